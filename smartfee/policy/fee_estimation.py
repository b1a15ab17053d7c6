from __future__ import annotations

from dataclasses import dataclass
from typing import List

from smartfee.types.fee_rate import FeeRate
from smartfee.types.sized_bytes import bytes32
from smartfee.util.ints import uint32, uint64


@dataclass(frozen=True)
class MempoolItemInfo:
    """
    The information the fee estimator is passed for each transaction that
    enters the mempool. Parsing raw mempool data into this record is up to the host.

    Attributes:
        tx_id (bytes32): identity of the transaction, used again on removal and block inclusion
        height_added_to_mempool (uint32): chain height when the transaction was seen
        fee (uint64): absolute fee in satoshis
        size (uint64): transaction size in bytes
    """

    tx_id: bytes32
    height_added_to_mempool: uint32
    fee: uint64
    size: uint64

    @property
    def fee_rate(self) -> FeeRate:
        return FeeRate.create(self.fee, self.size)


@dataclass(frozen=True)
class FeeBlockInfo:
    """
    Information from Blockchain needed to estimate fees.
    """

    block_height: uint32
    included_items: List[bytes32]
