from __future__ import annotations

from typing_extensions import Protocol

from smartfee.policy.fee_estimation import FeeBlockInfo, MempoolItemInfo
from smartfee.types.fee_rate import FeeRate
from smartfee.types.sized_bytes import bytes32
from smartfee.util.ints import uint32


class FeeEstimatorInterface(Protocol):
    def new_block_height(self, block_height: uint32) -> None:
        """Called immediately when block height changes. Can be called multiple times before `new_block`"""

    def new_block(self, block_info: FeeBlockInfo) -> None:
        """A new block has been connected to the blockchain"""

    def add_mempool_item(self, mempool_item: MempoolItemInfo, valid_fee_estimate: bool = True) -> None:
        """A transaction has been added to the mempool"""

    def remove_mempool_item(self, tx_id: bytes32) -> bool:
        """A transaction left the mempool without being included in a block"""

    def estimate_fee_rate(self, *, time_offset_seconds: int) -> FeeRate:
        """time_offset_seconds: number of seconds into the future for which to estimate fee"""

    def estimate_fee_rate_for_block(self, conf_target: int, conservative: bool = False) -> FeeRate:
        """conf_target: number of blocks within which the transaction should confirm"""

    def mempool_size(self) -> int:
        """Number of mempool transactions currently tracked"""
