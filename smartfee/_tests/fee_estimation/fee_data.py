from __future__ import annotations

from typing import Dict, List

from smartfee.policy.fee_estimation import MempoolItemInfo
from smartfee.policy.fee_tracker import FeeTracker
from smartfee.types.sized_bytes import bytes32
from smartfee.util.ints import uint32, uint64

HIGH_FEE_RATE = 50000  # satoshis per 1000 bytes, confirms in the next block
LOW_FEE_RATE = 5000  # confirms after LOW_FEE_WAIT blocks
LOW_FEE_WAIT = 5
TXS_PER_RATE = 5


def make_tx_id(n: int) -> bytes32:
    return bytes32(n.to_bytes(32, "big"))


def make_item(n: int, height: int, fee_rate: int, size: int = 1000) -> MempoolItemInfo:
    """A mempool item of `size` bytes paying `fee_rate` satoshis per 1000 bytes"""
    return MempoolItemInfo(make_tx_id(n), uint32(height), uint64(fee_rate * size // 1000), uint64(size))


def run_two_tier_blocks(tracker: FeeTracker, last_height: int, first_height: int = 1) -> None:
    """
    Feed the tracker blocks first_height..last_height. After every block,
    TXS_PER_RATE high fee txs and TXS_PER_RATE low fee txs enter the mempool.
    High fee txs are included in the next block, low fee ones LOW_FEE_WAIT blocks later.
    """
    pending: Dict[int, List[bytes32]] = {}
    counter = first_height * 1000
    for height in range(first_height, last_height + 1):
        tracker.process_block(uint32(height), pending.pop(height, []))
        for _ in range(TXS_PER_RATE):
            counter += 1
            high = make_item(counter, height, HIGH_FEE_RATE)
            tracker.add_tx(high)
            pending.setdefault(height + 1, []).append(high.tx_id)
            counter += 1
            low = make_item(counter, height, LOW_FEE_RATE)
            tracker.add_tx(low)
            pending.setdefault(height + LOW_FEE_WAIT, []).append(low.tx_id)

