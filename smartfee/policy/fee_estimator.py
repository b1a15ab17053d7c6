from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from smartfee.policy.fee_estimate import FeeCalculation
from smartfee.policy.fee_estimate_store import FeeStore
from smartfee.policy.fee_estimation import FeeBlockInfo, MempoolItemInfo
from smartfee.policy.fee_estimator_constants import SECONDS_PER_BLOCK
from smartfee.policy.fee_estimator_interface import FeeEstimatorInterface
from smartfee.policy.fee_tracker import FeeTracker
from smartfee.policy.smart_fee_estimator import SmartFeeEstimator
from smartfee.types.fee_rate import FeeRate
from smartfee.types.sized_bytes import bytes32
from smartfee.util.ints import uint32


class FeeEstimator(FeeEstimatorInterface):
    """
    A Fee Estimator based on the concepts and code at:
    https://github.com/bitcoin/bitcoin/tree/5b6f0f31fa6ce85db3fb7f9823b1bbb06161ae32/src/policy

    Not thread safe: calls that mutate (blocks, mempool items) and queries must be serialized by the caller.
    """

    fee_rate_estimator: SmartFeeEstimator
    tracker: FeeTracker
    block_height: uint32
    seconds_per_block: int

    def __init__(
        self,
        fee_tracker: FeeTracker,
        smart_fee_estimator: SmartFeeEstimator,
        seconds_per_block: int = SECONDS_PER_BLOCK,
    ) -> None:
        self.fee_rate_estimator = smart_fee_estimator
        self.tracker = fee_tracker
        self.block_height = uint32(0)
        self.seconds_per_block = seconds_per_block

    def new_block_height(self, block_height: uint32) -> None:
        self.block_height = block_height

    def new_block(self, block_info: FeeBlockInfo) -> None:
        self.block_height = block_info.block_height
        self.tracker.process_block(block_info.block_height, block_info.included_items)

    def add_mempool_item(self, mempool_item: MempoolItemInfo, valid_fee_estimate: bool = True) -> None:
        self.tracker.add_tx(mempool_item, valid_fee_estimate)

    def remove_mempool_item(self, tx_id: bytes32) -> bool:
        return self.tracker.remove_tx(tx_id, in_block=False)

    def estimate_smart_fee(self, conf_target: int, conservative: bool = False) -> Tuple[FeeRate, FeeCalculation]:
        return self.fee_rate_estimator.estimate_smart_fee(conf_target, conservative)

    def estimate_fee_rate_for_block(self, conf_target: int, conservative: bool = False) -> FeeRate:
        fee_rate, _ = self.fee_rate_estimator.estimate_smart_fee(conf_target, conservative)
        return fee_rate

    def estimate_fee_rate(self, *, time_offset_seconds: int) -> FeeRate:
        """
        time_offset_seconds: Target time in the future we want our tx included by
        """
        if time_offset_seconds < 0:
            return FeeRate(0)
        conf_target = int(time_offset_seconds / self.seconds_per_block) + 1
        return self.estimate_fee_rate_for_block(conf_target)

    def mempool_size(self) -> int:
        return len(self.tracker.mempool_txs)

    def get_tracker(self) -> FeeTracker:
        """
        `get_tracker` is for testing the FeeEstimator.
        Not part of `FeeEstimatorInterface`
        """
        return self.tracker

    def shutdown(self) -> None:
        self.tracker.shutdown()


def create_fee_estimator(config: Optional[Dict[str, Any]] = None, fee_store: Optional[FeeStore] = None) -> FeeEstimator:
    """
    config: the `fee_estimator` section of config.yaml, missing keys fall back to the defaults
    fee_store: holds a snapshot of a previous estimator to warm start from
    """
    if config is None:
        config = {}
    if fee_store is None:
        fee_store = FeeStore()
    fee_tracker = FeeTracker(fee_store, config)
    smart_fee_estimator = SmartFeeEstimator.create(fee_tracker, config)
    seconds_per_block = int(config.get("seconds_per_block", SECONDS_PER_BLOCK))
    return FeeEstimator(fee_tracker, smart_fee_estimator, seconds_per_block)
