from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from smartfee.policy.fee_estimate import EstimateResult, FeeCalculation, FeeReason
from smartfee.policy.fee_estimator_constants import (
    DOUBLE_SUCCESS_PCT,
    HALF_SUCCESS_PCT,
    SUCCESS_PCT,
    SUFFICIENT_FEE_TXS,
    SUFFICIENT_TXS_SHORT,
)
from smartfee.policy.fee_tracker import FeeStat, FeeTracker
from smartfee.types.fee_rate import FeeRate
from smartfee.util.errors import ConfigurationError


# https://github.com/bitcoin/bitcoin/blob/5b6f0f31fa6ce85db3fb7f9823b1bbb06161ae32/src/policy/fees.cpp
@dataclass()
class SmartFeeEstimator:
    fee_tracker: FeeTracker
    half_success_pct: float = HALF_SUCCESS_PCT
    success_pct: float = SUCCESS_PCT
    double_success_pct: float = DOUBLE_SUCCESS_PCT
    sufficient_fee_txs: float = SUFFICIENT_FEE_TXS
    sufficient_txs_short: float = SUFFICIENT_TXS_SHORT
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def __post_init__(self) -> None:
        for name in ("half_success_pct", "success_pct", "double_success_pct"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ConfigurationError(f"{name} must be in (0, 1]. Got {value}")
        for name in ("sufficient_fee_txs", "sufficient_txs_short"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive. Got {value}")

    @classmethod
    def create(cls, fee_tracker: FeeTracker, config: Optional[Dict[str, Any]] = None) -> SmartFeeEstimator:
        if config is None:
            config = {}
        return cls(
            fee_tracker,
            half_success_pct=float(config.get("half_success_pct", HALF_SUCCESS_PCT)),
            success_pct=float(config.get("success_pct", SUCCESS_PCT)),
            double_success_pct=float(config.get("double_success_pct", DOUBLE_SUCCESS_PCT)),
            sufficient_fee_txs=float(config.get("sufficient_fee_txs", SUFFICIENT_FEE_TXS)),
            sufficient_txs_short=float(config.get("sufficient_txs_short", SUFFICIENT_TXS_SHORT)),
        )

    def _estimate_median_val(
        self, stat: FeeStat, conf_target: int, success_threshold: float
    ) -> Tuple[float, EstimateResult]:
        if stat is self.fee_tracker.short_horizon:
            sufficient_tx_val = self.sufficient_txs_short
        else:
            sufficient_tx_val = self.sufficient_fee_txs
        return stat.estimate_median_val(
            conf_target=conf_target,
            sufficient_tx_val=sufficient_tx_val,
            success_break_point=success_threshold,
            require_greater=True,
            block_height=self.fee_tracker.latest_seen_height,
        )

    def estimate_raw_fee(
        self, conf_target: int, success_threshold: float, horizon: str
    ) -> Tuple[float, EstimateResult]:
        """Query a single horizon ("short", "medium" or "long") without any combination"""
        stats = {stat.type: stat for stat in self.fee_tracker.horizons()}
        stat = stats.get(horizon)
        if stat is None:
            raise ValueError(f"Unknown fee estimator horizon {horizon!r}")
        if conf_target < 1 or conf_target > stat.get_max_confirms():
            return -1.0, EstimateResult()
        return self._estimate_median_val(stat, conf_target, success_threshold)

    def estimate_combined_fee(
        self, conf_target: int, success_threshold: float, check_shorter_horizon: bool
    ) -> Tuple[float, EstimateResult]:
        """
        Return a fee estimate at the required success_threshold from the shortest
        time horizon which tracks confirmations up to the desired target. If
        check_shorter_horizon is requested, also allow short time horizon estimates
        for a lower target to reduce the given answer.
        """
        short_horizon, med_horizon, long_horizon = self.fee_tracker.horizons()
        estimate = -1.0
        result = EstimateResult()
        if conf_target < 1 or conf_target > long_horizon.get_max_confirms():
            return estimate, result

        # Find estimate from shortest time horizon possible
        if conf_target <= short_horizon.get_max_confirms():
            estimate, result = self._estimate_median_val(short_horizon, conf_target, success_threshold)
        elif conf_target <= med_horizon.get_max_confirms():
            estimate, result = self._estimate_median_val(med_horizon, conf_target, success_threshold)
        else:
            estimate, result = self._estimate_median_val(long_horizon, conf_target, success_threshold)

        if check_shorter_horizon:
            # If a lower target from a more recent horizon returns a lower answer use it
            for stat in (med_horizon, short_horizon):
                if conf_target <= stat.get_max_confirms():
                    continue
                shorter_max, shorter_result = self._estimate_median_val(
                    stat, stat.get_max_confirms(), success_threshold
                )
                if shorter_max > 0 and (estimate == -1 or shorter_max < estimate):
                    estimate = shorter_max
                    result = shorter_result

        return estimate, result

    def estimate_conservative_fee(self, double_target: int) -> Tuple[float, EstimateResult]:
        """
        Ensure that for a conservative estimate, the DOUBLE_SUCCESS_PCT is also met
        at 2 * target for any longer time horizons.
        """
        short_horizon, med_horizon, long_horizon = self.fee_tracker.horizons()
        estimate = -1.0
        result = EstimateResult()
        if double_target <= short_horizon.get_max_confirms():
            estimate, result = self._estimate_median_val(med_horizon, double_target, self.double_success_pct)
        if double_target <= med_horizon.get_max_confirms():
            long_estimate, long_result = self._estimate_median_val(long_horizon, double_target, self.double_success_pct)
            if long_estimate > estimate:
                estimate = long_estimate
                result = long_result
        return estimate, result

    def estimate_smart_fee(self, conf_target: int, conservative: bool = False) -> Tuple[FeeRate, FeeCalculation]:
        """
        Estimate the fee rate needed for a transaction to begin confirmation within
        conf_target blocks. A zero fee rate means there is no estimate.

        The answer is the maximum of:
        target / 2 at 60% success, target at 85% success, 2 * target at 95% success,
        and in conservative mode also 2 * target at 95% success on the longer horizons.
        """
        desired_target = conf_target
        long_max_confirms = self.fee_tracker.long_horizon.get_max_confirms()

        # Return failure if trying to analyze a target we're not tracking
        if conf_target <= 0 or conf_target > long_max_confirms:
            return FeeRate(0), FeeCalculation(desired_target=desired_target, returned_target=conf_target)

        # It's not possible to get reasonable estimates for a target of 1
        if conf_target == 1:
            conf_target = 2

        max_usable_estimate = self.fee_tracker.max_usable_estimate()
        if conf_target > max_usable_estimate:
            conf_target = max_usable_estimate
        if conf_target <= 1:
            return FeeRate(0), FeeCalculation(desired_target=desired_target, returned_target=conf_target)

        # check_shorter_horizon is requested for target / 2 and target to keep estimates
        # monotonically decreasing with the target. For 2 * target it is skipped in
        # conservative mode, which takes the max over all horizons and must not let short
        # term fluctuations lower the estimate.
        median, est = self.estimate_combined_fee(conf_target // 2, self.half_success_pct, True)
        reason = FeeReason.HALF_ESTIMATE

        actual_est, actual_result = self.estimate_combined_fee(conf_target, self.success_pct, True)
        if actual_est > median:
            median, est, reason = actual_est, actual_result, FeeReason.FULL_ESTIMATE

        double_est, double_result = self.estimate_combined_fee(
            2 * conf_target, self.double_success_pct, not conservative
        )
        if double_est > median:
            median, est, reason = double_est, double_result, FeeReason.DOUBLE_ESTIMATE

        if conservative or median == -1:
            cons_est, cons_result = self.estimate_conservative_fee(2 * conf_target)
            if cons_est > median:
                median, est, reason = cons_est, cons_result, FeeReason.CONSERVATIVE

        fee_calculation = FeeCalculation(
            est=est, reason=reason, desired_target=desired_target, returned_target=conf_target
        )
        if median < 0:
            return FeeRate(0), fee_calculation

        self.log.debug(f"Smart fee estimate for target {desired_target}: {median:g} ({reason.value})")
        return FeeRate(median), fee_calculation
