from __future__ import annotations

from typing import Any, Dict, List

import pytest

from smartfee._tests.fee_estimation.fee_data import HIGH_FEE_RATE, LOW_FEE_RATE, run_two_tier_blocks
from smartfee.policy.fee_estimate import FeeReason
from smartfee.policy.fee_estimate_store import FeeStore
from smartfee.policy.fee_estimator_constants import SHORT_DECAY
from smartfee.policy.fee_tracker import FeeTracker
from smartfee.policy.smart_fee_estimator import SmartFeeEstimator
from smartfee.types.fee_rate import FeeRate
from smartfee.util.errors import ConfigurationError
from smartfee.util.ints import uint32


@pytest.fixture(scope="module")
def estimator() -> SmartFeeEstimator:
    tracker = FeeTracker(FeeStore())
    # first confirmations in block 2, so the usable span is (100 - 2) // 2 blocks
    run_two_tier_blocks(tracker, 100)
    assert tracker.max_usable_estimate() == 49
    return SmartFeeEstimator.create(tracker)


def test_no_data() -> None:
    empty = SmartFeeEstimator.create(FeeTracker(FeeStore()))
    for target in (1, 2, 12, 48, 1008):
        fee_rate, fee_calculation = empty.estimate_smart_fee(target)
        assert fee_rate == FeeRate(0)
        assert fee_calculation.reason == FeeReason.NONE
        assert fee_calculation.desired_target == target


def test_target_out_of_range(estimator: SmartFeeEstimator) -> None:
    for target in (-1, 0, 1009):
        fee_rate, fee_calculation = estimator.estimate_smart_fee(target)
        assert fee_rate.satoshis_per_k == 0
        assert fee_calculation.returned_target == target


def test_target_of_one(estimator: SmartFeeEstimator) -> None:
    fee_rate, fee_calculation = estimator.estimate_smart_fee(1)
    assert fee_rate.satoshis_per_k == pytest.approx(HIGH_FEE_RATE)
    assert fee_calculation.desired_target == 1
    assert fee_calculation.returned_target == 2
    assert fee_calculation.reason == FeeReason.HALF_ESTIMATE
    assert fee_calculation.est.decay == SHORT_DECAY


def test_target_clamped_to_usable_history(estimator: SmartFeeEstimator) -> None:
    fee_rate, fee_calculation = estimator.estimate_smart_fee(200)
    assert fee_rate.satoshis_per_k == pytest.approx(LOW_FEE_RATE)
    assert fee_calculation.desired_target == 200
    assert fee_calculation.returned_target == 49

    fee_rate, fee_calculation = estimator.estimate_smart_fee(1008)
    assert fee_rate.satoshis_per_k > 0
    assert fee_calculation.returned_target == 49


def test_estimates(estimator: SmartFeeEstimator) -> None:
    # low fee txs need 5 blocks, which only passes the 60% check for target / 2 from target 10 on
    for target in range(1, 10):
        fee_rate, _ = estimator.estimate_smart_fee(target)
        assert fee_rate.satoshis_per_k == pytest.approx(HIGH_FEE_RATE)
    for target in range(10, 49):
        fee_rate, _ = estimator.estimate_smart_fee(target)
        assert fee_rate.satoshis_per_k == pytest.approx(LOW_FEE_RATE)


def test_monotonically_decreasing(estimator: SmartFeeEstimator) -> None:
    estimates: List[float] = [estimator.estimate_smart_fee(target)[0].satoshis_per_k for target in range(1, 60)]
    for earlier, later in zip(estimates, estimates[1:]):
        assert later <= earlier * (1 + 1e-9)


def test_conservative(estimator: SmartFeeEstimator) -> None:
    for target in (2, 5, 10, 20, 40):
        economical, _ = estimator.estimate_smart_fee(target)
        conservative, _ = estimator.estimate_smart_fee(target, conservative=True)
        assert conservative.satoshis_per_k >= economical.satoshis_per_k


def test_estimate_raw_fee(estimator: SmartFeeEstimator) -> None:
    median, result = estimator.estimate_raw_fee(3, 0.85, "short")
    assert median == pytest.approx(HIGH_FEE_RATE)
    assert result.pass_bucket.success_pct() > 85

    median, _ = estimator.estimate_raw_fee(6, 0.85, "short")
    assert median == pytest.approx(LOW_FEE_RATE)

    median, result = estimator.estimate_raw_fee(13, 0.85, "short")
    assert median == -1
    median, _ = estimator.estimate_raw_fee(13, 0.85, "medium")
    assert median == pytest.approx(LOW_FEE_RATE)

    with pytest.raises(ValueError):
        estimator.estimate_raw_fee(3, 0.85, "weekly")


def test_estimate_combined_fee(estimator: SmartFeeEstimator) -> None:
    assert estimator.estimate_combined_fee(0, 0.85, True)[0] == -1
    assert estimator.estimate_combined_fee(1009, 0.85, True)[0] == -1

    median, result = estimator.estimate_combined_fee(4, 0.85, True)
    assert median == pytest.approx(HIGH_FEE_RATE)
    assert result.scale == 1

    # answered by the long horizon
    median, result = estimator.estimate_combined_fee(100, 0.95, False)
    assert median == pytest.approx(LOW_FEE_RATE)
    assert result.scale == 24


def test_estimate_conservative_fee(estimator: SmartFeeEstimator) -> None:
    median, result = estimator.estimate_conservative_fee(30)
    assert median == pytest.approx(LOW_FEE_RATE)
    assert result.scale == 24

    median, _ = estimator.estimate_conservative_fee(100)
    assert median == -1


def test_combined_fee_within_short_horizon(estimator: SmartFeeEstimator) -> None:
    max_confirms = estimator.fee_tracker.short_horizon.get_max_confirms()
    medians = [estimator.estimate_combined_fee(target, 0.85, False)[0] for target in range(1, max_confirms + 1)]
    assert all(median > 0 for median in medians)
    for earlier, later in zip(medians, medians[1:]):
        assert later <= earlier
    assert medians[0] == pytest.approx(HIGH_FEE_RATE)
    assert medians[-1] == pytest.approx(LOW_FEE_RATE)


@pytest.mark.parametrize(
    "config",
    [
        {"sufficient_fee_txs": 0},
        {"sufficient_txs_short": -0.5},
        {"success_pct": 0},
        {"half_success_pct": 1.2},
        {"double_success_pct": -0.95},
    ],
)
def test_bad_configuration(config: Dict[str, Any]) -> None:
    with pytest.raises(ConfigurationError):
        SmartFeeEstimator.create(FeeTracker(FeeStore()), config)


def test_no_data_with_long_history() -> None:
    tracker = FeeTracker(FeeStore())
    tracker.first_recorded_height = uint32(1)
    tracker.latest_seen_height = uint32(100)
    empty = SmartFeeEstimator.create(tracker)
    for target in (2, 6, 48):
        fee_rate, _ = empty.estimate_smart_fee(target)
        assert fee_rate == FeeRate(0)
