from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class BucketResult:
    """
    Summary of a contiguous range of fee rate buckets.
    start and end are bucket boundaries in satoshis per 1000 bytes, -1 if the range was never filled in.
    """

    start: float = -1.0
    end: float = -1.0
    within_target: float = 0.0  # confirmed within the requested target
    total_confirmed: float = 0.0  # ever confirmed
    in_mempool: float = 0.0  # still in the mempool for at least the target
    left_mempool: float = 0.0  # left the mempool unconfirmed after the target

    def success_pct(self) -> float:
        total = self.total_confirmed + self.in_mempool + self.left_mempool
        if total <= 0:
            return 0.0
        return 100 * self.within_target / total


@dataclass(frozen=True)
class EstimateResult:
    pass_bucket: BucketResult = field(default_factory=BucketResult)
    fail_bucket: BucketResult = field(default_factory=BucketResult)
    decay: float = 0.0
    scale: int = 0


class FeeReason(Enum):
    NONE = "None"
    HALF_ESTIMATE = "Half Target 60% Threshold"
    FULL_ESTIMATE = "Target 85% Threshold"
    DOUBLE_ESTIMATE = "Double Target 95% Threshold"
    CONSERVATIVE = "Conservative Double Target longer horizon"


@dataclass(frozen=True)
class FeeCalculation:
    """
    Explains a smart fee estimate for operators.

    est: the result of the query that produced the returned fee rate
    reason: which threshold / horizon check produced it
    desired_target: the confirmation target the caller asked for
    returned_target: the target actually used after clamping
    """

    est: EstimateResult = field(default_factory=EstimateResult)
    reason: FeeReason = FeeReason.NONE
    desired_target: int = 0
    returned_target: int = 0
