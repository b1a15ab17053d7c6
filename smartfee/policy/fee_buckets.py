from __future__ import annotations

from typing import Iterator, List, Sequence

import typing_extensions
from sortedcontainers import SortedDict

from smartfee.policy.fee_estimator_constants import (
    INFINITE_FEE_RATE,
    MAX_BUCKET_FEE_RATE,
    MIN_BUCKET_FEE_RATE,
    STEP_SIZE,
)
from smartfee.util.errors import ConfigurationError


def init_buckets(
    min_fee_rate: float = MIN_BUCKET_FEE_RATE,
    max_fee_rate: float = MAX_BUCKET_FEE_RATE,
    step_size: float = STEP_SIZE,
    infinite_fee_rate: float = INFINITE_FEE_RATE,
) -> List[float]:
    if min_fee_rate <= 0:
        raise ConfigurationError(f"min_fee_rate must be positive. Got {min_fee_rate}")
    if step_size <= 1:
        raise ConfigurationError(f"step_size must be greater than 1. Got {step_size}")
    if infinite_fee_rate <= max_fee_rate:
        raise ConfigurationError("infinite_fee_rate must be above max_fee_rate")

    buckets: List[float] = []
    fee_rate = min_fee_rate
    while fee_rate <= max_fee_rate:
        buckets.append(fee_rate)
        fee_rate = fee_rate * step_size
    buckets.append(infinite_fee_rate)
    return buckets


@typing_extensions.final
class FeeBuckets:
    """
    Upper bounds of the fee rate buckets, in satoshis per 1000 bytes.
    Bucket `i` holds the fee rates in (boundaries[i - 1], boundaries[i]].
    The last boundary is a sentinel that catches every fee rate above the
    highest finite boundary.
    """

    boundaries: List[float]
    sorted_buckets: SortedDict  # key is upper bound of bucket, val is index in boundaries

    def __init__(self, boundaries: Sequence[float]) -> None:
        if len(boundaries) == 0:
            raise ConfigurationError("FeeBuckets needs at least one boundary")
        for lower, upper in zip(boundaries, boundaries[1:]):
            if upper <= lower:
                raise ConfigurationError(f"bucket boundaries must be strictly increasing: {lower} >= {upper}")

        self.boundaries = list(boundaries)
        self.sorted_buckets = SortedDict()
        for index, boundary in enumerate(self.boundaries):
            self.sorted_buckets[boundary] = index

    @classmethod
    def create(
        cls,
        min_fee_rate: float = MIN_BUCKET_FEE_RATE,
        max_fee_rate: float = MAX_BUCKET_FEE_RATE,
        step_size: float = STEP_SIZE,
        infinite_fee_rate: float = INFINITE_FEE_RATE,
    ) -> FeeBuckets:
        return cls(init_buckets(min_fee_rate, max_fee_rate, step_size, infinite_fee_rate))

    def get_bucket_index(self, fee_rate: float) -> int:
        if fee_rate in self.sorted_buckets:
            return int(self.sorted_buckets[fee_rate])

        # Smallest boundary above this fee rate, or the sentinel when there is none
        bucket_index = self.sorted_buckets.bisect_left(fee_rate)
        return min(int(bucket_index), len(self.boundaries) - 1)

    def __len__(self) -> int:
        return len(self.boundaries)

    def __getitem__(self, index: int) -> float:
        return self.boundaries[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self.boundaries)
