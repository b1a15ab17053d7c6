from __future__ import annotations

import math
from dataclasses import dataclass

import typing_extensions


@typing_extensions.final
@dataclass(frozen=True)
class FeeRate:
    """
    Represents Fee Rate in satoshis per 1000 bytes of transaction size.
    A rate of zero is also the "no estimate" answer of the fee estimator.
    """

    satoshis_per_k: float

    @classmethod
    def create(cls, satoshis: int, size_in_bytes: int) -> FeeRate:
        if size_in_bytes <= 0:
            return cls(0.0)
        return cls(satoshis * 1000 / size_in_bytes)

    def get_fee(self, size_in_bytes: int) -> int:
        """Fee in satoshis for a transaction of `size_in_bytes`, never rounded down to zero"""
        fee = math.trunc(self.satoshis_per_k * size_in_bytes / 1000)
        if fee == 0 and size_in_bytes != 0:
            if self.satoshis_per_k > 0:
                fee = 1
            elif self.satoshis_per_k < 0:
                fee = -1
        return fee

    def get_fee_per_k(self) -> int:
        return self.get_fee(1000)
