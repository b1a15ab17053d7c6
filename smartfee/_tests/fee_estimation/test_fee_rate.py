from __future__ import annotations

import pytest

from smartfee._tests.fee_estimation.fee_data import make_item
from smartfee.types.fee_rate import FeeRate


def test_create() -> None:
    assert FeeRate.create(500, 250).satoshis_per_k == 2000
    assert FeeRate.create(1, 3).satoshis_per_k == pytest.approx(333.333333)
    assert FeeRate.create(500, 0) == FeeRate(0)


@pytest.mark.parametrize(
    "satoshis_per_k, size, fee",
    [(2000, 250, 500), (1999, 1, 1), (-1999, 1, -1), (1, 999, 1), (0, 1000, 0), (1500.9, 0, 0), (1234.9, 1000, 1234)],
)
def test_get_fee(satoshis_per_k: float, size: int, fee: int) -> None:
    assert FeeRate(satoshis_per_k).get_fee(size) == fee


def test_get_fee_per_k() -> None:
    assert FeeRate(4321.7).get_fee_per_k() == 4321
    assert FeeRate(0.2).get_fee_per_k() == 1


def test_mempool_item_fee_rate() -> None:
    item = make_item(1, 0, 3000, size=400)
    assert item.fee == 1200
    assert item.fee_rate == FeeRate(3000)
