from __future__ import annotations

from enum import Enum


class Err(Enum):
    UNKNOWN = 1

    # a transaction cannot confirm at or before the height it entered the mempool
    INVALID_CONFIRMATION_DELAY = 2
    # a height that must not be lower than another one is lower
    HEIGHT_ORDER_INVERSION = 3
    # decrement of a mempool tracking counter that is already zero
    TRACKING_COUNTER_UNDERFLOW = 4

    INVALID_CONFIGURATION = 5


class EstimatorError(Exception):
    def __init__(self, code: Err, error_msg: str = ""):
        super().__init__(f"Error code: {code.name} {error_msg}")
        self.code = code
        self.error_msg = error_msg


class ConfigurationError(EstimatorError):
    def __init__(self, error_msg: str):
        super().__init__(Err.INVALID_CONFIGURATION, error_msg)
