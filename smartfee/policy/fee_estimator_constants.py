# https://github.com/bitcoin/bitcoin/blob/5b6f0f31fa6ce85db3fb7f9823b1bbb06161ae32/src/policy/fees.h
from __future__ import annotations

MIN_BUCKET_FEE_RATE = 1000.0  # Satoshis per 1000 bytes, value of the first bucket boundary
MAX_BUCKET_FEE_RATE = 1e7
INFINITE_FEE_RATE = 1e99

# Buckets are spaced exponentially so that a large range of fee rates is covered
STEP_SIZE = 1.05  # bucket increase by 1.05

# Track confirm delays up to SHORT_BLOCK_PERIOD blocks for short horizon
SHORT_BLOCK_PERIOD = 12
SHORT_SCALE = 1

# Track confirm delays up to MED_BLOCK_PERIOD * MED_SCALE = 48 blocks for medium horizon
MED_BLOCK_PERIOD = 24
MED_SCALE = 2

# Track confirm delays up to LONG_BLOCK_PERIOD * LONG_SCALE = 1008 blocks for long horizon
LONG_BLOCK_PERIOD = 42
LONG_SCALE = 24

SECONDS_PER_BLOCK = 600

SHORT_DECAY = 0.962  # half-life of 18 blocks or about 3 hours
MED_DECAY = 0.9952  # half-life of 144 blocks or about 1 day
LONG_DECAY = 0.99931  # half-life of 1008 blocks or about 1 week

HALF_SUCCESS_PCT = 0.6  # Require 60 % success rate for target / 2 confirmations
SUCCESS_PCT = 0.85  # Require 85 % success rate for target confirmations
DOUBLE_SUCCESS_PCT = 0.95  # Require 95 % success rate for target * 2 confirmations
SUFFICIENT_FEE_TXS = 0.1  # Require an avg of 0.1 tx in the combined fee rate bucket per block to have stat significance
SUFFICIENT_TXS_SHORT = 0.5  # Require an avg of 0.5 tx with the short decay since fewer blocks are considered

FEE_ESTIMATOR_VERSION = 1

# Historical estimates that are older than this are not used
OLDEST_ESTIMATE_HISTORY = 6 * 1008
