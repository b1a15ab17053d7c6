from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from smartfee.policy.fee_buckets import FeeBuckets
from smartfee.policy.fee_estimate import BucketResult, EstimateResult
from smartfee.policy.fee_estimate_store import FeeStore
from smartfee.policy.fee_estimation import MempoolItemInfo
from smartfee.policy.fee_estimator_constants import (
    FEE_ESTIMATOR_VERSION,
    INFINITE_FEE_RATE,
    LONG_BLOCK_PERIOD,
    LONG_DECAY,
    LONG_SCALE,
    MAX_BUCKET_FEE_RATE,
    MED_BLOCK_PERIOD,
    MED_DECAY,
    MED_SCALE,
    MIN_BUCKET_FEE_RATE,
    OLDEST_ESTIMATE_HISTORY,
    SHORT_BLOCK_PERIOD,
    SHORT_DECAY,
    SHORT_SCALE,
    STEP_SIZE,
)
from smartfee.policy.fee_history import FeeStatBackup, FeeTrackerBackup
from smartfee.types.sized_bytes import bytes32
from smartfee.util.errors import ConfigurationError, Err, EstimatorError
from smartfee.util.ints import uint8, uint32

log = logging.getLogger(__name__)


# Implementation of bitcoin core fee estimation algorithm
# https://gist.github.com/morcos/d3637f015bc4e607e1fd10d8351e9f41
class FeeStat:  # TxConfirmStats
    buckets: FeeBuckets

    # For each bucket x
    # Count the total number of txs in each bucket
    # Track historical moving average of this total over blocks
    tx_ct_avg: List[float]

    # Count the total number of txs confirmed within Y periods in each bucket
    # Track the historical moving average of these totals over blocks
    confirmed_average: List[List[float]]  # confirmed_average [y - 1][x]

    # Track moving average of txs which have been evicted from the mempool
    # after failing to be confirmed within Y periods
    failed_average: List[List[float]]  # failed_average [y - 1][x]

    # Sum the total fee_rate of all txs in each bucket
    # Track historical moving average of this total over blocks
    m_fee_rate_avg: List[float]

    decay: float

    # Resolution of blocks with which confirmations are tracked
    scale: int

    # Mempool counts of outstanding transactions
    # For each bucket x, track the number of transactions in mempool
    # that are unconfirmed for each possible confirmation value y
    unconfirmed_txs: List[List[int]]  # unconfirmed_txs [block_height % max_confirms][x]
    # transactions still unconfirmed after get_max_confirms for each bucket
    old_unconfirmed_txs: List[int]
    max_confirms: int

    def __init__(
        self,
        buckets: FeeBuckets,
        max_periods: int,
        decay: float,
        scale: int,
        log: logging.Logger,
        my_type: str,
    ):
        if scale <= 0:
            raise ConfigurationError(f"{my_type} horizon: scale must be positive. Got {scale}")
        if max_periods < 1:
            raise ConfigurationError(f"{my_type} horizon: max_periods must be at least 1. Got {max_periods}")
        if not 0 < decay < 1:
            raise ConfigurationError(f"{my_type} horizon: decay must be in (0, 1). Got {decay}")

        self.buckets = buckets
        self.decay = decay
        self.scale = scale
        self.max_periods = max_periods
        self.max_confirms = self.scale * self.max_periods
        self.log = log
        self.type = my_type

        num_buckets = len(buckets)
        self.confirmed_average = [[0.0] * num_buckets for _ in range(max_periods)]
        self.failed_average = [[0.0] * num_buckets for _ in range(max_periods)]
        self.tx_ct_avg = [0.0] * num_buckets
        self.m_fee_rate_avg = [0.0] * num_buckets

        self.unconfirmed_txs = [[0] * num_buckets for _ in range(self.max_confirms)]
        self.old_unconfirmed_txs = [0] * num_buckets

    def get_max_confirms(self) -> int:
        return self.max_confirms

    def tx_confirmed(self, blocks_to_confirm: int, fee_rate: float) -> None:
        if blocks_to_confirm < 1:
            raise EstimatorError(
                Err.INVALID_CONFIRMATION_DELAY,
                f"tx_confirmed called with {blocks_to_confirm} blocks to confirm",
            )

        periods_to_confirm = (blocks_to_confirm + self.scale - 1) // self.scale
        bucket_index = self.buckets.get_bucket_index(fee_rate)

        # Confirmed within P periods also counts as confirmed within every longer period
        for i in range(periods_to_confirm, self.max_periods + 1):
            self.confirmed_average[i - 1][bucket_index] += 1

        self.tx_ct_avg[bucket_index] += 1
        self.m_fee_rate_avg[bucket_index] += fee_rate

    def update_moving_averages(self) -> None:
        for j in range(len(self.buckets)):
            for i in range(self.max_periods):
                self.confirmed_average[i][j] *= self.decay
                self.failed_average[i][j] *= self.decay

            self.tx_ct_avg[j] *= self.decay
            self.m_fee_rate_avg[j] *= self.decay

    def clear_current(self, block_height: int) -> None:
        block_index = block_height % len(self.unconfirmed_txs)
        for i in range(len(self.buckets)):
            self.old_unconfirmed_txs[i] += self.unconfirmed_txs[block_index][i]
            self.unconfirmed_txs[block_index][i] = 0

    def new_mempool_tx(self, block_height: int, fee_rate: float) -> int:
        bucket_index = self.buckets.get_bucket_index(fee_rate)
        block_index = block_height % len(self.unconfirmed_txs)
        self.unconfirmed_txs[block_index][bucket_index] += 1
        return bucket_index

    def remove_tx(self, entry_height: int, latest_seen_height: int, bucket_index: int, in_block: bool) -> None:
        blocks_ago = latest_seen_height - entry_height
        if latest_seen_height == 0:
            blocks_ago = 0

        if blocks_ago < 0:
            raise EstimatorError(
                Err.HEIGHT_ORDER_INVERSION,
                f"{self.type} horizon: tx entered mempool at {entry_height} after latest seen {latest_seen_height}",
            )

        if blocks_ago >= len(self.unconfirmed_txs):
            if self.old_unconfirmed_txs[bucket_index] <= 0:
                raise EstimatorError(
                    Err.TRACKING_COUNTER_UNDERFLOW,
                    f"{self.type} horizon: old unconfirmed count for bucket {bucket_index} is already zero",
                )
            self.old_unconfirmed_txs[bucket_index] -= 1
        else:
            block_index = entry_height % len(self.unconfirmed_txs)
            if self.unconfirmed_txs[block_index][bucket_index] <= 0:
                raise EstimatorError(
                    Err.TRACKING_COUNTER_UNDERFLOW,
                    f"{self.type} horizon: unconfirmed count for height {entry_height} "
                    f"bucket {bucket_index} is already zero",
                )
            self.unconfirmed_txs[block_index][bucket_index] -= 1

        # Evicted without confirmation: a failure for every period it has already waited
        if not in_block and blocks_ago >= self.scale:
            periods_ago = blocks_ago // self.scale
            for i in range(min(periods_ago, self.max_periods)):
                self.failed_average[i][bucket_index] += 1

    def create_backup(self) -> FeeStatBackup:
        str_confirmed_average = [[float.hex(float(v)) for v in period] for period in self.confirmed_average]
        str_failed_average = [[float.hex(float(v)) for v in period] for period in self.failed_average]
        str_tx_ct_avg = [float.hex(float(v)) for v in self.tx_ct_avg]
        str_m_fee_rate_avg = [float.hex(float(v)) for v in self.m_fee_rate_avg]

        return FeeStatBackup(self.type, str_tx_ct_avg, str_confirmed_average, str_failed_average, str_m_fee_rate_avg)

    def backup_matches(self, backup: FeeStatBackup) -> bool:
        num_buckets = len(self.buckets)
        return (
            backup.type == self.type
            and len(backup.tx_ct_avg) == num_buckets
            and len(backup.m_fee_rate_avg) == num_buckets
            and len(backup.confirmed_average) == self.max_periods
            and len(backup.failed_average) == self.max_periods
            and all(len(period) == num_buckets for period in backup.confirmed_average)
            and all(len(period) == num_buckets for period in backup.failed_average)
        )

    def import_backup(self, backup: FeeStatBackup) -> None:
        if not self.backup_matches(backup):
            raise ConfigurationError(f"{self.type} horizon: backup does not match buckets and periods")

        for i in range(self.max_periods):
            self.confirmed_average[i] = [float.fromhex(v) for v in backup.confirmed_average[i]]
            self.failed_average[i] = [float.fromhex(v) for v in backup.failed_average[i]]

        self.tx_ct_avg = [float.fromhex(v) for v in backup.tx_ct_avg]
        self.m_fee_rate_avg = [float.fromhex(v) for v in backup.m_fee_rate_avg]

    def _in_mempool_count(self, conf_target: int, block_height: int, bucket: int) -> int:
        """Transactions of this bucket that have been in the mempool for conf_target blocks or longer"""
        bins = len(self.unconfirmed_txs)
        count = 0
        for conf_ct in range(conf_target, self.max_confirms):
            entry_height = block_height - conf_ct
            if entry_height < 0:
                # no block at this height yet
                break
            count += self.unconfirmed_txs[entry_height % bins][bucket]
        return count + self.old_unconfirmed_txs[bucket]

    def _bucket_result(
        self,
        near_bucket: int,
        far_bucket: int,
        within_target: float,
        total_confirmed: float,
        in_mempool: float,
        left_mempool: float,
    ) -> BucketResult:
        min_bucket = min(near_bucket, far_bucket)
        max_bucket = max(near_bucket, far_bucket)
        return BucketResult(
            start=self.buckets[min_bucket - 1] if min_bucket else 0,
            end=self.buckets[max_bucket],
            within_target=within_target,
            total_confirmed=total_confirmed,
            in_mempool=in_mempool,
            left_mempool=left_mempool,
        )

    # See TxConfirmStats::EstimateMedianVal in https://github.com/bitcoin/bitcoin/blob/master/src/policy/fees.cpp
    def estimate_median_val(
        self,
        conf_target: int,
        sufficient_tx_val: float,
        success_break_point: float,
        require_greater: bool,
        block_height: int,
    ) -> Tuple[float, EstimateResult]:
        """
        conf_target is the number of blocks within which we hope to get our transaction confirmed.

        require_greater means we are looking for the lowest fee rate such that all higher
        values pass, so we start at the highest fee rate bucket and look at successively
        lower buckets until we reach failure. Otherwise we look for the highest fee rate
        such that all lower values fail, and go in the opposite direction.

        Returns the median fee rate of the best passing bucket range, or -1.0 if there is none.
        """
        if conf_target < 1:
            raise ValueError(f"Bad argument to estimate_median_val: conf_target must be >= 1. Got {conf_target}")

        period_target = (conf_target + self.scale - 1) // self.scale
        if period_target > self.max_periods:
            return -1.0, EstimateResult(decay=self.decay, scale=self.scale)

        n_conf = 0.0  # Number of txs confirmed within conf_target
        total_num = 0.0  # Total number of txs that were ever confirmed
        extra_num = 0.0  # Number of txs still in mempool for conf_target or longer
        fail_num = 0.0  # Number of txs that left the mempool unconfirmed after conf_target

        max_bucket_index = len(self.buckets) - 1
        if require_greater:
            bucket_range = range(max_bucket_index, -1, -1)
        else:
            bucket_range = range(0, max_bucket_index + 1)
        start_bucket = bucket_range[0]

        # Buckets are combined until there are enough samples.
        # near and far define the range combined so far, best is the last
        # range that still had a high enough confirmation rate.
        cur_near_bucket = start_bucket
        best_near_bucket = start_bucket
        cur_far_bucket = start_bucket
        best_far_bucket = start_bucket

        found_answer = False
        new_bucket_range = True
        passing = True
        pass_bucket = BucketResult()
        fail_bucket = BucketResult()
        sufficient_total = sufficient_tx_val / (1 - self.decay)
        confirmed_in_period = self.confirmed_average[period_target - 1]
        failed_in_period = self.failed_average[period_target - 1]

        for bucket in bucket_range:
            if new_bucket_range:
                cur_near_bucket = bucket
                new_bucket_range = False

            cur_far_bucket = bucket
            n_conf += confirmed_in_period[bucket]
            total_num += self.tx_ct_avg[bucket]
            fail_num += failed_in_period[bucket]
            extra_num += self._in_mempool_count(conf_target, block_height, bucket)

            # If we have enough transaction data points in this range of buckets,
            # we can test for success
            # (Only count the confirmed data points, so that each confirmation count
            # will be looking at the same amount of data and same bucket breaks)
            if total_num < sufficient_total or total_num + fail_num + extra_num == 0:
                continue

            curr_pct = n_conf / (total_num + fail_num + extra_num)
            # Check to see if we are no longer getting confirmed at the success rate
            if (require_greater and curr_pct < success_break_point) or (
                not require_greater and curr_pct > success_break_point
            ):
                if passing:
                    # First time we hit a failure, record the failed bucket range
                    fail_bucket = self._bucket_result(
                        cur_near_bucket, cur_far_bucket, n_conf, total_num, extra_num, fail_num
                    )
                    passing = False
                continue

            # Otherwise update the cumulative stats and the bucket variables, and reset the counters
            fail_bucket = BucketResult()
            found_answer = True
            passing = True
            pass_bucket = self._bucket_result(cur_near_bucket, cur_far_bucket, n_conf, total_num, extra_num, fail_num)
            n_conf = 0.0
            total_num = 0.0
            extra_num = 0.0
            fail_num = 0.0
            best_near_bucket = cur_near_bucket
            best_far_bucket = cur_far_bucket
            new_bucket_range = True

        # Find the bucket with the median transaction of the best passing range and report the
        # average fee rate of that bucket. We don't keep every tx, so the exact median is unknown.
        median = -1.0
        if found_answer:
            min_bucket = min(best_near_bucket, best_far_bucket)
            max_bucket = max(best_near_bucket, best_far_bucket)
            tx_sum = sum(self.tx_ct_avg[min_bucket : max_bucket + 1])
            if tx_sum != 0:
                tx_sum = tx_sum / 2
                for i in range(min_bucket, max_bucket + 1):
                    if self.tx_ct_avg[i] < tx_sum:
                        tx_sum -= self.tx_ct_avg[i]
                    else:
                        median = self.m_fee_rate_avg[i] / self.tx_ct_avg[i]
                        break

        # If we were passing until we reached the last buckets with insufficient data, report those as failed
        if passing and not new_bucket_range:
            fail_bucket = self._bucket_result(cur_near_bucket, cur_far_bucket, n_conf, total_num, extra_num, fail_num)

        self.log.debug(
            f"FeeEst: {conf_target} {'>' if require_greater else '<'}{100 * success_break_point:.0f}% "
            f"decay {self.decay:.5f}: fee rate: {median:g} from ({pass_bucket.start:g} - {pass_bucket.end:g}) "
            f"{pass_bucket.success_pct():.2f}% {pass_bucket.within_target:.1f}/({pass_bucket.total_confirmed:.1f} "
            f"{pass_bucket.in_mempool:.0f} mem {pass_bucket.left_mempool:.1f} out) "
            f"Fail: ({fail_bucket.start:g} - {fail_bucket.end:g}) {fail_bucket.success_pct():.2f}% "
            f"{fail_bucket.within_target:.1f}/({fail_bucket.total_confirmed:.1f} {fail_bucket.in_mempool:.0f} mem "
            f"{fail_bucket.left_mempool:.1f} out)"
        )

        result = EstimateResult(pass_bucket=pass_bucket, fail_bucket=fail_bucket, decay=self.decay, scale=self.scale)
        return median, result


@dataclass(frozen=True)
class TrackedTx:
    entry_height: uint32
    fee_rate: float  # satoshis per 1000 bytes
    bucket_index: int


def _create_horizon(
    buckets: FeeBuckets,
    config: Dict[str, Any],
    my_type: str,
    block_periods: int,
    decay: float,
    scale: int,
) -> FeeStat:
    horizon_config: Dict[str, Any] = config.get(f"{my_type}_horizon", {})
    return FeeStat(
        buckets,
        int(horizon_config.get("block_periods", block_periods)),
        float(horizon_config.get("decay", decay)),
        int(horizon_config.get("scale", scale)),
        log,
        my_type,
    )


class FeeTracker:
    buckets: FeeBuckets
    short_horizon: FeeStat
    med_horizon: FeeStat
    long_horizon: FeeStat
    log: logging.Logger
    latest_seen_height: uint32
    first_recorded_height: uint32
    historical_first: uint32
    historical_best: uint32
    tracked_txs: int
    untracked_txs: int
    mempool_txs: Dict[bytes32, TrackedTx]
    fee_store: FeeStore

    def __init__(self, fee_store: FeeStore, config: Optional[Dict[str, Any]] = None):
        if config is None:
            config = {}
        self.log = log
        self.fee_store = fee_store
        self.latest_seen_height = uint32(0)
        self.first_recorded_height = uint32(0)
        self.historical_first = uint32(0)
        self.historical_best = uint32(0)
        self.tracked_txs = 0
        self.untracked_txs = 0
        self.mempool_txs = {}
        self.oldest_estimate_history = int(config.get("oldest_estimate_history", OLDEST_ESTIMATE_HISTORY))

        self.buckets = FeeBuckets.create(
            float(config.get("min_bucket_fee_rate", MIN_BUCKET_FEE_RATE)),
            float(config.get("max_bucket_fee_rate", MAX_BUCKET_FEE_RATE)),
            float(config.get("bucket_step_size", STEP_SIZE)),
            INFINITE_FEE_RATE,
        )
        self.short_horizon = _create_horizon(
            self.buckets, config, "short", SHORT_BLOCK_PERIOD, SHORT_DECAY, SHORT_SCALE
        )
        self.med_horizon = _create_horizon(self.buckets, config, "medium", MED_BLOCK_PERIOD, MED_DECAY, MED_SCALE)
        self.long_horizon = _create_horizon(
            self.buckets, config, "long", LONG_BLOCK_PERIOD, LONG_DECAY, LONG_SCALE
        )

        fee_backup: Optional[FeeTrackerBackup] = self.fee_store.get_stored_fee_data()
        if fee_backup is not None:
            self.import_backup(fee_backup)

    def horizons(self) -> Tuple[FeeStat, FeeStat, FeeStat]:
        return self.short_horizon, self.med_horizon, self.long_horizon

    def import_backup(self, fee_backup: FeeTrackerBackup) -> None:
        if fee_backup.fee_estimator_version != FEE_ESTIMATOR_VERSION:
            self.log.warning(f"Ignoring fee estimator backup of version {fee_backup.fee_estimator_version}")
            return

        stats_by_type = {stat.type: stat for stat in fee_backup.stats}
        for horizon in self.horizons():
            stat = stats_by_type.get(horizon.type)
            if stat is None or not horizon.backup_matches(stat):
                self.log.warning(f"Ignoring fee estimator backup: {horizon.type} horizon does not match")
                return

        for horizon in self.horizons():
            horizon.import_backup(stats_by_type[horizon.type])

        # The restored span only counts as history; fresh data starts recording again
        self.latest_seen_height = fee_backup.latest_seen_height
        self.historical_first = fee_backup.first_recorded_height
        self.historical_best = fee_backup.latest_seen_height
        self.log.info(
            f"Fee Estimator restored history from {self.historical_first} to {self.historical_best}"
        )

    def create_backup(self) -> FeeTrackerBackup:
        # Keep whichever of the current and historical spans carries more data
        if self.block_span() > self.historical_block_span() // 2:
            first, best = self.first_recorded_height, self.latest_seen_height
        else:
            first, best = self.historical_first, self.historical_best
        stats = [horizon.create_backup() for horizon in self.horizons()]
        return FeeTrackerBackup(uint8(FEE_ESTIMATOR_VERSION), uint32(first), uint32(best), stats)

    def shutdown(self) -> None:
        self.fee_store.store_fee_data(self.create_backup())

    def warm_start_heights(self) -> Tuple[int, int, int, int]:
        """first recorded height, latest seen height, historical first and historical best heights"""
        return (
            int(self.first_recorded_height),
            int(self.latest_seen_height),
            int(self.historical_first),
            int(self.historical_best),
        )

    def add_tx(self, item: MempoolItemInfo, valid_fee_estimate: bool = True) -> None:
        if item.tx_id in self.mempool_txs:
            self.log.debug(f"Fee estimator already tracking {item.tx_id.hex()}")
            return

        if item.height_added_to_mempool != self.latest_seen_height:
            # Ignore side chains and re-orgs. Assuming they are random
            # they don't affect the estimate.
            return

        if not valid_fee_estimate:
            self.untracked_txs += 1
            return

        self.tracked_txs += 1
        fee_rate = item.fee_rate.satoshis_per_k
        height = item.height_added_to_mempool
        # All horizons share one bucket layout, so they agree on the index
        bucket_index = self.short_horizon.new_mempool_tx(height, fee_rate)
        self.med_horizon.new_mempool_tx(height, fee_rate)
        self.long_horizon.new_mempool_tx(height, fee_rate)
        self.mempool_txs[item.tx_id] = TrackedTx(uint32(height), fee_rate, bucket_index)

    def remove_tx(self, tx_id: bytes32, in_block: bool = False) -> bool:
        """
        Stop tracking a transaction that left the mempool. Returns False if it was not tracked.
        Raises EstimatorError if the horizons' counters are out of sync with the tracked transactions.
        Every horizon is still updated before the first such error is raised.
        """
        tracked = self.mempool_txs.pop(tx_id, None)
        if tracked is None:
            return False

        error: Optional[EstimatorError] = None
        for horizon in self.horizons():
            try:
                horizon.remove_tx(tracked.entry_height, self.latest_seen_height, tracked.bucket_index, in_block)
            except EstimatorError as e:
                if error is None:
                    error = e
        if error is not None:
            raise error
        return True

    def process_block_tx(self, block_height: int, tx_id: bytes32) -> bool:
        tracked = self.mempool_txs.get(tx_id)
        if tracked is None:
            # Not tracked: seen before our latest block, or not valid for fee estimation
            return False

        self.remove_tx(tx_id, in_block=True)

        blocks_to_confirm = block_height - tracked.entry_height
        if blocks_to_confirm <= 0:
            self.log.error(
                f"Fee estimator: tx {tx_id.hex()} included in block {block_height} "
                f"but entered the mempool at {tracked.entry_height}"
            )
            return False

        for horizon in self.horizons():
            horizon.tx_confirmed(blocks_to_confirm, tracked.fee_rate)
        return True

    def process_block(self, block_height: uint32, included_items: List[bytes32]) -> None:
        """A new block has been connected and these transactions have been included in that block"""
        if block_height <= self.latest_seen_height:
            # Ignore reorgs and blocks we already processed
            return

        self.latest_seen_height = uint32(block_height)

        # The circular buffer slot is reused for this height, and decay runs before
        # this block's confirmations are recorded
        for horizon in self.horizons():
            horizon.clear_current(block_height)
        for horizon in self.horizons():
            horizon.update_moving_averages()

        counted_txs = 0
        for tx_id in included_items:
            try:
                if self.process_block_tx(block_height, tx_id):
                    counted_txs += 1
            except EstimatorError as e:
                self.log.error(f"Fee estimator: skipping tx {tx_id.hex()} in block {block_height}: {e}")

        if self.first_recorded_height == 0 and counted_txs > 0:
            self.first_recorded_height = uint32(block_height)
            self.log.info(f"Fee Estimator first recorded height: {self.first_recorded_height}")

        self.log.debug(
            f"Fee estimates updated by {counted_txs} of {len(included_items)} block txs, "
            f"since last block {self.tracked_txs} of {self.tracked_txs + self.untracked_txs} tracked, "
            f"mempool map size {len(self.mempool_txs)}, max target {self.max_usable_estimate()} "
            f"from {'historical' if self.historical_block_span() > self.block_span() else 'current'}"
        )

        self.tracked_txs = 0
        self.untracked_txs = 0

    def block_span(self) -> int:
        if self.first_recorded_height == 0:
            return 0
        if self.latest_seen_height < self.first_recorded_height:
            raise EstimatorError(
                Err.HEIGHT_ORDER_INVERSION,
                f"first recorded height {self.first_recorded_height} above latest seen {self.latest_seen_height}",
            )
        return int(self.latest_seen_height - self.first_recorded_height)

    def historical_block_span(self) -> int:
        if self.historical_first == 0:
            return 0
        if self.historical_best < self.historical_first:
            raise EstimatorError(
                Err.HEIGHT_ORDER_INVERSION,
                f"historical first height {self.historical_first} above historical best {self.historical_best}",
            )
        if self.latest_seen_height - self.historical_best > self.oldest_estimate_history:
            return 0
        return int(self.historical_best - self.historical_first)

    def max_usable_estimate(self) -> int:
        # Spans are halved so there are enough potential failing data points for the estimate
        return min(self.long_horizon.get_max_confirms(), max(self.block_span(), self.historical_block_span()) // 2)
