from __future__ import annotations

import dataclasses
from typing import Optional

import typing_extensions

from smartfee.policy.fee_history import FeeTrackerBackup


@typing_extensions.final
@dataclasses.dataclass
class FeeStore:
    """
    Holds the last snapshot of the fee tracker so a new tracker can warm start from it.
    Writing the snapshot to disk is left to the host application.
    """

    _backup: Optional[FeeTrackerBackup] = None

    def get_stored_fee_data(self) -> Optional[FeeTrackerBackup]:
        return self._backup

    def store_fee_data(self, fee_backup: FeeTrackerBackup) -> None:
        self._backup = fee_backup
