from __future__ import annotations

from typing import TypeAlias

import chia_rs.sized_bytes

bytes32: TypeAlias = chia_rs.sized_bytes.bytes32
