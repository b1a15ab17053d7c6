from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DEFAULT_ROOT_PATH = Path(os.path.expanduser(os.getenv("SMARTFEE_ROOT", "~/.smartfee"))).resolve()


def resolve_root_path(*, override: Optional[Path]) -> Path:
    candidates = [
        override,
        os.environ.get("SMARTFEE_ROOT"),
        "~/.smartfee",
    ]

    for candidate in candidates:
        if candidate is not None:
            return Path(candidate).expanduser().resolve()

    raise RuntimeError("unreachable: last candidate is hardcoded to be found")
