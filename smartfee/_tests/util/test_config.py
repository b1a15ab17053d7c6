from __future__ import annotations

from pathlib import Path

import pytest

from smartfee.policy.fee_estimator import create_fee_estimator
from smartfee.util.config import (
    config_path_for_filename,
    create_default_smartfee_config,
    load_config,
    lock_and_load_config,
    override_config,
    path_from_root,
    save_config,
)
from smartfee.util.default_root import resolve_root_path


def test_create_default_config(tmp_path: Path) -> None:
    create_default_smartfee_config(tmp_path, ("config.yaml",))
    assert config_path_for_filename(tmp_path, "config.yaml") == tmp_path / "config" / "config.yaml"
    assert (tmp_path / "config" / "config.yaml").is_file()

    config = load_config(tmp_path, "config.yaml")
    assert config["fee_estimator"]["short_horizon"] == {"block_periods": 12, "scale": 1, "decay": 0.962}
    assert config["fee_estimator"]["logging"] == config["logging"]

    sub_config = load_config(tmp_path, "config.yaml", "fee_estimator")
    assert sub_config["seconds_per_block"] == 600
    estimator = create_fee_estimator(sub_config)
    assert estimator.get_tracker().long_horizon.get_max_confirms() == 1008


def test_load_missing_config(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_config(tmp_path, "config.yaml")


def test_save_config(tmp_path: Path) -> None:
    create_default_smartfee_config(tmp_path)
    with lock_and_load_config(tmp_path, "config.yaml") as config:
        config["fee_estimator"]["short_horizon"]["decay"] = 0.9
        save_config(tmp_path, "config.yaml", config)

    config = load_config(tmp_path, "config.yaml", "fee_estimator")
    assert config["short_horizon"]["decay"] == 0.9
    assert create_fee_estimator(config).get_tracker().short_horizon.decay == 0.9


def test_override_config() -> None:
    config = {"short_horizon": {"decay": 0.962, "scale": 1}, "seconds_per_block": 600}
    new_config = override_config(config, {"short_horizon.decay": 0.95, "long_horizon.scale": 12, "success_pct": 0.8})
    assert new_config == {
        "short_horizon": {"decay": 0.95, "scale": 1},
        "long_horizon": {"scale": 12},
        "seconds_per_block": 600,
        "success_pct": 0.8,
    }
    # the original is left alone
    assert config["short_horizon"]["decay"] == 0.962
    assert override_config(config, None) == config


def test_path_from_root(tmp_path: Path) -> None:
    assert path_from_root(tmp_path, "log/debug.log") == (tmp_path / "log" / "debug.log").resolve()
    absolute = tmp_path / "elsewhere.log"
    assert path_from_root(Path("/unused"), absolute) == absolute.resolve()


def test_resolve_root_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_root_path(override=tmp_path) == tmp_path.resolve()

    monkeypatch.setenv("SMARTFEE_ROOT", str(tmp_path / "env"))
    assert resolve_root_path(override=None) == (tmp_path / "env").resolve()

    monkeypatch.delenv("SMARTFEE_ROOT")
    assert resolve_root_path(override=None) == Path("~/.smartfee").expanduser().resolve()
