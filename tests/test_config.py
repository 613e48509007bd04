import json
from pathlib import Path

import pytest

from quotesync.config import (
    QuotesyncConfig,
    get_config_path,
    get_env_overrides,
    load_config,
    read_config_file,
    write_config_file,
)


def test_read_config_file_rejects_invalid_json(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{not-json}")
    with pytest.raises(ValueError, match="invalid config json"):
        read_config_file(config_path)


def test_read_config_file_rejects_non_object(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2]")
    with pytest.raises(ValueError, match="config must be an object"):
        read_config_file(config_path)


def test_write_then_read_config(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "config.json"
    write_config_file({"server_url": "http://localhost:3000/posts"}, config_path)
    assert read_config_file(config_path) == {"server_url": "http://localhost:3000/posts"}


def test_config_path_honours_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("QUOTESYNC_CONFIG", str(tmp_path / "custom.json"))
    assert get_config_path() == tmp_path / "custom.json"


def test_load_config_defaults() -> None:
    cfg = load_config()
    assert cfg.server_url == "https://jsonplaceholder.typicode.com/posts"
    assert cfg.fetch_limit == 40
    assert cfg.sync_interval_s == 60
    assert cfg.conflict_policy == "server_wins"


def test_load_config_applies_file_then_env(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "fetch_limit": "25",
                "sync_interval_s": 30,
                "conflict_policy": "manual",
                "unknown_key": "ignored",
            }
        )
    )
    monkeypatch.setenv("QUOTESYNC_SYNC_INTERVAL_S", "45")

    cfg = load_config(config_path)

    assert cfg.fetch_limit == 25
    assert cfg.sync_interval_s == 45
    assert cfg.conflict_policy == "manual"
    assert not hasattr(cfg, "unknown_key")


def test_invalid_values_warn_and_keep_defaults(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"fetch_limit": "many", "conflict_policy": "coin-flip"}))

    with pytest.warns(RuntimeWarning):
        cfg = load_config(config_path)

    assert cfg.fetch_limit == 40
    assert cfg.conflict_policy == "server_wins"


def test_env_overrides_listing(monkeypatch) -> None:
    monkeypatch.setenv("QUOTESYNC_SERVER_URL", "http://localhost/posts")
    overrides = get_env_overrides()
    assert overrides["server_url"] == "http://localhost/posts"
    assert "fetch_limit" not in overrides


def test_env_overrides_flow_through_load_config(monkeypatch) -> None:
    monkeypatch.setenv("QUOTESYNC_FETCH_LIMIT", "7")
    monkeypatch.setenv("QUOTESYNC_CONFLICT_POLICY", "manual")

    cfg = load_config()

    assert cfg.fetch_limit == 7
    assert cfg.conflict_policy == "manual"


@pytest.mark.parametrize("key", ["fetch_limit", "sync_interval_s"])
@pytest.mark.parametrize("value", [0, -1])
def test_non_positive_ints_in_file_warn_and_keep_defaults(
    tmp_path: Path, key: str, value: int
) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({key: value}))

    with pytest.warns(RuntimeWarning, match=key):
        cfg = load_config(config_path)

    assert getattr(cfg, key) == getattr(QuotesyncConfig(), key)


@pytest.mark.parametrize(
    ("env_var", "key"),
    [("QUOTESYNC_FETCH_LIMIT", "fetch_limit"), ("QUOTESYNC_SYNC_INTERVAL_S", "sync_interval_s")],
)
def test_non_positive_env_ints_warn_and_keep_defaults(monkeypatch, env_var: str, key: str) -> None:
    monkeypatch.setenv(env_var, "-1")

    with pytest.warns(RuntimeWarning, match=key):
        cfg = load_config()

    assert getattr(cfg, key) == getattr(QuotesyncConfig(), key)
