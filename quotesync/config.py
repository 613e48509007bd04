from __future__ import annotations

import json
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, cast

DEFAULT_CONFIG_PATH = Path("~/.config/quotesync/config.json").expanduser()
DEFAULT_SERVER_URL = "https://jsonplaceholder.typicode.com/posts"

ConflictPolicy = Literal["server_wins", "manual"]
CONFLICT_POLICIES: tuple[str, ...] = ("server_wins", "manual")

CONFIG_ENV_OVERRIDES = {
    "db_path": "QUOTESYNC_DB_PATH",
    "server_url": "QUOTESYNC_SERVER_URL",
    "fetch_limit": "QUOTESYNC_FETCH_LIMIT",
    "http_timeout_s": "QUOTESYNC_HTTP_TIMEOUT_S",
    "sync_interval_s": "QUOTESYNC_SYNC_INTERVAL_S",
    "conflict_policy": "QUOTESYNC_CONFLICT_POLICY",
}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("QUOTESYNC_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    return config_path


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class QuotesyncConfig:
    db_path: str = "~/.quotesync/quotesync.sqlite"
    server_url: str = DEFAULT_SERVER_URL
    fetch_limit: int = 40
    http_timeout_s: float = 10.0
    sync_interval_s: int = 60
    conflict_policy: ConflictPolicy = "server_wins"


def _parse_int(value: object, default: int, *, key: str, minimum: int | None = None) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if minimum is not None and parsed < minimum:
        warnings.warn(f"{key} must be >= {minimum}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def _parse_float(value: object, default: float, *, key: str) -> float:
    if value is None:
        return default
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default


def normalize_policy(value: object, default: ConflictPolicy = "server_wins") -> ConflictPolicy:
    if value is None:
        return default
    text = str(value).strip().lower().replace("-", "_")
    if text in CONFLICT_POLICIES:
        return cast(ConflictPolicy, text)
    warnings.warn(f"Invalid conflict_policy: {value!r}", RuntimeWarning, stacklevel=2)
    return default


def load_config(path: Path | None = None) -> QuotesyncConfig:
    cfg = QuotesyncConfig()
    config_path = get_config_path(path)
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
        except json.JSONDecodeError:
            data = {}
        if isinstance(data, dict):
            cfg = _apply_dict(cfg, data)
    cfg = _apply_env(cfg)
    return cfg


def _apply_dict(cfg: QuotesyncConfig, data: dict[str, Any]) -> QuotesyncConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        if key in {"fetch_limit", "sync_interval_s"}:
            setattr(cfg, key, _parse_int(value, getattr(cfg, key), key=key, minimum=1))
            continue
        if key == "http_timeout_s":
            cfg.http_timeout_s = _parse_float(value, cfg.http_timeout_s, key=key)
            continue
        if key == "conflict_policy":
            cfg.conflict_policy = normalize_policy(value, cfg.conflict_policy)
            continue
        setattr(cfg, key, str(value))
    return cfg


def _apply_env(cfg: QuotesyncConfig) -> QuotesyncConfig:
    return _apply_dict(cfg, get_env_overrides())
