"""Configuration loading for the line protocol client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from influxline.errors import ConfigError
from influxline.precision import Precision

CONFIG_ENV_VAR = "INFLUXLINE_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/influxline.yaml")


@dataclass
class ClientConfig:
    """Connection settings for one write endpoint."""

    server: str
    database: str
    protocol: str = "http"
    port: Optional[int] = 8086
    precision: Precision = Precision.SECONDS
    timeout_s: float = 5.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None


@dataclass
class AppConfig:
    client: ClientConfig
    logging: LoggingConfig


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


def default_config_path() -> Path:
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def _parse_port(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"influx.port must be an integer, got {raw!r}") from None


def _parse_client(raw: Dict[str, Any]) -> ClientConfig:
    missing = [key for key in ("server", "database") if not str(raw.get(key) or "").strip()]
    if missing:
        raise ConfigError(f"Missing required config fields: {', '.join('influx.' + m for m in missing)}")
    try:
        timeout_s = float(raw.get("timeout_s", 5.0))
    except (TypeError, ValueError):
        raise ConfigError(f"influx.timeout_s must be a number, got {raw.get('timeout_s')!r}") from None

    return ClientConfig(
        server=str(raw["server"]).strip(),
        database=str(raw["database"]).strip(),
        protocol=str(raw.get("protocol", "http")).lower(),
        port=_parse_port(raw.get("port", 8086)),
        precision=Precision.parse(raw.get("precision", "s")),
        timeout_s=timeout_s,
    )


def load_client_config(path: Path) -> ClientConfig:
    """Load the ``influx`` section of a YAML config file."""

    raw = _load_yaml(path)
    return _parse_client(raw.get("influx", {}) or {})


def load_app_config(path: Path) -> AppConfig:
    """Load client and logging settings; relative log paths resolve next to the file."""

    raw = _load_yaml(path)
    log_raw = raw.get("logging", {}) or {}
    log_path = log_raw.get("path")
    resolved: Optional[Path] = None
    if log_path:
        resolved = Path(log_path).expanduser()
        if not resolved.is_absolute():
            resolved = (path.parent / resolved).resolve()
    return AppConfig(
        client=_parse_client(raw.get("influx", {}) or {}),
        logging=LoggingConfig(level=str(log_raw.get("level", "INFO")).upper(), path=resolved),
    )
