"""
Service configuration.

Loaded once at startup from ``config/service_config.json`` (or the file named
by ``CCXT_RPC_CONFIG``), then overridden by ``PORT``, ``HOST`` and
``LOG_LEVEL`` from the environment / ``.env``. The resulting
``ServiceConfig`` is immutable and passed explicitly to the service and
server.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from dotenv import load_dotenv

from src.core.errors import ConfigError
from src.exchanges.factory import build_registry

# Resolve project root (two levels up from this file: src/core/ -> repo root)
ROOT = Path(__file__).resolve().parents[2]

DEFAULT_CONFIG_PATH = ROOT / "config" / "service_config.json"
DEFAULT_PORT = 50051


@dataclass(frozen=True)
class ServiceConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    log_path: Optional[Path] = None
    grace_period_sec: float = 5.0
    exchanges: Mapping[str, Callable[[dict], Any]] = field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


def _read_json(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a JSON object")
    return data


def load_config(
    config_path: Optional[str | Path] = None,
    registry: Optional[Mapping[str, Callable[[dict], Any]]] = None,
) -> ServiceConfig:
    """Build the ``ServiceConfig``.

    Args:
        config_path: JSON file to read; defaults to ``CCXT_RPC_CONFIG`` or
            ``config/service_config.json``. A missing file means defaults.
        registry: Exchange registry to use instead of resolving ccxt
            classes from the ``exchanges`` allow-list (tests inject fakes).

    Returns:
        The resolved, immutable configuration.
    """
    load_dotenv()

    if config_path is None:
        config_path = os.environ.get("CCXT_RPC_CONFIG", DEFAULT_CONFIG_PATH)
    config_path = Path(config_path)
    data = _read_json(config_path)

    try:
        port = int(os.environ.get("PORT", data.get("port", DEFAULT_PORT)))
        grace = float(data.get("grace_period_sec", 5.0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting in {config_path}: {e}") from e

    log_path = data.get("log_path")
    if log_path:
        log_path = Path(log_path)
        if not log_path.is_absolute():
            log_path = ROOT / log_path

    if registry is None:
        registry = build_registry(data.get("exchanges") or None)

    return ServiceConfig(
        host=os.environ.get("HOST", data.get("host", "0.0.0.0")),
        port=port,
        log_level=os.environ.get("LOG_LEVEL", data.get("log_level", "INFO")).upper(),
        log_path=log_path or None,
        grace_period_sec=grace,
        exchanges=MappingProxyType(dict(registry)),
    )
