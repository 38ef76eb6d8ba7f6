"""
Builds per-call ccxt clients from the request's exchange block.

The registry maps ccxt ids to exchange classes and is resolved once at
startup (see ``core.config``). Every call gets a new client instance; the
caller is responsible for closing it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

import ccxt.async_support as ccxt_async

from src.core.errors import ConfigError, UnsupportedExchange
from src.core.models import Credentials, ExchangeConfig
from src.exchanges.base import ExchangeClient

logger = logging.getLogger(__name__)

ExchangeRegistry = Mapping[str, Callable[[dict], Any]]

# ccxt constructor option name for each credential field
_CREDENTIAL_OPTIONS = {
    "api_key": "apiKey",
    "secret": "secret",
    "password": "password",
    "uid": "uid",
    "login": "login",
    "token": "token",
    "twofa": "twofa",
}


def build_registry(allowed: Optional[Iterable[str]] = None) -> dict[str, Callable[[dict], Any]]:
    """
    Resolve ccxt async exchange classes by id.

    With no *allowed* list every exchange ccxt ships is registered. Unknown
    ids in *allowed* are a configuration error.
    """
    ids = list(allowed) if allowed else list(ccxt_async.exchanges)
    unknown = [i for i in ids if i not in ccxt_async.exchanges]
    if unknown:
        raise ConfigError(f"Unknown exchange id(s) in config: {', '.join(unknown)}")
    return {i: getattr(ccxt_async, i) for i in ids}


def build_options(config: ExchangeConfig, credentials: Optional[Credentials] = None) -> dict:
    """Translate the exchange block and credentials into ccxt constructor options."""
    options: dict[str, Any] = {
        "enableRateLimit": config.enable_rate_limit,
        "options": {},
    }
    if config.default_type:
        options["options"]["defaultType"] = config.default_type
    if config.subaccount:
        options["subaccount"] = config.subaccount

    if credentials is not None:
        for field, option in _CREDENTIAL_OPTIONS.items():
            value = getattr(credentials, field)
            # empty strings are proto3 defaults, not real secrets
            if value:
                options[option] = value
    return options


def create_exchange(
    registry: ExchangeRegistry,
    config: ExchangeConfig,
    credentials: Optional[Credentials] = None,
) -> ExchangeClient:
    """Instantiate a fresh client for ``config.exchange``."""
    ctor = registry.get(config.exchange)
    if ctor is None:
        raise UnsupportedExchange(config.exchange)

    options = build_options(config, credentials)
    logger.debug(
        f"Creating {config.exchange} client "
        f"(rateLimit={config.enable_rate_limit}, defaultType={config.default_type}, "
        f"authenticated={any(k in options for k in ('apiKey', 'secret', 'token'))})"
    )
    return ctor(options)
