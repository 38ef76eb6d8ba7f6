from dataclasses import dataclass
from typing import Optional

import grpc


@dataclass
class Candle:
    timestamp: int   # open time, ms since epoch
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class ExchangeConfig:
    exchange: str                       # ccxt id, e.g. "binance"
    enable_rate_limit: bool = True
    default_type: Optional[str] = None  # "spot", "future", "swap", ...
    subaccount: Optional[str] = None


@dataclass(frozen=True)
class Credentials:
    api_key: Optional[str] = None
    secret: Optional[str] = None
    password: Optional[str] = None
    uid: Optional[str] = None
    login: Optional[str] = None
    token: Optional[str] = None
    twofa: Optional[str] = None


@dataclass(frozen=True)
class ErrorOutcome:
    code: grpc.StatusCode
    message: str
