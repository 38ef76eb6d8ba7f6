from typing import Any, Optional, Protocol, Sequence, runtime_checkable

# Operations ccxt may not implement for a given venue; checked before use.
OPTIONAL_CAPABILITIES = {
    "fetch_status": "fetchStatus",
    "deposit": "deposit",
}


@runtime_checkable
class ExchangeClient(Protocol):
    """The slice of the ccxt async unified API the service calls.

    ``fetch_status`` and ``deposit`` are optional and not part of the
    protocol; use :func:`supports` before calling them.
    """

    # Market Data Methods
    async def load_markets(self, reload: bool = False, params: dict = {}) -> Any: ...

    async def fetch_markets(self, params: dict = {}) -> Any: ...

    async def fetch_currencies(self, params: dict = {}) -> Any: ...

    async def fetch_ticker(self, symbol: str, params: dict = {}) -> Any: ...

    async def fetch_tickers(self, symbols: Optional[Sequence[str]] = None, params: dict = {}) -> Any: ...

    async def fetch_order_book(self, symbol: str, limit: Optional[int] = None, params: dict = {}) -> Any: ...

    async def fetch_ohlcv(self, symbol: str, timeframe: str = "1m", since: Optional[int] = None,
                          limit: Optional[int] = None, params: dict = {}) -> Any: ...

    async def fetch_trades(self, symbol: str, since: Optional[int] = None,
                           limit: Optional[int] = None, params: dict = {}) -> Any: ...

    # Account Methods
    async def fetch_balance(self, params: dict = {}) -> Any: ...

    async def fetch_order(self, id: str, symbol: Optional[str] = None, params: dict = {}) -> Any: ...

    async def fetch_orders(self, symbol: Optional[str] = None, since: Optional[int] = None,
                           limit: Optional[int] = None, params: dict = {}) -> Any: ...

    async def fetch_open_orders(self, symbol: Optional[str] = None, since: Optional[int] = None,
                                limit: Optional[int] = None, params: dict = {}) -> Any: ...

    async def fetch_closed_orders(self, symbol: Optional[str] = None, since: Optional[int] = None,
                                  limit: Optional[int] = None, params: dict = {}) -> Any: ...

    async def fetch_my_trades(self, symbol: Optional[str] = None, since: Optional[int] = None,
                              limit: Optional[int] = None, params: dict = {}) -> Any: ...

    # Trading Methods
    async def create_order(self, symbol: str, type: str, side: str, amount: float,
                           price: Optional[float] = None, params: dict = {}) -> Any: ...

    async def cancel_order(self, id: str, symbol: Optional[str] = None, params: dict = {}) -> Any: ...

    async def withdraw(self, code: str, amount: float, address: str,
                       tag: Optional[str] = None, params: dict = {}) -> Any: ...


def supports(client: Any, method: str) -> bool:
    """True when *client* exposes *method* and its ``has`` map does not rule it out."""
    if not callable(getattr(client, method, None)):
        return False
    capability = OPTIONAL_CAPABILITIES.get(method)
    has = getattr(client, "has", None)
    if capability and isinstance(has, dict) and has.get(capability) is False:
        return False
    return True
