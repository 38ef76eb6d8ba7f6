"""
gRPC servicer that forwards each RPC to the ccxt unified API.

Every call is independent:

    1. Read ``config`` / ``credentials`` and build a fresh ccxt client.
    2. Decode the optional ``params`` ``Value`` into a plain dict.
    3. Await the single ccxt method backing the RPC.
    4. Encode the result as a ``google.protobuf.Value`` (candles for OHLCV).

Any exception along the way, construction included, is classified into a
gRPC status and reported with ``context.abort``; a call never returns a
partial response. The client is closed on every path.

Usage::

    from src.core.config import load_config
    from src.service.ccxt_service import CcxtService

    servicer = CcxtService(load_config())
    pb_grpc.add_CcxtServiceServicer_to_server(servicer, server)
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, Optional

import grpc

from src.core.config import ServiceConfig
from src.core.errors import CapabilityNotSupported, InvalidArguments, classify_error
from src.core.models import Credentials, ExchangeConfig
from src.exchanges.base import OPTIONAL_CAPABILITIES, ExchangeClient, supports
from src.exchanges.factory import create_exchange
from src.helpers.ohlcv_helper import to_candles
from src.helpers.value_helper import encode_value, extract_params
from src.service.messages import pb, pb_grpc

logger = logging.getLogger(__name__)

DEFAULT_TIMEFRAME = "1m"

Renderer = Callable[[Any], Any]


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

def _exchange_config(request) -> ExchangeConfig:
    if not request.HasField("config") or not request.config.exchange:
        raise InvalidArguments("config.exchange is required")
    cfg = request.config
    return ExchangeConfig(
        exchange=cfg.exchange,
        enable_rate_limit=cfg.enable_rate_limit if cfg.HasField("enable_rate_limit") else True,
        default_type=cfg.default_type or None,
        subaccount=cfg.subaccount or None,
    )


def _credentials(request) -> Optional[Credentials]:
    if not request.HasField("credentials"):
        return None
    c = request.credentials
    return Credentials(
        api_key=c.api_key or None,
        secret=c.secret or None,
        password=c.password or None,
        uid=c.uid or None,
        login=c.login or None,
        token=c.token or None,
        twofa=c.twofa or None,
    )


def _params(request):
    return extract_params(request.params if request.HasField("params") else None)


def _generic(result: Any):
    return pb.GenericResponse(data=encode_value(result))


def _ohlcv(result: Any):
    return pb.FetchOHLCVResponse(
        candles=[pb.Candle(**asdict(c)) for c in to_candles(result)]
    )


# ---------------------------------------------------------------------------
# Servicer
# ---------------------------------------------------------------------------

class CcxtService(pb_grpc.CcxtServiceServicer):
    """
    Async implementation of ``ccxt.CcxtService``.

    Parameters
    ----------
    config : ServiceConfig
        Immutable startup configuration; only ``config.exchanges`` (the
        exchange registry) is consulted per call.
    """

    def __init__(self, config: ServiceConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _open_exchange(self, request) -> ExchangeClient:
        return create_exchange(
            self.config.exchanges, _exchange_config(request), _credentials(request)
        )

    async def _dispatch(
        self,
        request,
        context: grpc.aio.ServicerContext,
        method: str,
        *args: Any,
        render: Renderer = _generic,
    ):
        exchange = None
        outcome = None
        response = None
        try:
            exchange = self._open_exchange(request)
            if method in OPTIONAL_CAPABILITIES and not supports(exchange, method):
                raise CapabilityNotSupported(OPTIONAL_CAPABILITIES[method])

            params = _params(request)
            kwargs = {} if params is None else {"params": params}
            logger.debug(f"{request.config.exchange}.{method}{args}")
            result = await getattr(exchange, method)(*args, **kwargs)
            response = render(result)
        except Exception as exc:
            outcome = classify_error(exc)
            logger.warning(
                f"{method} on '{request.config.exchange}' failed: "
                f"{outcome.code.name} {type(exc).__name__}: {outcome.message}"
            )
        finally:
            await self._close(exchange)

        if outcome is not None:
            await context.abort(outcome.code, outcome.message)
        return response

    async def _close(self, exchange) -> None:
        close = getattr(exchange, "close", None)
        if close is None:
            return
        try:
            await close()
        except Exception as exc:
            logger.warning(f"Error closing exchange client: {exc}")

    # ------------------------------------------------------------------
    # Market data
    # ------------------------------------------------------------------

    async def LoadMarkets(self, request, context):
        return await self._dispatch(request, context, "load_markets", request.reload)

    async def FetchMarkets(self, request, context):
        return await self._dispatch(request, context, "fetch_markets")

    async def FetchCurrencies(self, request, context):
        return await self._dispatch(request, context, "fetch_currencies")

    async def FetchTicker(self, request, context):
        return await self._dispatch(request, context, "fetch_ticker", request.symbol)

    async def FetchTickers(self, request, context):
        symbols = list(request.symbols) or None
        return await self._dispatch(request, context, "fetch_tickers", symbols)

    async def FetchOrderBook(self, request, context):
        return await self._dispatch(
            request, context, "fetch_order_book", request.symbol, request.limit or None
        )

    async def FetchOhlcv(self, request, context):
        return await self._dispatch(
            request,
            context,
            "fetch_ohlcv",
            request.symbol,
            request.timeframe or DEFAULT_TIMEFRAME,
            request.since or None,
            request.limit or None,
            render=_ohlcv,
        )

    async def FetchStatus(self, request, context):
        return await self._dispatch(request, context, "fetch_status")

    async def FetchTrades(self, request, context):
        return await self._dispatch(
            request, context, "fetch_trades",
            request.symbol, request.since or None, request.limit or None,
        )

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    async def FetchBalance(self, request, context):
        return await self._dispatch(request, context, "fetch_balance")

    async def FetchOrder(self, request, context):
        return await self._dispatch(
            request, context, "fetch_order", request.id, request.symbol or None
        )

    async def _fetch_order_list(self, request, context, method: str):
        return await self._dispatch(
            request, context, method,
            request.symbol or None, request.since or None, request.limit or None,
        )

    async def FetchOrders(self, request, context):
        return await self._fetch_order_list(request, context, "fetch_orders")

    async def FetchOpenOrders(self, request, context):
        return await self._fetch_order_list(request, context, "fetch_open_orders")

    async def FetchClosedOrders(self, request, context):
        return await self._fetch_order_list(request, context, "fetch_closed_orders")

    async def FetchMyTrades(self, request, context):
        return await self._fetch_order_list(request, context, "fetch_my_trades")

    # ------------------------------------------------------------------
    # Trading & funding
    # ------------------------------------------------------------------

    async def CreateOrder(self, request, context):
        return await self._dispatch(
            request, context, "create_order",
            request.symbol, request.type, request.side, request.amount,
            request.price or None,
        )

    async def CancelOrder(self, request, context):
        return await self._dispatch(
            request, context, "cancel_order", request.id, request.symbol or None
        )

    async def Deposit(self, request, context):
        return await self._dispatch(
            request, context, "deposit",
            request.code, request.amount, request.address, request.tag or None,
        )

    async def Withdraw(self, request, context):
        return await self._dispatch(
            request, context, "withdraw",
            request.code, request.amount, request.address, request.tag or None,
        )
