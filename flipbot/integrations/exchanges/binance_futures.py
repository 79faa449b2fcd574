"""
BinanceFuturesClient - Binance USDⓈ-M Futures Integration

REST client covering exactly what the position flipper needs:
- HMAC-SHA256 signed requests
- Quote asset balance, last price, position amount
- Cancel-all, flatten, market / stop-market / take-profit-market orders
- Leverage and isolated margin configuration
- LOT_SIZE step size lookup

No automatic retries: order placement is not idempotent.

Author: Flipbot Team
"""

import asyncio
import hmac
import hashlib
import time
from decimal import Decimal
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp

from flipbot.integrations.exchanges.base import (
    MarginType,
    OrderIntent,
    OrderSide,
)
from flipbot.shared.exceptions import (
    DataNotFoundError,
    ExchangeAuthenticationError,
    ExchangeError,
    TransportError,
)
from flipbot.utils.logger import get_logger

logger = get_logger(__name__)


# "No need to change margin type" - already in the requested state
ALREADY_SET_CODES = {-4046}

# Margin type cannot change while a position or open orders exist
MARGIN_LOCKED_BY_POSITION_CODES = {-4047, -4048}


class BinanceFuturesClient:
    """
    Binance USDⓈ-M Futures REST client.

    Usage:
        async with BinanceFuturesClient(
            api_key="your_api_key",
            api_secret="your_api_secret",
            testnet=True
        ) as client:
            balance = await client.get_balance()
            price = await client.get_mark_price("SOLUSDT")
            await client.place_order(OrderIntent.market(OrderSide.BUY, Decimal("1.5")), "SOLUSDT")
    """

    BASE_URL_PROD = "https://fapi.binance.com"
    BASE_URL_TESTNET = "https://testnet.binancefuture.com"

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        testnet: bool = False,
        quote_asset: str = "USDT",
        timeout_seconds: float = 10.0,
        recv_window: Optional[int] = None
    ):
        """
        Initialize Binance futures client.

        Args:
            api_key: Binance API key
            api_secret: Binance API secret
            testnet: Use Binance Futures testnet (default: False)
            quote_asset: Asset whose balance funds positions
            timeout_seconds: Total timeout applied to every request
            recv_window: Optional recvWindow for signed requests (ms)
        """
        if not api_key or not api_secret:
            raise ExchangeAuthenticationError(
                "Binance API key and secret are required"
            )

        self.api_key = api_key
        self.api_secret = api_secret
        self.testnet = testnet
        self.base_url = self.BASE_URL_TESTNET if testnet else self.BASE_URL_PROD
        self.quote_asset = quote_asset
        self.recv_window = recv_window
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

        # HTTP session (created on demand)
        self.session: Optional[aiohttp.ClientSession] = None

        logger.info(f"Initialized BinanceFuturesClient: testnet={testnet}, quote_asset={quote_asset}")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session"""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={"X-MBX-APIKEY": self.api_key}
            )
        return self.session

    async def close(self):
        """Close HTTP session"""
        if self.session and not self.session.closed:
            await self.session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ==================== REQUEST PLUMBING ====================

    def _generate_signature(self, query_string: str) -> str:
        """
        HMAC SHA256 hex signature over the exact query string sent.

        Args:
            query_string: URL-encoded query string

        Returns:
            Hex signature string
        """
        return hmac.new(
            self.api_secret.encode(),
            query_string.encode(),
            hashlib.sha256
        ).hexdigest()

    def _build_signed_query(self, params: Optional[Dict[str, Any]] = None) -> str:
        """Canonical query string with fresh timestamp and trailing signature."""
        payload = dict(params or {})
        if self.recv_window:
            payload["recvWindow"] = self.recv_window
        payload["timestamp"] = int(time.time() * 1000)

        query_string = urlencode(payload)
        return f"{query_string}&signature={self._generate_signature(query_string)}"

    async def signed_call(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Authenticated request.

        Raises:
            ExchangeError: Non-2xx response
            TransportError: Connection failure or timeout
        """
        url = f"{self.base_url}{path}?{self._build_signed_query(params)}"
        return await self._send(method, url, path)

    async def public_call(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Unauthenticated request."""
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return await self._send(method, url, path)

    async def _send(self, method: str, url: str, path: str) -> Any:
        session = await self._get_session()

        try:
            async with session.request(method, url, timeout=self.timeout) as response:
                return await self._handle_response(response, path)

        except asyncio.TimeoutError:
            logger.error(f"Binance request timed out: {method} {path}")
            raise TransportError(f"Binance request timed out: {method} {path}")
        except aiohttp.ClientError as e:
            logger.error(f"Binance request failed: {method} {path}: {str(e)}")
            raise TransportError(f"Failed to connect to Binance: {str(e)}")

    async def _handle_response(self, response: aiohttp.ClientResponse, path: str) -> Any:
        """
        Decode response and map non-2xx to ExchangeError.

        Raises:
            ExchangeError: carries HTTP status, Binance code and message
        """
        try:
            data = await response.json(content_type=None)
        except ValueError:
            data = {"msg": await response.text()}

        if 200 <= response.status < 300:
            return data

        error_code = data.get("code") if isinstance(data, dict) else None
        error_msg = data.get("msg", "Unknown error") if isinstance(data, dict) else str(data)

        logger.error(f"Binance API error on {path}: HTTP {response.status}, code={error_code}, msg={error_msg}")
        raise ExchangeError(
            f"Binance API error on {path}: {error_msg}",
            http_status=response.status,
            exchange_code=error_code,
            exchange_message=error_msg,
            payload=data,
        )

    # ==================== ACCOUNT ====================

    async def get_balance(self) -> Decimal:
        """Available balance of the quote asset"""
        balances = await self.signed_call("GET", "/fapi/v2/balance")

        for entry in balances or []:
            if entry.get("asset") == self.quote_asset:
                amount = entry.get("availableBalance") or entry.get("balance")
                if amount is None:
                    raise DataNotFoundError(f"No balance value for {self.quote_asset} in futures balance")
                return Decimal(str(amount))

        raise DataNotFoundError(f"Asset {self.quote_asset} not found in futures balance")

    async def get_position(self, symbol: str) -> Decimal:
        """Signed position amount; 0 when flat or symbol absent"""
        positions = await self.signed_call("GET", "/fapi/v2/positionRisk", {"symbol": symbol})

        for entry in positions or []:
            if entry.get("symbol") == symbol:
                return Decimal(str(entry.get("positionAmt", "0")))

        return Decimal("0")

    # ==================== MARKET DATA ====================

    async def get_mark_price(self, symbol: str) -> Decimal:
        """Latest traded price (unauthenticated)"""
        response = await self.public_call("GET", "/fapi/v1/ticker/price", {"symbol": symbol})

        if not isinstance(response, dict) or "price" not in response:
            raise DataNotFoundError(f"No price returned for {symbol}")

        return Decimal(str(response["price"]))

    async def get_symbol_step_size(self, symbol: str) -> Decimal:
        """Minimum order quantity increment from the LOT_SIZE filter"""
        response = await self.public_call("GET", "/fapi/v1/exchangeInfo")

        symbol_info = next(
            (s for s in response.get("symbols", []) if s.get("symbol") == symbol),
            None
        )
        if symbol_info is None:
            raise DataNotFoundError(f"Symbol {symbol} not found in exchange info")

        lot_size = next(
            (f for f in symbol_info.get("filters", []) if f.get("filterType") == "LOT_SIZE"),
            None
        )
        if lot_size is None or "stepSize" not in lot_size:
            raise DataNotFoundError(f"LOT_SIZE filter not found for {symbol}")

        return Decimal(str(lot_size["stepSize"]))

    # ==================== ORDERS ====================

    async def place_order(self, intent: OrderIntent, symbol: str) -> Dict[str, Any]:
        """Submit one order"""
        params = intent.to_params(symbol)
        logger.info(f"Placing {intent.order_type.value} {intent.side.value} on {symbol}: {params}")
        return await self.signed_call("POST", "/fapi/v1/order", params)

    async def cancel_all_open_orders(self, symbol: str) -> Any:
        """Cancel every open order on the symbol. Errors always propagate."""
        response = await self.signed_call("DELETE", "/fapi/v1/allOpenOrders", {"symbol": symbol})
        logger.info(f"Cancelled all open orders on {symbol}")
        return response

    async def close_any_open_position(self, symbol: str) -> Optional[Dict[str, Any]]:
        """
        Flatten the position with one opposing market order.

        Returns:
            Order response, or None when already flat
        """
        position_amt = await self.get_position(symbol)

        if position_amt == 0:
            logger.info(f"No open position on {symbol}")
            return None

        side = OrderSide.SELL if position_amt > 0 else OrderSide.BUY
        logger.info(f"Flattening {symbol}: positionAmt={position_amt}, closing with {side.value}")

        return await self.place_order(
            OrderIntent.market(side, abs(position_amt), reduce_only=True),
            symbol
        )

    # ==================== CONFIGURATION ====================

    async def set_leverage_and_isolated_margin(self, symbol: str, leverage: int) -> None:
        """
        Set leverage and isolated margin.

        "Already set" answers are ignored; every other failure propagates.
        """
        await self.signed_call("POST", "/fapi/v1/leverage", {"symbol": symbol, "leverage": leverage})
        logger.info(f"Leverage set to {leverage}x on {symbol}")

        try:
            await self.signed_call(
                "POST",
                "/fapi/v1/marginType",
                {"symbol": symbol, "marginType": MarginType.ISOLATED.value}
            )
            logger.info(f"Margin type set to ISOLATED on {symbol}")
        except ExchangeError as e:
            if e.exchange_code in ALREADY_SET_CODES:
                logger.debug(f"Margin type already ISOLATED on {symbol}")
                return
            if e.exchange_code in MARGIN_LOCKED_BY_POSITION_CODES:
                logger.warning(
                    f"Margin type on {symbol} not changed while position/orders exist: {e.exchange_message}"
                )
                return
            raise
