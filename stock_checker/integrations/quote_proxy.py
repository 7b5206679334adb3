from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from stock_checker.errors import QuoteConnectionError, QuoteNotFoundError, StockValidationError
from stock_checker.schemas.quote import Quote, normalize_symbol

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://stock-price-checker-proxy.freecodecamp.rocks"


class ProxyQuoteClient:
    """Quote client for the freeCodeCamp stock price checker proxy (IEX-shaped payloads)."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 5.0,
        session: Optional[Any] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests

    def quote_url(self, symbol: str) -> str:
        return f"{self.base_url}/v1/stock/{normalize_symbol(symbol)}/quote"

    def get_quote(self, symbol: str) -> Dict[str, Any]:
        url = self.quote_url(symbol)
        LOGGER.info("[PROXY][request] url=%s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise QuoteConnectionError(f"Request to {url} failed: {exc}") from exc

        status_code = getattr(response, "status_code", None)
        if not getattr(response, "ok", False):
            raise QuoteConnectionError(f"Received {status_code} from {url}", status_code=status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise QuoteConnectionError(f"Unparseable response from {url}", status_code=status_code) from exc

        if isinstance(payload, str):
            # the proxy answers unknown symbols with a bare JSON string
            if "symbol" in payload.lower():
                raise QuoteNotFoundError(normalize_symbol(symbol))
            raise QuoteConnectionError(f"Unexpected message from {url}: {payload}", status_code=status_code)
        if not isinstance(payload, dict):
            raise QuoteConnectionError(f"Unexpected payload from {url}", status_code=status_code)

        LOGGER.info("[PROXY][response] url=%s status=%s", url, status_code)
        return payload

    def build_quote(self, payload: Dict[str, Any]) -> Quote:
        try:
            return Quote.from_properties(payload)
        except StockValidationError as exc:
            raise QuoteConnectionError(f"Unexpected quote payload: {exc.description}") from exc

    async def fetch_quote(self, symbol: str) -> Quote:
        normalize_symbol(symbol)
        payload = await asyncio.to_thread(self.get_quote, symbol)
        return self.build_quote(payload)
