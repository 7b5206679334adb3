from __future__ import annotations

import logging

from stock_checker.schemas.quote import Quote, normalize_symbol

LOGGER = logging.getLogger(__name__)


class CacheHooks:
    """Lifecycle hooks for QuoteCache. The defaults change nothing."""

    async def fetch(self, symbol: str) -> Quote | None:
        """Supply a quote for a cache miss; ``None`` falls through to the fetcher."""
        return None

    async def on_fetched(self, quote: Quote) -> None:
        return None

    def on_evicted(self, symbol: str) -> bool:
        return True


class QuoteCache:
    """Symbol -> Quote cache that fetches on miss. Unbounded, no TTL."""

    def __init__(self, fetcher, hooks: CacheHooks | None = None) -> None:
        self.fetcher = fetcher
        self.hooks = hooks or CacheHooks()
        self._rows: dict[str, Quote] = {}
        self.hits = 0
        self.misses = 0

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, symbol: str) -> Quote | None:
        return self._rows.get(str(symbol).strip().upper())

    def quotes(self) -> dict[str, Quote]:
        return dict(self._rows)

    async def get_or_fetch(self, symbol: str) -> Quote:
        key = normalize_symbol(symbol)

        cached = self._rows.get(key)
        if cached is not None:
            self.hits += 1
            LOGGER.debug("[QUOTE][cache_hit] symbol=%s", key)
            await self.hooks.on_fetched(cached)
            return cached

        self.misses += 1
        LOGGER.info("[QUOTE][cache_miss] symbol=%s", key)
        quote = await self.hooks.fetch(key)
        if quote is None:
            quote = await self.fetcher.fetch_quote(key)

        # keyed by the requested symbol, not whatever the transport echoed back
        self._rows[key] = quote
        await self.hooks.on_fetched(quote)
        return quote

    def evict(self, symbol: str) -> bool:
        key = str(symbol).strip().upper()
        result = self.hooks.on_evicted(key)
        removed = self._rows.pop(key, None)
        LOGGER.info("[QUOTE][evicted] symbol=%s present=%s", key, removed is not None)
        return result

    def metrics(self) -> dict[str, int]:
        return {
            "cached_symbols": len(self._rows),
            "hits": self.hits,
            "misses": self.misses,
        }
