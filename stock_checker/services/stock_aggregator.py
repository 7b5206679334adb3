from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from stock_checker.errors import StockValidationError
from stock_checker.schemas.quote import normalize_symbol
from stock_checker.services.quote_cache import QuoteCache
from stock_checker.services.results import ComparisonResult, SnapshotResult
from stock_checker.services.watch_registry import WatchRegistry

LOGGER = logging.getLogger(__name__)


class StockAggregator:
    """Answers read / watch / compare requests from the quote cache and watch registry."""

    def __init__(
        self,
        *,
        quote_cache: QuoteCache,
        watch_registry: WatchRegistry | None = None,
    ) -> None:
        self.quote_cache = quote_cache
        self.watch_registry = watch_registry if watch_registry is not None else WatchRegistry()

    @property
    def loaded(self) -> SnapshotResult:
        return SnapshotResult(self.quote_cache.quotes(), tuple(self.watch_registry.items))

    async def read(self, symbol: str) -> SnapshotResult:
        quote = await self.quote_cache.get_or_fetch(symbol)
        return SnapshotResult(quote, tuple(self.watch_registry.search(quote.symbol)))

    async def watch(
        self, symbols: str | Sequence[str], address: str
    ) -> SnapshotResult | ComparisonResult:
        requested = [symbols] if isinstance(symbols, str) else list(symbols)
        # repeats collapse onto the first occurrence
        names = list(dict.fromkeys(normalize_symbol(symbol) for symbol in requested))
        if not names:
            raise StockValidationError("at least one symbol is required", fields=["symbols"])

        # sequential: a failure on symbol k leaves 0..k-1 registered
        for name in names:
            initial = await self.read(name)
            self.watch_registry.add(initial.quote, address)

        if len(names) > 1:
            return await self.compare(names)
        return await self.read(names[0])

    async def compare(self, symbols: Sequence[str]) -> ComparisonResult:
        names = [normalize_symbol(symbol) for symbol in list(symbols)[:2]]
        if len(names) < 2 or names[0] == names[1]:
            raise StockValidationError("compare needs two distinct symbols", fields=["symbols"])

        snapshots = await asyncio.gather(*(self.read(name) for name in names))
        LOGGER.info("[QUOTE][compare] symbols=%s", ",".join(names))
        return ComparisonResult(dict(zip(names, snapshots)))
