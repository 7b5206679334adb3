from __future__ import annotations

import logging

from stock_checker.errors import StockValidationError
from stock_checker.schemas.quote import Quote, normalize_symbol
from stock_checker.schemas.watch import WatchEntry, normalize_address

LOGGER = logging.getLogger(__name__)


class WatchHooks:
    def on_search(self, stock: Quote | str | None, address: str | None) -> None:
        return None


class WatchRegistry:
    """Ordered set of WatchEntry, at most one per address, in registration order."""

    def __init__(self, hooks: WatchHooks | None = None) -> None:
        self.hooks = hooks or WatchHooks()
        self._entries: list[WatchEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def search(
        self,
        stock: Quote | str | None = None,
        address: str | None = None,
    ) -> list[WatchEntry]:
        """Entries watching ``stock`` (identity for a Quote, symbol for a string) from ``address``."""
        symbol: str | None = None
        if stock not in (None, "") and not isinstance(stock, Quote):
            symbol = normalize_symbol(stock)
        if address:
            address = normalize_address(address)

        self.hooks.on_search(stock, address)

        def _watches(entry: WatchEntry) -> bool:
            if isinstance(stock, Quote):
                return any(item is stock for item in entry.stock)
            if symbol is not None:
                return any(item.symbol == symbol for item in entry.stock)
            return True

        return [
            entry
            for entry in self._entries
            if (not address or entry.address == address) and _watches(entry)
        ]

    @property
    def items(self) -> list[WatchEntry]:
        return self.search()

    @property
    def addresses(self) -> set[str]:
        return {entry.address for entry in self._entries}

    @property
    def stocks(self) -> tuple[Quote, ...]:
        seen: dict[int, Quote] = {}
        for entry in self._entries:
            for quote in entry.stock:
                seen.setdefault(id(quote), quote)
        return tuple(seen.values())

    def add(self, quote: Quote, address: str) -> bool:
        """Register ``address`` as a watcher of ``quote``; a repeat watch is a no-op.

        Returns True when the registry changed.
        """
        if not isinstance(quote, Quote):
            raise StockValidationError(f"Not a quote: {quote!r}", fields=["stock"])
        address = normalize_address(address)

        if self.search(quote.symbol, address):
            LOGGER.debug("[WATCH][duplicate] symbol=%s address=%s", quote.symbol, address)
            return False

        # entries are frozen; a new symbol replaces the address's entry in place
        for index, entry in enumerate(self._entries):
            if entry.address == address:
                self._entries[index] = WatchEntry(address=address, stock=entry.stock + (quote,))
                break
        else:
            self._entries.append(WatchEntry(address=address, stock=(quote,)))

        LOGGER.info(
            "[WATCH][registered] symbol=%s address=%s watchers=%s",
            quote.symbol,
            address,
            len(self._entries),
        )
        return True

    def remove(self, address: str) -> bool:
        address = normalize_address(address)
        for index, entry in enumerate(self._entries):
            if entry.address == address:
                del self._entries[index]
                LOGGER.info("[WATCH][removed] address=%s", address)
                return True
        return False
