from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from stock_checker.errors import StockValidationError
from stock_checker.schemas.quote import Quote
from stock_checker.schemas.watch import WatchEntry


@dataclass(frozen=True)
class SnapshotResult:
    """One read: a single quote (or a symbol -> quote mapping) plus its watchers."""

    quotes: Quote | Mapping[str, Quote]
    watchers: tuple[WatchEntry, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.quotes, Quote):
            if not isinstance(self.quotes, Mapping) or not all(
                isinstance(value, Quote) for value in self.quotes.values()
            ):
                raise StockValidationError(
                    "quotes must be a Quote or a mapping of Quote", fields=["quotes"]
                )
            object.__setattr__(self, "quotes", MappingProxyType(dict(self.quotes)))

        watchers = tuple(self.watchers)
        if not all(isinstance(watcher, WatchEntry) for watcher in watchers):
            raise StockValidationError("watchers must be WatchEntry instances", fields=["watchers"])
        object.__setattr__(self, "watchers", watchers)

    @property
    def is_single(self) -> bool:
        return isinstance(self.quotes, Quote)

    @property
    def quote(self) -> Quote:
        if not isinstance(self.quotes, Quote):
            raise TypeError("snapshot holds a quote mapping, not a single quote")
        return self.quotes

    @property
    def quote_map(self) -> Mapping[str, Quote]:
        if isinstance(self.quotes, Quote):
            return MappingProxyType({self.quotes.symbol: self.quotes})
        return self.quotes

    @property
    def likes(self) -> int:
        return len(self.watchers)

    def field_values(self) -> dict[str, Any]:
        if isinstance(self.quotes, Quote):
            return self.quotes.as_dict()
        return dict(self.quotes)


@dataclass(frozen=True)
class Comparison:
    watchers: dict[str, int] = field(default_factory=dict)
    stocks: dict[str, dict[str, float]] = field(default_factory=dict)


def _paired_index(index: int, count: int) -> int:
    return count - 1 - index


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _field_delta(mine: Any, theirs: Any) -> float | None:
    if _is_number(mine) and _is_number(theirs):
        return theirs - mine
    if isinstance(mine, datetime) and isinstance(theirs, datetime):
        if (mine.tzinfo is None) != (theirs.tzinfo is None):
            return None
        return (theirs - mine).total_seconds()
    return None


@dataclass(frozen=True)
class ComparisonResult:
    """Named snapshots whose diffs are taken against the opposite entry.

    For two entries each side reports "other minus mine", so the watcher and
    field deltas come out equal and opposite. Diffs are recomputed on every
    read of ``comparison``.
    """

    entries: Mapping[str, SnapshotResult]

    def __post_init__(self) -> None:
        if not all(isinstance(value, SnapshotResult) for value in self.entries.values()):
            raise StockValidationError("entries must be SnapshotResult instances", fields=["entries"])
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @property
    def names(self) -> list[str]:
        return list(self.entries)

    @property
    def comparison(self) -> Comparison:
        names = self.names
        count = len(names)
        if count != 2:
            raise StockValidationError(
                f"comparison needs exactly two entries, got {count}", fields=["entries"]
            )

        snapshots = [self.entries[name] for name in names]
        watchers: dict[str, int] = {}
        stocks: dict[str, dict[str, float]] = {}
        for index, name in enumerate(names):
            mine = snapshots[index]
            theirs = snapshots[_paired_index(index, count)]
            watchers[name] = theirs.likes - mine.likes

            their_values = theirs.field_values()
            deltas: dict[str, float] = {}
            for key, value in mine.field_values().items():
                if key not in their_values:
                    continue
                delta = _field_delta(value, their_values[key])
                if delta is not None:
                    deltas[key] = delta
            stocks[name] = deltas

        return Comparison(watchers=watchers, stocks=stocks)
