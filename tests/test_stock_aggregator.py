import asyncio
import unittest

from stock_checker.errors import QuoteNotFoundError, StockValidationError
from stock_checker.schemas.quote import Quote
from stock_checker.services.quote_cache import QuoteCache
from stock_checker.services.results import ComparisonResult, SnapshotResult
from stock_checker.services.stock_aggregator import StockAggregator
from stock_checker.services.watch_registry import WatchHooks, WatchRegistry


class RecordingWatchHooks(WatchHooks):
    def __init__(self) -> None:
        self.searches: list[tuple] = []

    def on_search(self, stock, address) -> None:
        self.searches.append((stock, address))


class StubQuoteFetcher:
    def __init__(self, prices: dict[str, float]) -> None:
        self.prices = prices
        self.calls: list[str] = []

    async def fetch_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        await asyncio.sleep(0)
        if symbol not in self.prices:
            raise QuoteNotFoundError(symbol)
        return Quote(symbol=symbol, latestPrice=self.prices[symbol])


class StockAggregatorTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.fetcher = StubQuoteFetcher({"DIS": 90.0, "NKE": 100.0, "AAPL": 180.0})
        self.registry = WatchRegistry()
        self.aggregator = StockAggregator(
            quote_cache=QuoteCache(self.fetcher),
            watch_registry=self.registry,
        )

    async def test_read_returns_quote_without_watchers(self):
        result = await self.aggregator.read("dis")

        self.assertIsInstance(result, SnapshotResult)
        self.assertEqual(result.quote.symbol, "DIS")
        self.assertEqual(result.quote.latest_price, 90.0)
        self.assertEqual(result.likes, 0)

    async def test_read_then_watch_then_repeat_watch(self):
        read = await self.aggregator.read("DIS")
        self.assertEqual(read.likes, 0)
        self.assertEqual(self.fetcher.calls, ["DIS"])

        watched = await self.aggregator.watch("DIS", "10.0.0.1")
        self.assertEqual(watched.likes, 1)

        await self.aggregator.watch("DIS", "10.0.0.1")
        entries = self.registry.search(read.quote, "10.0.0.1")
        self.assertEqual(len(entries), 1)
        self.assertEqual(len(entries[0].stock), 1)
        self.assertEqual(self.fetcher.calls, ["DIS"])

    async def test_watch_registers_address_once(self):
        first = await self.aggregator.watch("DIS", "1.2.3.4")
        again = await self.aggregator.watch("DIS", "1.2.3.4")

        self.assertEqual(first.likes, 1)
        self.assertEqual(again.likes, 1)
        self.assertEqual(self.fetcher.calls, ["DIS"])

    async def test_watchers_from_different_addresses_add_up(self):
        await self.aggregator.watch("DIS", "1.1.1.1")
        result = await self.aggregator.watch("DIS", "2.2.2.2")

        self.assertEqual(result.likes, 2)
        self.assertEqual((await self.aggregator.read("DIS")).likes, 2)

    async def test_watchers_survive_eviction_and_refetch(self):
        await self.aggregator.watch("DIS", "1.1.1.1")
        self.aggregator.quote_cache.evict("DIS")

        result = await self.aggregator.read("DIS")

        self.assertEqual(result.likes, 1)
        self.assertEqual(self.fetcher.calls, ["DIS", "DIS"])

    async def test_one_address_watching_two_symbols_in_turn(self):
        await self.aggregator.watch("DIS", "1.2.3.4")
        await self.aggregator.watch("NKE", "1.2.3.4")

        self.assertEqual(len(self.registry), 1)
        self.assertEqual(self.registry.items[0].symbols(), ["DIS", "NKE"])
        self.assertEqual((await self.aggregator.read("NKE")).likes, 1)

    async def test_compare_reports_opposite_deltas(self):
        await self.aggregator.watch("NKE", "1.1.1.1")

        result = await self.aggregator.compare(["DIS", "NKE"])

        self.assertIsInstance(result, ComparisonResult)
        comparison = result.comparison
        self.assertEqual(comparison.watchers, {"DIS": 1, "NKE": -1})
        self.assertEqual(comparison.stocks["DIS"]["latest_price"], 10.0)
        self.assertEqual(comparison.stocks["NKE"]["latest_price"], -10.0)

    async def test_compare_ignores_symbols_past_the_second(self):
        result = await self.aggregator.compare(["DIS", "NKE", "AAPL"])

        self.assertEqual(result.names, ["DIS", "NKE"])
        self.assertNotIn("AAPL", self.fetcher.calls)

    async def test_compare_needs_two_distinct_symbols(self):
        for symbols in (["DIS"], ["DIS", "dis"], []):
            with self.assertRaises(StockValidationError):
                await self.aggregator.compare(symbols)
        self.assertEqual(self.fetcher.calls, [])

    async def test_watch_many_returns_comparison_and_registers_each(self):
        result = await self.aggregator.watch(["DIS", "NKE"], "1.1.1.1")

        self.assertIsInstance(result, ComparisonResult)
        self.assertEqual(result.comparison.watchers, {"DIS": 0, "NKE": 0})
        self.assertEqual(self.registry.items[0].symbols(), ["DIS", "NKE"])

    async def test_watch_failure_keeps_earlier_registrations(self):
        with self.assertRaises(QuoteNotFoundError):
            await self.aggregator.watch(["DIS", "ZZZZ", "NKE"], "1.1.1.1")

        self.assertEqual(len(self.registry.search("DIS")), 1)
        self.assertEqual(self.registry.search("NKE"), [])

    async def test_watch_requires_a_symbol(self):
        with self.assertRaises(StockValidationError):
            await self.aggregator.watch([], "1.1.1.1")

    async def test_watch_rejects_bad_address_without_registering(self):
        with self.assertRaises(StockValidationError):
            await self.aggregator.watch("DIS", "not an address")

        self.assertEqual(len(self.registry), 0)

    async def test_loaded_snapshot_lists_cache_and_watchers(self):
        await self.aggregator.watch("DIS", "1.1.1.1")
        await self.aggregator.read("NKE")

        loaded = self.aggregator.loaded

        self.assertFalse(loaded.is_single)
        self.assertEqual(sorted(loaded.quote_map), ["DIS", "NKE"])
        self.assertEqual(loaded.likes, 1)

    async def test_watch_with_repeated_symbol_collapses_to_single_read(self):
        result = await self.aggregator.watch(["DIS", "dis"], "1.1.1.1")

        self.assertIsInstance(result, SnapshotResult)
        self.assertEqual(result.quote.symbol, "DIS")
        self.assertEqual(result.likes, 1)
        self.assertEqual(self.registry.items[0].symbols(), ["DIS"])

    async def test_watch_rejects_malformed_symbol_before_registering(self):
        with self.assertRaises(StockValidationError):
            await self.aggregator.watch(["DIS", "TOOLONG"], "1.1.1.1")

        self.assertEqual(len(self.registry), 0)
        self.assertEqual(self.fetcher.calls, [])

    async def test_injected_empty_registry_is_kept(self):
        hooks = RecordingWatchHooks()
        registry = WatchRegistry(hooks=hooks)
        aggregator = StockAggregator(quote_cache=QuoteCache(self.fetcher), watch_registry=registry)

        await aggregator.watch("DIS", "1.1.1.1")

        self.assertIs(aggregator.watch_registry, registry)
        self.assertEqual(len(registry), 1)
        self.assertTrue(hooks.searches)

    async def test_default_registry_is_created(self):
        aggregator = StockAggregator(quote_cache=QuoteCache(self.fetcher))

        self.assertEqual((await aggregator.read("DIS")).likes, 0)


if __name__ == "__main__":
    unittest.main()
