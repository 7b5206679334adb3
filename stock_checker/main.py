from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from stock_checker.api.routes import router
from stock_checker.config.settings import get_settings
from stock_checker.integrations.quote_proxy import ProxyQuoteClient
from stock_checker.services.quote_cache import QuoteCache
from stock_checker.services.stock_aggregator import StockAggregator
from stock_checker.services.watch_registry import WatchRegistry
from stock_checker.utils.logging_config import configure_logging

LOGGER = logging.getLogger(__name__)


def build_aggregator(fetcher=None) -> StockAggregator:
    return StockAggregator(
        quote_cache=QuoteCache(fetcher or ProxyQuoteClient()),
        watch_registry=WatchRegistry(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.get_settings()
    configure_logging(settings.LOG_LEVEL)

    fetcher = app.state.stock_aggregator.quote_cache.fetcher
    if isinstance(fetcher, ProxyQuoteClient):
        fetcher.base_url = settings.QUOTE_PROXY_BASE_URL.rstrip("/")
        fetcher.timeout = settings.QUOTE_PROXY_TIMEOUT_SEC
    LOGGER.info("[APP][startup] quote_source=%s", getattr(fetcher, "base_url", type(fetcher).__name__))

    try:
        yield
    finally:
        LOGGER.info("[APP][shutdown] %s", app.state.stock_aggregator.quote_cache.metrics())


app = FastAPI(title="Stock Price Checker", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/api")

# NOTE: settings stay lazy so importing the app does not read the environment.
app.state.get_settings = get_settings
app.state.stock_aggregator = build_aggregator()


def run() -> None:
    settings = get_settings()
    uvicorn.run("stock_checker.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=False)


if __name__ == "__main__":
    run()
