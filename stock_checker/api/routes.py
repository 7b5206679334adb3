import logging

from fastapi import APIRouter, HTTPException, Query, Request

from stock_checker.errors import StockCheckerError
from stock_checker.schemas.stock_data import StockPricesResponse, to_response

LOGGER = logging.getLogger(__name__)

router = APIRouter()

_WATCH_FLAG_VALUES = {"1", "true", "yes", "+"}


def _wants_watch(*flags: str | None) -> bool:
    return any(flag is not None and flag.strip().lower() in _WATCH_FLAG_VALUES for flag in flags)


def _client_address(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.get('/health')
def health():
    return {'status': 'ok'}


@router.get('/stock-prices', response_model=StockPricesResponse)
async def get_stock_prices(
    request: Request,
    stock: list[str] = Query(...),
    like: str | None = None,
    watch: str | None = None,
):
    aggregator = request.app.state.stock_aggregator
    symbols = [s.strip() for s in stock if s.strip()]
    if not symbols:
        raise HTTPException(status_code=400, detail='STOCK_REQUIRED')

    try:
        if _wants_watch(like, watch):
            address = _client_address(request)
            target = symbols if len(symbols) > 1 else symbols[0]
            result = await aggregator.watch(target, address)
        elif len(symbols) > 1:
            result = await aggregator.compare(symbols)
        else:
            result = await aggregator.read(symbols[0])
    except StockCheckerError as exc:
        LOGGER.warning('[API][stock_prices_error] symbols=%s error=%s', ','.join(symbols), exc.description)
        raise HTTPException(status_code=exc.code, detail=exc.to_detail()) from exc

    return to_response(result)


@router.get('/metrics/quote')
def quote_metrics(request: Request):
    aggregator = request.app.state.stock_aggregator
    metrics = aggregator.quote_cache.metrics()
    metrics['watchers'] = len(aggregator.watch_registry)
    metrics['watched_addresses'] = len(aggregator.watch_registry.addresses)
    return metrics
