from __future__ import annotations

from pydantic import BaseModel

from stock_checker.services.results import ComparisonResult, SnapshotResult


class StockData(BaseModel):
    stock: str
    price: float | None = None
    likes: int


class ComparedStockData(BaseModel):
    stock: str
    price: float | None = None
    rel_likes: int


class StockPricesResponse(BaseModel):
    stockData: StockData | list[ComparedStockData]


def to_response(result: SnapshotResult | ComparisonResult) -> StockPricesResponse:
    match result:
        case SnapshotResult():
            quote = result.quote
            return StockPricesResponse(
                stockData=StockData(stock=quote.symbol, price=quote.latest_price, likes=result.likes)
            )
        case ComparisonResult():
            rel_likes = result.comparison.watchers
            rows = []
            for name, snapshot in result.entries.items():
                quote = snapshot.quote
                rows.append(
                    ComparedStockData(stock=quote.symbol, price=quote.latest_price, rel_likes=rel_likes[name])
                )
            return StockPricesResponse(stockData=rows)
    raise TypeError(f"unsupported result type: {type(result).__name__}")
