from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Annotated, Any, ClassVar

from pydantic import ConfigDict, Field, field_validator

from stock_checker.errors import StockValidationError
from stock_checker.schemas.record import ValidatedRecord

SYMBOL_PATTERN = re.compile(r"^[A-Z.]{1,6}$")

# formats the quote proxy has been seen to send besides ISO 8601
_LATEST_TIME_FORMATS = ("%B %d, %Y", "%b %d, %Y")

NonNegative = Annotated[float, Field(ge=0)]


def normalize_symbol(value: Any) -> str:
    if value is None or isinstance(value, bool):
        raise StockValidationError(f"Invalid stock symbol: {value!r}", fields=["symbol"])
    text = str(value).strip().upper()
    if not SYMBOL_PATTERN.fullmatch(text):
        raise StockValidationError(f"Invalid stock symbol: {value!r}", fields=["symbol"])
    return text


def _parse_latest_time(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError("latestTime must be a timestamp")
    if isinstance(value, (int, float)):
        # epoch milliseconds
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _LATEST_TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise ValueError(f"unparseable latestTime: {value!r}")


class Quote(ValidatedRecord):
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    strict_construction: ClassVar[bool] = True

    symbol: str
    change: float | None = None
    change_percent: float | None = Field(default=None, alias="changePercent")
    close: NonNegative | None = None
    high: NonNegative | None = None
    latest_price: NonNegative | None = Field(default=None, alias="latestPrice")
    latest_time: datetime | None = Field(default=None, alias="latestTime")
    latest_volume: NonNegative | None = Field(default=None, alias="latestVolume")
    low: NonNegative | None = None
    open: NonNegative | None = None
    previous_close: NonNegative | None = Field(default=None, alias="previousClose")
    volume: NonNegative | None = None

    @field_validator("symbol", mode="before")
    @classmethod
    def normalize_symbol_field(cls, value: Any) -> str:
        return normalize_symbol(value)

    @field_validator("latest_time", mode="before")
    @classmethod
    def parse_latest_time(cls, value: Any) -> Any:
        return _parse_latest_time(value)
