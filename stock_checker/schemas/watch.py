from __future__ import annotations

import ipaddress
import re
from typing import Any, ClassVar

from pydantic import ConfigDict, field_validator

from stock_checker.errors import StockValidationError
from stock_checker.schemas.quote import Quote
from stock_checker.schemas.record import ValidatedRecord

_HOSTNAME_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def normalize_address(value: Any) -> str:
    """Return ``value`` if it is an IP literal or an RFC 1123 hostname."""
    if not isinstance(value, str) or not value.strip():
        raise StockValidationError(f"Invalid watcher address: {value!r}", fields=["address"])
    text = value.strip()
    try:
        ipaddress.ip_address(text)
        return text
    except ValueError:
        pass

    hostname = text[:-1] if text.endswith(".") else text
    if len(hostname) > 253 or not all(_HOSTNAME_LABEL.match(label) for label in hostname.split(".")):
        raise StockValidationError(f"Invalid watcher address: {value!r}", fields=["address"])
    return text


class WatchEntry(ValidatedRecord):
    model_config = ConfigDict(extra="forbid", frozen=True)

    strict_construction: ClassVar[bool] = True

    address: str
    stock: tuple[Quote, ...] = ()

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, value: Any) -> str:
        return normalize_address(value)

    @field_validator("stock", mode="before")
    @classmethod
    def require_quote_instances(cls, value: Any) -> tuple[Quote, ...]:
        items = tuple(value or ())
        for item in items:
            if not isinstance(item, Quote):
                raise ValueError("stock must only contain Quote instances")
        return items

    def symbols(self) -> list[str]:
        return [quote.symbol for quote in self.stock]
