from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError


class StockCheckerError(Exception):
    """Base error carrying an HTTP-style status code and a client-facing description."""

    code = 500
    name = "Processing-Error"

    def __init__(self, description: str | None = None) -> None:
        self.description = description or "Failed to process the request."
        super().__init__(self.description)

    def to_detail(self) -> dict[str, str | int]:
        return {"name": self.name, "description": self.description, "code": self.code}


class StockValidationError(StockCheckerError, ValueError):
    code = 400
    name = "Validation-Error"

    def __init__(self, description: str | None = None, fields: list[str] | None = None) -> None:
        super().__init__(description or "Invalid input.")
        self.fields = list(fields or [])

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "StockValidationError":
        fields: list[str] = []
        messages: list[str] = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
            fields.append(loc)
            messages.append(f"{loc}: {err.get('msg', 'invalid value')}")
        return cls("; ".join(messages) or str(exc), fields=fields)


class QuoteNotFoundError(StockCheckerError, LookupError):
    code = 404
    name = "Not-Found"

    def __init__(self, symbol: str) -> None:
        super().__init__(f"No quote found for symbol {symbol}.")
        self.symbol = symbol


class QuoteConnectionError(StockCheckerError):
    code = 502
    name = "Connection-Error"

    def __init__(self, description: str | None = None, status_code: int | None = None) -> None:
        super().__init__(description or "Quote source is unavailable.")
        self.status_code = status_code
