from __future__ import annotations

from typing import Any, ClassVar, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from stock_checker.errors import StockValidationError

RecordT = TypeVar("RecordT", bound="ValidatedRecord")


class ValidatedRecord(BaseModel):
    """Property bag validated against the model's declared fields on construction.

    Unknown fields are kept unless a subclass sets ``extra="forbid"``. Validation
    failures surface as ``StockValidationError`` rather than pydantic's own error.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # subclasses that must never yield an unpopulated instance set this to True
    strict_construction: ClassVar[bool] = False

    def __init__(self, /, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise StockValidationError.from_pydantic(exc) from exc

    @classmethod
    def from_properties(
        cls: type[RecordT],
        properties: Mapping[str, Any] | None = None,
        *,
        strict: bool = False,
    ) -> RecordT:
        enforce = strict or cls.strict_construction
        try:
            return cls(**dict(properties or {}))
        except StockValidationError:
            if enforce:
                raise
            return cls.model_construct()

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump()
