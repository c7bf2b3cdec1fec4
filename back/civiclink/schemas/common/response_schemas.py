# Standard library imports
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

# Third-party imports
from pydantic import BaseModel, computed_field

# Error details are either a message or a field -> message mapping
DetailsType = str | dict[str, Any]
DataT = TypeVar("DataT")
ItemT = TypeVar("ItemT")


class PaginationMeta(BaseModel):
    limit: int
    offset: int
    total_items: int

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_items


class ErrorDetails(BaseModel):
    code: str
    message: str
    details: DetailsType | None = None


class BaseResponse(BaseModel, Generic[DataT]):
    """Envelope shared by every endpoint: ``ok`` plus either ``data`` or ``error``."""

    ok: bool
    data: DataT | None = None
    meta: PaginationMeta | None = None
    error: ErrorDetails | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        data = super().model_dump(**kwargs)

        # Remove data and meta fields if they are None
        if data.get("data") is None:
            data.pop("data", None)
        if data.get("meta") is None:
            data.pop("meta", None)

        return data

    @classmethod
    def success(cls, data: DataT, meta: PaginationMeta | None = None) -> "BaseResponse[DataT]":
        return cls(ok=True, data=data, meta=meta)

    @classmethod
    def paginated(cls, items: Sequence[ItemT], limit: int, offset: int) -> "BaseResponse[list[ItemT]]":
        """One page of an already filtered and ordered result set."""
        meta = PaginationMeta(limit=limit, offset=offset, total_items=len(items))
        return BaseResponse[list[Any]](ok=True, data=list(items[offset : offset + limit]), meta=meta)

    @classmethod
    def failure(cls, code: str, message: str, details: DetailsType | None = None) -> "BaseResponse[None]":
        return BaseResponse[None](ok=False, error=ErrorDetails(code=code, message=message, details=details))
