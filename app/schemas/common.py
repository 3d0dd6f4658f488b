from typing import Generic, TypeVar
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class APIModel(BaseModel):
    """Base schema - snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class APIResponse(BaseModel, Generic[T]):
    """Response envelope shared by every endpoint."""
    success: bool = True
    message: str | None = None
    count: int | None = None
    data: T | None = None


def ok(data=None, message: str | None = None, count: int | None = None) -> dict:
    """Build a success envelope."""
    return {"success": True, "message": message, "count": count, "data": data}
