"""
Response envelope shared by every endpoint

    {"success": bool, "message": str, "data"?: T, "pagination"?: {...}}
"""
import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for wire schemas: snake_case in Python, camelCase in JSON"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class FieldError(BaseModel):
    field: str
    message: str


class MessageResponse(BaseModel):
    """Envelope without a payload (deletes, errors)"""
    success: bool = True
    message: str


class ErrorResponse(MessageResponse):
    success: bool = False
    errors: Optional[List[FieldError]] = None


# Documented error bodies, shared by every router
ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (400, 401, 403, 404, 500)
}


class ApiResponse(MessageResponse, Generic[T]):
    data: T


class PaginatedResponse(MessageResponse, Generic[T]):
    data: List[T]
    pagination: Pagination


def success(message: str, data=None) -> dict:
    """Shape a success envelope; `data` is omitted when None"""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def paginated(message: str, items: list, page: int, limit: int, total: int) -> dict:
    return {
        "success": True,
        "message": message,
        "data": items,
        "pagination": Pagination.build(page, limit, total),
    }
