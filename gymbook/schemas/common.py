from typing import Optional, List, Generic, TypeVar, Any
from pydantic import BaseModel

T = TypeVar("T")


# Paginated response wrapper, used by all list endpoints
class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


# Error responses (shape produced by the DomainError handler)
class ErrorResponse(BaseModel):
    detail: str
    field: Optional[str] = None
    errors: Optional[List[Any]] = None

