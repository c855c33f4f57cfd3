import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel

# ======================================================
# Configuration Commune Pydantic
# ======================================================


class PaginationMeta(BaseModel):
    """Métadonnées de pagination renvoyées avec chaque liste paginée."""
    current_page: int
    per_page: int
    total: int
    last_page: int

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "PaginationMeta":
        last_page = max(1, math.ceil(total / per_page)) if per_page else 1
        return cls(current_page=page, per_page=per_page, total=total, last_page=last_page)


T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: PaginationMeta


class MessageResponse(BaseModel):
    message: str
