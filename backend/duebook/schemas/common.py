import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """JSON uses camelCase; Python code and ORM attributes use snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Page(CamelModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def build(cls, content: list, page: int, size: int, total: int) -> dict:
        return {
            "content": content,
            "page": page,
            "size": size,
            "total_elements": total,
            "total_pages": math.ceil(total / size) if size else 0,
        }
