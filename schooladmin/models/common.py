from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of an active-records listing."""

    items: list[T]
    total: int
    page: int
    page_size: int
