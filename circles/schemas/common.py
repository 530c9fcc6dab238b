from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema rendering snake_case fields as camelCase keys"""
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class DataResponse(CamelModel, Generic[T]):
    success: bool = True
    data: T
    message: Optional[str] = None


class PageResponse(CamelModel, Generic[T]):
    success: bool = True
    data: List[T]
    count: int
    page: int
    total_pages: int = Field(alias="totalPages")


class MessageResponse(CamelModel):
    success: bool = True
    message: str
