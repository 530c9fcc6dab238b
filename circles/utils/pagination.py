import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, TypeVar

from circles.utils.exceptions import ValidationError

T = TypeVar("T")


def page_offset(page: int, limit: int) -> int:
    """Number of records to skip for a 1-based page"""
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    return (page - 1) * limit


def total_pages(count: int, limit: int) -> int:
    return math.ceil(count / limit)


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    count: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return total_pages(self.count, self.limit)

    def to_response(self) -> Dict[str, Any]:
        """Paginated success envelope"""
        return {
            "success": True,
            "data": self.items,
            "count": self.count,
            "page": self.page,
            "totalPages": self.total_pages,
        }
