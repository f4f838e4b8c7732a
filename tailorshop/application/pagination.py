import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from tailorshop.core_settings import get_settings
from .errors import ValidationError

T = TypeVar("T")


def clamp_page(page: Any) -> int:
    try:
        page = int(page)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def clamp_page_size(page_size: Any) -> int:
    settings = get_settings()
    try:
        size = int(page_size)
    except (TypeError, ValueError):
        return settings.DEFAULT_PAGE_SIZE
    if size == 0:
        size = settings.DEFAULT_PAGE_SIZE
    return min(max(size, 1), settings.MAX_PAGE_SIZE)


@dataclass
class ListParams:
    """Search, paging and sorting shared by every list operation."""
    q: Optional[str] = None
    page: int = 1
    page_size: int = 10
    sort_by: str = "created_at"
    sort_dir: str = "desc"

    def __post_init__(self):
        self.q = self.q.strip() if self.q and self.q.strip() else None
        self.page = clamp_page(self.page)
        self.page_size = clamp_page_size(self.page_size)
        self.sort_by = self.sort_by or "created_at"
        self.sort_dir = (self.sort_dir or "desc").lower()
        if self.sort_dir not in ("asc", "desc"):
            raise ValidationError("sortDir must be 'asc' or 'desc'")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    def envelope(self, data: list) -> dict:
        return {
            "data": data,
            "pagination": {
                "page": self.page,
                "pageSize": self.page_size,
                "total": self.total,
                "pages": self.pages,
            },
        }


def like_pattern(q: str) -> str:
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def paginate(db: Session, stmt: Select, params: ListParams, sortable: dict, id_column) -> Page:
    """
    Count the filtered statement, then fetch one page of it.

    `sortable` maps the public sortBy names to columns; ties are broken by
    `id_column` in the same direction so pages are stable.
    """
    column = sortable.get(params.sort_by)
    if column is None:
        raise ValidationError(
            f"Cannot sort by '{params.sort_by}'",
            details=[{"field": "sortBy", "message": f"Must be one of: {', '.join(sorted(sortable))}"}],
        )

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = db.execute(count_stmt).scalar_one()

    if params.sort_dir == "asc":
        order = (column.asc(), id_column.asc())
    else:
        order = (column.desc(), id_column.desc())
    rows = db.execute(
        stmt.order_by(*order).limit(params.page_size).offset(params.offset)
    ).scalars().unique().all()
    return Page(items=rows, total=total, page=params.page, page_size=params.page_size)
