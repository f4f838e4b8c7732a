from typing import Optional

from fastapi import Query

from tailorshop.application.pagination import ListParams


def list_params(
    q: Optional[str] = Query(None, max_length=200, description="Free-text search"),
    page: Optional[str] = Query(None, description="1-based page number; invalid values fall back to 1"),
    page_size: Optional[str] = Query(None, alias="pageSize", description="Rows per page, clamped to 1-100"),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_dir: str = Query("desc", alias="sortDir", description="asc or desc"),
) -> ListParams:
    # Page values are taken as raw strings so that garbage clamps instead of failing
    return ListParams(q=q, page=page, page_size=page_size, sort_by=sort_by, sort_dir=sort_dir)
