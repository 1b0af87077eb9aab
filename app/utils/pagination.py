from typing import Optional

from fastapi import Query

from app.core.settings import settings


class PageParams:
    """``page`` (1-based) and ``limit`` query parameters, limit capped at MAX_PAGE_LIMIT."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        limit: Optional[int] = Query(None, ge=1, description="Items per page"),
    ):
        self.page = page
        self.limit = min(limit or settings.default_page_limit, settings.max_page_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
