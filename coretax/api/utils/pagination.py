"""Query parameters shared by every list endpoint."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query

from coretax.core.config import get_settings


@dataclass(frozen=True, slots=True)
class PageParams:
    page: int
    limit: int
    search: str | None = None

    @property
    def cache_part(self) -> str:
        return f"page={self.page}:limit={self.limit}:search={self.search or ''}"


def page_params(
    page: Annotated[int, Query(description="1-based page number")] = 1,
    limit: Annotated[int | None, Query(description="Page size")] = None,
    search: Annotated[str | None, Query(description="Free-text search")] = None,
) -> PageParams:
    """Clamp paging input instead of rejecting it.

    ``page`` below 1 becomes 1; ``limit`` falls back to the configured default
    and never exceeds the configured maximum.
    """
    config = get_settings().pagination_config
    size = config.default_limit if limit is None or limit < 1 else limit
    return PageParams(
        page=max(page, 1),
        limit=min(size, config.max_limit),
        search=search.strip() or None if search else None,
    )


Paging = Annotated[PageParams, Depends(page_params)]
