"""
Pagination metadata schema.
Used by community list endpoints to describe the returned page.
"""
from __future__ import annotations

import math

from pydantic import computed_field

from carbonmeter.schemas.base import CamelModel


class Pagination(CamelModel):
    """Current page, page size, total count and total pages."""

    page: int
    limit: int
    total: int

    @computed_field(alias="totalPages")  # type: ignore[misc]
    @property
    def total_pages(self) -> int:
        if self.limit == 0:
            return 0
        return math.ceil(self.total / self.limit)
