# ============================================================================
# RESPONSE ENVELOPE MODELS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Domain model - Wire envelope and paginated collections
# PURPOSE: OcpiResponseBody and SearchResult
# CREATED: 18 OCT 2026
# ============================================================================
"""
Response Envelope Models

Every OCPI response body is wrapped:

    {
        "data": ...,
        "status_code": 1000,
        "status_message": "Success",
        "timestamp": "2015-06-30T21:59:59Z"
    }

A handler that returns a SearchResult as data gets a paginated response:
the envelope carries the bare item list and the pagination headers are
derived from the SearchResult (see api/responses.py).
"""

from datetime import datetime
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from core.clock import Clock, SystemClock, format_timestamp
from core.contracts import OcpiStatus

T = TypeVar("T")


class SearchResult(BaseModel, Generic[T]):
    """One page of a collection plus what is needed to find the next one."""

    items: List[T] = Field(default_factory=list)
    total_count: int = Field(..., ge=0)
    limit: int = Field(..., ge=0)
    offset: int = Field(default=0, ge=0)

    @property
    def next_offset(self) -> Optional[int]:
        """Offset of the next page, None on the last page."""
        candidate = self.offset + self.limit
        if self.limit > 0 and candidate < self.total_count:
            return candidate
        return None


def paginate(items: Sequence[T], offset: int = 0, limit: int = 50) -> SearchResult[T]:
    """Slice an in-memory sequence into a SearchResult."""
    offset = max(0, offset)
    return SearchResult(
        items=list(items[offset:offset + limit]),
        total_count=len(items),
        limit=limit,
        offset=offset,
    )


class OcpiResponseBody(BaseModel):
    """Envelope for every OCPI response."""

    data: Any = None
    status_code: int
    status_message: Optional[str] = None
    timestamp: str

    @classmethod
    def build(
        cls,
        data: Any = None,
        status: OcpiStatus = OcpiStatus.SUCCESS,
        message: Optional[str] = None,
        clock: Optional[Clock] = None,
        at: Optional[datetime] = None,
    ) -> "OcpiResponseBody":
        """Envelope stamped with the clock's current time."""
        instant = at or (clock or SystemClock()).now()
        return cls(
            data=data,
            status_code=int(status),
            status_message=message if message is not None else status.message,
            timestamp=format_timestamp(instant),
        )

    @property
    def is_success(self) -> bool:
        return 1000 <= self.status_code < 2000


__all__ = ["SearchResult", "paginate", "OcpiResponseBody"]
