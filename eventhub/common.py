"""Shared helpers: API errors, pagination and input validation."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from http import HTTPStatus
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_INTEGER = re.compile(r"[+-]?[0-9]+")


class ApiError(Exception):
    """An error that maps onto an HTTP status and a JSON error body."""

    def __init__(self, status: int, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.status = HTTPStatus(status)
        self.message = message
        self.body: dict[str, Any] = {"error": message, **extra}


@dataclass(frozen=True)
class Page:
    """A requested page of results."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER.fullmatch(value):
        return int(value)
    return None


def parse_pagination(page: Any = None, limit: Any = None) -> Page:
    """Read page and limit query values, falling back to the defaults."""
    page_value = _as_int(page)
    limit_value = _as_int(limit)
    page_int = page_value if page_value is not None and page_value > 0 else DEFAULT_PAGE
    if limit_value is not None and 0 < limit_value <= MAX_LIMIT:
        limit_int = limit_value
    else:
        limit_int = DEFAULT_LIMIT
    return Page(page=page_int, limit=limit_int)


def pagination_dict(page: Page, total: int) -> dict[str, int]:
    """The pagination block that accompanies a page of results."""
    total_pages = (total + page.limit - 1) // page.limit
    return {
        "page": page.page,
        "limit": page.limit,
        "total": total,
        "totalPages": total_pages,
    }


def validate_uuid(value: Any) -> bool:
    """True when the value is a textual UUID."""
    if not isinstance(value, str) or not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def validate_string_length(value: str, min_len: int, max_len: int) -> bool:
    """True when the trimmed value has between min_len and max_len characters."""
    length = len(value.strip())
    return min_len <= length <= max_len


def format_timestamp(moment: datetime) -> str:
    """Format a moment as ``YYYY-MM-DDTHH:MM:SSZ``."""
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")