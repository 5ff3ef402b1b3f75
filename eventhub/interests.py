"""The catalogue of interests that users and communities are built around."""

from __future__ import annotations

from typing import Any

from eventhub.common import (
    ApiError,
    pagination_dict,
    parse_pagination,
    validate_string_length,
)
from eventhub.models import Interest
from eventhub.store import Store

_BAD_DATA = "Неверные данные"
_CATEGORY_LENGTH = "Категория должна быть от 1 до 50 символов"


def _to_response(interest: Interest) -> dict[str, str]:
    return {
        "id": str(interest.id),
        "name": interest.name,
        "category": interest.category,
        "description": interest.description,
    }


def _required_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ApiError(400, _BAD_DATA)
    return value


class InterestCatalog:
    """Browsing interests and adding new ones."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def list_interests(
        self,
        category: str = "",
        search: str = "",
        page: Any = None,
        limit: Any = None,
    ) -> dict[str, Any]:
        """A page of interests ordered by name, optionally filtered."""
        requested = parse_pagination(page, limit)
        interests = self.store.all(Interest)

        if category:
            if not validate_string_length(category, 1, 50):
                raise ApiError(400, _CATEGORY_LENGTH)
            interests = [i for i in interests if i.category == category]

        if search:
            if not validate_string_length(search, 1, 100):
                raise ApiError(400, "Поисковый запрос должен быть от 1 до 100 символов")
            needle = search.lower()
            interests = [
                i
                for i in interests
                if needle in i.name.lower() or needle in i.description.lower()
            ]

        total = len(interests)
        interests.sort(key=lambda i: i.name)
        window = interests[requested.offset : requested.offset + requested.limit]
        return {
            "data": [_to_response(i) for i in window],
            "pagination": pagination_dict(requested, total),
        }

    def interest_categories(self) -> list[str]:
        """Every distinct interest category, each once."""
        return list(dict.fromkeys(i.category for i in self.store.all(Interest)))

    def create_interest(self, payload: Any) -> dict[str, str]:
        """Add an interest with a unique name."""
        if not isinstance(payload, dict):
            raise ApiError(400, _BAD_DATA)
        name = _required_str(payload, "name")
        category = _required_str(payload, "category")
        description = payload.get("description")
        if description is None:
            description = ""
        if not isinstance(description, str):
            raise ApiError(400, _BAD_DATA)

        if not validate_string_length(name, 1, 100):
            raise ApiError(400, "Название должно быть от 1 до 100 символов")
        if not validate_string_length(category, 1, 50):
            raise ApiError(400, _CATEGORY_LENGTH)

        name = name.strip()
        if self.store.first(Interest, name=name) is not None:
            raise ApiError(409, "Интерес с таким названием уже существует")

        interest = self.store.add(
            Interest(name=name, category=category.strip(), description=description)
        )
        return _to_response(interest)