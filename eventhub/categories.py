"""Event categories: browsing and administration."""

from __future__ import annotations

import uuid
from typing import Any

from eventhub.common import (
    ApiError,
    pagination_dict,
    parse_pagination,
    validate_string_length,
    validate_uuid,
)
from eventhub.models import Category
from eventhub.store import Store

_BAD_DATA = "Неверные данные"
_NAME_LENGTH = "Название категории должно быть от 1 до 100 символов"


def _optional_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ApiError(400, _BAD_DATA)
    return value


def _category_uuid(category_id: str) -> uuid.UUID:
    if not validate_uuid(category_id):
        raise ApiError(400, "Неверный формат ID категории")
    return uuid.UUID(category_id)


def _to_info(category: Category) -> dict[str, str]:
    return {
        "id": str(category.id),
        "name": category.name,
        "description": category.description,
    }


class CategoryService:
    """Lists, creates, changes and removes event categories."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def list_categories(
        self, search: str = "", page: Any = None, limit: Any = None
    ) -> dict[str, Any]:
        """A page of categories ordered by name, optionally filtered by a search term."""
        requested = parse_pagination(page, limit)
        categories = self.store.all(Category)

        if search:
            if not validate_string_length(search, 1, 100):
                raise ApiError(400, "Поисковый запрос должен быть от 1 до 100 символов")
            needle = search.lower()
            categories = [
                c
                for c in categories
                if needle in c.name.lower() or needle in c.description.lower()
            ]

        total = len(categories)
        categories.sort(key=lambda c: c.name)
        window = categories[requested.offset : requested.offset + requested.limit]
        return {
            "data": [_to_info(c) for c in window],
            "pagination": pagination_dict(requested, total),
        }

    def create_category(self, payload: Any) -> dict[str, str]:
        """Create a category from a name and an optional description."""
        if not isinstance(payload, dict):
            raise ApiError(400, _BAD_DATA)
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise ApiError(400, _BAD_DATA)
        description = _optional_str(payload, "description")

        if not validate_string_length(name, 1, 100):
            raise ApiError(400, _NAME_LENGTH)

        category = self.store.add(Category(name=name, description=description))
        return {"id": str(category.id), "name": category.name}

    def update_category(self, category_id: str, payload: Any) -> dict[str, str]:
        """Change the name and/or description of a category."""
        key = _category_uuid(category_id)
        if not isinstance(payload, dict):
            raise ApiError(400, _BAD_DATA)
        name = _optional_str(payload, "name")
        description = _optional_str(payload, "description")

        category = self.store.get(Category, key)
        if category is None:
            raise ApiError(404, "Категория не найдена")

        if name:
            if not validate_string_length(name, 1, 100):
                raise ApiError(400, _NAME_LENGTH)
            category.name = name
        if description:
            category.description = description

        self.store.add(category)
        return {"message": "Категория обновлена"}

    def delete_category(self, category_id: str) -> dict[str, str]:
        """Remove a category; removing one that does not exist is not an error."""
        key = _category_uuid(category_id)
        category = self.store.get(Category, key)
        if category is not None:
            self.store.delete(category)
        return {"message": "Категория удалена"}