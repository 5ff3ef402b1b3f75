"""The interests a user has chosen and how much each one matters to them."""

from __future__ import annotations

import uuid
from typing import Any

from eventhub.common import ApiError, format_timestamp, validate_uuid
from eventhub.models import Interest, UserInterest
from eventhub.store import Store

_BAD_DATA = "Неверные данные"
_DEFAULT_WEIGHT = 5
_NIL = uuid.UUID(int=0)


def _require_user(user_id: uuid.UUID | None) -> uuid.UUID:
    if user_id is None:
        raise ApiError(401, "Требуется авторизация")
    return user_id


def _interest_uuid(interest_id: str) -> uuid.UUID:
    if not validate_uuid(interest_id):
        raise ApiError(400, "Неверный формат ID")
    return uuid.UUID(interest_id)


def _weight(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ApiError(400, _BAD_DATA)
    return value


class UserInterestService:
    """Reads and changes the interests attached to a user."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def user_interests(self, user_id: uuid.UUID | None) -> list[dict[str, Any]]:
        """Every interest of the user with its weight."""
        user_id = _require_user(user_id)
        result = []
        for link in self.store.find(UserInterest, user_id=user_id):
            interest = self.store.get(Interest, link.interest_id)
            result.append(
                {
                    "id": str(link.id),
                    "interest": {
                        "id": str(interest.id if interest else _NIL),
                        "name": interest.name if interest else "",
                        "category": interest.category if interest else "",
                        "description": interest.description if interest else "",
                    },
                    "weight": link.weight,
                    "createdAt": format_timestamp(link.created_at),
                }
            )
        return result

    def add_user_interest(self, user_id: uuid.UUID | None, payload: Any) -> dict[str, str]:
        """Attach an interest to the user; weights outside 1..10 become 5."""
        user_id = _require_user(user_id)
        if not isinstance(payload, dict):
            raise ApiError(400, _BAD_DATA)
        text = payload.get("interestID")
        if not isinstance(text, str) or not validate_uuid(text):
            raise ApiError(400, _BAD_DATA)
        interest_id = uuid.UUID(text)
        weight = _weight(payload.get("weight"))

        if self.store.get(Interest, interest_id) is None:
            raise ApiError(404, "Интерес не найден")
        if self.store.first(UserInterest, user_id=user_id, interest_id=interest_id) is not None:
            raise ApiError(409, "Интерес уже добавлен")

        if not 1 <= weight <= 10:
            weight = _DEFAULT_WEIGHT
        self.store.add(UserInterest(user_id=user_id, interest_id=interest_id, weight=weight))
        return {"message": "Интерес добавлен"}

    def remove_user_interest(self, user_id: uuid.UUID | None, interest_id: str) -> dict[str, str]:
        """Detach an interest from the user; a missing one is not an error."""
        user_id = _require_user(user_id)
        key = _interest_uuid(interest_id)
        for link in self.store.find(UserInterest, user_id=user_id, interest_id=key):
            self.store.delete(link)
        return {"message": "Интерес удален"}

    def update_weight(
        self, user_id: uuid.UUID | None, interest_id: str, payload: Any
    ) -> dict[str, str]:
        """Set how much one of the user's interests matters, from 1 to 10."""
        user_id = _require_user(user_id)
        key = _interest_uuid(interest_id)
        if not isinstance(payload, dict):
            raise ApiError(400, _BAD_DATA)
        weight = _weight(payload.get("weight"))
        if weight == 0:
            raise ApiError(400, _BAD_DATA)
        if not 1 <= weight <= 10:
            raise ApiError(400, "Вес должен быть от 1 до 10")

        link = self.store.first(UserInterest, user_id=user_id, interest_id=key)
        if link is None:
            raise ApiError(404, "Интерес не найден")
        link.weight = weight
        self.store.add(link)
        return {"message": "Вес интереса обновлен"}