"""Creating, changing and removing event reviews."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from eventhub.common import ApiError, validate_string_length, validate_uuid
from eventhub.models import Event, EventReview, EventStatus, User
from eventhub.store import Store

_BAD_DATA = "Неверные данные"


def _bind_review(payload: Any) -> tuple[int, str]:
    if not isinstance(payload, dict):
        raise ApiError(400, _BAD_DATA)
    rating = payload.get("rating")
    if type(rating) is not int or not 1 <= rating <= 5:
        raise ApiError(400, _BAD_DATA)
    comment = payload.get("comment")
    if comment is None:
        comment = ""
    if not isinstance(comment, str):
        raise ApiError(400, _BAD_DATA)
    if comment and not validate_string_length(comment, 0, 2000):
        raise ApiError(400, "Комментарий должен быть до 2000 символов")
    return rating, comment


def _require_user(user_id: uuid.UUID | None) -> uuid.UUID:
    if user_id is None:
        raise ApiError(401, "Требуется авторизация")
    return user_id


class ReviewService:
    """Reviews that participants leave on past events."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def create_review(self, event_id: str, user_id: uuid.UUID | None, payload: Any) -> dict[str, Any]:
        """Add a review by a participant of a past event."""
        if not validate_uuid(event_id):
            raise ApiError(400, "Неверный формат ID события")
        user_id = _require_user(user_id)

        event = self.store.get(Event, event_id)
        if event is None:
            raise ApiError(404, "Событие не найдено")
        if event.status is not EventStatus.PAST:
            raise ApiError(400, "Отзыв можно оставить только для прошедших событий")
        if not any(p.user_id == user_id for p in event.participants):
            raise ApiError(403, "Вы не участвовали в этом событии")
        if self.store.first(EventReview, event_id=event.id, user_id=user_id) is not None:
            raise ApiError(400, "Вы уже оставили отзыв на это событие")

        rating, comment = _bind_review(payload)
        review = self.store.add(
            EventReview(event_id=event.id, user_id=user_id, rating=rating, comment=comment)
        )

        author = self.store.get(User, user_id)
        return {
            "id": str(review.id),
            "rating": review.rating,
            "comment": review.comment,
            "user": {
                "id": str(author.id if author else uuid.UUID(int=0)),
                "fullName": author.full_name if author else "",
            },
            "createdAt": review.created_at.isoformat(),
        }

    def _own_review(self, review_id: str, user_id: uuid.UUID | None) -> EventReview:
        if not validate_uuid(review_id):
            raise ApiError(400, "Неверный формат ID отзыва")
        user_id = _require_user(user_id)
        review = self.store.get(EventReview, review_id)
        if review is None or review.user_id != user_id:
            raise ApiError(404, "Отзыв не найден")
        return review

    def update_review(self, review_id: str, user_id: uuid.UUID | None, payload: Any) -> dict[str, str]:
        """Change the rating and comment of the user's own review."""
        review = self._own_review(review_id, user_id)
        rating, comment = _bind_review(payload)
        review.rating = rating
        review.comment = comment
        review.updated_at = datetime.now(timezone.utc)
        self.store.add(review)
        return {"message": "Отзыв обновлен"}

    def delete_review(self, review_id: str, user_id: uuid.UUID | None) -> dict[str, str]:
        """Remove the user's own review."""
        review = self._own_review(review_id, user_id)
        self.store.delete(review)
        return {"message": "Отзыв удален"}