"""Listing the reviews of an event together with its average rating."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from eventhub.common import ApiError, pagination_dict, parse_pagination, validate_uuid
from eventhub.models import EventReview, User
from eventhub.store import Store

_NIL = uuid.UUID(int=0)


def _event_uuid(event_id: str | uuid.UUID) -> uuid.UUID:
    if isinstance(event_id, uuid.UUID):
        return event_id
    if not validate_uuid(event_id):
        raise ApiError(400, "Неверный формат ID события")
    return uuid.UUID(event_id)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _rfc3339(moment: datetime) -> str:
    moment = _aware(moment)
    stamp = moment.strftime("%Y-%m-%dT%H:%M:%S")
    offset = moment.utcoffset()
    if not offset:
        return stamp + "Z"
    zone = moment.strftime("%z")
    return f"{stamp}{zone[:3]}:{zone[3:5]}"


def _mean(reviews: list[EventReview]) -> float:
    if not reviews:
        return 0.0
    return sum(r.rating for r in reviews) / len(reviews)


def _to_response(store: Store, review: EventReview) -> dict[str, Any]:
    user = store.get(User, review.user_id)
    updated = getattr(review, "updated_at", None) or review.created_at
    return {
        "id": str(review.id),
        "eventID": str(review.event_id),
        "userID": str(review.user_id),
        "rating": review.rating,
        "comment": review.comment,
        "user": {
            "id": str(user.id if user else _NIL),
            "fullName": user.full_name if user else "",
            "email": user.email if user else "",
        },
        "createdAt": _rfc3339(review.created_at),
        "updatedAt": _rfc3339(updated),
    }


def average_rating(store: Store, event_id: str | uuid.UUID) -> float:
    """Mean rating over every review of the event, or 0 when there are none."""
    return _mean(list(store.find(EventReview, event_id=_event_uuid(event_id))))


def list_reviews(
    store: Store, event_id: str, page: Any = None, limit: Any = None
) -> dict[str, Any]:
    """A page of an event's reviews, newest first, with the overall average."""
    key = _event_uuid(event_id)
    requested = parse_pagination(page, limit)
    reviews = list(store.find(EventReview, event_id=key))
    total = len(reviews)
    ordered = sorted(reviews, key=lambda r: _aware(r.created_at), reverse=True)
    window = ordered[requested.offset : requested.offset + requested.limit]
    return {
        "data": [_to_response(store, r) for r in window],
        "averageRating": _mean(reviews),
        "totalReviews": total,
        "pagination": pagination_dict(requested, total),
    }