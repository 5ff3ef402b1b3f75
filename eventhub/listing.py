"""Browsing events: filtered lists and event details."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from eventhub.common import (
    ApiError,
    pagination_dict,
    parse_pagination,
    validate_string_length,
    validate_uuid,
)
from eventhub.models import (
    Category,
    Event,
    EventParticipant,
    EventReview,
    EventStatus,
    User,
)
from eventhub.store import Store

ADMIN_ROLE = "Администратор"
_NIL = uuid.UUID(int=0)


@dataclass
class EventListParams:
    """Query options for listing events."""

    tab: str = ""
    status: str = ""
    search: str = ""
    category_ids: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    date_from: str = ""
    date_to: str = ""
    sort_by: str = "startDate"
    sort_order: str = "ASC"
    page: Any = None
    limit: Any = None


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _rfc3339(moment: datetime) -> str:
    text = _aware(moment).isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text


def _participants(store: Store, event: Event) -> list[EventParticipant]:
    found = {p.id: p for p in store.find(EventParticipant, event_id=event.id)}
    for participant in event.participants:
        found.setdefault(participant.id, participant)
    return list(found.values())


def _parse_day(text: str, name: str) -> datetime:
    try:
        day = datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        raise ApiError(400, f"Неверный формат {name}. Используйте YYYY-MM-DD") from None
    if len(text) != 10:
        raise ApiError(400, f"Неверный формат {name}. Используйте YYYY-MM-DD")
    return day.replace(tzinfo=timezone.utc)


def _categories(store: Store, event: Event) -> list[dict[str, str]]:
    found = (store.get(Category, key) for key in event.category_ids)
    return [{"id": str(c.id), "name": c.name} for c in found if c is not None]


def _organizer(store: Store, event: Event) -> dict[str, str]:
    user = store.get(User, event.organizer_id)
    if user is None:
        return {"id": "", "fullName": "", "email": ""}
    return {"id": str(user.id), "fullName": user.full_name, "email": user.email}


def _event_body(store: Store, event: Event) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "title": event.title,
        "shortDescription": event.short_description,
        "fullDescription": event.full_description,
        "startDate": _rfc3339(event.start_date),
        "endDate": _rfc3339(event.end_date),
        "imageURL": event.image_url,
        "paymentInfo": event.payment_info,
        "maxParticipants": event.max_participants,
        "status": event.status.value,
        "participantsCount": len(_participants(store, event)),
        "categories": _categories(store, event),
        "tags": list(event.tags),
        "address": event.address,
        "latitude": event.latitude,
        "longitude": event.longitude,
        "yandexMapLink": event.yandex_map_link,
        "organizer": _organizer(store, event),
    }


def list_events(
    store: Store, user_id: uuid.UUID | None, params: EventListParams
) -> dict[str, Any]:
    """A filtered, sorted page of events."""
    requested = parse_pagination(params.page, params.limit)
    events = store.all(Event)

    if params.tab == "active":
        events = [e for e in events if e.status is EventStatus.ACTIVE]
    elif params.tab == "my":
        if user_id is None:
            raise ApiError(401, "Для просмотра своих событий требуется авторизация")
        events = [
            e
            for e in events
            if (
                e.organizer_id == user_id
                or any(p.user_id == user_id for p in _participants(store, e))
            )
            and e.status in (EventStatus.ACTIVE, EventStatus.PAST)
        ]
    elif params.tab == "past":
        events = [e for e in events if e.status is EventStatus.PAST]
    else:
        events = [e for e in events if e.status is not EventStatus.REJECTED]

    if params.status:
        try:
            wanted = EventStatus(params.status)
        except ValueError:
            raise ApiError(
                400, "Неверный статус. Допустимые значения: Активное, Прошедшее, Отклоненное"
            ) from None
        events = [e for e in events if e.status is wanted]

    if params.search:
        if not validate_string_length(params.search, 1, 200):
            raise ApiError(400, "Поисковый запрос должен быть от 1 до 200 символов")
        needle = params.search.lower()
        events = [
            e
            for e in events
            if needle in e.title.lower()
            or needle in e.short_description.lower()
            or needle in e.full_description.lower()
        ]

    if params.category_ids:
        wanted_categories = set()
        for text in params.category_ids:
            if not validate_uuid(text):
                raise ApiError(400, "Неверный формат ID категории: " + text)
            wanted_categories.add(uuid.UUID(text))
        events = [e for e in events if wanted_categories.intersection(e.category_ids)]

    for tag in params.tags:
        if tag:
            events = [e for e in events if tag in e.tags]

    if params.date_from:
        start = _parse_day(params.date_from, "dateFrom")
        events = [e for e in events if _aware(e.start_date) >= start]

    if params.date_to:
        end = _parse_day(params.date_to, "dateTo") + timedelta(days=1) - timedelta(seconds=1)
        events = [e for e in events if _aware(e.end_date) <= end]

    total = len(events)
    descending = params.sort_order == "DESC"
    if params.sort_by == "createdAt":
        events.sort(key=lambda e: _aware(e.created_at), reverse=descending)
    elif params.sort_by == "participantsCount":
        events.sort(key=lambda e: len(_participants(store, e)), reverse=descending)
    else:
        events.sort(key=lambda e: _aware(e.start_date), reverse=descending)

    window = events[requested.offset : requested.offset + requested.limit]
    return {
        "data": [_event_body(store, e) for e in window],
        "pagination": pagination_dict(requested, total),
    }


def get_event(
    store: Store, event_id: str, user_id: uuid.UUID | None = None, role: str = ""
) -> dict[str, Any]:
    """Full details of one event, with the viewer's participation and ratings."""
    if not validate_uuid(event_id):
        raise ApiError(400, "Неверный формат ID события")
    event = store.get(Event, event_id)
    if event is None:
        raise ApiError(404, "Событие не найдено")
    if event.status is EventStatus.REJECTED and (user_id is None or role != ADMIN_ROLE):
        raise ApiError(403, "Доступ запрещен")

    participants = _participants(store, event)
    is_participant = user_id is not None and any(p.user_id == user_id for p in participants)

    ratings = [r.rating for r in store.find(EventReview, event_id=event.id)]
    average = sum(ratings) / len(ratings) if ratings else 0.0

    body = _event_body(store, event)
    organizer = store.get(User, event.organizer_id)
    body["organizer"] = {
        "id": str(organizer.id if organizer else _NIL),
        "fullName": organizer.full_name if organizer else "",
        "email": organizer.email if organizer else "",
    }
    body["isParticipant"] = is_participant
    body["averageRating"] = average
    body["totalReviews"] = len(ratings)
    return body