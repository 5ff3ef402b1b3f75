"""Changing events and telling participants what changed."""

from __future__ import annotations

import copy
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from eventhub.common import ApiError, validate_string_length, validate_uuid
from eventhub.models import Category, Event, EventParticipant, EventStatus, User
from eventhub.notify import Notifier
from eventhub.store import Store

MAX_CATEGORIES = 10

_BAD_DATA = "Неверные данные"
_DATE_FORMAT = "%d.%m.%Y %H:%M"
_UNSET = "не указано"
_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)
_TEXT_FIELDS = {
    "title": "title",
    "shortDescription": "short_description",
    "fullDescription": "full_description",
    "imageURL": "image_url",
    "paymentInfo": "payment_info",
    "status": "status",
    "address": "address",
    "yandexMapLink": "yandex_map_link",
}


@dataclass
class _Request:
    title: str = ""
    short_description: str = ""
    full_description: str = ""
    image_url: str = ""
    payment_info: str = ""
    status: str = ""
    address: str = ""
    yandex_map_link: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_participants: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    tags: list[str] | None = None
    category_ids: list[uuid.UUID] | None = None


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _date(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _aware(value)
    if not isinstance(value, str):
        raise ApiError(400, _BAD_DATA)
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ApiError(400, _BAD_DATA)
    day, clock, fraction, zone = match.groups()
    micro = (fraction or "").ljust(6, "0")[:6]
    offset = "+00:00" if zone == "Z" else zone
    try:
        return datetime.fromisoformat(f"{day}T{clock}.{micro}{offset}")
    except ValueError:
        raise ApiError(400, _BAD_DATA) from None


def _number(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ApiError(400, _BAD_DATA)
    return float(value)


def _bind(payload: Any) -> _Request:
    if not isinstance(payload, dict):
        raise ApiError(400, _BAD_DATA)
    request = _Request()
    for key, attr in _TEXT_FIELDS.items():
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ApiError(400, _BAD_DATA)
        setattr(request, attr, value)

    request.start_date = _date(payload.get("startDate"))
    request.end_date = _date(payload.get("endDate"))

    limit = payload.get("maxParticipants")
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
        raise ApiError(400, _BAD_DATA)
    request.max_participants = limit

    request.latitude = _number(payload.get("latitude"))
    request.longitude = _number(payload.get("longitude"))

    tags = payload.get("tags")
    if tags is not None:
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ApiError(400, _BAD_DATA)
        request.tags = list(tags)

    category_ids = payload.get("categoryIDs")
    if category_ids is not None:
        if not isinstance(category_ids, list):
            raise ApiError(400, _BAD_DATA)
        parsed = []
        for item in category_ids:
            if isinstance(item, uuid.UUID):
                parsed.append(item)
            elif isinstance(item, str) and validate_uuid(item):
                parsed.append(uuid.UUID(item))
            else:
                raise ApiError(400, _BAD_DATA)
        request.category_ids = parsed
    return request


def _apply(event: Event, request: _Request, now: datetime) -> None:
    if request.title:
        if not validate_string_length(request.title, 1, 200):
            raise ApiError(400, "Название события должно быть от 1 до 200 символов")
        event.title = request.title
    if request.short_description:
        if not validate_string_length(request.short_description, 1, 500):
            raise ApiError(400, "Краткое описание должно быть от 1 до 500 символов")
        event.short_description = request.short_description
    if request.full_description:
        if not validate_string_length(request.full_description, 1, 5000):
            raise ApiError(400, "Полное описание должно быть от 1 до 5000 символов")
        event.full_description = request.full_description
    if request.start_date is not None:
        if request.start_date < now:
            raise ApiError(400, "Дата начала должна быть в будущем")
        event.start_date = request.start_date
    if request.end_date is not None:
        if request.end_date < _aware(event.start_date):
            raise ApiError(400, "Дата окончания должна быть позже даты начала")
        event.end_date = request.end_date
    if request.image_url:
        event.image_url = request.image_url
    if request.payment_info:
        if not validate_string_length(request.payment_info, 0, 2000):
            raise ApiError(400, "Информация об оплате должна быть до 2000 символов")
        event.payment_info = request.payment_info
    if request.max_participants is not None:
        if request.max_participants < 1:
            raise ApiError(400, "Максимальное количество участников должно быть больше 0")
        event.max_participants = request.max_participants
    if request.status:
        try:
            event.status = EventStatus(request.status)
        except ValueError:
            raise ApiError(
                400, "Неверный статус. Допустимые значения: Активное, Прошедшее, Отклоненное"
            ) from None
    if request.address:
        if not validate_string_length(request.address, 0, 500):
            raise ApiError(400, "Адрес должен быть до 500 символов")
        event.address = request.address
    if request.latitude is not None:
        if not -90 <= request.latitude <= 90:
            raise ApiError(400, "Широта должна быть от -90 до 90")
        event.latitude = request.latitude
    if request.longitude is not None:
        if not -180 <= request.longitude <= 180:
            raise ApiError(400, "Долгота должна быть от -180 до 180")
        event.longitude = request.longitude
    if request.yandex_map_link:
        if not validate_string_length(request.yandex_map_link, 0, 1000):
            raise ApiError(400, "Ссылка на карту должна быть до 1000 символов")
        event.yandex_map_link = request.yandex_map_link
    if request.tags is not None:
        event.tags = request.tags


def change_summary(old: Event, new: Event, payload: Any) -> list[str]:
    """Human-readable descriptions of what the payload changed in the event."""
    request = _bind(payload)
    changes: list[str] = []
    if request.title and new.title != old.title:
        changes.append(f'Название: с "{old.title}" на "{new.title}"')
    if request.short_description and new.short_description != old.short_description:
        changes.append("Краткое описание было обновлено")
    if request.full_description and new.full_description != old.full_description:
        changes.append("Полное описание было обновлено")
    if request.start_date is not None and _aware(new.start_date) != _aware(old.start_date):
        changes.append(
            f"Дата начала: с {old.start_date.strftime(_DATE_FORMAT)} "
            f"на {new.start_date.strftime(_DATE_FORMAT)}"
        )
    if request.end_date is not None and _aware(new.end_date) != _aware(old.end_date):
        changes.append(
            f"Дата окончания: с {old.end_date.strftime(_DATE_FORMAT)} "
            f"на {new.end_date.strftime(_DATE_FORMAT)}"
        )
    if request.address and new.address != old.address:
        changes.append(
            f'Место проведения: с "{old.address or _UNSET}" на "{new.address or _UNSET}"'
        )
    if request.payment_info and new.payment_info != old.payment_info:
        changes.append("Информация об оплате была обновлена")
    if request.max_participants is not None:
        if new.max_participants is not None and old.max_participants is not None:
            if new.max_participants != old.max_participants:
                changes.append(
                    "Максимальное количество участников: "
                    f"с {old.max_participants} на {new.max_participants}"
                )
        elif old.max_participants is None:
            changes.append(
                f"Максимальное количество участников установлено: {new.max_participants}"
            )
        elif new.max_participants is None:
            changes.append("Максимальное количество участников снято")
    return changes


def notification_message(changes: list[str]) -> str:
    """The text sent to participants about a change to their event."""
    if not changes:
        return "Данные события были обновлены. Проверьте информацию о событии."
    lines = "".join(f"{number}. {change}\n" for number, change in enumerate(changes, start=1))
    return (
        "Данные события были изменены:\n\n"
        + lines
        + "\nПроверьте обновленную информацию о событии."
    )


def _participants(store: Store, event: Event) -> list[EventParticipant]:
    found = {p.id: p for p in store.find(EventParticipant, event_id=event.id)}
    for participant in event.participants:
        found.setdefault(participant.id, participant)
    return list(found.values())


def update_event(
    store: Store,
    notifier: Notifier | None,
    event_id: str,
    payload: Any,
    now: datetime | None = None,
) -> dict[str, str]:
    """Apply the given changes to an event and notify its participants."""
    if not validate_uuid(event_id):
        raise ApiError(400, "Неверный формат ID события")
    key = uuid.UUID(event_id)
    request = _bind(payload)
    now = _aware(now or datetime.now(timezone.utc))

    event = store.get(Event, key)
    if event is None:
        raise ApiError(404, "Событие не найдено")

    old = copy.copy(event)
    _apply(event, request, now)
    store.add(event)

    if request.category_ids is not None:
        if len(request.category_ids) > MAX_CATEGORIES:
            raise ApiError(400, "Максимальное количество категорий на событие - 10")
        found = [
            c
            for c in (store.get(Category, k) for k in dict.fromkeys(request.category_ids))
            if c is not None
        ]
        if len(found) != len(request.category_ids):
            raise ApiError(400, "Некоторые категории не найдены")
        event.category_ids = [c.id for c in found]
        store.add(event)

    message = notification_message(change_summary(old, event, payload))
    if notifier is not None:
        for participant in _participants(store, event):
            user = store.get(User, participant.user_id)
            if user is not None:
                notifier.send(user.email, event.title, message)

    return {"message": "Событие обновлено"}