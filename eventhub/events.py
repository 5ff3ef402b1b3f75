"""Creating events from submitted fields and an optional image upload."""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from eventhub.common import ApiError, validate_string_length
from eventhub.images import DEFAULT_UPLOAD_DIR, ImageError, save_event_image
from eventhub.models import Category, Event, EventParticipant, EventStatus, User, UserStatus
from eventhub.notify import Notifier
from eventhub.store import Store

MAX_CATEGORIES = 10

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)
_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(text)
    day, clock, fraction, zone = match.groups()
    micro = (fraction or "").ljust(6, "0")[:6]
    offset = "+00:00" if zone == "Z" else zone
    return datetime.fromisoformat(f"{day}T{clock}.{micro}{offset}")


def _bad_field(key: str) -> ApiError:
    return ApiError(400, f"Неверный формат данных: поле {key}")


def _text(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _bad_field(key)
    return value


def _present(fields: dict[str, Any], key: str) -> bool:
    value = fields.get(key)
    return value is not None and value != ""


def _date(fields: dict[str, Any], key: str, example: str) -> datetime:
    value = fields[key]
    if isinstance(value, datetime):
        return _aware(value)
    text = _text(fields, key)
    try:
        return _parse_rfc3339(text)
    except ValueError:
        raise ApiError(
            400,
            f"Неверный формат {key}. Используйте RFC3339 (например: {example}). "
            f"Получено: {text}",
        ) from None


def _max_participants(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise _bad_field("maxParticipants")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if _INTEGER.fullmatch(value) and int(value) > 0:
            return int(value)
        return None
    raise _bad_field("maxParticipants")


def _coordinate(value: Any, key: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise _bad_field(key)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value) if _FLOAT.fullmatch(value) else None
    raise _bad_field(key)


def _uuid_list(value: Any, key: str) -> list[uuid.UUID]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _bad_field(key)
    result = []
    for item in value:
        if isinstance(item, uuid.UUID):
            result.append(item)
        elif isinstance(item, str):
            try:
                result.append(uuid.UUID(item))
            except ValueError:
                continue
        else:
            raise _bad_field(key)
    return result


def _tags(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise _bad_field("tags")
    return list(value)


class EventService:
    """Creates events, stores uploaded posters and tells invited users."""

    def __init__(
        self,
        store: Store,
        notifier: Notifier | None = None,
        upload_dir: str | Path = DEFAULT_UPLOAD_DIR,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.upload_dir = upload_dir

    def create_event(
        self,
        user_id: uuid.UUID | None,
        fields: dict[str, Any],
        image: tuple[str, bytes] | None = None,
        now: datetime | None = None,
    ) -> dict[str, str]:
        """Validate the fields, create an active event and return its id and image URL."""
        if not isinstance(fields, dict):
            raise ApiError(400, "Неверный формат данных")
        now = _aware(now or datetime.now(timezone.utc))

        missing = [
            key
            for key in ("title", "fullDescription", "startDate", "endDate")
            if not _present(fields, key)
        ]
        if missing:
            raise ApiError(400, "Необходимо указать обязательные поля: " + ", ".join(missing))

        title = _text(fields, "title")
        full_description = _text(fields, "fullDescription")
        short_description = _text(fields, "shortDescription")
        image_url = _text(fields, "imageURL")
        payment_info = _text(fields, "paymentInfo")
        address = _text(fields, "address")
        map_link = _text(fields, "yandexMapLink")
        max_participants = _max_participants(fields.get("maxParticipants"))
        latitude = _coordinate(fields.get("latitude"), "latitude")
        longitude = _coordinate(fields.get("longitude"), "longitude")
        category_ids = _uuid_list(fields.get("categoryIDs"), "categoryIDs")
        participant_ids = _uuid_list(fields.get("participantIDs"), "participantIDs")
        tags = _tags(fields.get("tags"))

        start = _date(fields, "startDate", "2024-12-10T10:00:00Z")
        end = _date(fields, "endDate", "2024-12-10T18:00:00Z")

        if image is not None:
            filename, data = image
            try:
                image_url = save_event_image(filename, data, self.upload_dir)
            except ImageError as exc:
                if not image_url:
                    raise ApiError(400, exc.message) from exc

        if not image_url:
            raise ApiError(400, "Необходимо указать imageURL или загрузить файл image")
        if not validate_string_length(title, 1, 200):
            raise ApiError(400, "Название события должно быть от 1 до 200 символов")
        if not validate_string_length(full_description, 1, 5000):
            raise ApiError(400, "Полное описание должно быть от 1 до 5000 символов")
        if short_description and not validate_string_length(short_description, 1, 500):
            raise ApiError(400, "Краткое описание должно быть от 1 до 500 символов")
        if start < now:
            raise ApiError(400, "Дата начала должна быть в будущем")
        if end < start:
            raise ApiError(400, "Дата окончания должна быть позже даты начала")
        if max_participants is not None and max_participants < 1:
            raise ApiError(400, "Максимальное количество участников должно быть больше 0")
        if latitude is not None and not -90 <= latitude <= 90:
            raise ApiError(400, "Широта должна быть от -90 до 90")
        if longitude is not None and not -180 <= longitude <= 180:
            raise ApiError(400, "Долгота должна быть от -180 до 180")
        if address and not validate_string_length(address, 0, 500):
            raise ApiError(400, "Адрес должен быть до 500 символов")
        if map_link and not validate_string_length(map_link, 0, 1000):
            raise ApiError(400, "Ссылка на карту должна быть до 1000 символов")
        if user_id is None:
            raise ApiError(401, "Требуется авторизация")

        event = self.store.add(
            Event(
                title=title,
                short_description=short_description,
                full_description=full_description,
                start_date=start,
                end_date=end,
                image_url=image_url,
                payment_info=payment_info,
                max_participants=max_participants,
                status=EventStatus.ACTIVE,
                organizer_id=user_id,
                tags=tags,
                address=address,
                latitude=latitude,
                longitude=longitude,
                yandex_map_link=map_link,
            )
        )

        if category_ids:
            if len(category_ids) > MAX_CATEGORIES:
                raise ApiError(400, "Максимальное количество категорий на событие - 10")
            found = [
                c
                for c in (self.store.get(Category, k) for k in dict.fromkeys(category_ids))
                if c is not None
            ]
            if len(found) != len(category_ids):
                raise ApiError(400, "Некоторые категории не найдены")
            event.category_ids.extend(c.id for c in found if c.id not in event.category_ids)
            self.store.add(event)

        message = (
            f"Вы были добавлены в новое событие: {event.title}. "
            f"Дата начала: {event.start_date.strftime('%d.%m.%Y %H:%M')}"
        )
        for key in dict.fromkeys(participant_ids):
            user = self.store.get(User, key)
            if user is None or user.status is not UserStatus.ACTIVE:
                continue
            participant = self.store.add(EventParticipant(event_id=event.id, user_id=user.id))
            event.participants.append(participant)
            if self.notifier is not None:
                self.notifier.send(user.email, event.title, message)
        self.store.add(event)

        return {"id": str(event.id), "message": "Событие создано", "imageURL": event.image_url}