"""Joining and leaving events, and cancelling them."""

from __future__ import annotations

import uuid
from typing import Any

from eventhub.common import ApiError, validate_uuid
from eventhub.models import Event, EventParticipant, EventStatus, User
from eventhub.notify import Notifier
from eventhub.store import Store

_LIMIT_REACHED = "Достигнут максимальный лимит участников"


def _event_uuid(event_id: str) -> uuid.UUID:
    if not validate_uuid(event_id):
        raise ApiError(400, "Неверный формат ID события")
    return uuid.UUID(event_id)


def _require_user(user_id: uuid.UUID | None) -> uuid.UUID:
    if user_id is None:
        raise ApiError(401, "Требуется авторизация")
    return user_id


class ParticipationService:
    """Manages who takes part in events and tells the people concerned."""

    def __init__(self, store: Store, notifier: Notifier | None = None) -> None:
        self.store = store
        self.notifier = notifier

    def _participants(self, event_id: uuid.UUID, event: Event | None) -> list[EventParticipant]:
        found = {p.id: p for p in self.store.find(EventParticipant, event_id=event_id)}
        if event is not None:
            for participant in event.participants:
                found.setdefault(participant.id, participant)
        return list(found.values())

    def _notify(self, to: str, subject: str, message: str) -> None:
        if self.notifier is not None:
            self.notifier.send(to, subject, message)

    def _tell_organizer(self, event: Event, user_id: uuid.UUID, action: str) -> None:
        organizer = self.store.get(User, event.organizer_id)
        user = self.store.get(User, user_id)
        if organizer is not None and user is not None:
            self._notify(organizer.email, event.title, f"{user.full_name} {action}")

    def join(self, user_id: uuid.UUID | None, event_id: str) -> dict[str, str]:
        """Confirm the user's participation in an active event."""
        key = _event_uuid(event_id)
        user_id = _require_user(user_id)

        event = self.store.get(Event, key)
        if event is None:
            raise ApiError(404, "Событие не найдено")
        if event.status is not EventStatus.ACTIVE:
            raise ApiError(400, "Можно участвовать только в активных событиях")

        participants = self._participants(key, event)
        if event.max_participants is not None and len(participants) >= event.max_participants:
            raise ApiError(400, _LIMIT_REACHED, message=_LIMIT_REACHED)
        if any(p.user_id == user_id for p in participants):
            raise ApiError(400, "Вы уже участвуете в этом событии")

        participant = self.store.add(EventParticipant(event_id=event.id, user_id=user_id))
        event.participants.append(participant)
        self.store.add(event)

        self._tell_organizer(event, user_id, "подтвердил участие в событии")
        return {"message": "Участие успешно подтверждено"}

    def leave(self, user_id: uuid.UUID | None, event_id: str) -> dict[str, str]:
        """Cancel the user's participation in an event."""
        key = _event_uuid(event_id)
        user_id = _require_user(user_id)

        event = self.store.get(Event, key)
        own = [p for p in self._participants(key, event) if p.user_id == user_id]
        if not own:
            raise ApiError(404, "Участие не найдено")

        for participant in own:
            self.store.delete(participant)
        if event is not None:
            event.participants = [p for p in event.participants if p.user_id != user_id]
            self.store.add(event)
            self._tell_organizer(event, user_id, "отменил участие в событии")
        return {"message": "Участие успешно отменено"}

    def delete_event(self, event_id: str) -> dict[str, Any]:
        """Remove an event and tell its participants it was cancelled."""
        key = _event_uuid(event_id)
        event = self.store.get(Event, key)
        if event is None:
            raise ApiError(404, "Событие не найдено")

        participants = self._participants(key, event)
        self.store.delete(event)

        for participant in participants:
            user = self.store.get(User, participant.user_id)
            if user is not None:
                self._notify(user.email, event.title, "Событие было отменено организатором.")
        return {"message": "Событие удалено"}