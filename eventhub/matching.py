"""Finding company for events: matching flags, scores and match requests."""

from __future__ import annotations

import uuid
from http import HTTPStatus
from typing import Any

from eventhub.common import ApiError, format_timestamp, validate_uuid
from eventhub.models import (
    Event,
    EventMatching,
    Interest,
    MatchRequest,
    MatchRequestStatus,
    MatchStatus,
    User,
    UserInterest,
)
from eventhub.store import Store

_BAD_DATA = "Неверные данные"
_NIL = uuid.UUID(int=0)


def _require_user(user_id: uuid.UUID | None) -> uuid.UUID:
    if user_id is None:
        raise ApiError(401, "Требуется авторизация")
    return user_id


def _event_uuid(event_id: str) -> uuid.UUID:
    if not validate_uuid(event_id):
        raise ApiError(400, "Неверный формат ID события")
    return uuid.UUID(event_id)


def _request_uuid(request_id: str) -> uuid.UUID:
    if not validate_uuid(request_id):
        raise ApiError(400, "Неверный формат ID")
    return uuid.UUID(request_id)


def _optional_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ApiError(400, _BAD_DATA)
    return value


class MatchingService:
    """Lets users look for company at events and connect with each other."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def _user_info(self, user_id: uuid.UUID, with_name: bool = False) -> dict[str, str]:
        user = self.store.get(User, user_id)
        info = {
            "id": str(user.id if user else _NIL),
            "email": user.email if user else "",
        }
        if with_name:
            info["fullName"] = user.full_name if user else ""
        return info

    def set_matching(
        self, user_id: uuid.UUID | None, event_id: str, payload: Any
    ) -> tuple[HTTPStatus, dict[str, str]]:
        """Mark that the user looks for company at an event, or update the mark."""
        user_id = _require_user(user_id)
        event_uuid = _event_uuid(event_id)
        if not isinstance(payload, dict):
            raise ApiError(400, _BAD_DATA)
        status_text = _optional_str(payload, "status")
        preferences = _optional_str(payload, "preferences")

        if self.store.get(Event, event_uuid) is None:
            raise ApiError(404, "Событие не найдено")

        try:
            status = MatchStatus(status_text) if status_text else MatchStatus.LOOKING
        except ValueError:
            raise ApiError(400, _BAD_DATA) from None

        existing = self.store.first(EventMatching, user_id=user_id, event_id=event_uuid)
        if existing is not None:
            existing.status = status
            existing.preferences = preferences
            self.store.add(existing)
            return HTTPStatus.OK, {"message": "Матчинг обновлен"}

        self.store.add(
            EventMatching(
                user_id=user_id, event_id=event_uuid, status=status, preferences=preferences
            )
        )
        return HTTPStatus.CREATED, {"message": "Матчинг создан"}

    def find_matches(self, user_id: uuid.UUID, event_id: uuid.UUID) -> list[dict[str, Any]]:
        """Other people looking for company at the event who share interests."""
        own_weights = {
            ui.interest_id: ui.weight for ui in self.store.find(UserInterest, user_id=user_id)
        }
        others = [
            m
            for m in self.store.find(EventMatching, event_id=event_id, status=MatchStatus.LOOKING)
            if m.user_id != user_id
        ]

        matches = []
        for matching in others:
            common: list[str] = []
            scores: list[float] = []
            for other in self.store.find(UserInterest, user_id=matching.user_id):
                weight = own_weights.get(other.interest_id)
                if weight is None:
                    continue
                interest = self.store.get(Interest, other.interest_id)
                common.append(interest.name if interest else "")
                scores.append((weight + other.weight) / 2.0)
            if scores:
                matches.append(
                    {
                        "user": self._user_info(matching.user_id, with_name=True),
                        "score": sum(scores) / len(scores),
                        "commonInterests": common,
                    }
                )
        return matches

    def get_matches(self, user_id: uuid.UUID | None, event_id: str) -> list[dict[str, Any]]:
        """Matches for a user who is looking for company at the event."""
        user_id = _require_user(user_id)
        event_uuid = _event_uuid(event_id)
        own = self.store.first(EventMatching, user_id=user_id, event_id=event_uuid)
        if own is None:
            raise ApiError(404, "Вы не отметили, что ищете компанию для этого события")
        if own.status is not MatchStatus.LOOKING:
            raise ApiError(400, "Вы больше не ищете компанию для этого события")
        return self.find_matches(user_id, event_uuid)

    def create_request(
        self, user_id: uuid.UUID | None, event_id: str, payload: Any
    ) -> dict[str, str]:
        """Send another user a request to go to the event together."""
        user_id = _require_user(user_id)
        event_uuid = _event_uuid(event_id)
        if not isinstance(payload, dict):
            raise ApiError(400, _BAD_DATA)
        to_text = payload.get("toUserID")
        if not isinstance(to_text, str) or not validate_uuid(to_text):
            raise ApiError(400, _BAD_DATA)
        to_user = uuid.UUID(to_text)
        message = _optional_str(payload, "message")

        if to_user == user_id:
            raise ApiError(400, "Нельзя отправить запрос самому себе")
        if (
            self.store.first(
                MatchRequest, from_user_id=user_id, to_user_id=to_user, event_id=event_uuid
            )
            is not None
        ):
            raise ApiError(409, "Запрос уже отправлен")

        self.store.add(
            MatchRequest(
                from_user_id=user_id,
                to_user_id=to_user,
                event_id=event_uuid,
                status=MatchRequestStatus.PENDING,
                message=message,
            )
        )
        return {"message": "Запрос отправлен"}

    def my_requests(self, user_id: uuid.UUID | None, status: str = "") -> list[dict[str, Any]]:
        """Requests the user sent or received, newest first."""
        user_id = _require_user(user_id)
        requests = [
            r
            for r in self.store.all(MatchRequest)
            if (r.to_user_id == user_id or r.from_user_id == user_id)
            and (not status or r.status == status)
        ]
        requests.sort(key=lambda r: r.created_at, reverse=True)

        result = []
        for request in requests:
            event = self.store.get(Event, request.event_id)
            result.append(
                {
                    "id": str(request.id),
                    "fromUser": self._user_info(request.from_user_id),
                    "toUser": self._user_info(request.to_user_id),
                    "event": {
                        "id": str(event.id if event else _NIL),
                        "title": event.title if event else "",
                    },
                    "status": request.status.value,
                    "message": request.message,
                    "createdAt": format_timestamp(request.created_at),
                }
            )
        return result

    def _pending_request(self, user_id: uuid.UUID | None, request_id: str) -> MatchRequest:
        user_id = _require_user(user_id)
        request_uuid = _request_uuid(request_id)
        request = self.store.get(MatchRequest, request_uuid)
        if request is None or request.to_user_id != user_id:
            raise ApiError(404, "Запрос не найден")
        if request.status is not MatchRequestStatus.PENDING:
            raise ApiError(400, "Запрос уже обработан")
        return request

    def accept_request(self, user_id: uuid.UUID | None, request_id: str) -> dict[str, str]:
        """Accept a request addressed to the user; both sides count as found."""
        request = self._pending_request(user_id, request_id)
        request.status = MatchRequestStatus.ACCEPTED
        self.store.add(request)
        for party in (request.from_user_id, request.to_user_id):
            matching = self.store.first(EventMatching, user_id=party, event_id=request.event_id)
            if matching is not None:
                matching.status = MatchStatus.FOUND
                self.store.add(matching)
        return {"message": "Запрос принят"}

    def reject_request(self, user_id: uuid.UUID | None, request_id: str) -> dict[str, str]:
        """Decline a request addressed to the user."""
        request = self._pending_request(user_id, request_id)
        request.status = MatchRequestStatus.REJECTED
        self.store.add(request)
        return {"message": "Запрос отклонен"}

    def remove_matching(self, user_id: uuid.UUID | None, event_id: str) -> dict[str, str]:
        """Stop looking for company at the event."""
        user_id = _require_user(user_id)
        event_uuid = _event_uuid(event_id)
        for matching in self.store.find(EventMatching, user_id=user_id, event_id=event_uuid):
            self.store.delete(matching)
        return {"message": "Матчинг удален"}