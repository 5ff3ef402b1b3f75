"""Domain records kept in the store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _now() -> datetime:
    return datetime.now(timezone.utc)


class EventStatus(str, Enum):
    ACTIVE = "Активное"
    PAST = "Прошедшее"
    REJECTED = "Отклоненное"


class MatchStatus(str, Enum):
    LOOKING = "looking"
    FOUND = "found"


class MatchRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


@dataclass(kw_only=True)
class User:
    email: str
    full_name: str = ""
    status: UserStatus = UserStatus.ACTIVE
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)


@dataclass(kw_only=True)
class Category:
    name: str
    description: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(kw_only=True)
class Interest:
    name: str
    category: str
    description: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(kw_only=True)
class UserInterest:
    user_id: uuid.UUID
    interest_id: uuid.UUID
    weight: int = 5
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)


@dataclass(kw_only=True)
class MicroCommunity:
    name: str
    admin_id: uuid.UUID
    description: str = ""
    auto_notify: bool = False
    members_count: int = 0
    interest_ids: list[uuid.UUID] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)


@dataclass(kw_only=True)
class CommunityMember:
    user_id: uuid.UUID
    community_id: uuid.UUID
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    joined_at: datetime = field(default_factory=_now)


@dataclass(kw_only=True)
class EventParticipant:
    event_id: uuid.UUID
    user_id: uuid.UUID
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)


@dataclass(kw_only=True)
class Event:
    title: str
    full_description: str
    start_date: datetime
    end_date: datetime
    organizer_id: uuid.UUID
    short_description: str = ""
    image_url: str = ""
    payment_info: str = ""
    max_participants: int | None = None
    status: EventStatus = EventStatus.ACTIVE
    tags: list[str] = field(default_factory=list)
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None
    yandex_map_link: str = ""
    category_ids: list[uuid.UUID] = field(default_factory=list)
    participants: list[EventParticipant] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)

    def participants_count(self) -> int:
        """Number of people taking part in the event."""
        return len(self.participants)


@dataclass(kw_only=True)
class EventReview:
    event_id: uuid.UUID
    user_id: uuid.UUID
    rating: int
    comment: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass(kw_only=True)
class EventMatching:
    user_id: uuid.UUID
    event_id: uuid.UUID
    status: MatchStatus = MatchStatus.LOOKING
    preferences: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)


@dataclass(kw_only=True)
class MatchRequest:
    from_user_id: uuid.UUID
    to_user_id: uuid.UUID
    event_id: uuid.UUID
    status: MatchRequestStatus = MatchRequestStatus.PENDING
    message: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)