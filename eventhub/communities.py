"""Micro-communities built around shared interests."""

from __future__ import annotations

import uuid
from typing import Any

from eventhub.common import (
    ApiError,
    format_timestamp,
    pagination_dict,
    parse_pagination,
    validate_string_length,
    validate_uuid,
)
from eventhub.models import CommunityMember, Interest, MicroCommunity, User
from eventhub.store import Store

_BAD_DATA = "Неверные данные"
_NIL = uuid.UUID(int=0)


def _require_user(user_id: uuid.UUID | None) -> uuid.UUID:
    if user_id is None:
        raise ApiError(401, "Требуется авторизация")
    return user_id


def _community_uuid(community_id: str) -> uuid.UUID:
    if not validate_uuid(community_id):
        raise ApiError(400, "Неверный формат ID")
    return uuid.UUID(community_id)


def _bind_create(payload: Any) -> tuple[str, str, list[str], bool]:
    if not isinstance(payload, dict):
        raise ApiError(400, _BAD_DATA)
    name = payload.get("name")
    if not isinstance(name, str) or not name:
        raise ApiError(400, _BAD_DATA)
    description = payload.get("description") or ""
    if not isinstance(description, str):
        raise ApiError(400, _BAD_DATA)
    interest_ids = payload.get("interestIDs") or []
    if not isinstance(interest_ids, list) or not all(isinstance(i, str) for i in interest_ids):
        raise ApiError(400, _BAD_DATA)
    auto_notify = payload.get("autoNotify")
    if auto_notify is None:
        auto_notify = False
    if not isinstance(auto_notify, bool):
        raise ApiError(400, _BAD_DATA)
    return name, description, interest_ids, auto_notify


class CommunityService:
    """Creating, browsing, joining and leaving communities."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def _interests(self, community: MicroCommunity) -> list[Interest]:
        found = (self.store.get(Interest, i) for i in community.interest_ids)
        return [interest for interest in found if interest is not None]

    def _to_response(self, community: MicroCommunity) -> dict[str, Any]:
        admin = self.store.get(User, community.admin_id)
        return {
            "id": str(community.id),
            "name": community.name,
            "description": community.description,
            "interests": [
                {
                    "id": str(interest.id),
                    "name": interest.name,
                    "category": interest.category,
                    "description": interest.description,
                }
                for interest in self._interests(community)
            ],
            "admin": {
                "id": str(admin.id if admin else _NIL),
                "email": admin.email if admin else "",
            },
            "autoNotify": community.auto_notify,
            "membersCount": community.members_count,
            "createdAt": format_timestamp(community.created_at),
        }

    def create_community(self, user_id: uuid.UUID | None, payload: Any) -> dict[str, Any]:
        """Create a community with the user as its admin and first member."""
        user_id = _require_user(user_id)
        name, description, interest_ids, auto_notify = _bind_create(payload)
        if not validate_string_length(name, 1, 100):
            raise ApiError(400, "Название должно быть от 1 до 100 символов")

        interests: list[Interest] = []
        if interest_ids:
            wanted: list[uuid.UUID] = []
            for text in interest_ids:
                if not validate_uuid(text):
                    raise ApiError(400, "Неверный формат ID интереса: " + text)
                key = uuid.UUID(text)
                if key not in wanted:
                    wanted.append(key)
            interests = [i for i in (self.store.get(Interest, k) for k in wanted) if i is not None]
            if len(interests) != len(interest_ids):
                raise ApiError(400, "Некоторые интересы не найдены")

        community = self.store.add(
            MicroCommunity(
                name=name.strip(),
                description=description,
                admin_id=user_id,
                auto_notify=auto_notify,
                members_count=1,
                interest_ids=[interest.id for interest in interests],
            )
        )
        self.store.add(CommunityMember(user_id=user_id, community_id=community.id))
        return self._to_response(community)

    def list_communities(
        self,
        search: str = "",
        category: str = "",
        interest_id: str = "",
        page: Any = None,
        limit: Any = None,
    ) -> dict[str, Any]:
        """A page of communities, largest first, optionally filtered."""
        requested = parse_pagination(page, limit)
        communities = self.store.all(MicroCommunity)

        if search:
            if not validate_string_length(search, 1, 100):
                raise ApiError(400, "Поисковый запрос должен быть от 1 до 100 символов")
            needle = search.lower()
            communities = [
                c
                for c in communities
                if needle in c.name.lower() or needle in c.description.lower()
            ]

        if category:
            communities = [
                c for c in communities if any(i.category == category for i in self._interests(c))
            ]

        if interest_id:
            if not validate_uuid(interest_id):
                raise ApiError(400, "Неверный формат ID интереса")
            key = uuid.UUID(interest_id)
            communities = [c for c in communities if key in c.interest_ids]

        total = len(communities)
        communities.sort(key=lambda c: (c.members_count, c.created_at), reverse=True)
        window = communities[requested.offset : requested.offset + requested.limit]
        return {
            "data": [self._to_response(c) for c in window],
            "pagination": pagination_dict(requested, total),
        }

    def _existing(self, community_id: str) -> MicroCommunity:
        community = self.store.get(MicroCommunity, _community_uuid(community_id))
        if community is None:
            raise ApiError(404, "Сообщество не найдено")
        return community

    def get_community(self, community_id: str) -> dict[str, Any]:
        """One community by its identifier."""
        return self._to_response(self._existing(community_id))

    def join(self, user_id: uuid.UUID | None, community_id: str) -> dict[str, str]:
        """Add the user to the community's members."""
        user_id = _require_user(user_id)
        community = self._existing(community_id)
        if self.store.first(CommunityMember, user_id=user_id, community_id=community.id):
            raise ApiError(409, "Вы уже состоите в этом сообществе")
        self.store.add(CommunityMember(user_id=user_id, community_id=community.id))
        community.members_count += 1
        self.store.add(community)
        return {"message": "Вы присоединились к сообществу"}

    def leave(self, user_id: uuid.UUID | None, community_id: str) -> dict[str, str]:
        """Remove the user from the community; the admin cannot leave."""
        user_id = _require_user(user_id)
        community = self._existing(community_id)
        if community.admin_id == user_id:
            raise ApiError(400, "Администратор не может покинуть сообщество")
        for member in self.store.find(CommunityMember, user_id=user_id, community_id=community.id):
            self.store.delete(member)
        community.members_count = max(community.members_count - 1, 0)
        self.store.add(community)
        return {"message": "Вы покинули сообщество"}

    def my_communities(self, user_id: uuid.UUID | None) -> list[dict[str, Any]]:
        """Communities the user belongs to."""
        user_id = _require_user(user_id)
        result = []
        for membership in self.store.find(CommunityMember, user_id=user_id):
            community = self.store.get(MicroCommunity, membership.community_id)
            if community is not None:
                result.append(self._to_response(community))
        return result

    def members(self, community_id: str) -> list[dict[str, Any]]:
        """Members of a community in the order they joined."""
        key = _community_uuid(community_id)
        members = sorted(
            self.store.find(CommunityMember, community_id=key), key=lambda m: m.joined_at
        )
        result = []
        for member in members:
            user = self.store.get(User, member.user_id)
            result.append(
                {
                    "id": str(member.id),
                    "user": {
                        "id": str(user.id if user else _NIL),
                        "email": user.email if user else "",
                    },
                    "joinedAt": format_timestamp(member.joined_at),
                }
            )
        return result