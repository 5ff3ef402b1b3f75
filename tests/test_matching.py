import uuid
from datetime import datetime, timedelta, timezone
from http import HTTPStatus

import pytest

from eventhub.common import ApiError
from eventhub.matching import MatchingService
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


@pytest.fixture
def world():
    store = Store()
    alice = store.add(User(email="alice@example.com", full_name="Alice"))
    bob = store.add(User(email="bob@example.com", full_name="Bob"))
    carol = store.add(User(email="carol@example.com", full_name="Carol"))
    music = store.add(Interest(name="Музыка", category="Искусство"))
    chess = store.add(Interest(name="Шахматы", category="Игры"))
    start = datetime.now(timezone.utc) + timedelta(days=3)
    event = store.add(
        Event(
            title="Концерт",
            full_description="Вечер музыки",
            start_date=start,
            end_date=start + timedelta(hours=3),
            organizer_id=alice.id,
        )
    )
    store.add(UserInterest(user_id=alice.id, interest_id=music.id, weight=7))
    store.add(UserInterest(user_id=bob.id, interest_id=music.id, weight=7))
    store.add(UserInterest(user_id=carol.id, interest_id=chess.id, weight=3))
    return store, MatchingService(store), alice, bob, carol, event


def test_set_matching_creates_then_updates(world):
    store, service, alice, _, _, event = world
    status, body = service.set_matching(alice.id, str(event.id), {"preferences": "тихо"})
    assert status == HTTPStatus.CREATED
    assert body == {"message": "Матчинг создан"}
    status, body = service.set_matching(alice.id, str(event.id), {"preferences": "шумно"})
    assert status == HTTPStatus.OK
    assert body == {"message": "Матчинг обновлен"}
    records = store.find(EventMatching, user_id=alice.id)
    assert len(records) == 1
    assert records[0].preferences == "шумно"
    assert records[0].status is MatchStatus.LOOKING


@pytest.mark.parametrize(
    "user, event_id, payload, code",
    [
        (None, "event", {}, 401),
        ("alice", "not-a-uuid", {}, 400),
        ("alice", "missing", {}, 404),
        ("alice", "event", {"status": "bogus"}, 400),
        ("alice", "event", "oops", 400),
    ],
)
def test_set_matching_errors(world, user, event_id, payload, code):
    _, service, alice, _, _, event = world
    user_id = alice.id if user == "alice" else None
    if event_id == "event":
        event_id = str(event.id)
    elif event_id == "missing":
        event_id = str(uuid.uuid4())
    with pytest.raises(ApiError) as err:
        service.set_matching(user_id, event_id, payload)
    assert err.value.status == code


def test_find_matches_only_shared_interests(world):
    _, service, alice, bob, carol, event = world
    for person in (alice, bob, carol):
        service.set_matching(person.id, str(event.id), {})
    matches = service.get_matches(alice.id, str(event.id))
    assert len(matches) == 1
    match = matches[0]
    assert match["user"] == {"id": str(bob.id), "fullName": "Bob", "email": "bob@example.com"}
    assert match["commonInterests"] == ["Музыка"]
    assert match["score"] == 7


def test_find_matches_excludes_found_users(world):
    _, service, alice, bob, _, event = world
    service.set_matching(alice.id, str(event.id), {})
    service.set_matching(bob.id, str(event.id), {"status": "found"})
    assert service.find_matches(alice.id, event.id) == []


def test_get_matches_requires_own_matching(world):
    _, service, alice, _, _, event = world
    with pytest.raises(ApiError) as err:
        service.get_matches(alice.id, str(event.id))
    assert err.value.status == 404


def test_get_matches_rejects_when_already_found(world):
    _, service, alice, _, _, event = world
    service.set_matching(alice.id, str(event.id), {"status": "found"})
    with pytest.raises(ApiError) as err:
        service.get_matches(alice.id, str(event.id))
    assert err.value.status == 400


def test_create_request_and_duplicate(world):
    store, service, alice, bob, _, event = world
    body = service.create_request(alice.id, str(event.id), {"toUserID": str(bob.id), "message": "Пойдём?"})
    assert body == {"message": "Запрос отправлен"}
    saved = store.first(MatchRequest, from_user_id=alice.id)
    assert saved.to_user_id == bob.id
    assert saved.status is MatchRequestStatus.PENDING
    with pytest.raises(ApiError) as err:
        service.create_request(alice.id, str(event.id), {"toUserID": str(bob.id)})
    assert err.value.status == 409


def test_create_request_to_self_and_bad_payload(world):
    _, service, alice, _, _, event = world
    with pytest.raises(ApiError) as err:
        service.create_request(alice.id, str(event.id), {"toUserID": str(alice.id)})
    assert err.value.status == 400
    with pytest.raises(ApiError) as err:
        service.create_request(alice.id, str(event.id), {})
    assert err.value.status == 400


def test_my_requests_both_directions_and_filter(world):
    _, service, alice, bob, carol, event = world
    service.create_request(alice.id, str(event.id), {"toUserID": str(bob.id)})
    service.create_request(carol.id, str(event.id), {"toUserID": str(alice.id)})
    everything = service.my_requests(alice.id, "")
    assert len(everything) == 2
    assert {r["fromUser"]["email"] for r in everything} == {"alice@example.com", "carol@example.com"}
    assert all(r["event"]["title"] == "Концерт" for r in everything)
    request_id = next(r["id"] for r in everything if r["toUser"]["id"] == str(alice.id))
    service.accept_request(alice.id, request_id)
    accepted = service.my_requests(alice.id, "accepted")
    assert [r["id"] for r in accepted] == [request_id]
    assert service.my_requests(bob.id, "accepted") == []


def test_accept_request_marks_both_found(world):
    store, service, alice, bob, _, event = world
    service.set_matching(alice.id, str(event.id), {})
    service.set_matching(bob.id, str(event.id), {})
    service.create_request(alice.id, str(event.id), {"toUserID": str(bob.id)})
    request = store.first(MatchRequest, from_user_id=alice.id)
    assert service.accept_request(bob.id, str(request.id)) == {"message": "Запрос принят"}
    assert request.status is MatchRequestStatus.ACCEPTED
    for person in (alice, bob):
        assert store.first(EventMatching, user_id=person.id).status is MatchStatus.FOUND
    with pytest.raises(ApiError) as err:
        service.accept_request(bob.id, str(request.id))
    assert err.value.status == 400


def test_only_recipient_can_answer(world):
    store, service, alice, bob, _, event = world
    service.create_request(alice.id, str(event.id), {"toUserID": str(bob.id)})
    request = store.first(MatchRequest, from_user_id=alice.id)
    with pytest.raises(ApiError) as err:
        service.reject_request(alice.id, str(request.id))
    assert err.value.status == 404
    assert service.reject_request(bob.id, str(request.id)) == {"message": "Запрос отклонен"}
    assert request.status is MatchRequestStatus.REJECTED


def test_remove_matching(world):
    store, service, alice, _, _, event = world
    service.set_matching(alice.id, str(event.id), {})
    assert service.remove_matching(alice.id, str(event.id)) == {"message": "Матчинг удален"}
    assert store.find(EventMatching, user_id=alice.id) == []
    with pytest.raises(ApiError) as err:
        service.remove_matching(None, str(event.id))
    assert err.value.status == 401