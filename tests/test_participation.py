import uuid
from datetime import datetime, timezone

import pytest

from eventhub.common import ApiError
from eventhub.models import Event, EventParticipant, EventStatus, User
from eventhub.notify import RecordingNotifier
from eventhub.participation import ParticipationService
from eventhub.store import Store


@pytest.fixture
def world():
    store = Store()
    notifier = RecordingNotifier()
    organizer = store.add(User(email="organizer@example.com", full_name="Olga"))
    guest = store.add(User(email="guest@example.com", full_name="Gleb"))
    other = store.add(User(email="other@example.com", full_name="Oleg"))
    event = store.add(
        Event(
            title="Meetup",
            full_description="desc",
            start_date=datetime(2030, 1, 1, tzinfo=timezone.utc),
            end_date=datetime(2030, 1, 2, tzinfo=timezone.utc),
            organizer_id=organizer.id,
        )
    )
    service = ParticipationService(store, notifier)
    return store, notifier, service, event, guest, other


def test_join_adds_participant_and_notifies(world):
    store, notifier, service, event, guest, _ = world
    result = service.join(guest.id, str(event.id))
    assert result == {"message": "Участие успешно подтверждено"}
    assert event.participants_count() == 1
    assert store.first(EventParticipant, event_id=event.id, user_id=guest.id) is not None
    assert notifier.sent == [
        ("organizer@example.com", "Meetup", "Gleb подтвердил участие в событии")
    ]


def test_join_twice_rejected(world):
    _, _, service, event, guest, _ = world
    service.join(guest.id, str(event.id))
    with pytest.raises(ApiError) as err:
        service.join(guest.id, str(event.id))
    assert err.value.message == "Вы уже участвуете в этом событии"


def test_join_inactive_event(world):
    _, _, service, event, guest, _ = world
    event.status = EventStatus.PAST
    with pytest.raises(ApiError) as err:
        service.join(guest.id, str(event.id))
    assert err.value.message == "Можно участвовать только в активных событиях"


def test_join_unknown_event(world):
    _, _, service, _, guest, _ = world
    with pytest.raises(ApiError) as err:
        service.join(guest.id, str(uuid.uuid4()))
    assert err.value.status == 404


def test_join_invalid_id(world):
    _, _, service, _, guest, _ = world
    with pytest.raises(ApiError) as err:
        service.join(guest.id, "bad")
    assert err.value.message == "Неверный формат ID события"


def test_join_without_user(world):
    _, _, service, event, _, _ = world
    with pytest.raises(ApiError) as err:
        service.join(None, str(event.id))
    assert err.value.status == 401


def test_leave_removes_participant_and_notifies(world):
    store, notifier, service, event, guest, _ = world
    service.join(guest.id, str(event.id))
    result = service.leave(guest.id, str(event.id))
    assert result == {"message": "Участие успешно отменено"}
    assert event.participants_count() == 0
    assert store.find(EventParticipant, event_id=event.id) == []
    assert notifier.sent[-1] == (
        "organizer@example.com",
        "Meetup",
        "Gleb отменил участие в событии",
    )


def test_leave_without_participation(world):
    _, _, service, event, guest, _ = world
    with pytest.raises(ApiError) as err:
        service.leave(guest.id, str(event.id))
    assert err.value.status == 404
    assert err.value.message == "Участие не найдено"


def test_rejoin_after_leave(world):
    _, _, service, event, guest, _ = world
    service.join(guest.id, str(event.id))
    service.leave(guest.id, str(event.id))
    service.join(guest.id, str(event.id))
    assert [p.user_id for p in event.participants] == [guest.id]


def test_delete_event_notifies_participants(world):
    store, notifier, service, event, guest, other = world
    service.join(guest.id, str(event.id))
    service.join(other.id, str(event.id))
    notifier.sent.clear()
    result = service.delete_event(str(event.id))
    assert result == {"message": "Событие удалено"}
    assert store.get(Event, event.id) is None
    assert sorted(notifier.sent) == sorted(
        (email, "Meetup", "Событие было отменено организатором.")
        for email in ("guest@example.com", "other@example.com")
    )


def test_delete_unknown_event(world):
    _, _, service, _, _, _ = world
    with pytest.raises(ApiError) as err:
        service.delete_event(str(uuid.uuid4()))
    assert err.value.message == "Событие не найдено"


def test_delete_invalid_id(world):
    _, _, service, _, _, _ = world
    with pytest.raises(ApiError) as err:
        service.delete_event("x")
    assert err.value.status == 400