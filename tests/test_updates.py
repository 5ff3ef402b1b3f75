import copy
import uuid
from datetime import datetime, timezone

import pytest

from eventhub.common import ApiError
from eventhub.models import Category, Event, EventParticipant, EventStatus, User
from eventhub.notify import RecordingNotifier
from eventhub.store import Store
from eventhub.updates import change_summary, notification_message, update_event

NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


def _event(**changes):
    values = dict(
        title="Old title",
        short_description="",
        full_description="Long text",
        start_date=datetime(2031, 3, 1, 10, 0, tzinfo=timezone.utc),
        end_date=datetime(2031, 3, 1, 18, 0, tzinfo=timezone.utc),
        image_url="/uploads/events/poster.png",
        payment_info="",
        max_participants=None,
        status=EventStatus.ACTIVE,
        organizer_id=uuid.uuid4(),
        tags=[],
        address="",
        latitude=None,
        longitude=None,
        yandex_map_link="",
    )
    values.update(changes)
    return Event(**values)


@pytest.fixture
def env():
    store = Store()
    event = store.add(_event())
    user = store.add(User(email="guest@example.com", full_name="Guest"))
    store.add(EventParticipant(event_id=event.id, user_id=user.id))
    return store, event, RecordingNotifier()


def test_notification_without_changes():
    assert notification_message([]) == (
        "Данные события были обновлены. Проверьте информацию о событии."
    )


def test_notification_lists_changes():
    text = notification_message(["a", "b"])
    assert text == (
        "Данные события были изменены:\n\n1. a\n2. b\n\n"
        "Проверьте обновленную информацию о событии."
    )


def test_summary_title_change():
    old = _event()
    new = copy.copy(old)
    new.title = "New title"
    assert change_summary(old, new, {"title": "New title"}) == [
        'Название: с "Old title" на "New title"'
    ]


def test_summary_ignores_fields_not_in_payload():
    old = _event()
    new = copy.copy(old)
    new.title = "Other"
    assert change_summary(old, new, {}) == []


def test_summary_address_unset_placeholder():
    old = _event()
    new = copy.copy(old)
    new.address = "Main street"
    assert change_summary(old, new, {"address": "Main street"}) == [
        'Место проведения: с "не указано" на "Main street"'
    ]


def test_summary_start_date():
    old = _event()
    new = copy.copy(old)
    new.start_date = datetime(2032, 3, 1, 10, 0, tzinfo=timezone.utc)
    result = change_summary(old, new, {"startDate": "2032-03-01T10:00:00Z"})
    assert result == ["Дата начала: с 01.03.2031 10:00 на 01.03.2032 10:00"]


def test_update_saves_and_notifies(env):
    store, event, notifier = env
    result = update_event(store, notifier, str(event.id), {"title": "Fresh"}, NOW)
    assert result == {"message": "Событие обновлено"}
    assert store.get(Event, event.id).title == "Fresh"
    assert len(notifier.sent) == 1
    to, subject, message = notifier.sent[0]
    assert to == "guest@example.com"
    assert subject == "Fresh"
    assert 'Название: с "Old title" на "Fresh"' in message


def test_update_max_participants_set(env):
    store, event, notifier = env
    update_event(store, notifier, str(event.id), {"maxParticipants": 5}, NOW)
    assert store.get(Event, event.id).max_participants == 5
    assert "установлено: 5" in notifier.sent[0][2]


def test_invalid_id(env):
    store, _, notifier = env
    with pytest.raises(ApiError):
        update_event(store, notifier, "bad-id", {}, NOW)


def test_missing_event(env):
    store, _, notifier = env
    with pytest.raises(ApiError):
        update_event(store, notifier, str(uuid.uuid4()), {"title": "x"}, NOW)


@pytest.mark.parametrize(
    "payload",
    [
        {"startDate": "2029-06-01T10:00:00Z"},
        {"endDate": "2031-02-01T10:00:00Z"},
        {"status": "Unknown"},
        {"latitude": 91},
        {"longitude": -181},
        {"maxParticipants": 0},
        {"title": 42},
        {"startDate": "tomorrow"},
    ],
)
def test_invalid_changes_rejected(env, payload):
    store, event, notifier = env
    with pytest.raises(ApiError):
        update_event(store, notifier, str(event.id), payload, NOW)
    assert notifier.sent == []


def test_status_change(env):
    store, event, notifier = env
    update_event(store, notifier, str(event.id), {"status": EventStatus.PAST.value}, NOW)
    assert store.get(Event, event.id).status is EventStatus.PAST


def test_categories_replaced(env):
    store, event, notifier = env
    category = store.add(Category(name="Music", description=""))
    update_event(store, notifier, str(event.id), {"categoryIDs": [str(category.id)]}, NOW)
    assert store.get(Event, event.id).category_ids == [category.id]


def test_too_many_categories_after_save(env):
    store, event, notifier = env
    ids = [str(uuid.uuid4()) for _ in range(11)]
    with pytest.raises(ApiError):
        update_event(store, notifier, str(event.id), {"title": "Kept", "categoryIDs": ids}, NOW)
    assert store.get(Event, event.id).title == "Kept"


def test_unknown_category_rejected(env):
    store, event, notifier = env
    with pytest.raises(ApiError):
        update_event(store, notifier, str(event.id), {"categoryIDs": [str(uuid.uuid4())]}, NOW)