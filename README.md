# eventhub

The service layer of an events platform, with no web framework attached. It
covers events, event categories, interests, a user's own interests,
micro-communities, reviews and "looking for company" matching. All records
live in an in-memory `Store`.

The service methods return plain dictionaries and lists, shaped like JSON
response bodies with camelCase keys. When a request is rejected they raise
`eventhub.common.ApiError`. The error carries `status` (an `http.HTTPStatus`),
`message`, and `body`, the JSON error body `{"error": message, ...}`. Error
messages and notification texts are in Russian.

The package has no third-party dependencies.

## Installation

```
pip install .
pip install ".[test]"   # adds pytest for the test suite
```

## Modules

- `eventhub.common`: `ApiError`, `Page` (with `page`, `limit` and `offset`),
  `parse_pagination(page, limit)`, `pagination_dict(page, total)`,
  `validate_uuid(value)`, `validate_string_length(value, min_len, max_len)` and
  `format_timestamp(moment)`. Lengths are measured after stripping whitespace.
  `page` defaults to 1 and `limit` to 20. A page below 1, a limit outside 1 to
  100, or a value that is not an integer falls back to the default.
- `eventhub.store`: `Store(online=True)`, which keeps records of every type by
  their `id`. Its methods are `add`, `get(kind, record_id)`, `all(kind)`,
  `find(kind, **attrs)`, `first(kind, **attrs)`, `delete(record)` and `ping()`.
- `eventhub.models`: the record dataclasses `User`, `Category`, `Interest`,
  `UserInterest`, `MicroCommunity`, `CommunityMember`, `Event`,
  `EventParticipant`, `EventReview`, `EventMatching` and `MatchRequest`, and the
  enums `EventStatus`, `MatchStatus`, `MatchRequestStatus` and `UserStatus`.
- `eventhub.health`: `HealthService(store).check()` returns a status code and a
  body. The result is 200 when the store answers `ping()`. It is 503 when there
  is no store or the store does not answer.
- `eventhub.categories`: `CategoryService` with `list_categories`,
  `create_category`, `update_category` and `delete_category`.
- `eventhub.interests`: `InterestCatalog` with `list_interests`,
  `interest_categories` and `create_interest`. Interest names are unique.
- `eventhub.userinterests`: `UserInterestService` with `user_interests`,
  `add_user_interest`, `remove_user_interest` and `update_weight`. Weights run
  from 1 to 10. When an interest is added with a weight outside that range, it
  gets weight 5.
- `eventhub.communities`: `CommunityService` with `create_community`,
  `list_communities`, `get_community`, `join`, `leave`, `my_communities` and
  `members`. The creator becomes the admin and first member, and the admin
  cannot leave.
- `eventhub.matching`: `MatchingService` with `set_matching`, `find_matches`,
  `get_matches`, `create_request`, `my_requests`, `accept_request`,
  `reject_request` and `remove_matching`. `find_matches` scores other users by
  shared interests. For each shared interest it takes the mean of the two
  users' weights, and the score is the mean of those values.
- `eventhub.events`: `EventService(store, notifier=None, upload_dir=...)`.
  `create_event(user_id, fields, image=None, now=None)` validates the fields,
  including RFC 3339 dates, which may also be given as `datetime` objects. It
  stores an uploaded image if one is given, attaches categories (at most 10)
  and adds any `participantIDs` that belong to active users, sending each of
  them a notification.
- `eventhub.listing`: `EventListParams`, and `list_events(store, user_id,
  params)`, which filters by tab, status, search term, categories, tags and
  date range, and sorts by start date, creation time or participant count.
  `get_event(store, event_id, user_id, role)` returns an event's details,
  whether the viewer takes part in it, and its average rating. Rejected events
  are shown only to the `"Администратор"` role.
- `eventhub.updates`: `update_event(store, notifier, event_id, payload, now)`
  applies the changes and notifies every participant. The helpers
  `change_summary` and `notification_message` build the text of that
  notification.
- `eventhub.participation`: `ParticipationService` with `join`, `leave` and
  `delete_event`. Joining and leaving notify the organizer, and deleting an
  event notifies its participants.
- `eventhub.reviews`: `ReviewService` with `create_review`, `update_review`
  and `delete_review`. Only participants of past events can write a review,
  only one review per event, with a rating from 1 to 5.
- `eventhub.reviewlist`: `list_reviews(store, event_id, page, limit)`, which
  lists newest first together with the average rating, and
  `average_rating(store, event_id)`.
- `eventhub.images`: `detect_mime(head)`, `is_valid_image(head, ext)` and
  `save_event_image(filename, data, upload_dir)`. Accepted images are JPEG,
  PNG, GIF, WebP or SVG of at most 10 MB, and the content must match the
  extension. A saved image is reachable at `/uploads/events/<name>`. Rejected
  files raise `ImageError`.
- `eventhub.export`: `participants_csv(users)` and `participants_xlsx(users)`.
  `export_participants(store, event_id, file_format)` returns the content type,
  the file name and the bytes. It produces CSV when `file_format` is `"csv"`
  and XLSX otherwise.
- `eventhub.notify`: `Notifier(deliver=None, sender="noreply@example.com")`
  builds an `email.message.EmailMessage` and passes it to `deliver` when one
  is given. `RecordingNotifier` also appends every `(to, subject, message)`
  to `sent`.

## Example

```python
from datetime import datetime, timedelta, timezone

from eventhub.common import ApiError
from eventhub.events import EventService
from eventhub.models import User
from eventhub.notify import RecordingNotifier
from eventhub.participation import ParticipationService
from eventhub.store import Store

store = Store()
organizer = store.add(User(email="organizer@example.com", full_name="Olga"))
guest = store.add(User(email="guest@example.com", full_name="Gleb"))
notifier = RecordingNotifier()

start = datetime.now(timezone.utc) + timedelta(days=7)
created = EventService(store, notifier).create_event(
    organizer.id,
    {
        "title": "Jazz evening",
        "fullDescription": "Live music",
        "startDate": start,
        "endDate": start + timedelta(hours=3),
        "imageURL": "/static/jazz.png",
    },
)
ParticipationService(store, notifier).join(guest.id, created["id"])
print(notifier.sent)  # the organizer is told that Gleb joined

try:
    ParticipationService(store).join(guest.id, "not-a-uuid")
except ApiError as err:
    print(err.status, err.message)
```

## What this package does not do

- It runs no HTTP server and defines no routes. The caller maps requests onto
  the service methods and turns `ApiError` into a response.
- It does not authenticate anyone. Callers pass the current user's id, and
  `None` where nobody is signed in, and the caller checks roles.
- It has no persistent database. `Store` keeps everything in memory.
- It does not send e-mail itself. `Notifier` hands messages to the `deliver`
  callable it is given.
- Creating an event does not notify communities that might be interested in
  it.