from __future__ import annotations

import pytest

from eventplanner.client import ApiError
from eventplanner.events import map_backend_event, search_params, to_backend_payload
from eventplanner.schemas import AttendanceStatus, NewEvent, UserProfile
from eventplanner.tasks import map_backend_task


def test_map_backend_event_renames_fields():
    event = map_backend_event(
        {
            "id": 12,
            "title": "Board games",
            "eventDate": "2025-12-01",
            "eventTime": "18:30",
            "location": "Library",
            "description": "Bring snacks",
            "createdBy": 3,
            "organizer": {"id": 3, "name": "Bob Smith"},
            "attendees": [{"userId": 4, "status": "not_going", "userName": "Dee"}],
        }
    )

    assert event.id == "12"
    assert event.date == "2025-12-01"
    assert event.time == "18:30"
    assert event.organizer_id == "3"
    assert event.organizer_name == "Bob Smith"
    assert event.attendees[0].id == "4"
    assert event.attendees[0].status is AttendanceStatus.NOT_GOING
    assert event.attendees[0].name == "Dee"


def test_map_backend_task_uses_description_as_title():
    task = map_backend_task(
        {"id": 5, "description": "Buy cups", "dueDate": "", "eventId": 12, "assignedTo": None}
    )

    assert task.id == "5"
    assert task.title == "Buy cups"
    assert task.date is None
    assert task.event_id == "12"
    assert task.assignee_id is None


def test_backend_payload_fills_defaults():
    payload = to_backend_payload(
        NewEvent(title="Picnic", date="2025-07-04", time="", location="")
    )

    assert payload == {
        "title": "Picnic",
        "description": "",
        "location": "",
        "eventDate": "2025-07-04",
        "eventTime": "00:00",
    }


def test_search_params():
    assert search_params("party", "any", "events") == {"keyword": "party", "type": "events"}
    assert search_params("", "Organizer", "events") == {"role": "organizer", "type": "events"}
    assert search_params(None, None, "tasks") == {"type": "tasks"}


def test_signup_then_login_starts_session(auth, session_state, backend):
    created = auth.signup("Dana Lee", "dana@example.com", "hunter22")
    assert isinstance(created, UserProfile)
    assert created.id == "4"

    profile = auth.login("dana@example.com", "hunter22")

    assert profile.name == "Dana Lee"
    assert session_state.user_id == "4"
    assert session_state.token == "token-4"


def test_login_with_bad_password_raises_401(auth, session_state):
    with pytest.raises(ApiError) as excinfo:
        auth.login("sami@example.com", "wrong-password")

    assert excinfo.value.status_code == 401
    assert not session_state.is_authenticated


def test_create_and_list_organized_events(events, logged_in):
    created = events.create(
        NewEvent(title="Launch", date="2025-12-01", time="18:30", location="HQ")
    )

    assert created.organizer_id == "1"
    assert [e.title for e in events.organized()] == ["Launch"]
    assert events.invited() == []


def test_invited_events_show_pending_as_maybe(events, backend, logged_in):
    event = backend.add_event(2, "Alice's dinner")
    backend.invite(event["id"], 1)

    (invited,) = events.invited()

    assert invited.title == "Alice's dinner"
    assert invited.organizer_name == "Alice Johnson"
    assert invited.attendee_status("1") is AttendanceStatus.MAYBE


def test_set_attendance_sends_backend_spelling(events, backend, logged_in):
    event = backend.add_event(2, "Dinner")
    backend.invite(event["id"], 1)

    assert events.set_attendance(str(event["id"]), AttendanceStatus.NOT_GOING) is True
    assert backend.status_of(event["id"], 1) == "not_going"


def test_invite_and_attendees(events, backend, logged_in):
    event = backend.add_event(1, "Launch")

    assert events.invite(str(event["id"]), "bob@example.com") is True
    attendees = events.attendees(str(event["id"]))

    assert [(a.id, a.role) for a in attendees] == [("1", "organizer"), ("3", "attendee")]
    assert attendees[1].email == "bob@example.com"


def test_invite_unknown_email_raises_404(events, backend, logged_in):
    event = backend.add_event(1, "Launch")

    with pytest.raises(ApiError) as excinfo:
        events.invite(str(event["id"]), "nobody@example.com")

    assert excinfo.value.status_code == 404


def test_details_and_delete(events, backend, logged_in):
    event = backend.add_event(1, "Launch", description="Rocket")

    assert events.details(str(event["id"])).description == "Rocket"
    assert events.delete(str(event["id"])) is True
    with pytest.raises(ApiError) as excinfo:
        events.details(str(event["id"]))
    assert excinfo.value.status_code == 404


def test_search_events_and_tasks(events, tasks, backend, logged_in):
    mine = backend.add_event(1, "Summer party")
    other = backend.add_event(2, "Party planning", description="invite only")
    backend.invite(other["id"], 1)
    backend.add_event(3, "Secret party")
    backend.add_task(mine["id"], "Order party balloons", due_date="2025-06-01")

    found = events.search("party", "organizer")
    assert [e.title for e in found] == ["Summer party"]
    assert backend.last_query == {"keyword": "party", "role": "organizer", "type": "events"}

    assert [e.title for e in events.search("party")] == ["Summer party", "Party planning"]

    (task,) = tasks.search("balloons")
    assert task.title == "Order party balloons"
    assert task.date == "2025-06-01"
    assert backend.last_query == {"keyword": "balloons", "type": "tasks"}
