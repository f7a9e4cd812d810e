"""Event gateway: backend calls and backend/client record mapping."""

from __future__ import annotations

from typing import Any

from .client import ApiClient
from .schemas import AttendanceStatus, Attendee, Event, NewEvent

SEARCH_ROLES = {"organizer", "attendee"}


def map_backend_attendee(record: dict[str, Any]) -> Attendee:
    return Attendee(
        id=record.get("userId"),
        status=AttendanceStatus.from_backend(record.get("status")),
        name=record.get("userName") or None,
        email=record.get("userEmail") or None,
        role=record.get("role") or None,
    )


def map_backend_event(record: dict[str, Any]) -> Event:
    """Rename the backend event fields into the client's event shape."""
    organizer = record.get("organizer") or {}
    return Event(
        id=record.get("id"),
        title=record.get("title") or "",
        date=record.get("eventDate") or "",
        time=record.get("eventTime") or None,
        location=record.get("location") or None,
        description=record.get("description") or None,
        organizer_id=record.get("createdBy"),
        organizer_name=organizer.get("name") or None,
        attendees=[map_backend_attendee(a) for a in record.get("attendees") or []],
    )


def to_backend_payload(new_event: NewEvent) -> dict[str, str]:
    return {
        "title": new_event.title,
        "description": new_event.description or "",
        "location": new_event.location or "",
        "eventDate": new_event.date,
        "eventTime": new_event.time or "00:00",
    }


def search_params(keyword: str | None, role: str | None, kind: str) -> dict[str, str]:
    params: dict[str, str] = {}
    if keyword:
        params["keyword"] = keyword
    if role and role.lower() in SEARCH_ROLES:
        params["role"] = role.lower()
    params["type"] = kind
    return params


class EventGateway:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def create(self, new_event: NewEvent) -> Event:
        return map_backend_event(self.client.post("/events", json=to_backend_payload(new_event)))

    def organized(self) -> list[Event]:
        return [map_backend_event(e) for e in self.client.get("/events/organized") or []]

    def invited(self) -> list[Event]:
        return [map_backend_event(e) for e in self.client.get("/events/invited") or []]

    def details(self, event_id: str) -> Event:
        return map_backend_event(self.client.get(f"/events/{event_id}"))

    def invite(self, event_id: str, email: str, *, role: str = "attendee") -> bool:
        self.client.post(f"/events/{event_id}/invite", json={"email": email, "role": role})
        return True

    def set_attendance(self, event_id: str, status: AttendanceStatus) -> bool:
        self.client.put(
            f"/events/{event_id}/attendance", json={"status": status.backend_value}
        )
        return True

    def delete(self, event_id: str) -> bool:
        self.client.delete(f"/events/{event_id}")
        return True

    def attendees(self, event_id: str) -> list[Attendee]:
        """Organizer-only attendee list, organizers first."""
        payload = self.client.get(f"/events/{event_id}/attendees") or {}
        return [map_backend_attendee(a) for a in payload.get("attendees") or []]

    def search(self, keyword: str | None = None, role: str | None = None) -> list[Event]:
        payload = self.client.get("/search", params=search_params(keyword, role, "events"))
        return [map_backend_event(e) for e in (payload or {}).get("events") or []]
