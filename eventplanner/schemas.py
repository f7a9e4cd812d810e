"""Pydantic models for the records the client works with."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, Field


class AttendanceStatus(str, Enum):
    GOING = "Going"
    MAYBE = "Maybe"
    NOT_GOING = "Not Going"

    @classmethod
    def from_backend(cls, raw: str | None) -> "AttendanceStatus":
        """Map a backend status string; anything unrecognised reads as Maybe."""
        return BACKEND_STATUS_MAP.get((raw or "").strip().lower(), cls.MAYBE)

    @classmethod
    def parse(cls, text: str) -> "AttendanceStatus":
        """Accept user input in either the client or the backend spelling."""
        normalized = (text or "").strip().lower().replace("-", " ").replace("_", " ")
        for status in cls:
            if status.value.lower() == normalized:
                return status
        raise ValueError(f"Unknown attendance status {text!r}")

    @property
    def backend_value(self) -> str:
        return _BACKEND_VALUES[self]


BACKEND_STATUS_MAP: dict[str, AttendanceStatus] = {
    "going": AttendanceStatus.GOING,
    "maybe": AttendanceStatus.MAYBE,
    "not_going": AttendanceStatus.NOT_GOING,
    "pending": AttendanceStatus.MAYBE,
}

_BACKEND_VALUES: dict[AttendanceStatus, str] = {
    AttendanceStatus.GOING: "going",
    AttendanceStatus.MAYBE: "maybe",
    AttendanceStatus.NOT_GOING: "not_going",
}


def _as_id(value):
    if value is None:
        return value
    return str(value)


# Backend ids are integers; the client always handles them as strings.
RecordId = Annotated[str, BeforeValidator(_as_id)]
OptionalRecordId = Annotated[str | None, BeforeValidator(_as_id)]


class Attendee(BaseModel):
    id: RecordId
    status: AttendanceStatus = AttendanceStatus.MAYBE
    name: str | None = None
    email: str | None = None
    role: str | None = None


class Event(BaseModel):
    id: RecordId
    title: str
    date: str
    time: str | None = None
    location: str | None = None
    description: str | None = None
    organizer_id: RecordId
    organizer_name: str | None = None
    attendees: list[Attendee] = Field(default_factory=list)

    def find_attendee(self, user_id: str | None) -> Attendee | None:
        if not user_id:
            return None
        return next((a for a in self.attendees if a.id == user_id), None)

    def attendee_status(self, user_id: str | None) -> AttendanceStatus | None:
        attendee = self.find_attendee(user_id)
        return attendee.status if attendee else None

    def set_attendee_status(self, user_id: str, status: AttendanceStatus) -> Attendee:
        """Overwrite the user's status in place, or append them if unlisted."""
        attendee = self.find_attendee(user_id)
        if attendee is None:
            attendee = Attendee(id=user_id, status=status)
            self.attendees.append(attendee)
        else:
            attendee.status = status
        return attendee

    def role_for(self, user_id: str | None) -> str:
        if not user_id:
            return ""
        if self.organizer_id == user_id:
            return "Organizer"
        if self.find_attendee(user_id) is not None:
            return "Attendee"
        return ""


class Task(BaseModel):
    id: RecordId
    title: str = ""
    description: str = ""
    date: str | None = None
    created_by: OptionalRecordId = None
    assignee_id: OptionalRecordId = None
    event_id: OptionalRecordId = None
    event_title: str | None = None
    status: str | None = None


class UserProfile(BaseModel):
    id: RecordId
    name: str = ""
    email: str = ""
    role: str | None = None


class NewEvent(BaseModel):
    """Fields collected by the create-event form."""

    title: str
    date: str
    time: str
    location: str
    description: str | None = None


class SearchResult(BaseModel):
    type: Literal["event", "task"]
    item: Event | Task
