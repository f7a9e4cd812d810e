"""View models behind the front-end pages and the CLI commands.

Each view owns its local state (lists, loading flag, messages), talks to
the gateways it is given and turns backend status codes into the messages
shown to the user.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from .auth import AuthGateway
from .client import ApiError
from .directory import UserDirectory
from .events import EventGateway
from .optimistic import OptimisticUpdate
from .schemas import AttendanceStatus, Event, NewEvent, SearchResult
from .session import SessionState, Subscription
from .tasks import TaskGateway
from .utils import clean_text, is_valid_date, is_valid_email, is_valid_time

T = TypeVar("T")

NOT_LOGGED_IN = "Not logged in"
HOME_ROUTE = "/events/mine"
LOGIN_ROUTE = "/login"


class View:
    def __init__(self, session: SessionState) -> None:
        self.session = session
        self.is_loading = False
        self.error_message: str | None = None
        self.notice: str | None = None
        self._subscription: Subscription | None = None

    def close(self) -> None:
        """Release the session subscription; the view stops reacting."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class LoginView(View):
    def __init__(self, session: SessionState, auth: AuthGateway) -> None:
        super().__init__(session)
        self.auth = auth

    def submit(self, email: str | None, password: str | None) -> str | None:
        """Log in and return the next route, or ``None`` with an error set."""
        email = clean_text(email)
        if not is_valid_email(email) or len(password or "") < 6:
            self.error_message = "Please enter a valid email and password"
            return None

        self.is_loading = True
        self.error_message = None
        try:
            self.auth.login(email, password)
        except ApiError as exc:
            if exc.status_code == 401:
                self.error_message = "Invalid email or password"
            elif exc.status_code == 400:
                self.error_message = "Invalid input. Please check your details."
            else:
                self.error_message = "Login failed. Please try again."
            return None
        finally:
            self.is_loading = False
        return HOME_ROUTE


class SignupView(View):
    def __init__(self, session: SessionState, auth: AuthGateway) -> None:
        super().__init__(session)
        self.auth = auth

    def submit(
        self, name: str | None, email: str | None, password: str | None
    ) -> str | None:
        name = clean_text(name)
        email = clean_text(email)
        if (
            len(name or "") < 2
            or not is_valid_email(email)
            or len(password or "") < 6
        ):
            self.error_message = "Please fill in all required fields correctly"
            return None

        self.is_loading = True
        self.error_message = None
        try:
            self.auth.signup(name, email, password)
        except ApiError as exc:
            self.is_loading = False
            if exc.status_code == 409:
                self.error_message = (
                    "Email already registered. Please use a different email."
                )
            elif exc.status_code == 400:
                self.error_message = "Invalid input. Please check your details."
            else:
                self.error_message = "Signup failed. Please try again."
            return None

        self.is_loading = False
        try:
            self.auth.login(email, password)
        except ApiError:
            self.error_message = "Signup successful, but please login manually."
            return LOGIN_ROUTE
        return HOME_ROUTE


class CreateEventView(View):
    def __init__(self, session: SessionState, events: EventGateway) -> None:
        super().__init__(session)
        self.gateway = events
        self.created: Event | None = None

    def submit(
        self,
        *,
        title: str | None,
        date: str | None,
        time: str | None,
        location: str | None,
        description: str | None = None,
    ) -> str | None:
        fields = {
            "title": clean_text(title),
            "date": clean_text(date),
            "time": clean_text(time),
            "location": clean_text(location),
        }
        if not all(fields.values()):
            self.error_message = "Please fill in all required fields"
            return None
        if not is_valid_date(fields["date"]) or not is_valid_time(fields["time"]):
            self.error_message = "Invalid event data. Please check your input."
            return None

        self.is_loading = True
        self.error_message = None
        if not self.session.user_id:
            self.error_message = "You must be logged in to create an event."
            self.is_loading = False
            return None

        new_event = NewEvent(description=clean_text(description) or "", **fields)
        try:
            self.created = self.gateway.create(new_event)
        except ApiError as exc:
            if exc.status_code == 400:
                self.error_message = "Invalid event data. Please check your input."
            elif exc.status_code == 401:
                self.error_message = "You must be logged in to create an event."
            else:
                self.error_message = "Failed to create event. Please try again."
            return None
        finally:
            self.is_loading = False
        return HOME_ROUTE


class EventItem:
    """Per-event presentation helpers: role badge and organizer name."""

    def __init__(
        self,
        event: Event,
        current_user_id: str | None,
        directory: UserDirectory | None = None,
    ) -> None:
        self.event = event
        self.current_user_id = current_user_id
        self.directory = directory or UserDirectory()

    @property
    def role(self) -> str:
        return self.event.role_for(self.current_user_id)

    @property
    def organizer_name(self) -> str:
        return self.directory.display_name(self.event.organizer_id)

    @property
    def my_status(self) -> AttendanceStatus | None:
        return self.event.attendee_status(self.current_user_id)


class EventListView(View):
    """Shared loading logic for the organized and invited event lists."""

    unauthorized_message = "You must be logged in to view your events."
    load_failed_message = "Failed to load events. Please try again."

    def __init__(
        self,
        session: SessionState,
        events: EventGateway,
        directory: UserDirectory | None = None,
    ) -> None:
        super().__init__(session)
        self.gateway = events
        self.directory = directory or UserDirectory()
        self.events: list[Event] = []
        self.current_user_id: str | None = None

    def _fetch(self) -> list[Event]:
        raise NotImplementedError

    def open(self) -> "EventListView":
        """Follow the session; every user change reloads the list."""
        if self._subscription is None:
            self._subscription = self.session.subscribe(self._on_user_changed)
        return self

    def _on_user_changed(self, user_id: str | None) -> None:
        self.current_user_id = user_id
        self.load()

    def load(self) -> None:
        if not self.current_user_id:
            self.events = []
            return

        self.is_loading = True
        self.error_message = None
        try:
            self.events = self._fetch()
        except ApiError as exc:
            self.events = []
            if exc.status_code == 401:
                self.error_message = self.unauthorized_message
            else:
                self.error_message = self.load_failed_message
        finally:
            self.is_loading = False
        self._remember_names()

    def _remember_names(self) -> None:
        for event in self.events:
            self.directory.register(event.organizer_id, event.organizer_name)
            for attendee in event.attendees:
                self.directory.register(attendee.id, attendee.name)

    def find(self, event_id: str) -> Event | None:
        return next((e for e in self.events if e.id == event_id), None)

    def items(self) -> list[EventItem]:
        return [EventItem(e, self.current_user_id, self.directory) for e in self.events]


class MyEventsView(EventListView):
    def _fetch(self) -> list[Event]:
        return self.gateway.organized()

    def _remove_local(self, event_id: str) -> None:
        self.events = [e for e in self.events if e.id != event_id]

    def delete_event(self, event_id: str) -> bool:
        """Drop the event from the list at once; restore the list if refused."""
        if not self.current_user_id:
            self.error_message = NOT_LOGGED_IN
            return False

        outcome = OptimisticUpdate(
            apply=lambda: self._remove_local(event_id),
            send=lambda: self.gateway.delete(event_id),
            reload=self.load,
        ).run()
        if outcome.confirmed:
            return True
        if outcome.error is None or outcome.error.status_code in (403, 404):
            self.error_message = "Unable to delete (not organizer)"
        else:
            self.error_message = "Failed to delete event"
        return False

    def invite(self, event_id: str, email: str | None) -> bool:
        email = clean_text(email)
        if not email:
            return False
        self.notice = None
        try:
            invited = self.gateway.invite(event_id, email)
        except ApiError as exc:
            if exc.status_code == 404:
                self.error_message = "User not found with that email."
            elif exc.status_code == 409:
                self.error_message = "User is already invited to this event."
            else:
                self.error_message = "Failed to send invite. Please try again."
            return False
        if not invited:
            self.error_message = "Invite failed"
            return False
        self.notice = f"Invited {email}"
        return True


class InvitedEventsView(EventListView):
    unauthorized_message = "You must be logged in to view your invited events."
    load_failed_message = "Failed to load invited events. Please try again."

    def _fetch(self) -> list[Event]:
        return self.gateway.invited()

    def set_status(self, event_id: str, status: AttendanceStatus) -> bool:
        """Show the new status immediately, then confirm it with the backend."""
        user_id = self.current_user_id
        if not user_id:
            self.error_message = NOT_LOGGED_IN
            return False

        def apply() -> None:
            event = self.find(event_id)
            if event is not None:
                event.set_attendee_status(user_id, status)

        outcome = OptimisticUpdate(
            apply=apply,
            send=lambda: self.gateway.set_attendance(event_id, status),
            reload=self.load,
        ).run()
        if outcome.confirmed:
            return True
        if outcome.error is None:
            self.error_message = "Failed to set status"
        else:
            self.error_message = "Failed to update your attendance status."
        return False

    def attendee_status(self, event: Event) -> AttendanceStatus | None:
        return event.attendee_status(self.current_user_id)

    def is_status(self, event: Event, status: AttendanceStatus) -> bool:
        return self.attendee_status(event) == status


class SearchView(View):
    def __init__(
        self,
        session: SessionState,
        events: EventGateway,
        tasks: TaskGateway,
    ) -> None:
        super().__init__(session)
        self.events = events
        self.tasks = tasks
        self.results: list[SearchResult] = []
        self.current_user_id = session.user_id
        self._subscription = session.subscribe(self._on_user_changed, replay=False)

    def _on_user_changed(self, user_id: str | None) -> None:
        self.current_user_id = user_id

    def _collect(self, call: Callable[[], list[T]]) -> list[T]:
        try:
            return call()
        except ApiError as exc:
            if exc.status_code == 401:
                self.error_message = "You must be logged in to search."
            else:
                self.error_message = "Search failed. Please try again."
            return []

    def search(
        self, keyword: str | None = None, role: str | None = "any"
    ) -> list[SearchResult]:
        """Search events, then tasks, and merge both into one tagged list."""
        keyword = clean_text(keyword)
        self.is_loading = True
        self.error_message = None
        found_events = self._collect(lambda: self.events.search(keyword, role))
        found_tasks = self._collect(lambda: self.tasks.search(keyword))
        self.results = [SearchResult(type="event", item=e) for e in found_events]
        self.results.extend(SearchResult(type="task", item=t) for t in found_tasks)
        self.is_loading = False
        return self.results
