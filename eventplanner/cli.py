"""Typer CLI for the Event Planner client."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn

from sqlalchemy.exc import OperationalError
import typer
import uvicorn

from .api import build_services
from .config import load_settings, settings, settings_as_dict, update_config_file
from .client import ApiError
from .schemas import AttendanceStatus, Event
from .storage import init_db, upgrade_database
from .views import (
    CreateEventView,
    EventItem,
    InvitedEventsView,
    LoginView,
    MyEventsView,
    SearchView,
    SignupView,
    View,
)
from .web import Services

app = typer.Typer(help="Event Planner command-line client")
events_app = typer.Typer(help="Create, list and manage events")
app.add_typer(events_app, name="events")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Show help when no subcommand is provided."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(levelname)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _fail(message: str | None) -> NoReturn:
    typer.secho(message or "Something went wrong.", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _services() -> Services:
    """Open the state store and restore the saved session."""
    init_db()
    services = build_services()
    services.session.restore()
    return services


def _check(view: View) -> None:
    if view.error_message:
        _fail(view.error_message)


def _echo_event(item: EventItem, *, verbose: bool = False) -> None:
    event = item.event
    badge = f" [{item.role}]" if item.role else ""
    when = f"{event.date} {event.time or ''}".strip()
    typer.echo(f"#{event.id} {event.title}{badge} - {when}")
    if event.location:
        typer.echo(f"    at {event.location}")
    typer.echo(f"    organizer: {item.organizer_name}")
    if item.my_status:
        typer.echo(f"    my status: {item.my_status.value}")
    if verbose:
        if event.description:
            typer.echo(f"    {event.description}")
        for attendee in event.attendees:
            typer.echo(f"    - {attendee.name or attendee.id}: {attendee.status.value}")


def _require_login(services: Services) -> None:
    if not services.session.is_authenticated:
        _fail("You are not logged in. Run 'eventplanner login' first.")


@app.command("runserver")
def runserver(
    host: str = typer.Option(settings.app_host, "--host", help="Host to bind"),
    port: int = typer.Option(settings.app_port, "--port", help="Port to bind"),
):
    """Serve the web front-end."""
    init_db()
    config = uvicorn.Config(
        "eventplanner.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=False,
    )
    server = uvicorn.Server(config)
    typer.echo(f"Starting Event Planner on {host}:{port} (backend {settings.api_base_url})")
    server.run()


@app.command("upgrade-db")
def upgrade_db(
    no_backup: bool = typer.Option(
        False,
        "--no-backup",
        help="Skip creating a .bak copy of the state database before upgrading",
    ),
) -> None:
    """Upgrade the local state database schema if needed."""
    try:
        actions = upgrade_database(make_backup=not no_backup)
    except OperationalError as exc:
        message = str(getattr(exc, "orig", exc)).lower()
        if "readonly" in message or "read-only" in message:
            _fail(
                "Unable to upgrade because the state database is read-only. "
                f"Ensure write access to {settings.database_path}."
            )
        raise

    typer.echo("State database upgrade complete:")
    for action in actions:
        typer.echo(f"- {action}")


@app.command("config")
def configure(
    show: bool = typer.Option(
        False, "--show", help="Show the current effective configuration"
    ),
    api_base_url: str | None = typer.Option(
        None, "--api-base-url", help="Base URL of the event planner backend"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", min=0.1, help="Request timeout in seconds"
    ),
    host: str | None = typer.Option(None, "--host", help="Default host for runserver"),
    port: int | None = typer.Option(None, "--port", help="Default port for runserver"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level"),
    config_path: Path | None = typer.Option(
        None,
        "--config-path",
        help="Path to eventplanner.toml (default: ./eventplanner.toml)",
    ),
):
    """View or update the persistent configuration file."""
    updates = {
        "api_base_url": api_base_url,
        "request_timeout_seconds": timeout,
        "app_host": host,
        "app_port": port,
        "log_level": log_level,
    }
    clean_updates = {k: v for k, v in updates.items() if v is not None}

    target_path = config_path or settings.config_path
    if clean_updates:
        settings_ref = update_config_file(clean_updates, path=target_path)
        typer.echo(f"Updated configuration in {target_path}")
    else:
        settings_ref = load_settings(target_path)
    if show or not clean_updates:
        effective = settings_as_dict(settings_ref)
        effective["config_path"] = str(target_path)
        typer.echo(json.dumps(effective, indent=2))


@app.command("signup")
def signup(
    name: str = typer.Option(..., "--name", prompt=True),
    email: str = typer.Option(..., "--email", prompt=True),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
):
    """Create an account and log in with it."""
    services = _services()
    view = SignupView(services.session, services.auth)
    next_route = view.submit(name, email, password)
    if next_route is None:
        _fail(view.error_message)
    if view.error_message:
        typer.secho(view.error_message, fg=typer.colors.YELLOW)
        return
    typer.secho(f"Welcome, {services.session.profile.name}!", fg=typer.colors.GREEN)


@app.command("login")
def login(
    email: str = typer.Option(..., "--email", prompt=True),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
):
    """Log in and remember the session."""
    services = _services()
    view = LoginView(services.session, services.auth)
    if view.submit(email, password) is None:
        _fail(view.error_message)
    profile = services.session.profile
    typer.secho(f"Logged in as {profile.name or profile.email}.", fg=typer.colors.GREEN)


@app.command("logout")
def logout() -> None:
    """Forget the saved session."""
    services = _services()
    services.auth.logout()
    typer.echo("Logged out.")


@app.command("whoami")
def whoami() -> None:
    """Show the logged-in user."""
    services = _services()
    profile = services.session.profile
    if profile is None:
        _fail("Not logged in")
    typer.echo(f"{profile.name} <{profile.email}> (id {profile.id})")


@app.command("search")
def search(
    keyword: str = typer.Argument("", help="Text to look for in events and tasks"),
    role: str = typer.Option(
        "any", "--role", help="Only events where I am: organizer, attendee or any"
    ),
):
    """Search events and tasks together."""
    services = _services()
    with SearchView(services.session, services.events, services.tasks) as view:
        results = view.search(keyword, role)
        _check(view)
    if not results:
        typer.echo("No matches.")
        return
    for result in results:
        item = result.item
        if isinstance(item, Event):
            typer.echo(f"[event] #{item.id} {item.title} - {item.date}")
        else:
            due = f" (due {item.date})" if item.date else ""
            typer.echo(f"[task]  #{item.id} {item.title}{due}")


@events_app.command("create")
def create_event(
    title: str = typer.Option(..., "--title", prompt=True),
    date: str = typer.Option(..., "--date", prompt="Date (YYYY-MM-DD)"),
    time: str = typer.Option(..., "--time", prompt="Time (HH:MM)"),
    location: str = typer.Option(..., "--location", prompt=True),
    description: str = typer.Option("", "--description"),
):
    """Create a new event you organize."""
    services = _services()
    view = CreateEventView(services.session, services.events)
    if view.submit(
        title=title, date=date, time=time, location=location, description=description
    ) is None:
        _fail(view.error_message)
    typer.secho(f"Created event #{view.created.id} {view.created.title}", fg=typer.colors.GREEN)


@events_app.command("mine")
def my_events() -> None:
    """List the events you organize."""
    services = _services()
    _require_login(services)
    with MyEventsView(services.session, services.events, services.directory).open() as view:
        _check(view)
        if not view.events:
            typer.echo("You are not organizing any events yet.")
        for item in view.items():
            _echo_event(item)


@events_app.command("invited")
def invited_events() -> None:
    """List the events you are invited to."""
    services = _services()
    _require_login(services)
    with InvitedEventsView(
        services.session, services.events, services.directory
    ).open() as view:
        _check(view)
        if not view.events:
            typer.echo("No invitations yet.")
        for item in view.items():
            _echo_event(item)


@events_app.command("show")
def show_event(event_id: str = typer.Argument(..., help="Event id")) -> None:
    """Show one event with its attendees."""
    services = _services()
    _require_login(services)
    try:
        event = services.events.details(event_id)
    except ApiError as exc:
        if exc.status_code == 404:
            _fail("Event not found.")
        if exc.status_code == 403:
            _fail("You are not allowed to view this event.")
        _fail("Failed to load the event. Please try again.")
    services.directory.register(event.organizer_id, event.organizer_name)
    _echo_event(
        EventItem(event, services.session.user_id, services.directory), verbose=True
    )


@events_app.command("attendees")
def list_attendees(event_id: str = typer.Argument(..., help="Event id")) -> None:
    """List attendees and their status (organizers only)."""
    services = _services()
    _require_login(services)
    try:
        attendees = services.events.attendees(event_id)
    except ApiError as exc:
        if exc.status_code == 403:
            _fail("Only organizers can view the attendee list.")
        if exc.status_code == 404:
            _fail("Event not found.")
        _fail("Failed to load attendees. Please try again.")
    for attendee in attendees:
        label = attendee.name or attendee.id
        email = f" <{attendee.email}>" if attendee.email else ""
        role = f" [{attendee.role}]" if attendee.role else ""
        typer.echo(f"{label}{email}{role}: {attendee.status.value}")


@events_app.command("invite")
def invite(
    event_id: str = typer.Argument(..., help="Event id"),
    email: str = typer.Argument(..., help="Email address to invite"),
) -> None:
    """Invite someone to one of your events."""
    services = _services()
    _require_login(services)
    with MyEventsView(services.session, services.events, services.directory) as view:
        if not view.invite(event_id, email):
            _fail(view.error_message or "Invite failed")
        typer.secho(view.notice, fg=typer.colors.GREEN)


@events_app.command("attend")
def attend(
    event_id: str = typer.Argument(..., help="Event id"),
    status: str = typer.Argument(..., help="Going, Maybe or 'Not Going'"),
) -> None:
    """Set your attendance status for an event."""
    try:
        parsed = AttendanceStatus.parse(status)
    except ValueError:
        raise typer.BadParameter("Use Going, Maybe or 'Not Going'", param_hint="STATUS")
    services = _services()
    _require_login(services)
    with InvitedEventsView(
        services.session, services.events, services.directory
    ).open() as view:
        if not view.set_status(event_id, parsed):
            _fail(view.error_message)
        typer.secho(f"Status for event #{event_id}: {parsed.value}", fg=typer.colors.GREEN)


@events_app.command("delete")
def delete_event(
    event_id: str = typer.Argument(..., help="Event id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete an event you organize."""
    services = _services()
    _require_login(services)
    with MyEventsView(services.session, services.events, services.directory).open() as view:
        event = view.find(event_id)
        label = f'"{event.title}"' if event else f"#{event_id}"
        if not yes and not typer.confirm(f"Delete event {label}?"):
            raise typer.Abort()
        if not view.delete_event(event_id):
            _fail(view.error_message)
        typer.echo(f"Deleted event {label}.")


if __name__ == "__main__":
    app()
