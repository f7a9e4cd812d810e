"""Page route handlers for the Event Planner front-end."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from fastapi import Depends, Form, HTTPException, Query, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from .auth import AuthGateway
from .client import ApiClient
from .directory import UserDirectory
from .events import EventGateway
from .schemas import AttendanceStatus
from .session import SessionState
from .tasks import TaskGateway
from .utils import format_event_when
from .views import (
    CreateEventView,
    InvitedEventsView,
    LoginView,
    MyEventsView,
    SearchView,
    SignupView,
)

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")
templates.env.filters["when"] = format_event_when
templates.env.globals["attendance_statuses"] = list(AttendanceStatus)

SEARCH_ROLE_CHOICES = ("any", "organizer", "attendee")


@dataclass
class Services:
    """Everything a page needs, built once per application."""

    session: SessionState
    client: ApiClient
    auth: AuthGateway
    events: EventGateway
    tasks: TaskGateway
    directory: UserDirectory


def get_services(request: Request) -> Services:
    return request.app.state.services


def _no_cache(response: Response) -> Response:
    """Prevent clients from caching pages so fresh data is shown."""
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
    return response


def _render(
    request: Request,
    services: Services,
    template_name: str,
    context: dict,
    *,
    status_code: int = 200,
):
    response = templates.TemplateResponse(
        request,
        template_name,
        {"request": request, "current_user": services.session.profile, **context},
        status_code=status_code,
    )
    return _no_cache(response)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def index():
    return _redirect("/login")


def login_page(request: Request, services: Services = Depends(get_services)):
    return _render(request, services, "login.html", {"form": {}})


def submit_login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    services: Services = Depends(get_services),
):
    view = LoginView(services.session, services.auth)
    next_route = view.submit(email, password)
    if next_route:
        return _redirect(next_route)
    return _render(
        request,
        services,
        "login.html",
        {"form": {"email": email}, "error_message": view.error_message},
        status_code=400,
    )


def signup_page(request: Request, services: Services = Depends(get_services)):
    return _render(request, services, "signup.html", {"form": {}})


def submit_signup(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    services: Services = Depends(get_services),
):
    view = SignupView(services.session, services.auth)
    next_route = view.submit(name, email, password)
    if next_route == "/login":
        # Account exists but the automatic login failed.
        return _render(
            request,
            services,
            "login.html",
            {"form": {"email": email}, "error_message": view.error_message},
        )
    if next_route:
        return _redirect(next_route)
    return _render(
        request,
        services,
        "signup.html",
        {"form": {"name": name, "email": email}, "error_message": view.error_message},
        status_code=400,
    )


def logout(services: Services = Depends(get_services)):
    services.auth.logout()
    return _redirect("/login")


def event_create_page(request: Request, services: Services = Depends(get_services)):
    return _render(request, services, "event_create.html", {"form": {}})


def submit_event(
    request: Request,
    title: str = Form(""),
    date: str = Form(""),
    time: str = Form(""),
    location: str = Form(""),
    description: str = Form(""),
    services: Services = Depends(get_services),
):
    view = CreateEventView(services.session, services.events)
    next_route = view.submit(
        title=title, date=date, time=time, location=location, description=description
    )
    if next_route:
        return _redirect(next_route)
    form = {
        "title": title,
        "date": date,
        "time": time,
        "location": location,
        "description": description,
    }
    return _render(
        request,
        services,
        "event_create.html",
        {"form": form, "error_message": view.error_message},
        status_code=400,
    )


def _render_my_events(request: Request, services: Services, view: MyEventsView):
    return _render(
        request,
        services,
        "events_mine.html",
        {
            "items": view.items(),
            "error_message": view.error_message,
            "notice": view.notice,
        },
    )


def my_events(request: Request, services: Services = Depends(get_services)):
    with MyEventsView(services.session, services.events, services.directory).open() as view:
        return _render_my_events(request, services, view)


def delete_event(
    event_id: str, request: Request, services: Services = Depends(get_services)
):
    with MyEventsView(services.session, services.events, services.directory).open() as view:
        view.delete_event(event_id)
        return _render_my_events(request, services, view)


def invite_to_event(
    event_id: str,
    request: Request,
    email: str = Form(""),
    services: Services = Depends(get_services),
):
    with MyEventsView(services.session, services.events, services.directory).open() as view:
        view.invite(event_id, email)
        return _render_my_events(request, services, view)


def _render_invited(request: Request, services: Services, view: InvitedEventsView):
    return _render(
        request,
        services,
        "events_invited.html",
        {"items": view.items(), "error_message": view.error_message},
    )


def invited_events(request: Request, services: Services = Depends(get_services)):
    with InvitedEventsView(
        services.session, services.events, services.directory
    ).open() as view:
        return _render_invited(request, services, view)


def set_attendance(
    event_id: str,
    request: Request,
    status: str = Form(...),
    services: Services = Depends(get_services),
):
    try:
        parsed = AttendanceStatus.parse(status)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Unknown attendance status") from exc
    with InvitedEventsView(
        services.session, services.events, services.directory
    ).open() as view:
        view.set_status(event_id, parsed)
        return _render_invited(request, services, view)


def search_page(
    request: Request,
    keyword: str | None = Query(None),
    role: str = Query("any"),
    services: Services = Depends(get_services),
):
    if role not in SEARCH_ROLE_CHOICES:
        role = "any"
    with SearchView(services.session, services.events, services.tasks) as view:
        submitted = keyword is not None
        if submitted:
            view.search(keyword, role)
        return _render(
            request,
            services,
            "search.html",
            {
                "keyword": keyword or "",
                "role": role,
                "role_choices": SEARCH_ROLE_CHOICES,
                "submitted": submitted,
                "results": view.results,
                "error_message": view.error_message,
            },
        )


def register_web_routes(app):
    """Register the client page routes on the FastAPI app."""
    app.get("/", include_in_schema=False)(index)
    app.get("/login", response_class=HTMLResponse)(login_page)
    app.post("/login", response_class=HTMLResponse)(submit_login)
    app.get("/signup", response_class=HTMLResponse)(signup_page)
    app.post("/signup", response_class=HTMLResponse)(submit_signup)
    app.post("/logout")(logout)
    app.get("/events/create", response_class=HTMLResponse)(event_create_page)
    app.post("/events/create", response_class=HTMLResponse)(submit_event)
    app.get("/events/mine", response_class=HTMLResponse)(my_events)
    app.post("/events/{event_id}/delete", response_class=HTMLResponse)(delete_event)
    app.post("/events/{event_id}/invite", response_class=HTMLResponse)(invite_to_event)
    app.get("/events/invited", response_class=HTMLResponse)(invited_events)
    app.post("/events/{event_id}/attendance", response_class=HTMLResponse)(
        set_attendance
    )
    app.get("/search", response_class=HTMLResponse)(search_page)
