"""FastAPI application serving the Event Planner client pages."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
import tomllib

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import AuthGateway
from .client import ApiClient
from .config import Settings, settings as default_settings
from .directory import UserDirectory
from .events import EventGateway
from .session import SessionState
from .storage import init_db
from .tasks import TaskGateway
from .web import Services, register_web_routes, templates

# Use uvicorn's error logger so messages get the level prefix in the default log
# format.
logger = logging.getLogger("uvicorn.error")


def _load_app_version() -> str:
    """Return the current package version, falling back to pyproject for dev runs."""
    try:
        return pkg_version("eventplanner")
    except PackageNotFoundError:
        pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            data = tomllib.loads(pyproject_path.read_text())
            project = data.get("project") or {}
            return str(project.get("version") or "dev")
    return "dev"


APP_VERSION = _load_app_version()
templates.env.globals["app_version"] = APP_VERSION


def build_services(
    settings: Settings | None = None,
    *,
    session_state: SessionState | None = None,
    api_client: ApiClient | None = None,
) -> Services:
    config = settings or default_settings
    session = session_state or SessionState(settings=config)
    client = api_client or ApiClient(session=session, settings=config)
    return Services(
        session=session,
        client=client,
        auth=AuthGateway(client, session),
        events=EventGateway(client),
        tasks=TaskGateway(client),
        directory=UserDirectory(),
    )


def _wants_json(request: Request) -> bool:
    accept = (request.headers.get("accept") or "").lower()
    return "application/json" in accept and "text/html" not in accept


def _render_error(request: Request, status_code: int, message: str | None):
    context = {
        "request": request,
        "status_code": status_code,
        "error_message": message or "Something went wrong.",
    }
    return templates.TemplateResponse(
        request, "error.html", context, status_code=status_code
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as friendly pages unless JSON was requested."""
    if _wants_json(request):
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)
    detail = exc.detail if isinstance(exc.detail, str) else "Something went wrong."
    return _render_error(request, exc.status_code, detail)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    if _wants_json(request):
        return JSONResponse({"detail": exc.errors()}, status_code=422)
    return _render_error(
        request,
        422,
        "Some of the fields were invalid. Please double-check and try again.",
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Gracefully handle unexpected errors."""
    logger.exception(
        "Unhandled error while processing %s %s", request.method, request.url.path
    )
    if _wants_json(request):
        return JSONResponse({"detail": "Internal server error"}, status_code=500)
    return _render_error(
        request,
        500,
        "We hit a snag while processing that request. Please try again.",
    )


def create_app(
    settings: Settings | None = None,
    *,
    session_state: SessionState | None = None,
    api_client: ApiClient | None = None,
) -> FastAPI:
    """Build the front-end around one owned session and HTTP client."""
    services = build_services(
        settings, session_state=session_state, api_client=api_client
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        init_db()
        profile = services.session.restore()
        if profile:
            services.directory.register(profile.id, profile.name)
            logger.info("Restored session for user %s", profile.id)
        try:
            yield
        finally:
            services.client.close()

    app = FastAPI(title="Event Planner", version=APP_VERSION, lifespan=lifespan)
    app.state.services = services
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    register_web_routes(app)
    return app
