"""The current-user session shared by the gateways and views."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from pydantic import ValidationError

from .config import Settings, settings as default_settings
from .schemas import UserProfile
from .storage import StateStore

logger = logging.getLogger("uvicorn.error")

Listener = Callable[[str | None], None]


class Subscription:
    """Handle returned by :meth:`SessionState.subscribe`."""

    def __init__(self, state: "SessionState", listener: Listener) -> None:
        self._state = state
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._state._listeners.remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class SessionState:
    """Holds the authenticated user and persists it across restarts.

    The token and the serialized profile live in the state store under the
    fixed keys from settings. Listeners receive the current user id (a
    string) or ``None`` whenever it changes.
    """

    def __init__(
        self, store: StateStore | None = None, *, settings: Settings | None = None
    ) -> None:
        config = settings or default_settings
        self.store = store or StateStore()
        self.token_key = config.token_key
        self.user_key = config.user_key
        self._profile: UserProfile | None = None
        self._token: str | None = None
        self._listeners: list[Subscription] = []

    @property
    def profile(self) -> UserProfile | None:
        return self._profile

    @property
    def user_id(self) -> str | None:
        return self._profile.id if self._profile else None

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._profile is not None

    def restore(self) -> UserProfile | None:
        """Load the persisted profile and token, dropping unreadable data."""
        self._token = self.store.get(self.token_key)
        raw = self.store.get(self.user_key)
        profile = None
        if raw:
            try:
                profile = UserProfile.model_validate(json.loads(raw))
            except (ValueError, ValidationError):
                logger.warning("Discarding unreadable persisted user profile")
                self.store.delete(self.user_key)
        self._set_profile(profile)
        return profile

    def start(self, token: str | None, user: UserProfile | dict[str, Any] | None) -> None:
        if token:
            self.store.set(self.token_key, token)
            self._token = token
        if user is not None:
            profile = (
                user if isinstance(user, UserProfile) else UserProfile.model_validate(user)
            )
            self.store.set(self.user_key, profile.model_dump_json())
            self._set_profile(profile)

    def end(self) -> None:
        self.store.delete(self.token_key)
        self.store.delete(self.user_key)
        self._token = None
        self._set_profile(None)

    def subscribe(self, listener: Listener, *, replay: bool = True) -> Subscription:
        subscription = Subscription(self, listener)
        self._listeners.append(subscription)
        if replay:
            listener(self.user_id)
        return subscription

    def _set_profile(self, profile: UserProfile | None) -> None:
        self._profile = profile
        user_id = self.user_id
        for subscription in list(self._listeners):
            if subscription.active:
                subscription._listener(user_id)
