"""Display names for user ids."""

from __future__ import annotations

DEFAULT_USERS: dict[str, str] = {
    "user-1": "Sami Elbialley",
    "user-2": "Alice Johnson",
    "user-3": "Bob Smith",
}


class UserDirectory:
    """In-memory id to name lookup, seeded with the demo users."""

    def __init__(self, users: dict[str, str] | None = None) -> None:
        self._names = dict(DEFAULT_USERS if users is None else users)

    def register(self, user_id: str | None, name: str | None) -> None:
        if user_id and name:
            self._names[str(user_id)] = name

    def display_name(self, user_id: str | None) -> str:
        if not user_id:
            return "Unknown"
        return self._names.get(user_id, user_id)
