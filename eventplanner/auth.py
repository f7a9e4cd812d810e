"""Sign-up and login against the backend."""

from __future__ import annotations

from .client import ApiClient, ApiError
from .schemas import UserProfile
from .session import SessionState


class AuthGateway:
    def __init__(self, client: ApiClient, session: SessionState) -> None:
        self.client = client
        self.session = session

    def signup(self, name: str, email: str, password: str) -> UserProfile:
        """Create an account; the backend answers 201 with the new user."""
        payload = self.client.post(
            "/signup", json={"name": name, "email": email, "password": password}
        )
        return UserProfile.model_validate(payload)

    def login(self, email: str, password: str) -> UserProfile:
        """Exchange credentials for a token and start the session."""
        payload = self.client.post("/login", json={"email": email, "password": password})
        if not isinstance(payload, dict) or not payload.get("user"):
            raise ApiError("Login response did not include a user", method="POST", path="/login")
        profile = UserProfile.model_validate(payload["user"])
        self.session.start(payload.get("token"), profile)
        return profile

    def logout(self) -> None:
        self.session.end()
