"""Task gateway, used by the combined search."""

from __future__ import annotations

from typing import Any

from .client import ApiClient
from .events import search_params
from .schemas import Task


def map_backend_task(record: dict[str, Any]) -> Task:
    description = record.get("description") or ""
    return Task(
        id=record.get("id"),
        title=description,
        description=description,
        date=record.get("dueDate") or None,
        created_by=record.get("createdBy"),
        assignee_id=record.get("assignedTo") or None,
        event_id=record.get("eventId"),
        event_title=record.get("eventTitle") or None,
        status=record.get("status") or None,
    )


class TaskGateway:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def search(self, keyword: str | None = None, role: str | None = None) -> list[Task]:
        payload = self.client.get("/search", params=search_params(keyword, role, "tasks"))
        return [map_backend_task(t) for t in (payload or {}).get("tasks") or []]
