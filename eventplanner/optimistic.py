"""Optimistic local changes confirmed against the backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .client import ApiError

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class OptimisticOutcome:
    confirmed: bool
    error: ApiError | None = None


class OptimisticUpdate:
    """Apply a change locally, send it, and re-fetch the truth if it fails.

    ``apply`` mutates local state, ``send`` performs the backend call and
    returns a truthy value on success, ``reload`` replaces local state with
    the authoritative copy. Nothing guards against external edits made
    between ``apply`` and ``reload``.
    """

    def __init__(
        self,
        *,
        apply: Callable[[], Any],
        send: Callable[[], Any],
        reload: Callable[[], Any],
    ) -> None:
        self.apply = apply
        self.send = send
        self.reload = reload

    def run(self) -> OptimisticOutcome:
        self.apply()
        try:
            confirmed = bool(self.send())
        except ApiError as exc:
            logger.info("Optimistic change rejected (%s); reloading", exc)
            self.reload()
            return OptimisticOutcome(confirmed=False, error=exc)
        if not confirmed:
            self.reload()
        return OptimisticOutcome(confirmed=confirmed)
