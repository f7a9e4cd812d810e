"""SQLAlchemy models for the persisted client state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

from .utils import utcnow

Base = declarative_base()


def _now() -> datetime:
    return utcnow()


class StoredValue(Base):
    """One entry of the durable key/value store (token, serialized profile)."""

    __tablename__ = "client_state"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)
