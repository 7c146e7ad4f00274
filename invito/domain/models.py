"""
Domain models - Plain data carried between the store, services and the hub.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class User:
    """
    A registered user as stored in the ``users`` table.

    Field names match the column names so the repository can build
    instances directly from rows.
    """

    id: UUID
    user_name: str
    email: str
    ref_code: str
    added_by_ref_code: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RegistrationEvent:
    """Snapshot published once per successful registration."""

    user: User
