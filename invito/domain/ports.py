"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from typing import Protocol
from uuid import UUID

from .models import RegistrationEvent, User


class UserRepository(Protocol):
    """
    Port interface for user persistence.

    Implementations raise DuplicateKey when a unique constraint is violated
    and StoreError for any other store failure.
    """

    def find_by_ref_code(self, code: str) -> User | None:
        """Return the user holding ``code``, or None."""
        ...

    def increment_referral_count(self, user_id: UUID) -> bool:
        """
        Atomically add one to the user's signup counter.

        Must be a single ``counter = counter + 1`` statement so concurrent
        credits for the same referrer are never lost.

        Returns:
            True if a row was updated, False if the user no longer exists
        """
        ...

    def insert_user(self, user_name: str, email: str, ref_code: str) -> User:
        """Insert a new user with a zero signup counter and return it."""
        ...

    def list_users(self, limit: int, offset: int) -> list[User]:
        """Return one page of users in a stable order."""
        ...

    def get_user(self, user_id: UUID) -> User | None:
        """Return the user with ``user_id``, or None."""
        ...

    def update_user(
        self, user_id: UUID, user_name: str | None, email: str | None
    ) -> User | None:
        """
        Merge the given fields over the stored values.

        Fields passed as None keep their current value.

        Returns:
            The updated user, or None if no row has ``user_id``
        """
        ...

    def delete_user(self, user_id: UUID) -> bool:
        """Delete a user. Returns False if no row was affected."""
        ...


class EventPublisher(Protocol):
    """Port interface for live registration events."""

    def publish(self, event: RegistrationEvent) -> int:
        """
        Hand an event to every current subscriber without waiting on them.

        Returns:
            Number of subscribers the event was offered to (0 is a no-op)
        """
        ...
