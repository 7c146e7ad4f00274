"""
User query service - List, fetch, update and delete users.
"""

from dataclasses import dataclass
from uuid import UUID

from .exceptions import Conflict, DuplicateKey, InternalError, StoreError, UserNotFound
from .models import User
from .ports import UserRepository


@dataclass
class UserService:
    """Plain data access over the user repository with domain errors."""

    repository: UserRepository

    def list_users(self, page: int = 1, limit: int = 10) -> list[User]:
        """Return page ``page`` (1-based) of ``limit`` users."""
        offset = (page - 1) * limit
        try:
            return self.repository.list_users(limit, offset)
        except StoreError as e:
            raise InternalError(str(e)) from e

    def get_user(self, user_id: UUID) -> User:
        try:
            user = self.repository.get_user(user_id)
        except StoreError as e:
            raise InternalError(str(e)) from e
        if user is None:
            raise UserNotFound(user_id)
        return user

    def update_user(
        self, user_id: UUID, user_name: str | None = None, email: str | None = None
    ) -> User:
        """
        Merge the given fields over the stored user.

        Raises:
            UserNotFound: If no user has ``user_id``
            Conflict: If the new email or user name is taken
            InternalError: On any other store failure
        """
        try:
            user = self.repository.update_user(user_id, user_name, email)
        except DuplicateKey as e:
            raise Conflict(e.field) from e
        except StoreError as e:
            raise InternalError(str(e)) from e
        if user is None:
            raise UserNotFound(user_id)
        return user

    def delete_user(self, user_id: UUID) -> None:
        try:
            deleted = self.repository.delete_user(user_id)
        except StoreError as e:
            raise InternalError(str(e)) from e
        if not deleted:
            raise UserNotFound(user_id)
