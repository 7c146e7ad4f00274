"""
Domain exceptions - Semantic error types for user registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Taxonomy:
- ValidationError: malformed input (e.g. user name too short for a referral code)
- NotFound: missing user or referral code
- Conflict: uniqueness violation on email, user name or referral code
- InternalError: unclassified store or I/O failure

StoreError and DuplicateKey are raised by repository adapters and translated
into the taxonomy above by the domain services.
"""


class UserServiceError(Exception):
    """Base class for user domain errors."""

    pass


class ValidationError(UserServiceError):
    """Input rejected by a domain rule."""

    pass


class NotFound(UserServiceError):
    """Requested record does not exist."""

    pass


class UserNotFound(NotFound):
    """No user with the given id."""

    def __init__(self, user_id: object) -> None:
        self.user_id = user_id
        super().__init__(f"User with ID: {user_id} not found")


class ReferralCodeNotFound(NotFound):
    """No user holds the given referral code."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"User with referral code: {code} not found")


class Conflict(UserServiceError):
    """A unique field is already taken."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"User with that {field} already exists")


class InternalError(UserServiceError):
    """Store failure that has no more specific meaning."""

    pass


class StoreError(Exception):
    """Failure reported by the record store."""

    pass


class DuplicateKey(StoreError):
    """Unique constraint violated by an insert or update."""

    def __init__(self, constraint: str | None) -> None:
        self.constraint = constraint
        super().__init__(f"duplicate key value violates unique constraint {constraint!r}")

    @property
    def field(self) -> str:
        """
        Column name behind the violated constraint.

        PostgreSQL names implicit unique constraints ``<table>_<column>_key``.
        """
        if self.constraint:
            for column in ("user_name", "email", "ref_code"):
                if column in self.constraint:
                    return column
        return "email or user_name"
