"""
Referral resolution - Locate the referring user and credit the signup.
"""

from dataclasses import dataclass
from uuid import UUID

from .exceptions import ReferralCodeNotFound, StoreError
from .models import User
from .ports import UserRepository


@dataclass
class ReferralResolver:
    """Looks up referrers by code and increments their signup counter."""

    repository: UserRepository

    def resolve(self, code: str) -> User:
        """
        Find the user that owns a referral code.

        Raises:
            ReferralCodeNotFound: If no user holds ``code``
        """
        referrer = self.repository.find_by_ref_code(code)
        if referrer is None:
            raise ReferralCodeNotFound(code)
        return referrer

    def credit(self, user_id: UUID) -> None:
        """
        Add one signup to the referrer's counter.

        The increment is a single atomic statement in the store; the
        referrer row is never read back and rewritten here.

        Raises:
            StoreError: If the update fails or the referrer has disappeared
        """
        if not self.repository.increment_referral_count(user_id):
            raise StoreError(f"referrer {user_id} no longer exists")
