"""
Registration domain service - Referral-aware user registration.

This module contains the core business logic for user registration:

1. Generate a referral code for the new user (fails on short user names)
2. If a referral code was presented, resolve its owner and credit them
3. Insert the new user with a zero signup counter
4. Publish a RegistrationEvent to live subscribers (best effort)

Side effects are not rolled back: a credited referrer stays credited if
the insert later fails. A missing referral code aborts before anything
is written.

Credit failures are logged and swallowed unless the service is built with
``require_referral_credit=True``, in which case they abort the registration
before the new user is inserted.
"""

import logging
from dataclasses import dataclass, field

from .codes import generate_referral_code
from .exceptions import Conflict, DuplicateKey, InternalError, StoreError
from .models import RegistrationEvent, User
from .ports import EventPublisher, UserRepository
from .referral import ReferralResolver

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates referral resolution, referrer credit, referral code
    generation, user persistence and event publication.
    """

    repository: UserRepository
    publisher: EventPublisher
    require_referral_credit: bool = False
    resolver: ReferralResolver = field(init=False)

    def __post_init__(self) -> None:
        self.resolver = ReferralResolver(self.repository)

    def register(self, user_name: str, email: str, ref_code: str | None = None) -> User:
        """
        Register a new user, optionally crediting a referrer.

        Args:
            user_name: Unique display name (at least 3 characters)
            email: Unique email address
            ref_code: Referral code of an existing user, if any

        Returns:
            The newly created user

        Raises:
            ValidationError: If the user name is too short
            ReferralCodeNotFound: If ``ref_code`` matches no user
            Conflict: If the email, user name or generated code is taken
            InternalError: On any other store failure
        """
        # Generated before the referral steps so a rejected name credits nobody
        code = generate_referral_code(user_name)

        if ref_code is not None:
            try:
                referrer = self.resolver.resolve(ref_code)
            except StoreError as e:
                raise InternalError(str(e)) from e
            self._credit_referrer(referrer)

        try:
            user = self.repository.insert_user(user_name, email, code)
        except DuplicateKey as e:
            raise Conflict(e.field) from e
        except StoreError as e:
            raise InternalError(str(e)) from e

        logger.info("Registered user %s (ref_code=%s)", user.id, user.ref_code)
        self._publish(RegistrationEvent(user=user))
        return user

    def _credit_referrer(self, referrer: User) -> None:
        try:
            self.resolver.credit(referrer.id)
        except StoreError as e:
            if self.require_referral_credit:
                raise InternalError(str(e)) from e
            logger.warning("Referral credit for %s failed: %s", referrer.id, e)

    def _publish(self, event: RegistrationEvent) -> None:
        """Publish without ever failing the registration."""
        try:
            delivered = self.publisher.publish(event)
        except Exception:
            logger.exception("Failed to publish registration event for %s", event.user.id)
            return
        if delivered == 0:
            logger.debug("No live subscribers for registration of %s", event.user.id)
