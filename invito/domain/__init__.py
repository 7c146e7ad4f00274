"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for referral-aware user
registration. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .codes import generate_referral_code
from .exceptions import (
    Conflict,
    DuplicateKey,
    InternalError,
    NotFound,
    ReferralCodeNotFound,
    StoreError,
    UserNotFound,
    UserServiceError,
    ValidationError,
)
from .models import RegistrationEvent, User
from .ports import EventPublisher, UserRepository
from .referral import ReferralResolver
from .registration import RegistrationService
from .users import UserService

__all__ = [
    "Conflict",
    "DuplicateKey",
    "EventPublisher",
    "InternalError",
    "NotFound",
    "ReferralCodeNotFound",
    "ReferralResolver",
    "RegistrationEvent",
    "RegistrationService",
    "StoreError",
    "User",
    "UserNotFound",
    "UserRepository",
    "UserService",
    "UserServiceError",
    "ValidationError",
    "generate_referral_code",
]
