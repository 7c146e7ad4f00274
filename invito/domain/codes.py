"""
Referral code generation.

A code is the first three characters of the user name followed by
four characters of a fresh random UUID, e.g. ``ann1f2a``. Uniqueness is
enforced by the store; a collision surfaces as a Conflict on insert.
"""

import uuid

from .exceptions import ValidationError

PREFIX_LENGTH = 3
SUFFIX_LENGTH = 4


def generate_referral_code(user_name: str) -> str:
    """
    Build a referral code for a new user.

    Raises:
        ValidationError: If the user name is shorter than the prefix
    """
    if len(user_name) < PREFIX_LENGTH:
        raise ValidationError(
            f"user_name must be at least {PREFIX_LENGTH} characters to derive a referral code"
        )
    suffix = str(uuid.uuid4())[:SUFFIX_LENGTH]
    return f"{user_name[:PREFIX_LENGTH]}{suffix}"
