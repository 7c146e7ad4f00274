"""Referral-aware user registration service with live registration events."""

__version__ = "0.1.0"
