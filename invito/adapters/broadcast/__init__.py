"""Broadcast adapters - Live event fan-out."""

from .hub import BroadcastHub, Subscription, SubscriptionClosed, SubscriptionLagged

__all__ = ["BroadcastHub", "Subscription", "SubscriptionClosed", "SubscriptionLagged"]
