"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
The pool and the broadcast hub live on ``app.state`` and are
created by the application lifespan.
"""

from fastapi import Depends, Request
from psycopg_pool import ConnectionPool

from invito.adapters.broadcast.hub import BroadcastHub
from invito.adapters.repository.postgres import PostgresUserRepository
from invito.config.settings import Settings, get_settings
from invito.domain.registration import RegistrationService
from invito.domain.users import UserService


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_hub(request: Request) -> BroadcastHub:
    """Get the application's broadcast hub from app state."""
    return request.app.state.hub


def get_repository(request: Request) -> PostgresUserRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresUserRepository(pool)


def get_registration_service(
    repository: PostgresUserRepository = Depends(get_repository),
    hub: BroadcastHub = Depends(get_hub),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and broadcast hub for the domain service.
    """
    return RegistrationService(
        repository=repository,
        publisher=hub,
        require_referral_credit=settings.require_referral_credit,
    )


def get_user_service(
    repository: PostgresUserRepository = Depends(get_repository),
) -> UserService:
    return UserService(repository=repository)
