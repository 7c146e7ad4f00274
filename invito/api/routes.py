"""
API routes - Health, user registration, user CRUD and live updates.

Store-backed handlers are plain ``def`` functions: FastAPI runs them in its
threadpool, so a slow database round trip never stalls the event loop
that serves the live-update streams.

Endpoints (mounted under /api):
- GET    /healthchecker  - Static liveness payload
- GET    /users          - Paginated user list
- POST   /users          - Register a user, optionally with a referral code
- GET    /user/{id}      - Fetch one user
- PATCH  /user/{id}      - Partial update
- DELETE /user/{id}      - Delete a user
- GET    /events         - Server-Sent Events stream of registrations
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import StreamingResponse

from invito.adapters.broadcast.hub import BroadcastHub
from invito.api.dependencies import get_hub, get_registration_service, get_user_service
from invito.api.live import live_event_stream
from invito.api.models import (
    CreateUserRequest,
    CreateUserResponse,
    ErrorResponse,
    HealthResponse,
    UpdateUserRequest,
    UserData,
    UserEnvelope,
    UserListResponse,
    UserResponse,
)
from invito.config.settings import Settings, get_settings
from invito.domain.exceptions import (
    Conflict,
    InternalError,
    NotFound,
    UserNotFound,
    ValidationError,
)
from invito.domain.models import User
from invito.domain.registration import RegistrationService
from invito.domain.users import UserService

router = APIRouter(tags=["users"])

HEALTH_MESSAGE = "Invito is running..."


def _envelope(user: User) -> UserData:
    return UserData(user=UserResponse.model_validate(user))


@router.get("/healthchecker", response_model=HealthResponse, summary="Health check")
async def health_checker() -> HealthResponse:
    return HealthResponse(status="success", message=HEALTH_MESSAGE)


@router.get(
    "/users",
    response_model=UserListResponse,
    responses={500: {"model": ErrorResponse, "description": "Store failure"}},
    summary="List users",
)
def users_list(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    """Return one page of users; offset is ``(page - 1) * limit``."""
    try:
        users = service.list_users(page=page, limit=limit)
    except InternalError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Something bad happened while fetching all user items",
        ) from None
    return UserListResponse(
        results=len(users),
        users=[UserResponse.model_validate(user) for user in users],
    )


@router.post(
    "/users",
    response_model=CreateUserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Referral code not found"},
        409: {"model": ErrorResponse, "description": "Email or user name already exists"},
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
    summary="Register a new user",
    description="Create a user with a freshly generated referral code. "
    "When ref_code is given, its owner is credited with the signup "
    "and connected live-update clients are notified.",
)
def create_user(
    request_data: CreateUserRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> CreateUserResponse:
    """
    Register a new user.

    - **user_name**: Unique name, at least 3 characters
    - **email**: Unique email address
    - **ref_code**: Optional referral code of an existing user
    """
    try:
        user = service.register(request_data.user_name, request_data.email, request_data.ref_code)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    except Conflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from None
    except InternalError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None
    return CreateUserResponse(data=_envelope(user))


@router.get(
    "/user/{user_id}",
    response_model=UserEnvelope,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Get a user",
)
def get_user(user_id: UUID, service: UserService = Depends(get_user_service)) -> UserEnvelope:
    try:
        user = service.get_user(user_id)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    except InternalError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None
    return UserEnvelope(data=_envelope(user))


@router.patch(
    "/user/{user_id}",
    response_model=UserEnvelope,
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Email or user name already exists"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
    summary="Update a user",
)
def edit_user(
    user_id: UUID,
    request_data: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserEnvelope:
    """Merge the supplied fields over the stored user."""
    try:
        user = service.update_user(
            user_id, user_name=request_data.user_name, email=request_data.email
        )
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    except Conflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    except InternalError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None
    return UserEnvelope(data=_envelope(user))


@router.delete(
    "/user/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Delete a user",
)
def delete_user(user_id: UUID, service: UserService = Depends(get_user_service)) -> Response:
    try:
        service.delete_user(user_id)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    except InternalError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/events",
    response_class=StreamingResponse,
    summary="Live registration events",
    description="Server-Sent Events stream: one `connected` frame, then "
    "`user_created` frames with the new user, interleaved with `heartbeat` "
    "frames while idle.",
)
async def live_updates(
    request: Request,
    hub: BroadcastHub = Depends(get_hub),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    return StreamingResponse(
        live_event_stream(hub, request.is_disconnected, settings.heartbeat_seconds),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
