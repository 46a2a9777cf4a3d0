"""User CRUD endpoints.

Every handled failure is answered with HTTP 400 and a short error code;
not-found and data-access failures get the same response.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from app.core.dependencies import get_user_store
from app.core.errors import RepositoryError, UserNotFoundError
from app.models.user import User
from app.schemas.user import ErrorResponse, UserPayload, UserRead
from app.services.users import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

BAD_REQUEST = "bad request"
PROCESSING_ERROR = "processing error"
USER_EXISTS = "user exists"
SUBMISSION_FAILED = "submission failed"
UPDATE_FAILED = "update failed"

_error_responses = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}


def error_response(code: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": code})


@router.get(
    "",
    response_model=list[UserRead],
    response_model_exclude_none=True,
    responses=_error_responses,
)
async def list_users(store: UserStore = Depends(get_user_store)):
    try:
        users = await store.list_all()
    except RepositoryError:
        return error_response(BAD_REQUEST)
    return [UserRead.model_validate(user) for user in users]


@router.get(
    "/{user_id}",
    response_model=UserRead,
    response_model_exclude_none=True,
    responses=_error_responses,
)
async def get_user(user_id: str, store: UserStore = Depends(get_user_store)):
    try:
        user = await store.get_by_id(user_id)
    except RepositoryError:
        return error_response(BAD_REQUEST)

    user.password = ""
    return UserRead.model_validate(user)


@router.post(
    "",
    response_model=UserRead,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=_error_responses,
)
async def create_user(payload: UserPayload, store: UserStore = Depends(get_user_store)):
    try:
        existing = await store.get_by_email(payload.email)
    except UserNotFoundError:
        existing = None
    except RepositoryError:
        return error_response(PROCESSING_ERROR)

    if existing is not None:
        return error_response(USER_EXISTS)

    # Check-then-insert is not atomic: concurrent creates with one email can both land.
    user = User(
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        password=payload.password,
        active=payload.active,
    )
    try:
        user.id = await store.insert(user)
    except RepositoryError:
        return error_response(SUBMISSION_FAILED)

    user.password = ""
    logger.info("Created user %s", user.id)
    return UserRead.model_validate(user)


@router.post(
    "/{user_id}",
    status_code=status.HTTP_202_ACCEPTED,
    response_class=Response,
    responses=_error_responses,
)
async def update_user(user_id: str, payload: UserPayload, store: UserStore = Depends(get_user_store)):
    try:
        user = await store.get_by_id(user_id)
    except RepositoryError:
        return error_response(BAD_REQUEST)

    user.email = payload.email
    user.first_name = payload.first_name
    user.last_name = payload.last_name
    user.active = payload.active

    try:
        await store.update(user)
    except RepositoryError:
        return error_response(UPDATE_FAILED)

    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_202_ACCEPTED,
    response_class=Response,
    responses=_error_responses,
)
async def delete_user(user_id: str, store: UserStore = Depends(get_user_store)):
    try:
        await store.delete_by_id(user_id)
    except RepositoryError:
        return error_response(BAD_REQUEST)

    return Response(status_code=status.HTTP_202_ACCEPTED)
