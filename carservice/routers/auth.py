import logging
from typing import List

from fastapi import APIRouter, Depends, status

from carservice.deps import get_authenticator, get_credential_store
from carservice.schemas.user import (
    MessageResponse,
    SigninRequest,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from carservice.services.authenticator import Authenticator
from carservice.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["auth"],
)


@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def signup(
    request: SignupRequest,
    authenticator: Authenticator = Depends(get_authenticator),
):
    """
    Register a new user.

    - **username**: Unique login name.
    - **password** / **confirmPassword**: Must match.
    - **mobileNumber**: Contact number.
    """
    user_id = authenticator.signup(
        request.username, request.password, request.confirm_password, request.mobile_number
    )
    logger.info(f"User created: {user_id}")
    return {"message": "User created successfully"}


@router.post(
    "/signin",
    response_model=TokenResponse,
    summary="Sign in and obtain a bearer token",
)
def signin(
    request: SigninRequest,
    authenticator: Authenticator = Depends(get_authenticator),
):
    """
    Exchange a username and password for a token valid for 24 hours.
    Send it back as `Authorization: Bearer <token>`.
    """
    token = authenticator.signin(request.username, request.password)
    return {"token": token, "username": request.username}


@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List users",
    description="Diagnostic listing of registered users. Password hashes are never returned.",
)
def list_users(credential_store: CredentialStore = Depends(get_credential_store)):
    return credential_store.list_users()
