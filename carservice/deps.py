"""FastAPI dependencies wiring the storage handle and services into routes."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from carservice.db import get_db
from carservice.errors import Unauthorized
from carservice.services.authenticator import Authenticator, Identity
from carservice.services.booking_repository import BookingRepository
from carservice.services.credential_store import CredentialStore

# A missing header is turned into a 401 by get_current_user.
bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="Enter the token returned by /api/signin.",
    auto_error=False,
)


def get_settings(request: Request):
    return request.app.state.settings


def get_credential_store(request: Request, db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db, request.app.state.pwd_context)


def get_authenticator(
    credential_store: CredentialStore = Depends(get_credential_store),
    settings=Depends(get_settings),
) -> Authenticator:
    return Authenticator(credential_store, settings)


def get_booking_repository(db: Session = Depends(get_db)) -> BookingRepository:
    return BookingRepository(db)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    authenticator: Authenticator = Depends(get_authenticator),
) -> Identity:
    """Verify the bearer token and return the caller's identity."""
    if credentials is None:
        raise Unauthorized("Access token required")
    return authenticator.verify(credentials.credentials)
