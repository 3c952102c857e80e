"""Signup, signin and bearer token verification."""

import logging
from dataclasses import dataclass

from carservice.errors import InvalidCredentials, NotFound, Unauthorized, ValidationError
from carservice.services.credential_store import CredentialStore
from carservice.utils.auth import create_access_token, decode_access_token, verify_password
from carservice.utils.validation_helpers import require_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The verified owner of a bearer token."""

    user_id: int
    username: str


class Authenticator:
    def __init__(self, credential_store: CredentialStore, settings):
        self.credential_store = credential_store
        self.settings = settings

    def signup(self, username: str, password: str, confirm_password: str, mobile_number: str) -> int:
        require_fields(
            {
                "username": username,
                "password": password,
                "confirm_password": confirm_password,
                "mobile_number": mobile_number,
            },
            "All fields are required",
        )
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        return self.credential_store.register(username, password, mobile_number)

    def signin(self, username: str, password: str) -> str:
        """Check the credentials and issue a token.

        An unknown username and a wrong password fail with the same
        ``InvalidCredentials`` error so callers cannot probe for accounts.
        """
        require_fields({"username": username, "password": password}, "Username and password are required")
        try:
            user = self.credential_store.find_by_username(username)
        except NotFound:
            # Spend the same hashing time as a real comparison.
            self.credential_store.pwd_context.dummy_verify()
            logger.warning("Sign in failed")
            raise InvalidCredentials()
        if not verify_password(self.credential_store.pwd_context, password, user.password):
            logger.warning("Sign in failed")
            raise InvalidCredentials()

        logger.debug(f"Issuing token for user: {user.id}")
        return create_access_token(
            {"userId": user.id, "username": user.username},
            self.settings.secret_key,
            self.settings.algorithm,
            self.settings.access_token_expire_minutes,
        )

    def verify(self, token: str) -> Identity:
        if not token:
            raise Unauthorized("Access token required")
        claims = decode_access_token(token, self.settings.secret_key, self.settings.algorithm)
        user_id = claims.get("userId")
        username = claims.get("username")
        if not isinstance(user_id, int) or not isinstance(username, str):
            raise Unauthorized()
        return Identity(user_id=user_id, username=username)
