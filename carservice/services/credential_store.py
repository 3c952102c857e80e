"""Persistence of user identities and their password hashes."""

import logging
from typing import List

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from carservice.errors import DuplicateUsername, NotFound
from carservice.models.user import User
from carservice.utils.auth import get_password_hash
from carservice.utils.validation_helpers import require_fields

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, db: Session, pwd_context: CryptContext):
        self.db = db
        self.pwd_context = pwd_context

    def register(self, username: str, password: str, mobile_number: str) -> int:
        """Create a user and return its id.

        Uniqueness is left to the ``users.username`` constraint so two
        concurrent signups for the same name cannot both succeed.
        """
        require_fields({"username": username, "password": password, "mobile_number": mobile_number})

        user = User(
            username=username,
            password=get_password_hash(self.pwd_context, password),
            mobile_number=mobile_number,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Signup rejected, username taken: {username}")
            raise DuplicateUsername()
        self.db.refresh(user)
        logger.debug(f"Registered user: {user.id}")
        return user.id

    def find_by_username(self, username: str) -> User:
        user = self.db.query(User).filter(User.username == username).first()
        if user is None:
            raise NotFound("User not found")
        return user

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()
