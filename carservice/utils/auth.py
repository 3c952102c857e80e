from datetime import datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from carservice.errors import Unauthorized


def make_password_context(rounds: int = 10) -> CryptContext:
    """Build a bcrypt context with the given cost factor."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def verify_password(pwd_context: CryptContext, plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(pwd_context: CryptContext, password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def create_access_token(data: dict, secret_key: str, algorithm: str, expires_minutes: int) -> str:
    """Create a signed JWT carrying ``data`` plus issue and expiry times."""
    to_encode = data.copy()
    issued_at = datetime.utcnow()
    to_encode.update({"iat": issued_at, "exp": issued_at + timedelta(minutes=expires_minutes)})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str, secret_key: str, algorithm: str) -> dict:
    """Check signature and expiry and return the claims.

    Raises ``Unauthorized`` for a bad signature, malformed token or expired token.
    """
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        raise Unauthorized()
