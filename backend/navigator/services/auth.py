"""
Auth service: password hashing and JWT issue/verification.
Uses bcrypt directly (no passlib) to avoid passlib/bcrypt version conflicts.
The token service takes Settings explicitly; routes get it from api.deps.get_token_service.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from navigator.config import Settings
from navigator.errors import InvalidToken

# Bcrypt limit is 72 bytes; use 71 so we never exceed
BCRYPT_MAX_BYTES = 71
DEFAULT_BCRYPT_ROUNDS = 10


def _truncate_to_bytes(s: str, max_bytes: int = BCRYPT_MAX_BYTES) -> bytes:
    """Truncate string to at most max_bytes UTF-8; return bytes for bcrypt."""
    if not s:
        return b""
    encoded = s.encode("utf-8")
    if len(encoded) <= max_bytes:
        return encoded
    return encoded[:max_bytes]


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash password for storage. Raises ValueError if password is None."""
    if password is None:
        raise ValueError("password is required")
    raw = _truncate_to_bytes(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(raw, salt)
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    raw = _truncate_to_bytes(plain)
    try:
        return bcrypt.checkpw(raw, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        # malformed or missing stored hash
        return False


@dataclass(frozen=True)
class TokenPayload:
    user_id: int
    email: str
    role: str
    issued_at: int | None = None
    expires_at: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class TokenService:
    """Signs and checks bearer tokens carrying {userId, email, role}."""

    def __init__(self, settings: Settings):
        self.secret_key = settings.secret_key
        self.algorithm = settings.jwt_algorithm
        self.expire_hours = settings.jwt_expire_hours

    def issue(self, user_id: int, email: str, role: str, now: datetime | None = None) -> str:
        issued = now or datetime.now(timezone.utc)
        expire = issued + timedelta(hours=self.expire_hours)
        # JWT iat/exp must be numeric (Unix timestamp), not datetime
        payload = {
            "userId": user_id,
            "email": email,
            "role": role,
            "iat": int(issued.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """Decode token; raise InvalidToken on bad signature, expiry or malformed payload."""
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            # expired tokens land here too (ExpiredSignatureError subclasses JWTError)
            raise InvalidToken()
        user_id = claims.get("userId")
        email = claims.get("email")
        role = claims.get("role")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise InvalidToken()
        if not isinstance(email, str) or not isinstance(role, str):
            raise InvalidToken()
        return TokenPayload(
            user_id=user_id,
            email=email,
            role=role,
            issued_at=claims.get("iat"),
            expires_at=claims.get("exp"),
        )
