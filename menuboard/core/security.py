"""Security utilities: password hashing and bearer-token signing."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from menuboard.core.errors import InvalidToken

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ── JWT ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    """Mints and verifies signed, time-limited bearer tokens.

    The signing key and expiry window are fixed at construction; a token is
    valid only while the key is unchanged and ``now < exp``. Nothing is
    stored server-side.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expire = timedelta(minutes=expire_minutes)

    def issue(self, subject: str, expires_delta: timedelta | None = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self._expire),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        """Verify signature and expiry. Raises InvalidToken on any failure."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require_sub": True, "require_exp": True},
            )
        except JWTError as exc:
            raise InvalidToken() from exc

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        try:
            issued_at = datetime.fromtimestamp(int(payload.get("iat", 0)), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken() from exc
        return TokenClaims(subject=subject, issued_at=issued_at, expires_at=expires_at)
