"""
Hi-Pot Test Log - Authentication Gate
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-05): validate_token is a plain function returning a Principal
                      or raising AuthError; injectable clock for expiry checks
v1.0.0 (2026-10-01): bcrypt login and HS256 bearer tokens

Tokens are self-contained JWTs valid for a fixed window (24h by default).
There is no session table and no revocation: a token stays valid until it
expires.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import bcrypt
import jwt

from models.auth import Principal
from services.credential_store import CredentialStore
from services.errors import AuthError, AuthErrorCode

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(hours=24)


def hash_password(password: str, rounds: int = 10) -> str:
    """bcrypt hash of a password, as text for the users table"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash, or a password bcrypt refuses outright
        return False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthGate:
    """Issues and validates bearer tokens"""

    def __init__(self, credentials: CredentialStore, secret_key: str,
                 algorithm: str = "HS256", token_ttl: timedelta = TOKEN_TTL,
                 clock: Callable[[], datetime] = _utcnow):
        if not secret_key:
            raise ValueError("JWT secret key must not be empty")
        self.credentials = credentials
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._token_ttl = token_ttl
        self._clock = clock

    async def issue_token(self, username: str, password: str) -> str:
        """Verify credentials and return a signed token for the user"""
        logger.info(f"Login attempt: {username!r}")
        user = await self.credentials.get_by_username(username) if username else None

        if not user or not verify_password(password or "", user["password_hash"]):
            logger.warning(f"Login rejected for {username!r}")
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS, "Invalid credentials")

        issued_at = self._clock()
        claims = {
            "sub": str(user["id"]),
            "username": user["username"],
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._token_ttl).timestamp()),
        }
        token = jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
        logger.info(f"Token issued for {username!r}")
        return token

    def validate_token(self, token: Optional[str]) -> Principal:
        """
        Verify a bearer token and return the identity it carries.

        Raises AuthError with NO_TOKEN when absent, TOKEN_EXPIRED when past
        its validity window, INVALID_TOKEN when the signature or format is bad.
        """
        if not token:
            raise AuthError(AuthErrorCode.NO_TOKEN, "Authentication required")

        try:
            # Expiry is checked against our own clock below
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
            user_id = int(claims["sub"])
            issued_at = datetime.fromtimestamp(claims["iat"], tz=timezone.utc)
            expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        except (jwt.InvalidTokenError, TypeError, ValueError, OverflowError, OSError) as e:
            logger.warning(f"Token verification failed: {type(e).__name__}")
            raise AuthError(AuthErrorCode.INVALID, "Invalid token")

        if self._clock() >= expires_at:
            logger.info(f"Expired token presented for user {user_id}")
            raise AuthError(AuthErrorCode.EXPIRED, "Token expired")

        return Principal(
            user_id=user_id,
            username=claims.get("username", ""),
            issued_at=issued_at,
            expires_at=expires_at,
        )
