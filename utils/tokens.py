"""
Token service: access and refresh JWTs (PyJWT, HS256 by default).

- Access tokens are stateless: signature, type and expiry decide validity.
- Refresh tokens are signed with a different secret AND stored; a refresh
  token authenticates only while its row exists.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional
import uuid

import jwt

from models.refresh_token import RefreshToken

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token failures."""


class InvalidToken(TokenError):
    """Bad signature, wrong token type, malformed token or missing claims."""


class TokenExpired(InvalidToken):
    """Signature is fine but the token is past its exp claim."""


class RefreshTokenNotFound(TokenError):
    """No stored row for this refresh token (never issued, revoked or redeemed)."""


class RefreshTokenRejected(TokenError):
    """A stored refresh token failed verification or is past its expiry."""


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: str
    email: Optional[str] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class TokenService:
    def __init__(
        self,
        storage,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
        single_use_refresh: bool = False,
        issuer: str = "itinerary-api",
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required")
        self.storage = storage
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.single_use_refresh = single_use_refresh
        self.issuer = issuer

    def _encode(self, claims: Dict[str, Any], secret: str, ttl: timedelta, now: datetime) -> str:
        payload = {
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": str(uuid.uuid4()),
            **claims,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _decode(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT. Raises TokenExpired / InvalidToken.
        """
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(f"Invalid token: {exc}") from exc

        if decoded.get("type") != expected_type:
            raise InvalidToken("Wrong token type")
        return decoded

    def issue_access(self, user_id: str, email: Optional[str] = None, now: Optional[datetime] = None) -> str:
        claims = {"sub": str(user_id), "type": ACCESS}
        if email is not None:
            claims["email"] = email
        return self._encode(claims, self.access_secret, self.access_ttl, now or _now())

    def verify_access(self, token: str) -> AuthenticatedIdentity:
        decoded = self._decode(token, self.access_secret, ACCESS)
        return AuthenticatedIdentity(user_id=decoded["sub"], email=decoded.get("email"))

    def issue_refresh(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Sign a refresh token and persist it. Every call yields a new row,
        so each device/session holds its own token."""
        now = now or _now()
        token = self._encode({"sub": str(user_id), "type": REFRESH}, self.refresh_secret, self.refresh_ttl, now)
        self.storage.new(
            RefreshToken(token=token, user_id=str(user_id), expires_at=now + self.refresh_ttl)
        )
        self.storage.save()
        logger.debug("Issued refresh token for user %s", user_id)
        return token

    def refresh(self, token: str, now: Optional[datetime] = None) -> str:
        """Redeem a refresh token for a new access token."""
        now = now or _now()
        record = self.storage.find_one(RefreshToken, token=token)
        if record is None:
            raise RefreshTokenNotFound("Refresh token not found")

        try:
            decoded = self._decode(token, self.refresh_secret, REFRESH)
            if decoded["sub"] != record.user_id:
                raise InvalidToken("Token subject does not match its owner")
            if _as_utc(record.expires_at) <= now:
                raise TokenExpired("Token expired")
        except InvalidToken as exc:
            # The row can never authenticate again, so it goes now
            self.revoke(token)
            logger.info("Rejected refresh token for user %s: %s", record.user_id, exc)
            raise RefreshTokenRejected(str(exc)) from exc

        email = record.user.email if record.user is not None else None
        if self.single_use_refresh:
            # Exactly-once: only the transaction that removes the row wins
            if self.storage.delete_where(RefreshToken, token=token) != 1:
                self.storage.rollback()
                raise RefreshTokenNotFound("Refresh token not found")
            self.storage.save()
        return self.issue_access(record.user_id, email=email, now=now)

    def revoke(self, token: str) -> int:
        """Delete every stored row for this token. Revoking an unknown token is a no-op."""
        removed = self.storage.delete_where(RefreshToken, token=token)
        self.storage.save()
        if removed:
            logger.info("Revoked %d refresh token row(s)", removed)
        return removed

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        removed = self.storage.delete_where(RefreshToken, RefreshToken.expires_at <= (now or _now()))
        self.storage.save()
        return removed
