from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from ...core.config import JwtSettings
from ...domain.errors import InvalidTokenSignatureError, MalformedTokenError, TokenExpiredError

_REQUIRED_CLAIMS = ["sub", "email", "iss", "aud", "iat", "exp"]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class Claims:
    subject: str
    email: str
    issuer: str
    audience: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issues and verifies HS256-signed access tokens."""

    def __init__(
        self,
        settings: JwtSettings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings
        self._clock = clock

    @property
    def lifetime(self) -> timedelta:
        return timedelta(minutes=self._settings.expiry_minutes)

    def issue(self, subject: str, email: str, now: Optional[datetime] = None) -> str:
        issued_at = now or self._clock()
        payload = {
            "sub": subject,
            "email": email,
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._settings.secret_key, algorithm=self._settings.algorithm)

    def verify(self, token: str, now: Optional[datetime] = None) -> Claims:
        """
        Decode ``token`` and check it against the configured secret, issuer and audience.

        Expiry is compared against ``now`` (or the service clock) instead of
        the library's wall clock, with no leeway.

        Raises:
            InvalidTokenSignatureError: The signature does not match.
            TokenExpiredError: ``now`` is past the ``exp`` claim.
            MalformedTokenError: Structure, algorithm or claims are wrong.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[self._settings.algorithm],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": _REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidTokenSignatureError("Token signature is invalid.") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(f"Token is malformed: {exc}") from exc

        claims = self._to_claims(payload)
        current = now or self._clock()
        if current > claims.expires_at:
            raise TokenExpiredError("Token has expired.")
        return claims

    @staticmethod
    def _to_claims(payload: dict) -> Claims:
        subject = payload.get("sub")
        email = payload.get("email")
        if not isinstance(subject, str) or not isinstance(email, str):
            raise MalformedTokenError("Token subject or email claim is invalid.")
        try:
            issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise MalformedTokenError("Token timestamps are invalid.") from exc
        return Claims(
            subject=subject,
            email=email,
            issuer=payload["iss"],
            audience=payload["aud"] if isinstance(payload["aud"], str) else ",".join(payload["aud"]),
            issued_at=issued_at,
            expires_at=expires_at,
        )
