from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

import bcrypt

from ...domain.errors import DuplicateEmailError, InvalidCredentialsError, RequestValidationFailed
from ...domain.models import User
from ...domain.ports.persistence import UserRepository
from ...domain.validation import MAX_PASSWORD_BYTES, REGISTRATION_RULES, parse_credentials

logger = logging.getLogger(__name__)


class CredentialService:
    """Registers users and verifies their email/password credentials."""

    def __init__(self, users: UserRepository, rounds: int = 12) -> None:
        self._users = users
        self._rounds = rounds
        # Unknown emails are checked against this hash so both failure paths cost the same.
        self._dummy_hash = self._hash("not-a-real-password")

    # ------------------------------------------------------------------
    def ensure_default_user(self, email: Optional[str], password: Optional[str]) -> Optional[User]:
        if not email or not password:
            return None
        try:
            email, password = parse_credentials(
                {"email": email, "password": password}, REGISTRATION_RULES
            )
        except RequestValidationFailed as exc:
            problems = "; ".join(
                f"{field}: {message}" for field, messages in exc.errors.items() for message in messages
            )
            raise RuntimeError(f"Invalid seed user credentials ({problems})") from exc
        existing = self._users.get_user_by_email(self._normalize(email))
        if existing:
            return existing
        logger.info("Creating default user account for %s", email)
        return self.register(email, password)

    def register(self, email: str, password: str) -> User:
        """
        Create a user with a bcrypt hash of ``password``.

        Raises:
            DuplicateEmailError: The email (case-insensitive) is already registered.
        """
        email_clean = self._normalize(email)
        if self._users.get_user_by_email(email_clean):
            raise DuplicateEmailError(email_clean)
        user = self._users.create_user(
            user_id=str(uuid4()),
            email=email_clean,
            password_hash=self._hash(password),
            created_at=datetime.now(tz=timezone.utc),
        )
        logger.info("Registered user %s", user.id)
        return user

    def verify(self, email: str, password: str) -> User:
        """
        Return the user owning ``email`` when ``password`` matches.

        Raises:
            InvalidCredentialsError: No such user or wrong password.
        """
        user = self._users.get_user_by_email(self._normalize(email))
        candidate = password.encode("utf-8")
        stored = user.password_hash.encode("utf-8") if user else self._dummy_hash.encode("utf-8")
        # Registration caps passwords at the bcrypt input limit, so longer ones never match.
        matched = bcrypt.checkpw(candidate[:MAX_PASSWORD_BYTES], stored)
        if not user or not matched or len(candidate) > MAX_PASSWORD_BYTES:
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()
        return user

    # ------------------------------------------------------------------
    @staticmethod
    def _normalize(email: str) -> str:
        return email.strip().lower()

    def _hash(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)
        ).decode("utf-8")
