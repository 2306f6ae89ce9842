"""User domain model for credential-based authentication."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class User:
    """
    Registered account able to obtain access tokens.

    Attributes:
        id: Opaque unique identifier (UUID string)
        email: Normalised (trimmed, lowercased) email address, unique
        password_hash: bcrypt digest including its salt
        created_at: Registration timestamp (UTC)
    """

    id: str
    email: str
    password_hash: str
    created_at: datetime

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
