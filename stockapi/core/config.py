import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

MIN_SECRET_LENGTH = 32


@dataclass(frozen=True, slots=True)
class JwtSettings:
    """Immutable token signing configuration handed to the token service."""

    secret_key: str
    issuer: str
    audience: str
    expiry_minutes: int
    algorithm: str = "HS256"


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.jwt_secret_key = self._get("JWT_SECRET_KEY")
        if len(self.jwt_secret_key) < MIN_SECRET_LENGTH:
            raise RuntimeError(
                f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters long"
            )
        self.jwt_issuer = os.getenv("JWT_ISSUER", "ProductStockAPI")
        self.jwt_audience = os.getenv("JWT_AUDIENCE", "ProductStockAPIUsers")
        self.jwt_expiry_minutes = self._get_int("JWT_EXPIRY_MINUTES", default=60)
        if self.jwt_expiry_minutes <= 0:
            raise RuntimeError("JWT_EXPIRY_MINUTES must be a positive integer")
        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", default=12)
        if not 4 <= self.bcrypt_rounds <= 31:
            raise RuntimeError("BCRYPT_ROUNDS must be between 4 and 31")
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/stock.db")).resolve()
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.seed_user_email = os.getenv("SEED_USER_EMAIL")
        self.seed_user_password = os.getenv("SEED_USER_PASSWORD")
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @property
    def jwt(self) -> JwtSettings:
        return JwtSettings(
            secret_key=self.jwt_secret_key,
            issuer=self.jwt_issuer,
            audience=self.jwt_audience,
            expiry_minutes=self.jwt_expiry_minutes,
        )

    @staticmethod
    def _get(key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc
