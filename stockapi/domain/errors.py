"""Typed failures raised by the services and mapped to HTTP responses."""

from __future__ import annotations

from typing import Dict, List


class StockApiError(Exception):
    """Base class for every expected failure of the service."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RequestValidationFailed(StockApiError):
    """One or more payload fields violated their constraints."""

    def __init__(self, errors: Dict[str, List[str]]) -> None:
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Validation failed for: {fields}")


class DuplicateEmailError(StockApiError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email '{email}' is already taken.")


class InvalidCredentialsError(StockApiError):
    """Unknown email or wrong password; deliberately indistinguishable."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password.")


class TokenError(StockApiError):
    """Base class for access token verification failures."""


class MalformedTokenError(TokenError):
    pass


class InvalidTokenSignatureError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class ProductNotFoundError(StockApiError):
    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product with ID '{product_id}' was not found.")
