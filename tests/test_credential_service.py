"""
Name: Credential Service Tests

Responsibilities:
  - Ensure registration stores a bcrypt hash under a normalised email
  - Ensure duplicate emails are refused regardless of case
  - Ensure both login failure causes surface the same error
"""

from pathlib import Path

import bcrypt
import pytest

from stockapi.application.services.credential_service import CredentialService
from stockapi.domain.errors import DuplicateEmailError, InvalidCredentialsError
from stockapi.infrastructure.persistence.sqlite import SQLitePersistence

pytestmark = pytest.mark.unit


@pytest.fixture
def persistence(tmp_path: Path):
    gateway = SQLitePersistence(tmp_path / "users.db")
    yield gateway
    gateway.close()


@pytest.fixture
def service(persistence) -> CredentialService:
    return CredentialService(persistence, rounds=4)


def test_register_hashes_password(service, persistence):
    user = service.register("  A@X.com ", "Secret1!")

    stored = persistence.get_user_by_email("a@x.com")
    assert stored is not None
    assert stored.id == user.id
    assert stored.email == "a@x.com"
    assert stored.password_hash != "Secret1!"
    assert bcrypt.checkpw(b"Secret1!", stored.password_hash.encode("utf-8"))


def test_register_duplicate_email_is_case_insensitive(service):
    service.register("a@x.com", "Secret1!")

    with pytest.raises(DuplicateEmailError) as excinfo:
        service.register("A@X.COM", "Other2@pass")

    assert excinfo.value.message == "Email 'a@x.com' is already taken."


def test_verify_returns_user_for_matching_password(service):
    registered = service.register("a@x.com", "Secret1!")

    assert service.verify("A@x.com", "Secret1!").id == registered.id


def test_wrong_password_and_unknown_email_fail_identically(service):
    service.register("a@x.com", "Secret1!")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        service.verify("a@x.com", "Secret1?")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        service.verify("b@x.com", "Secret1!")

    assert wrong_password.value.message == unknown_email.value.message


def test_password_longer_than_bcrypt_limit_never_matches(service):
    password = "Aa1!" + "x" * 68
    service.register("a@x.com", password)

    with pytest.raises(InvalidCredentialsError):
        service.verify("a@x.com", password + "extra")


def test_ensure_default_user_is_idempotent(service):
    first = service.ensure_default_user("admin@x.com", "Secret1!")
    second = service.ensure_default_user("ADMIN@x.com", "Secret1!")

    assert first is not None
    assert second is not None
    assert first.id == second.id


def test_ensure_default_user_without_credentials_does_nothing(service, persistence):
    assert service.ensure_default_user(None, None) is None
    assert service.ensure_default_user("admin@x.com", "") is None
    assert persistence.get_user_by_email("admin@x.com") is None


@pytest.mark.parametrize(
    "email, password",
    [("admin@x.com", "weak"), ("not-an-email", "Secret1!")],
)
def test_ensure_default_user_rejects_invalid_seed(service, persistence, email, password):
    with pytest.raises(RuntimeError, match="Invalid seed user credentials"):
        service.ensure_default_user(email, password)

    assert persistence.get_user_by_email(email) is None
