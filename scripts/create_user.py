import argparse
import getpass
import sys

from dotenv import load_dotenv

from stockapi.application.services.credential_service import CredentialService
from stockapi.core.config import Settings
from stockapi.domain.errors import DuplicateEmailError, RequestValidationFailed
from stockapi.domain.validation import REGISTRATION_RULES, parse_credentials
from stockapi.infrastructure.persistence.sqlite import SQLitePersistence


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a user able to log in to the API.")
    parser.add_argument("--email", help="User email (prompted when omitted)")
    return parser.parse_args()


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def main() -> None:
    load_dotenv()
    args = _parse_args()
    settings = Settings()

    email = args.email or input("Email: ").strip()
    password = _prompt_password()
    try:
        email, password = parse_credentials({"email": email, "password": password}, REGISTRATION_RULES)
    except RequestValidationFailed as exc:
        for field, messages in exc.errors.items():
            for message in messages:
                print(f"{field}: {message}", file=sys.stderr)
        raise SystemExit(1) from exc

    persistence = SQLitePersistence(settings.database_path)
    try:
        user = CredentialService(persistence, rounds=settings.bcrypt_rounds).register(email, password)
    except DuplicateEmailError as exc:
        print(f"{exc.message} Nothing to do.")
        return
    finally:
        persistence.close()
    print("User created:", user.email, f"({user.id})")


if __name__ == "__main__":
    main()
