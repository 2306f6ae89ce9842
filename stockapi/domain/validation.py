"""
Declarative payload validation.

Every field owns an ordered sequence of independent rules. ``validate`` runs
all rules of all fields and collects the failing messages per field, so a
single response can report every violation at once. Rules other than
``required`` let an absent value through, and range/length rules ignore a
value of the wrong type; the type rule of that field reports it instead.
"""

from __future__ import annotations

import math
import string
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple, Type, Union

from email_validator import EmailNotValidError, validate_email

from .errors import RequestValidationFailed
from .models import ProductDraft

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_PRICE = Decimal("999999.99")
MAX_STOCK = 2_147_483_647
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72

Check = Callable[[Any], bool]
FieldRules = Mapping[str, Sequence["Rule"]]


@dataclass(frozen=True, slots=True)
class Rule:
    check: Check
    message: str

    def passes(self, value: Any) -> bool:
        return self.check(value)


def validate(payload: Mapping[str, Any], rules: FieldRules) -> Dict[str, List[str]]:
    """Return a mapping of field name to failed rule messages (empty when valid)."""
    errors: Dict[str, List[str]] = {}
    for field, field_rules in rules.items():
        value = payload.get(field)
        messages = [rule.message for rule in field_rules if not rule.passes(value)]
        if messages:
            errors[field] = messages
    return errors


def ensure_valid(payload: Mapping[str, Any], rules: FieldRules) -> None:
    errors = validate(payload, rules)
    if errors:
        raise RequestValidationFailed(errors)


# Rule factories ---------------------------------------------------------
def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return False


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def to_decimal(value: Union[int, float, Decimal]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps the literal a JSON float was parsed from (9.99, not 9.9900000000000002131...)
    return Decimal(str(value))


def required(message: str) -> Rule:
    return Rule(lambda value: not _is_missing(value), message)


def of_type(expected: Union[Type[Any], Tuple[Type[Any], ...]], message: str) -> Rule:
    return Rule(lambda value: value is None or isinstance(value, expected), message)


def number(message: str) -> Rule:
    return Rule(lambda value: value is None or _is_number(value), message)


def integer(message: str) -> Rule:
    return Rule(lambda value: value is None or _is_integer(value), message)


def max_length(limit: int, message: str) -> Rule:
    return Rule(lambda value: not isinstance(value, str) or len(value) <= limit, message)


def greater_than(bound: Union[int, Decimal], message: str) -> Rule:
    return Rule(lambda value: not _is_number(value) or to_decimal(value) > bound, message)


def at_least(bound: Union[int, Decimal], message: str) -> Rule:
    return Rule(lambda value: not _is_number(value) or to_decimal(value) >= bound, message)


def at_most(bound: Union[int, Decimal], message: str) -> Rule:
    return Rule(lambda value: not _is_number(value) or to_decimal(value) <= bound, message)


def satisfies(predicate: Callable[[str], bool], message: str) -> Rule:
    """Apply ``predicate`` to present string values only."""
    return Rule(
        lambda value: not isinstance(value, str) or _is_missing(value) or predicate(value),
        message,
    )


def _valid_email_syntax(value: str) -> bool:
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def email_address(message: str) -> Rule:
    return satisfies(_valid_email_syntax, message)


# Rule sets --------------------------------------------------------------
PRODUCT_RULES: FieldRules = {
    "name": (
        required("Product name is required."),
        of_type(str, "Name must be a string."),
        max_length(MAX_NAME_LENGTH, f"Name cannot exceed {MAX_NAME_LENGTH} characters."),
    ),
    "description": (
        of_type(str, "Description must be a string."),
        max_length(
            MAX_DESCRIPTION_LENGTH,
            f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters.",
        ),
    ),
    "price": (
        required("Product price is required."),
        number("Price must be a number."),
        greater_than(0, "Price must be a positive value."),
        at_most(MAX_PRICE, f"Price cannot exceed {MAX_PRICE}."),
    ),
    "stock": (
        required("Stock is required."),
        integer("Stock must be an integer."),
        at_least(0, "Stock cannot be negative."),
        at_most(MAX_STOCK, f"Stock cannot exceed {MAX_STOCK}."),
    ),
}

_EMAIL_RULES = (
    required("Email is required."),
    of_type(str, "Email must be a string."),
    email_address("Invalid email format."),
)

_PASSWORD_RULES = (
    required("Password is required."),
    of_type(str, "Password must be a string."),
)

LOGIN_RULES: FieldRules = {
    "email": _EMAIL_RULES,
    "password": _PASSWORD_RULES,
}

REGISTRATION_RULES: FieldRules = {
    "email": _EMAIL_RULES,
    "password": _PASSWORD_RULES
    + (
        satisfies(
            lambda value: len(value) >= MIN_PASSWORD_LENGTH,
            f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.",
        ),
        satisfies(
            lambda value: any(ch in string.digits for ch in value),
            "Passwords must have at least one digit ('0'-'9').",
        ),
        satisfies(
            lambda value: any(ch in string.ascii_lowercase for ch in value),
            "Passwords must have at least one lowercase ('a'-'z').",
        ),
        satisfies(
            lambda value: any(ch in string.ascii_uppercase for ch in value),
            "Passwords must have at least one uppercase ('A'-'Z').",
        ),
        satisfies(
            lambda value: any(not ch.isalnum() for ch in value),
            "Passwords must have at least one non alphanumeric character.",
        ),
        satisfies(
            lambda value: len(value.encode("utf-8")) <= MAX_PASSWORD_BYTES,
            f"Passwords cannot exceed {MAX_PASSWORD_BYTES} bytes.",
        ),
    ),
}


# Typed parsing ----------------------------------------------------------
def parse_product_payload(payload: Mapping[str, Any]) -> ProductDraft:
    """Validate a create/update body and return its business fields."""
    ensure_valid(payload, PRODUCT_RULES)
    return ProductDraft(
        name=payload["name"],
        description=payload.get("description") or "",
        price=to_decimal(payload["price"]),
        stock=payload["stock"],
    )


def parse_credentials(payload: Mapping[str, Any], rules: FieldRules) -> Tuple[str, str]:
    ensure_valid(payload, rules)
    return payload["email"], payload["password"]
