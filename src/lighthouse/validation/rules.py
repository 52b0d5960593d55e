"""Validation predicates and form rules.

Predicates take any value and answer ``True``/``False``::

    validate_email("a@example.com")   # True
    validate_required("0")            # True: "0" counts as present

``check()`` turns a predicate into a form rule for ``validate()``: a
callable that returns an error message, or ``None`` when valid::

    rules = {
        "email": [check(validate_email, "Invalid email address")],
        "password": [check(validate_min_length, "Too short", 8)],
    }
"""

import ipaddress
import re
from collections.abc import Callable, Collection, Iterable
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

# A form rule: error message on failure, None on success
type Validator = Callable[[Any], str | None]


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def validate_required(value: Any) -> bool:
    """True for any non-empty value. The string ``"0"`` is present;
    ``None``, ``""``, ``0``, ``False`` and empty collections are not."""
    if isinstance(value, str):
        return value != ""
    return bool(value)


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def validate_min_length(value: Any, length: int) -> bool:
    return len(_text(value)) >= length


def validate_max_length(value: Any, length: int) -> bool:
    return len(_text(value)) <= length


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,}$"
)


def validate_email(value: Any) -> bool:
    """Structural email check (local part, ``@``, dotted domain)."""
    return isinstance(value, str) and len(value) <= 254 and bool(_EMAIL_RE.match(value))


def validate_url(value: Any) -> bool:
    """Absolute URL with a scheme and a host."""
    if not isinstance(value, str) or not value or any(c.isspace() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc and parts.hostname)


def validate_ip(value: Any) -> bool:
    """IPv4 or IPv6 address."""
    if not isinstance(value, str):
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def validate_date(value: Any, date_format: str = "%Y-%m-%d") -> bool:
    """Strict date check: *value* must parse with *date_format* and format back
    to exactly the same string (``"2024-2-1"`` fails ``%Y-%m-%d``)."""
    text = _text(value)
    try:
        parsed = datetime.strptime(text, date_format)
    except ValueError:
        return False
    return parsed.strftime(date_format) == text


# ---------------------------------------------------------------------------
# Character classes
# ---------------------------------------------------------------------------

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_INTEGER_RE = re.compile(r"^[+-]?(0|[1-9]\d*)$")
_ALPHA_RE = re.compile(r"^[A-Za-z]+$")
_ALNUM_RE = re.compile(r"^[A-Za-z0-9]+$")


def validate_numeric(value: Any) -> bool:
    """Number, or a string holding one (sign, decimals, exponent allowed)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    return isinstance(value, str) and bool(_NUMERIC_RE.match(value))


def validate_integer(value: Any) -> bool:
    """Integer, or a string of optionally signed digits without leading zeros."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(_INTEGER_RE.match(value))


def validate_alphabetic(value: Any) -> bool:
    return bool(_ALPHA_RE.match(_text(value)))


def validate_alpha_numeric(value: Any) -> bool:
    return bool(_ALNUM_RE.match(_text(value)))


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


def value_in_array(value: Any, allowed: Iterable[Any]) -> bool:
    """Strict membership: type and value must both match (``1`` is not ``"1"``)."""
    return any(type(item) is type(value) and item == value for item in allowed)


# ---------------------------------------------------------------------------
# Form rules
# ---------------------------------------------------------------------------


def check(predicate: Callable[..., bool], message: str, *args: Any) -> Validator:
    """Wrap *predicate* as a form rule reporting *message* on failure."""

    def rule(value: Any) -> str | None:
        return None if predicate(value, *args) else message

    return rule


def required(value: Any) -> str | None:
    """Form rule: field must be present."""
    return None if validate_required(value) else "This field is required"


def one_of(choices: Collection[str], message: str | None = None) -> Validator:
    """Form rule: value must be one of *choices*."""

    def rule(value: Any) -> str | None:
        if value_in_array(value, choices):
            return None
        return message or f"Must be one of: {', '.join(sorted(choices))}"

    return rule


def _text(value: Any) -> str:
    return "" if value is None else str(value)
