"""Input validation and sanitization.

Stateless predicates (``validate_*``), sanitizers (``sanitize_*``) and a
form-level ``validate()`` that collects error messages instead of
raising::

    from lighthouse.validation import check, validate, validate_email

    async def subscribe(request: Request):
        form = await request.form()
        result = validate(form, {
            "email": [check(validate_email, "Invalid email address")],
        })
        if not result:
            return View("subscribe.html", errors=result.messages, email=form.get("email", ""))
"""

from collections.abc import Mapping
from typing import Any

from lighthouse.validation.result import ValidationResult
from lighthouse.validation.rules import (
    Validator,
    check,
    one_of,
    required,
    validate_alpha_numeric,
    validate_alphabetic,
    validate_date,
    validate_email,
    validate_integer,
    validate_ip,
    validate_max_length,
    validate_min_length,
    validate_numeric,
    validate_required,
    validate_url,
    value_in_array,
)
from lighthouse.validation.sanitize import (
    sanitize_email,
    sanitize_float,
    sanitize_int,
    sanitize_string,
    sanitize_url,
)

__all__ = [
    "ValidationResult",
    "Validator",
    "check",
    "one_of",
    "required",
    "sanitize_email",
    "sanitize_float",
    "sanitize_int",
    "sanitize_string",
    "sanitize_url",
    "validate",
    "validate_alpha_numeric",
    "validate_alphabetic",
    "validate_date",
    "validate_email",
    "validate_integer",
    "validate_ip",
    "validate_max_length",
    "validate_min_length",
    "validate_numeric",
    "validate_required",
    "validate_url",
    "value_in_array",
]


def validate(data: Mapping[str, Any], rules: dict[str, list[Validator]]) -> ValidationResult:
    """Validate *data* against *rules*.

    Each field's rules run in order. A failed ``required`` stops the
    remaining rules for that field; other failures accumulate.
    """
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, str] = {}

    for field_name, validators in rules.items():
        value = data.get(field_name) or ""
        field_errors: list[str] = []
        for validator in validators:
            error = validator(value)
            if error is not None:
                field_errors.append(error)
                if validator is required:
                    break
        if field_errors:
            errors[field_name] = field_errors
        else:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)
