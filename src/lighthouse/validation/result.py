"""Validation result: immutable container for validated data or errors."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating form data against a set of rules.

    The result is falsy when invalid, so you can write::

        result = validate(form, rules)
        if not result:
            return View("register.html", errors=result.messages)

    ``data`` holds the values of fields that passed. ``errors`` maps
    field names to their messages; ``messages`` flattens them in rule
    order for a displayable error list.
    """

    data: dict[str, str]
    errors: dict[str, list[str]]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> list[str]:
        return [msg for field_errors in self.errors.values() for msg in field_errors]

    def __bool__(self) -> bool:
        return self.is_valid
