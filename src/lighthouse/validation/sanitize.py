"""Sanitizers: trim and transform untrusted input, never reject it.

Use them before echoing input back into a page or storing it.
"""

import html
import re
from typing import Any

_EMAIL_STRIP = re.compile(r"[^A-Za-z0-9!#$%&'*+\-=?^_`{|}~@.\[\]]")
_URL_STRIP = re.compile(r"[^A-Za-z0-9$\-_.+!*'(),{}|\\^~\[\]`<>#%\";/?:@&=]")
_INT_STRIP = re.compile(r"[^0-9+\-]")
_FLOAT_STRIP = re.compile(r"[^0-9+\-.]")
_LEADING_INT = re.compile(r"^[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")


def sanitize_string(value: Any) -> str:
    """Trim, then HTML-escape (quotes included)."""
    return html.escape(_text(value).strip(), quote=True)


def sanitize_email(value: Any) -> str:
    """Trim and drop every character not allowed in an email address."""
    return _EMAIL_STRIP.sub("", _text(value).strip())


def sanitize_url(value: Any) -> str:
    """Trim and drop every character not allowed in a URL."""
    return _URL_STRIP.sub("", _text(value).strip())


def sanitize_int(value: Any) -> int:
    """Keep digits and signs, then read the leading integer.

    ``" 123abc "`` gives ``123``; input with no leading digits gives ``0``.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    m = _LEADING_INT.match(_INT_STRIP.sub("", _text(value)))
    return int(m.group(0)) if m else 0


def sanitize_float(value: Any) -> float:
    """Keep digits, signs and the decimal point, then read the leading number.

    ``" 12.34abc "`` gives ``12.34``.
    """
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    m = _LEADING_FLOAT.match(_FLOAT_STRIP.sub("", _text(value)))
    return float(m.group(0)) if m else 0.0


def _text(value: Any) -> str:
    return "" if value is None else str(value)
