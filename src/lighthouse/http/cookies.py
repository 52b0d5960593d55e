"""Cookie header parsing and ``Set-Cookie`` serialization.

The read side feeds ``Request.cookies``; the write side is what
``Response.with_cookie`` attaches and the sender serializes.
"""

from __future__ import annotations

from dataclasses import dataclass


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header into a name -> value dict.

    Pairs without ``=`` are ignored. An empty header gives ``{}``.
    """
    cookies: dict[str, str] = {}
    for chunk in header.split(";") if header else ():
        name, sep, value = chunk.strip().partition("=")
        if sep and name:
            cookies[name.strip()] = value.strip()
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` directive."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    @classmethod
    def expired(cls, name: str, *, path: str = "/") -> SetCookie:
        """A directive that tells the browser to drop *name*."""
        return cls(name=name, value="", max_age=0, path=path)

    def to_header_value(self) -> str:
        parts = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(parts)
