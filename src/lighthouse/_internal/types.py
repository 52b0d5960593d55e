"""Shared type aliases used across lighthouse modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: positional path captures, optional ``request``
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
