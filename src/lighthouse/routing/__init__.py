"""Ordered-pattern routing."""

from lighthouse.routing.route import Route, RouteMatch, compile_pattern
from lighthouse.routing.router import Router

__all__ = ["Route", "RouteMatch", "Router", "compile_pattern"]
