"""``lighthouse routes``: list registered routes in match order."""

import argparse
import sys

from lighthouse.cli._resolve import resolve_app


def run_routes(args: argparse.Namespace) -> None:
    """Print a PATTERN / HANDLER table for the resolved app."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str]] = []
    for route in routes:
        handler_name = getattr(route.handler, "__name__", str(route.handler))
        if route.name:
            handler_name = f"{handler_name} ({route.name})"
        rows.append((route.pattern, handler_name))

    width = max(7, *(len(pattern) for pattern, _ in rows))
    fmt = f"{{:<{width}}}  {{}}"
    print(fmt.format("PATTERN", "HANDLER"))
    print("-" * min(width + 2 + max(len(h) for _, h in rows), 80))
    for pattern, handler_name in rows:
        print(fmt.format(pattern, handler_name))
