"""``lighthouse run``: start the pounce dev server."""

import argparse
import sys

from lighthouse.cli._resolve import resolve_app


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app.run(
        args.host,
        args.port,
        reload=False if args.no_reload else None,
        app_path=args.app,
    )
