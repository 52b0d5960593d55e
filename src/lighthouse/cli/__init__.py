"""Lighthouse CLI: dev server, route listing and migrations.

Entry point registered as ``lighthouse`` in ``pyproject.toml``::

    [project.scripts]
    lighthouse = "lighthouse.cli:main"
"""

import argparse
import sys

DEFAULT_DATABASE = "sqlite:///storage/database.sqlite"
DEFAULT_MIGRATIONS_DIR = "migrations"


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``lighthouse`` command."""
    parser = argparse.ArgumentParser(
        prog="lighthouse",
        description="Lighthouse: a small, predictable web stack.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- lighthouse run ---------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the dev server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Do not restart on file changes",
    )

    # -- lighthouse routes ------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in match order")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- lighthouse migrate -----------------------------------------------
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending migrations")
    migrate_parser.add_argument(
        "--database",
        default=None,
        help=f"Database URL (default: $DATABASE_URL or {DEFAULT_DATABASE})",
    )
    migrate_parser.add_argument(
        "--dir",
        default=DEFAULT_MIGRATIONS_DIR,
        help="Migrations directory",
    )

    # -- lighthouse make-migration ----------------------------------------
    make_parser = subparsers.add_parser("make-migration", help="Create a migration file")
    make_parser.add_argument("name", help="Migration name (e.g. create_users)")
    make_parser.add_argument(
        "--dir",
        default=DEFAULT_MIGRATIONS_DIR,
        help="Migrations directory",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from lighthouse.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from lighthouse.cli._routes import run_routes

        run_routes(args)
    elif args.command == "migrate":
        from lighthouse.cli._migrate import run_migrate

        run_migrate(args)
    elif args.command == "make-migration":
        from lighthouse.cli._migrate import run_make_migration

        run_make_migration(args)
