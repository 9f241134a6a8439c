#!/usr/bin/env python3
"""
Stock ledger management CLI.

Usage:
    python manage.py migrate                Apply pending database migrations
    python manage.py migration-status       Show applied and pending migrations
    python manage.py verify-schema          Run database integrity checks
    python manage.py serve                  Start the API server
    python manage.py generate-forecasts     Recalculate forecasts for all active items
    python manage.py expire-forecasts       Expire forecasts past their validity window
"""

import argparse
import asyncio
import sys
from pathlib import Path

from stockledger.config import configure_logging, get_settings


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

    db_path = Path(args.db_path) if args.db_path else None
    results = asyncio.run(run_migrations(db_path, create_backup_before=not args.no_backup))

    if not results:
        print("Database is up to date.")
        return

    failed = False
    for result in results:
        marker = "ok" if result.success else "FAILED"
        print(f"  v{result.version} {result.name}: {marker} ({result.execution_time_ms} ms)")
        if not result.success:
            print(f"    {result.error}")
            failed = True

    if failed:
        sys.exit(1)


def cmd_migration_status(args: argparse.Namespace) -> None:
    """Print migration status."""
    from stockledger.infrastructure.storage.sqlite.migrations import get_migration_status

    db_path = Path(args.db_path) if args.db_path else None
    status = asyncio.run(get_migration_status(db_path))

    print(f"Database exists:  {status['exists']}")
    print(f"Current version:  {status['current_version'] or '-'}")
    print(f"Applied:          {', '.join(status['applied_migrations']) or '-'}")
    print(f"Pending:          {', '.join(status['pending_migrations']) or '-'}")


def cmd_verify_schema(args: argparse.Namespace) -> None:
    """Run integrity checks against the database."""
    from stockledger.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    db_path = Path(args.db_path) if args.db_path else None
    checks = asyncio.run(verify_schema_integrity(db_path))

    ok = True
    for check in checks:
        print(f"  {check['check']}: {check['status']}")
        if check["status"] != "PASS":
            details = {k: v for k, v in check.items() if k not in ("check", "status")}
            print(f"    {details}")
            ok = False

    if not ok:
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "stockledger.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=None if args.reload else args.workers,
    )


async def _generate_forecasts() -> None:
    from stockledger.application.use_cases import GenerateForecastsUseCase
    from stockledger.infrastructure.storage.sqlite import close_pool

    try:
        report = await GenerateForecastsUseCase().execute(generated_by="manage.py")
    finally:
        await close_pool()

    print(f"Generated {report.generated} forecast(s).")
    for item_id, error in sorted(report.failed.items()):
        print(f"  item {item_id}: {error}")


async def _expire_forecasts() -> None:
    from stockledger.application.use_cases import ExpireForecastsUseCase
    from stockledger.infrastructure.storage.sqlite import close_pool

    try:
        result = await ExpireForecastsUseCase().execute()
    finally:
        await close_pool()

    print(f"Expired {result.expired} forecast(s) as of {result.as_of.isoformat()}.")


def cmd_generate_forecasts(args: argparse.Namespace) -> None:
    asyncio.run(_generate_forecasts())


def cmd_expire_forecasts(args: argparse.Namespace) -> None:
    asyncio.run(_expire_forecasts())


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stock ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", help="Database file (default: from settings)")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # migration-status
    p_status = sub.add_parser("migration-status", help="Show migration status")
    p_status.add_argument("--db-path", help="Database file (default: from settings)")
    p_status.set_defaults(func=cmd_migration_status)

    # verify-schema
    p_verify = sub.add_parser("verify-schema", help="Run database integrity checks")
    p_verify.add_argument("--db-path", help="Database file (default: from settings)")
    p_verify.set_defaults(func=cmd_verify_schema)

    # serve
    settings = get_settings()
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=settings.api.host, help="Bind host")
    p_serve.add_argument("--port", type=int, default=settings.api.port, help="Bind port")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.add_argument("--workers", type=int, default=1, help="Number of uvicorn workers")
    p_serve.set_defaults(func=cmd_serve)

    # forecasts
    p_generate = sub.add_parser("generate-forecasts", help="Recalculate all forecasts")
    p_generate.set_defaults(func=cmd_generate_forecasts)

    p_expire = sub.add_parser("expire-forecasts", help="Expire stale forecasts")
    p_expire.set_defaults(func=cmd_expire_forecasts)

    args = parser.parse_args()
    configure_logging()
    args.func(args)


if __name__ == "__main__":
    main()
