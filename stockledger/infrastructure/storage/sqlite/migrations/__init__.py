"""Database migrations module."""

from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationResult,
    create_backup,
    discover_migrations,
    get_migration_status,
    restore_backup,
    run_migrations,
    verify_schema_integrity,
)

__all__ = [
    "REQUIRED_TABLES",
    "MigrationInfo",
    "MigrationResult",
    "create_backup",
    "discover_migrations",
    "get_migration_status",
    "restore_backup",
    "run_migrations",
    "verify_schema_integrity",
]
