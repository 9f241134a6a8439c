"""
Versioned schema migrations.

Migration files live next to this module as ``vNNN_name.sql``. Applied
versions and their checksums are tracked in ``schema_migrations``; an
existing database is copied aside before migrating and restored if a
migration blows up.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = (
    "schema_migrations",
    "suppliers",
    "inventory_items",
    "inventory_movements",
    "inventory_forecasts",
)

_FILENAME_RE = re.compile(r"v(\d+)_(.+)\.sql")


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME_RE.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        content = path.read_text(encoding="utf-8")
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=hashlib.sha256(content.encode()).hexdigest()[:16],
        )


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order."""
    migrations = []
    for path in sorted(directory.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum. Empty on a fresh database."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
        return {row[0]: row[1] for row in await cursor.fetchall()}
    except aiosqlite.OperationalError:
        return {}


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        elapsed = int((time.perf_counter() - started) * 1000)
        await conn.execute(
            """
            INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed),
        )
        await conn.commit()
    except (aiosqlite.Error, OSError) as e:
        await conn.rollback()
        elapsed = int((time.perf_counter() - started) * 1000)
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=elapsed,
            error=str(e),
        )

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed,
    )
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{timestamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.info("database_restored_from_backup", backup_path=str(backup_path))


async def run_migrations(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Copy an existing database aside first

    Returns:
        Results of the migrations that were attempted
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []

    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            applied = await get_applied_migrations(conn)

            for migration in discover_migrations():
                recorded = applied.get(migration.version)
                if recorded == migration.checksum:
                    continue
                if recorded is not None:
                    # Edited after being applied; never re-run
                    logger.error(
                        "migration_checksum_mismatch",
                        version=migration.version,
                        recorded=recorded,
                        current=migration.checksum,
                    )
                    break

                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break

            cursor = await conn.execute("PRAGMA foreign_key_check")
            violations = await cursor.fetchall()
            if violations:
                logger.error("foreign_key_violations", count=len(violations))

    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    if backup_path and all(r.success for r in results):
        backup_path.unlink()
        logger.info("backup_cleaned_up")
    elif backup_path:
        restore_backup(db_path, backup_path)

    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Current version, applied and pending migrations."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
            "total_migrations": len(discovered),
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """Foreign key, page integrity and required-table checks."""
    db_path = db_path or get_settings().storage.db_path
    checks = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = await cursor.fetchall()
        checks.append({
            "check": "foreign_keys",
            "status": "PASS" if not fk_violations else "FAIL",
            "violations": len(fk_violations),
        })

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = await cursor.fetchone()
        checks.append({
            "check": "integrity",
            "status": "PASS" if integrity[0] == "ok" else "FAIL",
            "result": integrity[0],
        })

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        existing = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in existing]
        checks.append({
            "check": "required_tables",
            "status": "PASS" if not missing else "FAIL",
            "missing": missing,
        })

    return checks
