"""SQLite storage for phone usage rows.

Schema design:
- hourly_phone_usage: one row per (user_id, date, hour, app_name),
  usage_time in minutes plus an open count
- daily_usage_summary: optional per-day totals; preferred over summing
  hourly rows when present
- dates stored as ISO 'YYYY-MM-DD' text, so string ranges sort by day

Migration system:
- Schema version tracked in db_meta table
- Migrations stored as SQL files in src/usagemon/migrations/
- Files named: NNN_description.sql (e.g., 001_initial_schema.sql)
- Applied in order on database init
"""

import sqlite3
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from .env import get_config
from . import log


MIGRATIONS_DIR = Path(__file__).parent / "migrations"

DateLike = Union[date, str]


def _iso(d: DateLike) -> str:
    return d.isoformat() if isinstance(d, date) else str(d)


# =============================================================================
# File-based Migration System
# =============================================================================


def _get_migration_files() -> list[tuple[int, Path]]:
    """Get all migration files sorted by version number."""
    if not MIGRATIONS_DIR.exists():
        return []

    migrations = []
    for sql_file in MIGRATIONS_DIR.glob("*.sql"):
        try:
            version = int(sql_file.stem.split("_")[0])
        except ValueError:
            log.warn(f"Skipping invalid migration filename: {sql_file.name}")
            continue
        migrations.append((version, sql_file))

    return sorted(migrations, key=lambda x: x[0])


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Current schema version, 0 for a fresh database."""
    try:
        row = conn.execute(
            "SELECT value FROM db_meta WHERE key = 'schema_version'"
        ).fetchone()
        return int(row[0]) if row else 0
    except sqlite3.OperationalError:
        # db_meta table doesn't exist
        return 0


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    conn.execute(
        "INSERT OR REPLACE INTO db_meta (key, value) VALUES ('schema_version', ?)",
        (str(version),),
    )


def _apply_migrations(conn: sqlite3.Connection) -> None:
    """Apply pending migrations from SQL files."""
    current_version = _get_schema_version(conn)
    migrations = _get_migration_files()

    if not migrations:
        raise RuntimeError(
            f"No migration files found in {MIGRATIONS_DIR}. "
            "Expected at least 001_initial_schema.sql"
        )

    for version, sql_file in migrations:
        if version <= current_version:
            continue

        log.info(f"Applying migration {sql_file.name}")
        try:
            conn.executescript(sql_file.read_text())
            _set_schema_version(conn, version)
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {sql_file.name} failed: {e}") from e


def get_schema_version(db_path: Optional[Path] = None) -> int:
    """Schema version of the database file, 0 if it doesn't exist."""
    if db_path is None:
        db_path = get_db_path()
    if not db_path.exists():
        return 0

    with get_connection(db_path, readonly=True) as conn:
        return _get_schema_version(conn)


# =============================================================================
# Database Connection & Initialization
# =============================================================================


def get_db_path() -> Path:
    """Get database file path."""
    return get_config().state_dir / "usage.db"


def init_db(db_path: Optional[Path] = None) -> None:
    """Create the database and bring its schema up to date.

    Safe to call multiple times.

    Args:
        db_path: Optional path override (for testing)
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        _apply_migrations(conn)
        conn.commit()
        log.debug(f"Database initialized at {db_path} (schema v{_get_schema_version(conn)})")
    finally:
        conn.close()


@contextmanager
def get_connection(
    db_path: Optional[Path] = None,
    readonly: bool = False
) -> Iterator[sqlite3.Connection]:
    """Context manager for database connections.

    Args:
        db_path: Optional path override
        readonly: If True, open in read-only mode

    Yields:
        sqlite3.Connection with Row factory enabled
    """
    if db_path is None:
        db_path = get_db_path()

    if readonly:
        conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    else:
        conn = sqlite3.connect(db_path)

    conn.row_factory = sqlite3.Row

    try:
        yield conn
        if not readonly:
            conn.commit()
    except Exception:
        if not readonly:
            conn.rollback()
        raise
    finally:
        conn.close()


# =============================================================================
# Writes
# =============================================================================


def insert_usage(
    user_id: str,
    day: DateLike,
    hour: int,
    app_name: str,
    usage_time: float,
    open_count: int = 0,
    db_path: Optional[Path] = None,
) -> None:
    """Insert or replace one hourly app usage row.

    Args:
        user_id: User identifier
        day: Calendar day of the usage
        hour: Hour of day, 0-23
        app_name: Application display name
        usage_time: Minutes used within the hour
        open_count: Number of times the app was opened
        db_path: Optional path override
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be in 0..23, got {hour}")

    with get_connection(db_path) as conn:
        conn.execute(
            """
            INSERT OR REPLACE INTO hourly_phone_usage
            (user_id, date, hour, app_name, usage_time, open_count)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (user_id, _iso(day), hour, app_name, float(usage_time), int(open_count)),
        )


def upsert_daily_summary(
    user_id: str,
    day: DateLike,
    total_usage_time: float,
    db_path: Optional[Path] = None,
) -> None:
    """Store the total minutes used on one day."""
    with get_connection(db_path) as conn:
        conn.execute(
            """
            INSERT INTO daily_usage_summary (user_id, date, total_usage_time)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id, date) DO UPDATE SET
                total_usage_time = excluded.total_usage_time
            """,
            (user_id, _iso(day), float(total_usage_time)),
        )


# =============================================================================
# Queries
# =============================================================================


def get_usage_rows(
    user_id: str,
    start_date: DateLike,
    end_date: DateLike,
    hour: Optional[int] = None,
    until_hour: Optional[int] = None,
    db_path: Optional[Path] = None,
) -> list[dict[str, Any]]:
    """Fetch hourly usage rows for a user within a date range.

    Args:
        user_id: User identifier
        start_date: First day (inclusive)
        end_date: Last day (inclusive)
        hour: Only rows for exactly this hour
        until_hour: Only rows with hour <= until_hour
        db_path: Optional path override

    Returns:
        Row dicts ordered by date, hour and app name
    """
    sql = """
        SELECT user_id, date, hour, app_name, usage_time, open_count
        FROM hourly_phone_usage
        WHERE user_id = ? AND date BETWEEN ? AND ?
    """
    params: list[Any] = [user_id, _iso(start_date), _iso(end_date)]
    if hour is not None:
        sql += " AND hour = ?"
        params.append(hour)
    if until_hour is not None:
        sql += " AND hour <= ?"
        params.append(until_hour)
    sql += " ORDER BY date ASC, hour ASC, app_name ASC"

    with get_connection(db_path, readonly=True) as conn:
        return [dict(row) for row in conn.execute(sql, params).fetchall()]


def get_day_total(
    user_id: str,
    day: DateLike,
    db_path: Optional[Path] = None,
) -> float:
    """Total minutes used on a day.

    Uses daily_usage_summary when a row exists, otherwise sums the
    hourly rows. Returns 0.0 when there is no data at all.
    """
    with get_connection(db_path, readonly=True) as conn:
        row = conn.execute(
            "SELECT total_usage_time FROM daily_usage_summary WHERE user_id = ? AND date = ?",
            (user_id, _iso(day)),
        ).fetchone()
        if row is not None:
            return float(row[0])

        row = conn.execute(
            "SELECT COALESCE(SUM(usage_time), 0) FROM hourly_phone_usage "
            "WHERE user_id = ? AND date = ?",
            (user_id, _iso(day)),
        ).fetchone()
        return float(row[0])


def get_daily_totals(
    user_id: str,
    start_date: DateLike,
    end_date: DateLike,
    db_path: Optional[Path] = None,
) -> list[tuple[str, float]]:
    """(date, total minutes) summary rows within a date range, oldest first."""
    with get_connection(db_path, readonly=True) as conn:
        cursor = conn.execute(
            """
            SELECT date, total_usage_time FROM daily_usage_summary
            WHERE user_id = ? AND date BETWEEN ? AND ?
            ORDER BY date ASC
            """,
            (user_id, _iso(start_date), _iso(end_date)),
        )
        return [(row["date"], float(row["total_usage_time"])) for row in cursor.fetchall()]


def get_active_users(
    start_date: DateLike,
    end_date: DateLike,
    db_path: Optional[Path] = None,
) -> list[str]:
    """Users with any usage row or daily summary in a date range, sorted."""
    with get_connection(db_path, readonly=True) as conn:
        cursor = conn.execute(
            """
            SELECT user_id FROM hourly_phone_usage WHERE date BETWEEN ? AND ?
            UNION
            SELECT user_id FROM daily_usage_summary WHERE date BETWEEN ? AND ?
            ORDER BY user_id
            """,
            (_iso(start_date), _iso(end_date), _iso(start_date), _iso(end_date)),
        )
        return [row[0] for row in cursor.fetchall()]
