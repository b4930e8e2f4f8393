"""
PostgreSQL store adapter - Implements RegistrationStore protocol.

This module provides the PostgreSQL implementation of the domain's
store port using psycopg3 with raw SQL.

Constraint Classification
-------------------------
The registrations table carries two UNIQUE constraints (email and identity
card number), NOT NULL columns, and CHECK constraints on the enumerated
columns. Driver errors are translated into StoreConstraintError with a
ConstraintKind so the domain never sees a SQLSTATE:

- 23505 unique_violation      -> UNIQUE (column taken from the constraint name)
- 23502 not_null_violation    -> NOT_NULL
- 23514 check_violation       -> CHECK
- 23503 foreign_key_violation -> FOREIGN_KEY
- class 22 data exceptions    -> INVALID_TEXT
"""

import logging
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.models import RegistrationForm, RegistrationRecord
from src.domain.ports import ConstraintKind, StoreConstraintError, StoreError

logger = logging.getLogger(__name__)

COLUMNS = RegistrationForm.field_names()

# Optional text columns are stored as NULL when left blank
NULLABLE_COLUMNS = frozenset(
    {"postal_code", "emergency_contact_name", "emergency_contact_number", "blood_group"}
)


def _column_from_constraint(constraint_name: str | None) -> str | None:
    """registrations_email_key -> email"""
    if not constraint_name:
        return None
    name = constraint_name.removeprefix("registrations_")
    for suffix in ("_key", "_check", "_fkey"):
        name = name.removesuffix(suffix)
    return name


def _row_to_record(row: dict) -> RegistrationRecord:
    data = {}
    for column in COLUMNS:
        value = row.get(column)
        if column == "date_of_birth" and value is not None:
            value = value.isoformat()
        data[column] = "" if value is None else value
    return RegistrationRecord(id=str(row["id"]), created_at=row["created_at"], data=data)


class PostgresRegistrationStore:
    """
    Implements RegistrationStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def probe(self) -> bool:
        """Verify connectivity and that the registrations table is queryable."""
        try:
            with self._pool.connection() as conn:
                conn.execute("SELECT id FROM registrations LIMIT 1")
        except psycopg.Error as e:
            logger.warning("Table verification failed: %s", e)
            return False
        return True

    def find_by_identity_number(self, identity_card_number: str) -> RegistrationRecord | None:
        sql = f"""
            SELECT id, created_at, {", ".join(COLUMNS)}
            FROM registrations
            WHERE identity_card_number = %s
            LIMIT 1
        """
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (identity_card_number,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            raise StoreError(f"Error checking IC number: {e}") from e

        return _row_to_record(row) if row is not None else None

    def insert(self, form: RegistrationForm) -> RegistrationRecord:
        """
        Insert a registration and return it with its assigned id.

        The UNIQUE constraint on email makes the database the sole arbiter
        of email uniqueness; concurrent inserts cannot both succeed.
        """
        values = form.to_dict()
        params = [
            None if column in NULLABLE_COLUMNS and values[column] == "" else values[column]
            for column in COLUMNS
        ]
        # Blank date must reach the NOT NULL constraint, not the date parser
        if params[COLUMNS.index("date_of_birth")] == "":
            params[COLUMNS.index("date_of_birth")] = None

        sql = f"""
            INSERT INTO registrations ({", ".join(COLUMNS)})
            VALUES ({", ".join(["%s"] * len(COLUMNS))})
            RETURNING id, created_at
        """

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            raise StoreConstraintError(
                ConstraintKind.UNIQUE, _column_from_constraint(e.diag.constraint_name), str(e)
            ) from e
        except errors.NotNullViolation as e:
            raise StoreConstraintError(ConstraintKind.NOT_NULL, e.diag.column_name, str(e)) from e
        except errors.CheckViolation as e:
            raise StoreConstraintError(
                ConstraintKind.CHECK, _column_from_constraint(e.diag.constraint_name), str(e)
            ) from e
        except errors.ForeignKeyViolation as e:
            raise StoreConstraintError(
                ConstraintKind.FOREIGN_KEY, _column_from_constraint(e.diag.constraint_name), str(e)
            ) from e
        except errors.DataError as e:
            raise StoreConstraintError(ConstraintKind.INVALID_TEXT, e.diag.column_name, str(e)) from e
        except errors.IntegrityError as e:
            raise StoreConstraintError(ConstraintKind.OTHER, None, str(e)) from e
        except psycopg.Error as e:
            raise StoreError(str(e)) from e

        return RegistrationRecord.from_form(form, id=str(row["id"]), created_at=row["created_at"])


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except psycopg.Error as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
