"""
SQLite data store with schema-validated collections.

The ``Database`` object owns the single connection used by the whole
application.  It is opened by the FastAPI lifespan handler, handed to
the services at construction time and closed on shutdown.  On open it
applies pending migrations, stored as versions in the ``migrations``
table and executed in order.

Each table is exposed as a ``Collection``: documents are plain dicts
that are validated against a list of ``FieldSpec`` declarations before
insert (defaults filled, required fields checked, values cast to their
declared type).  Queries accept a small filter mapping where a value is
either matched for equality or given as ``{"$gte": ..., "$lte": ...}``.
"""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from .dates import from_storage, parse_date, to_storage, utcnow
from .errors import DuplicateError, InternalError, SchemaValidationError

logger = logging.getLogger(__name__)

MEMORY_URL = ":memory:"
SQLITE_SCHEME = "sqlite:///"

SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1

MIGRATIONS: List[tuple[int, str]] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS exercises (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            userId INTEGER NOT NULL,
            description TEXT NOT NULL,
            duration INTEGER NOT NULL,
            date TEXT NOT NULL
        );
        """,
    ),
    # Migration 2: log queries always filter by owner and date
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_exercises_user_date ON exercises(userId, date);
        """,
    ),
]

_TYPE_NAMES = {int: "Number", str: "String", datetime: "Date"}

_OPERATORS = {"$gte": ">=", "$lte": "<=", "$gt": ">", "$lt": "<"}


@dataclass(frozen=True)
class FieldSpec:
    """Declaration of one document field."""

    name: str
    type: type
    required: bool = False
    default: Optional[Callable[[], Any]] = None


USER_FIELDS = (FieldSpec("username", str, required=True),)

EXERCISE_FIELDS = (
    FieldSpec("userId", int, required=True),
    FieldSpec("description", str, required=True),
    FieldSpec("duration", int, required=True),
    FieldSpec("date", datetime, default=utcnow),
)


def resolve_database_path(url: str) -> str:
    """Turn a connection string into something ``sqlite3.connect`` accepts.

    ``sqlite:///`` prefixes are stripped.  Relative paths are resolved
    against the project root; ``:memory:`` is returned unchanged.
    """
    if url.startswith(SQLITE_SCHEME):
        url = url[len(SQLITE_SCHEME):]
    if url == MEMORY_URL:
        return url
    if os.path.isabs(url):
        return url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / url).resolve())


def check_int_range(value: int) -> int:
    """Reject integers that do not fit a SQLite INTEGER column."""
    if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
        raise ValueError(value)
    return value


def _cast(spec: FieldSpec, value: Any) -> Any:
    """Cast ``value`` to the field type, raising ``ValueError`` on failure."""
    if spec.type is int:
        if isinstance(value, bool):
            raise ValueError(value)
        if isinstance(value, int):
            return check_int_range(value)
        if isinstance(value, float) and value.is_integer():
            return check_int_range(int(value))
        if isinstance(value, str):
            return check_int_range(int(value.strip()))
        raise ValueError(value)
    if spec.type is str:
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value)
        raise ValueError(value)
    if spec.type is datetime:
        return parse_date(value)
    raise ValueError(value)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


class Collection:
    """A table whose rows are validated documents."""

    def __init__(self, db: "Database", name: str, fields: Sequence[FieldSpec]) -> None:
        self.db = db
        self.name = name
        self.fields = tuple(fields)
        self._by_name = {spec.name: spec for spec in self.fields}

    def validate(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Return a cleaned copy of ``document`` or raise ``SchemaValidationError``."""
        errors: Dict[str, str] = {}
        cleaned: Dict[str, Any] = {}
        for spec in self.fields:
            value = document.get(spec.name)
            if _is_missing(value) and spec.default is not None:
                value = spec.default()
            if _is_missing(value):
                if spec.required:
                    errors[spec.name] = f"Path `{spec.name}` is required."
                continue
            try:
                cleaned[spec.name] = _cast(spec, value)
            except (TypeError, ValueError):
                errors[spec.name] = (
                    f'Cast to {_TYPE_NAMES[spec.type]} failed for value "{value}" '
                    f'at path "{spec.name}"'
                )
        if errors:
            raise SchemaValidationError(self.name, errors)
        return cleaned

    def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and store ``document``; return it with its assigned ``id``."""
        cleaned = self.validate(document)
        columns = list(cleaned)
        sql = "INSERT INTO {} ({}) VALUES ({})".format(
            self.name,
            ", ".join(columns),
            ", ".join("?" for _ in columns),
        )
        params = [self._encode(cleaned[column]) for column in columns]
        try:
            with self.db.cursor() as cursor:
                cursor.execute(sql, params)
                new_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc):
                raise DuplicateError(f"duplicate key error collection: {self.name}") from exc
            raise InternalError(str(exc)) from exc
        return {"id": new_id, **cleaned}

    def find_by_id(self, doc_id: int) -> Optional[Dict[str, Any]]:
        rows = self.find({"id": doc_id}, limit=1)
        return rows[0] if rows else None

    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        exclude: Sequence[str] = (),
    ) -> List[Dict[str, Any]]:
        """Return matching documents in insertion order.

        ``limit`` of ``None`` means unbounded.  Fields listed in
        ``exclude`` are dropped from each returned document.
        """
        clauses: List[str] = []
        params: List[Any] = []
        for column, condition in (filters or {}).items():
            self._check_column(column)
            if isinstance(condition, dict):
                for op, operand in condition.items():
                    if op not in _OPERATORS:
                        raise InternalError(f"unsupported operator {op}")
                    clauses.append(f"{column} {_OPERATORS[op]} ?")
                    params.append(self._encode(operand))
            else:
                clauses.append(f"{column} = ?")
                params.append(self._encode(condition))
        sql = f"SELECT * FROM {self.name}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        with self.db.cursor() as cursor:
            rows = cursor.execute(sql, params).fetchall()
        return [self._decode(row, exclude) for row in rows]

    def _check_column(self, column: str) -> None:
        if column != "id" and column not in self._by_name:
            raise InternalError(f"unknown field {column} in {self.name}")

    @staticmethod
    def _encode(value: Any) -> Any:
        if isinstance(value, datetime):
            return to_storage(value)
        return value

    def _decode(self, row: sqlite3.Row, exclude: Sequence[str]) -> Dict[str, Any]:
        document: Dict[str, Any] = {}
        for key in row.keys():
            if key in exclude:
                continue
            value = row[key]
            spec = self._by_name.get(key)
            if spec is not None and spec.type is datetime and value is not None:
                value = from_storage(value)
            document[key] = value
        return document


class Database:
    """Owner of the single SQLite connection shared by all requests."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.path = resolve_database_path(url)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self.users = Collection(self, "users", USER_FIELDS)
        self.exercises = Collection(self, "exercises", EXERCISE_FIELDS)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def connect(self) -> "Database":
        """Open the connection and apply pending migrations."""
        if self._conn is not None:
            return self
        if self.path != MEMORY_URL:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        # Requests run on the event loop while the TestClient and uvicorn
        # may open the connection from another thread.
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.info("Opened data store at %s", self.path)
        self.migrate()
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info("Closed data store at %s", self.path)

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor; commit on success, roll back on error."""
        if self._conn is None:
            raise InternalError("Data store is not connected")
        with self._lock:
            cursor = self._conn.cursor()
            try:
                yield cursor
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            finally:
                cursor.close()

    def migrate(self) -> int:
        """Apply migrations newer than the stored version; return the new version."""
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0
            for version, sql in MIGRATIONS:
                if version > current_version:
                    logger.info("Applying migration %s", version)
                    cursor.executescript(sql)
                    cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                    current_version = version
        return current_version
