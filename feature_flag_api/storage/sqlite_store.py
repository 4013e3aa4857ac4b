"""
SQLite storage backend for feature flags

Each feature is stored as a JSON document in a bucket table keyed by the
feature key. A connection is opened per transaction so that worker threads
never share one. Write transactions start with ``BEGIN IMMEDIATE``: the
write lock is taken up front and concurrent writers wait for at most
``timeout`` seconds.
"""

import logging
import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from pydantic import ValidationError

from feature_flag_api.core.errors import FlagNotFoundError, StoreError
from feature_flag_api.core.models import FeatureFlag
from feature_flag_api.storage.base import DEFAULT_BUCKET, FlagStore, StoreTransaction

logger = logging.getLogger(__name__)

BUCKET_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteTransaction(StoreTransaction):
    """Transaction over a single SQLite connection"""

    def __init__(self, conn: sqlite3.Connection, bucket: str, writable: bool):
        super().__init__(writable)
        self._conn = conn
        self._bucket = bucket

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StoreError(f"SQLite error on bucket {self._bucket}: {e}") from e

    def _decode(self, document: str) -> FeatureFlag:
        try:
            return FeatureFlag.from_json(document)
        except ValidationError as e:
            raise StoreError(f"Corrupt feature record in bucket {self._bucket}") from e

    def get(self, key: str) -> FeatureFlag:
        row = self._execute(
            f"SELECT value FROM {self._bucket} WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            raise FlagNotFoundError(key)
        return self._decode(row[0])

    def put(self, flag: FeatureFlag) -> None:
        self._ensure_writable()
        self._execute(
            f"INSERT OR REPLACE INTO {self._bucket} (key, value) VALUES (?, ?)",
            (flag.key, flag.to_json()),
        )

    def delete(self, key: str) -> None:
        self._ensure_writable()
        cursor = self._execute(f"DELETE FROM {self._bucket} WHERE key = ?", (key,))
        if cursor.rowcount == 0:
            raise FlagNotFoundError(key)

    def exists(self, key: str) -> bool:
        row = self._execute(
            f"SELECT 1 FROM {self._bucket} WHERE key = ?", (key,)
        ).fetchone()
        return row is not None

    def list_all(self) -> List[FeatureFlag]:
        rows = self._execute(
            f"SELECT value FROM {self._bucket} ORDER BY key"
        ).fetchall()
        return [self._decode(row[0]) for row in rows]


class SQLiteFlagStore(FlagStore):
    """SQLite-backed feature flag store"""

    def __init__(
        self,
        db_path: str = "features.db",
        bucket: str = DEFAULT_BUCKET,
        timeout: float = 1.0,
    ):
        if not BUCKET_NAME_PATTERN.match(bucket):
            raise ValueError(f"Invalid bucket name: {bucket!r}")

        self.db_path = db_path
        self.bucket = bucket
        self.timeout = timeout

        parent = Path(db_path).parent
        if not parent.exists():
            parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(
                self.db_path,
                timeout=self.timeout,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise StoreError(f"Unable to open database {self.db_path}: {e}") from e

    def _init_db(self) -> None:
        """Create the bucket table if it does not exist yet"""
        conn = self._connect()
        try:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {self.bucket} "
                "(key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
        except sqlite3.Error as e:
            raise StoreError(f"Unable to create bucket {self.bucket}: {e}") from e
        finally:
            conn.close()

        logger.info(f"SQLite store ready at {self.db_path} (bucket: {self.bucket})")

    @contextmanager
    def _transaction(self, writable: bool) -> Iterator[SQLiteTransaction]:
        conn = self._connect()
        try:
            try:
                conn.execute("BEGIN IMMEDIATE" if writable else "BEGIN")
            except sqlite3.Error as e:
                raise StoreError(f"Unable to begin transaction: {e}") from e

            try:
                yield SQLiteTransaction(conn, self.bucket, writable)
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                raise StoreError(f"Unable to commit transaction: {e}") from e
        finally:
            conn.close()

    def view(self):
        return self._transaction(writable=False)

    def update(self):
        return self._transaction(writable=True)
