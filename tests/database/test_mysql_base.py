from datetime import datetime, timedelta, timezone

import mysql.connector
import pytest

from time_tracking.core.exceptions import NotFoundError, StorageError
from time_tracking.database.bootstrap import _iter_sql_statements, bundled_schema
from time_tracking.database.mysql_base import db_cursor, from_db_datetime, is_duplicate_key, to_db_datetime


class FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.cursor_obj = FakeCursor()
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, error=None):
        self.conn = FakeConnection()
        self.error = error

    def connect(self):
        if self.error:
            raise self.error
        return self.conn


def test_commits_on_success():
    factory = FakeFactory()

    with db_cursor(factory) as (conn, cur):
        assert conn is factory.conn
        assert cur is factory.conn.cursor_obj

    assert factory.conn.committed
    assert not factory.conn.rolled_back
    assert factory.conn.cursor_obj.closed
    assert factory.conn.closed


def test_driver_errors_become_storage_errors():
    factory = FakeFactory()

    with pytest.raises(StorageError):
        with db_cursor(factory):
            raise mysql.connector.Error("lost connection")

    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.conn.closed


def test_domain_errors_pass_through_after_rollback():
    factory = FakeFactory()

    with pytest.raises(NotFoundError):
        with db_cursor(factory):
            raise NotFoundError("missing")

    assert factory.conn.rolled_back


def test_connect_failure_is_storage_error():
    with pytest.raises(StorageError):
        with db_cursor(FakeFactory(error=mysql.connector.Error("refused"))):
            pass


def test_duplicate_key_detection():
    assert is_duplicate_key(mysql.connector.IntegrityError(msg="dup", errno=1062))
    assert not is_duplicate_key(mysql.connector.IntegrityError(msg="fk", errno=1452))
    assert not is_duplicate_key(ValueError("x"))


def test_datetime_round_trip_through_naive_utc():
    warsaw = timezone(timedelta(hours=1))
    value = datetime(2026, 2, 2, 9, 0, tzinfo=warsaw)

    stored = to_db_datetime(value)

    assert stored == datetime(2026, 2, 2, 8, 0)
    assert stored.tzinfo is None
    assert from_db_datetime(stored) == value
    assert from_db_datetime(None) is None
    with pytest.raises(ValueError):
        to_db_datetime(datetime(2026, 2, 2, 8, 0))


def test_sql_splitter_handles_quotes_and_comments():
    sql = """
    -- leading comment
    CREATE TABLE a (x VARCHAR(10) DEFAULT 'a;b'); -- trailing
    INSERT INTO a VALUES ("it's; fine");
    SELECT 1
    """

    statements = list(_iter_sql_statements(sql))

    assert statements == [
        "CREATE TABLE a (x VARCHAR(10) DEFAULT 'a;b')",
        'INSERT INTO a VALUES ("it\'s; fine")',
        "SELECT 1",
    ]


def test_bundled_schema_defines_tracking_tables():
    statements = list(_iter_sql_statements(bundled_schema()))
    text = "\n".join(statements)

    for table in ("work_sessions", "break_intervals", "tracking_settings", "tracking_user_locks", "notifications"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in text
