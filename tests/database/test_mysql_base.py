from __future__ import annotations

from pathlib import Path

import mysql.connector
import pytest

from src.class_attendance.class_attendance.core.exceptions import DuplicateKeyError, StorageError
from src.class_attendance.class_attendance.database.bootstrap import iter_sql_statements
from src.class_attendance.class_attendance.database.mysql_base import db_cursor, duplicate_key_name

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


class FakeCursor:
    def __init__(self, error=None):
        self._error = error
        self.closed = False

    def execute(self, sql, params=None):
        if self._error:
            raise self._error

    def close(self):
        self.closed = True


class FakeConn:
    def __init__(self, error=None):
        self.cur = FakeCursor(error)
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cur

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, connect_error=None):
        self.conn = conn
        self._connect_error = connect_error

    def connect(self):
        if self._connect_error:
            raise self._connect_error
        return self.conn


def test_duplicate_key_name_handles_qualified_and_bare_names():
    assert (
        duplicate_key_name("Duplicate entry '201-7' for key 'attendance.uq_attendance_student_session'")
        == "uq_attendance_student_session"
    )
    assert duplicate_key_name("Duplicate entry '3' for key 'uq_sessions_active_class'") == "uq_sessions_active_class"
    assert duplicate_key_name("something else") == ""


def test_successful_block_commits_and_closes():
    conn = FakeConn()
    with db_cursor(FakeFactory(conn)) as (_, cur):
        cur.execute("SELECT 1")

    assert conn.committed is True
    assert conn.rolled_back is False
    assert conn.closed is True
    assert conn.cur.closed is True


def test_duplicate_entry_becomes_duplicate_key_error():
    error = mysql.connector.errors.IntegrityError(
        msg="Duplicate entry '201-7' for key 'attendance.uq_attendance_student_session'", errno=1062
    )
    conn = FakeConn(error)

    with pytest.raises(DuplicateKeyError) as exc:
        with db_cursor(FakeFactory(conn)) as (_, cur):
            cur.execute("INSERT ...")

    assert exc.value.key == "uq_attendance_student_session"
    assert conn.rolled_back is True
    assert conn.closed is True


def test_other_integrity_error_is_storage_error():
    error = mysql.connector.errors.IntegrityError(msg="Cannot add or update a child row", errno=1452)

    with pytest.raises(StorageError) as exc:
        with db_cursor(FakeFactory(FakeConn(error))) as (_, cur):
            cur.execute("INSERT ...")
    assert not isinstance(exc.value, DuplicateKeyError)


def test_connection_failure_is_storage_error():
    factory = FakeFactory(connect_error=mysql.connector.errors.InterfaceError(msg="Can't connect", errno=2003))

    with pytest.raises(StorageError):
        with db_cursor(factory):
            pass


def test_schema_declares_the_unique_keys():
    statements = list(iter_sql_statements(SCHEMA.read_text(encoding="utf-8")))
    text = "\n".join(statements)

    assert "uq_attendance_student_session" in text
    assert "uq_sessions_active_class" in text
    assert "uq_sessions_active_code" in text


def test_iter_sql_statements_keeps_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES (\"c\");"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", 'INSERT INTO t VALUES ("c")']
