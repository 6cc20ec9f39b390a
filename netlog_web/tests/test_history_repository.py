from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from netlog_web.adapters.sqlserver_history import SqlServerHistoryRepository
from netlog_web.domain.errors import ExternalServiceError, MalformedResponseError
from netlog_web.repositories.history_repository import DisabledHistoryRepository, summary_title_for
from netlog_web.tests.fixtures import SAMPLE_RESPONSE, quiet_result, sample_result


# -----------------------------
# Test doubles
# -----------------------------
class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self._conn = conn

    def execute(self, q: str, *params: Any) -> "FakeCursor":
        self._conn.executed.append((q, params))
        if self._conn.error is not None:
            raise self._conn.error
        return self

    def fetchone(self):
        return self._conn.rows[0] if self._conn.rows else None

    def fetchall(self):
        return list(self._conn.rows)


class FakeConnection:
    def __init__(self, rows: Optional[List[Any]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.executed: List[tuple] = []
        self.commits = 0
        self.conn_strs: List[tuple] = []

    def __enter__(self) -> "FakeConnection":
        return self

    def __exit__(self, *exc) -> bool:
        return False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.commits += 1

    def connect(self, conn_str: str, timeout: int) -> "FakeConnection":
        self.conn_strs.append((conn_str, timeout))
        return self


# -----------------------------
# Helpers
# -----------------------------
ENTRY_ID = "3f2504e0-4f89-11d3-9a0c-0305e82c3301"


def make_row(entry_id: str = ENTRY_ID, dashboard: Any = None, title: Optional[str] = "Anomaly: x", created_at: Any = None):
    # created_at arrives as the ISO 8601 text produced by CONVERT(..., 127)
    return SimpleNamespace(
        id=entry_id,
        created_at=created_at or "2025-03-01T10:30:00.123+07:00",
        raw_log="raw log",
        dashboard_data=json.dumps(SAMPLE_RESPONSE["dashboardData"]) if dashboard is None else dashboard,
        report_markdown=SAMPLE_RESPONSE["reportMarkdown"],
        summary_title=title,
    )


def make_repo(conn: FakeConnection, **kwargs) -> SqlServerHistoryRepository:
    kwargs.setdefault("db_url", "DRIVER={ODBC Driver 18 for SQL Server};SERVER=db;DATABASE=netlog;UID=app;")
    kwargs.setdefault("db_key", "s3cret")
    return SqlServerHistoryRepository(connect=conn.connect, **kwargs)


# -----------------------------
# Summary titles
# -----------------------------
def test_title_uses_first_anomaly():
    assert summary_title_for(sample_result()) == "Anomaly: IP spoofing from 192.168.1.200 on eth1"


def test_title_falls_back_to_line_count():
    assert summary_title_for(quiet_result()) == "Log Analysis (42 lines)"


# -----------------------------
# Local mode
# -----------------------------
def test_disabled_repository_is_inert():
    repo = DisabledHistoryRepository()

    assert repo.enabled is False
    assert repo.save("raw", sample_result()) is None
    assert repo.fetch_recent() == []
    assert repo.get("any") is None


# -----------------------------
# SQL Server adapter
# -----------------------------
def test_connection_string_appends_the_key_and_timeout():
    conn = FakeConnection()
    make_repo(conn, login_timeout_seconds=4).fetch_recent()

    assert conn.conn_strs == [
        ("DRIVER={ODBC Driver 18 for SQL Server};SERVER=db;DATABASE=netlog;UID=app;PWD={s3cret};", 4)
    ]


def test_save_inserts_serialized_dashboard_and_title():
    conn = FakeConnection(rows=[make_row(title="Anomaly: IP spoofing from 192.168.1.200 on eth1")])
    repo = make_repo(conn)

    entry = repo.save("raw log", sample_result())

    (q, params) = conn.executed[0]
    assert "INSERT INTO analysis_history" in q
    assert params[0] == "raw log"
    assert json.loads(params[1]) == SAMPLE_RESPONSE["dashboardData"]
    assert params[2] == SAMPLE_RESPONSE["reportMarkdown"]
    assert params[3] == "Anomaly: IP spoofing from 192.168.1.200 on eth1"
    assert conn.commits == 1

    assert entry.id == ENTRY_ID
    assert entry.created_at == "2025-03-01T10:30:00.123+07:00"
    assert entry.to_result() == sample_result()


def test_created_at_is_read_as_iso_text():
    # DATETIMEOFFSET has no pyodbc reader, so every read converts it server-side
    conn = FakeConnection(rows=[make_row()])
    repo = make_repo(conn)

    repo.save("raw log", sample_result())
    repo.fetch_recent()
    repo.get(ENTRY_ID)

    save_q, recent_q, get_q = (q for q, _ in conn.executed)
    assert "CONVERT(varchar(33), INSERTED.created_at, 127) AS created_at" in save_q
    for q in (recent_q, get_q):
        assert "CONVERT(varchar(33), created_at, 127) AS created_at" in q


def test_save_without_returned_row_fails():
    repo = make_repo(FakeConnection(rows=[]))

    with pytest.raises(ExternalServiceError):
        repo.save("raw log", sample_result())


def test_fetch_recent_orders_newest_first_with_limit():
    conn = FakeConnection(rows=[make_row("a"), make_row("b", title=None)])
    repo = make_repo(conn, limit=5)

    entries = repo.fetch_recent()

    (q, params) = conn.executed[0]
    assert "SELECT TOP (5)" in q
    # sorts on the column, not on the converted text alias
    assert "ORDER BY h.created_at DESC" in q
    assert params == ()
    assert [e.id for e in entries] == ["a", "b"]
    assert entries[1].summary_title is None


def test_fetch_recent_skips_unreadable_rows():
    conn = FakeConnection(rows=[make_row("a"), make_row("bad", dashboard="{broken"), make_row("c")])

    entries = make_repo(conn).fetch_recent()

    assert [e.id for e in entries] == ["a", "c"]


def test_get_passes_id_as_parameter():
    conn = FakeConnection(rows=[make_row()])

    entry = make_repo(conn).get(ENTRY_ID.upper())

    (q, params) = conn.executed[0]
    assert "WHERE id = ?" in q
    assert params == (ENTRY_ID,)
    assert entry.id == ENTRY_ID


def test_get_unknown_id_returns_none():
    assert make_repo(FakeConnection(rows=[])).get(ENTRY_ID) is None


@pytest.mark.parametrize("entry_id", ["not-a-guid", "abc", "", "1; DROP TABLE analysis_history"])
def test_get_with_malformed_id_returns_none_without_querying(entry_id):
    conn = FakeConnection(rows=[make_row()])

    assert make_repo(conn).get(entry_id) is None
    assert conn.executed == []
    assert conn.conn_strs == []


def test_get_corrupt_row_is_malformed():
    repo = make_repo(FakeConnection(rows=[make_row(dashboard="{broken")]))

    with pytest.raises(MalformedResponseError):
        repo.get(ENTRY_ID)


def test_datetime_values_are_rendered_as_iso_text():
    created = datetime(2025, 3, 1, 10, 30, tzinfo=timezone(timedelta(hours=7)))
    conn = FakeConnection(rows=[make_row(created_at=created)])

    assert make_repo(conn).fetch_recent()[0].created_at == "2025-03-01T10:30:00+07:00"


def test_driver_errors_are_wrapped():
    repo = make_repo(FakeConnection(error=RuntimeError("Login timeout expired")))

    with pytest.raises(ExternalServiceError) as exc:
        repo.fetch_recent()
    assert "Failed to load history" in str(exc.value)

    with pytest.raises(ExternalServiceError) as exc:
        repo.save("raw log", sample_result())
    assert "Failed to save analysis" in str(exc.value)

    with pytest.raises(ExternalServiceError) as exc:
        repo.get(ENTRY_ID)
    assert "Failed to load history entry" in str(exc.value)


@pytest.mark.parametrize("table", ["history; DROP TABLE x", "1abc", "", "a.b.c"])
def test_rejects_unsafe_table_names(table):
    with pytest.raises(ValueError):
        make_repo(FakeConnection(), table_name=table)


def test_rejects_empty_db_url():
    with pytest.raises(ValueError):
        make_repo(FakeConnection(), db_url="  ")
