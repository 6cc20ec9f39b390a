from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime
from typing import Any, Callable, List, Optional

from netlog_web.domain.errors import ExternalServiceError, MalformedResponseError, NetlogError
from netlog_web.domain.models import AnalysisResult, DashboardData, HistoryEntry
from netlog_web.repositories.history_repository import HistoryRepository, summary_title_for

logger = logging.getLogger(__name__)

_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

# pyodbc has no reader for DATETIMEOFFSET (ODBC type -155); the server hands it over as ISO 8601 text.
_SELECT_COLUMNS = (
    "id, CONVERT(varchar(33), created_at, 127) AS created_at, "
    "raw_log, dashboard_data, report_markdown, summary_title"
)
_OUTPUT_COLUMNS = (
    "INSERTED.id, CONVERT(varchar(33), INSERTED.created_at, 127) AS created_at, "
    "INSERTED.raw_log, INSERTED.dashboard_data, INSERTED.report_markdown, INSERTED.summary_title"
)


def _pyodbc_connect(conn_str: str, timeout: int):
    # Imported here so the app still starts in local mode on hosts without an ODBC driver manager.
    import pyodbc

    return pyodbc.connect(conn_str, timeout=timeout)


class SqlServerHistoryRepository(HistoryRepository):
    def __init__(
        self,
        db_url: str,
        db_key: str,
        table_name: str = "analysis_history",
        limit: int = 20,
        login_timeout_seconds: int = 15,
        connect: Optional[Callable[[str, int], Any]] = None,
    ):
        if not _TABLE_NAME_RE.match(table_name or ""):
            raise ValueError(f"Invalid history table name: {table_name!r}")
        if not (db_url or "").strip():
            raise ValueError("db_url is empty")

        self.table_name = table_name
        self.limit = limit
        self._db_url = db_url.strip().rstrip(";")
        self._db_key = db_key or ""
        self._login_timeout = login_timeout_seconds
        self._connect_fn = connect or _pyodbc_connect

    def _connect(self):
        parts = [self._db_url]
        if self._db_key:
            parts.append(f"PWD={{{self._db_key}}}")
        conn_str = ";".join(parts) + ";"
        return self._connect_fn(conn_str, self._login_timeout)

    @staticmethod
    def _get(r, name: str, default=None):
        return getattr(r, name, default)

    def _to_entry(self, r) -> HistoryEntry:
        raw_dashboard = self._get(r, "dashboard_data", "")
        try:
            dashboard = json.loads(raw_dashboard) if isinstance(raw_dashboard, (str, bytes)) else raw_dashboard
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Stored dashboard_data is not valid JSON: {e}") from e

        created_at = self._get(r, "created_at")
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()

        title = self._get(r, "summary_title")
        return HistoryEntry(
            id=str(self._get(r, "id", "")),
            created_at=str(created_at or ""),
            raw_log=str(self._get(r, "raw_log", "") or ""),
            dashboard_data=DashboardData.from_dict(dashboard),
            report_markdown=str(self._get(r, "report_markdown", "") or ""),
            summary_title=str(title) if title is not None else None,
        )

    def save(self, raw_log: str, result: AnalysisResult) -> Optional[HistoryEntry]:
        title = summary_title_for(result)
        q = f"""
        INSERT INTO {self.table_name} (raw_log, dashboard_data, report_markdown, summary_title)
        OUTPUT {_OUTPUT_COLUMNS}
        VALUES (?, ?, ?, ?)
        """
        params = (
            raw_log,
            json.dumps(result.dashboard_data.to_dict(), ensure_ascii=False),
            result.report_markdown,
            title,
        )

        try:
            with self._connect() as conn:
                cur = conn.cursor()
                row = cur.execute(q, *params).fetchone()
                conn.commit()
        except NetlogError:
            raise
        except Exception as e:
            logger.exception("Error saving analysis to %s", self.table_name)
            raise ExternalServiceError(f"Failed to save analysis: {e}") from e

        if not row:
            raise ExternalServiceError("Insert returned no row")

        entry = self._to_entry(row)
        logger.info("Saved analysis %s (%s)", entry.id, title)
        return entry

    def fetch_recent(self) -> List[HistoryEntry]:
        q = f"""
        SELECT TOP ({int(self.limit)}) {_SELECT_COLUMNS}
        FROM {self.table_name} AS h
        ORDER BY h.created_at DESC
        """
        try:
            with self._connect() as conn:
                cur = conn.cursor()
                rows = cur.execute(q).fetchall()
        except NetlogError:
            raise
        except Exception as e:
            logger.exception("Error fetching history from %s", self.table_name)
            raise ExternalServiceError(f"Failed to load history: {e}") from e

        entries = []
        for r in rows:
            try:
                entries.append(self._to_entry(r))
            except MalformedResponseError as e:
                # one unreadable row must not hide the rest of the list
                logger.warning("Skipping history row %s: %s", self._get(r, "id"), e)
        return entries

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        # ids are UNIQUEIDENTIFIER; anything else cannot match and would fail the conversion server-side
        try:
            entry_id = str(uuid.UUID(entry_id))
        except (TypeError, ValueError):
            return None

        q = f"""
        SELECT {_SELECT_COLUMNS}
        FROM {self.table_name}
        WHERE id = ?
        """
        try:
            with self._connect() as conn:
                cur = conn.cursor()
                r = cur.execute(q, entry_id).fetchone()
        except NetlogError:
            raise
        except Exception as e:
            logger.exception("Error loading history entry %s", entry_id)
            raise ExternalServiceError(f"Failed to load history entry: {e}") from e

        if not r:
            return None
        return self._to_entry(r)
