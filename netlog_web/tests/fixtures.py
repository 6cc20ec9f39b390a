from __future__ import annotations

from typing import List, Optional

from netlog_web.config import AppSettings
from netlog_web.domain.models import AnalysisResult, HistoryEntry

SAMPLE_RESPONSE = {
    "dashboardData": {
        "totalLogs": 7,
        "severityCounts": {"info": 2, "warning": 3, "error": 0, "critical": 2},
        "topEvents": [
            {"name": "LINK-3-UPDOWN", "value": 2},
            {"name": "STP-2-DISPUTE", "value": 1},
            {"name": "CPU-3-HIGH", "value": 1},
        ],
        "detectedAnomalies": [
            "IP spoofing from 192.168.1.200 on eth1",
            "Sustained 95% CPU on Router-Main",
        ],
        "portStatuses": [
            {"port": "Gi0/1", "status": "FLAPPING", "details": "down then up within 2s"},
            {"port": "Gi0/24", "status": "DOWN"},
        ],
    },
    "reportMarkdown": "# Summary\n## Key events\n- Gi0/1 flapped\n  - twice\n1. Check cabling\n\nAll else normal.",
}

QUIET_RESPONSE = {
    "dashboardData": {
        "totalLogs": 42,
        "severityCounts": {"info": 42, "warning": 0, "error": 0, "critical": 0},
        "topEvents": [],
        "detectedAnomalies": [],
        "portStatuses": [],
    },
    "reportMarkdown": "Nothing unusual.",
}


def sample_result() -> AnalysisResult:
    return AnalysisResult.from_dict(SAMPLE_RESPONSE)


def quiet_result() -> AnalysisResult:
    return AnalysisResult.from_dict(QUIET_RESPONSE)


def make_entry(result: AnalysisResult, entry_id: str = "e-1", raw_log: str = "raw log", title: str | None = "title") -> HistoryEntry:
    return HistoryEntry(
        id=entry_id,
        created_at="2025-03-01T10:30:00+00:00",
        raw_log=raw_log,
        dashboard_data=result.dashboard_data,
        report_markdown=result.report_markdown,
        summary_title=title,
    )


def make_settings(*, api_key: str = "test-key", db_url: str = "", db_key: str = "") -> AppSettings:
    return AppSettings(
        flask_host="127.0.0.1",
        flask_port=5000,
        flask_debug=False,
        model="gemini-2.5-flash",
        report_language="English",
        history_table="analysis_history",
        history_limit=20,
        db_login_timeout_seconds=15,
        api_key=api_key,
        db_url=db_url,
        db_key=db_key,
    )


# -----------------------------
# Test doubles
# -----------------------------
class FakeAnalyzer:
    def __init__(self, result: Optional[AnalysisResult] = None, error: Optional[Exception] = None):
        self._result = result or sample_result()
        self._error = error
        self.calls: List[str] = []

    def analyze(self, log_text: str) -> AnalysisResult:
        self.calls.append(log_text)
        if self._error is not None:
            raise self._error
        return self._result


class FakeHistoryRepository:
    def __init__(self, enabled: bool = True, save_error: Optional[Exception] = None, entries=None):
        self.enabled = enabled
        self._save_error = save_error
        self._entries = list(entries or [])
        self.saved: List[tuple] = []
        self.fetch_calls = 0
        self.get_calls: List[str] = []

    def save(self, raw_log: str, result: AnalysisResult) -> Optional[HistoryEntry]:
        self.saved.append((raw_log, result))
        if self._save_error is not None:
            raise self._save_error
        return make_entry(result, entry_id="new-id", raw_log=raw_log)

    def fetch_recent(self) -> List[HistoryEntry]:
        self.fetch_calls += 1
        return self._entries

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        self.get_calls.append(entry_id)
        return next((e for e in self._entries if e.id == entry_id), None)
