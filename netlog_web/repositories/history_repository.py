from __future__ import annotations

import logging
from typing import List, Optional

from netlog_web.domain.models import AnalysisResult, HistoryEntry

logger = logging.getLogger(__name__)


def summary_title_for(result: AnalysisResult) -> str:
    data = result.dashboard_data
    if data.detected_anomalies:
        return f"Anomaly: {data.detected_anomalies[0]}"
    return f"Log Analysis ({data.total_logs} lines)"


class HistoryRepository:
    """
    Repository interface over the remote `analysis_history` table.
    Insert and read only; rows are never updated or deleted from here.
    """
    enabled = True

    def save(self, raw_log: str, result: AnalysisResult) -> Optional[HistoryEntry]:
        raise NotImplementedError

    def fetch_recent(self) -> List[HistoryEntry]:
        raise NotImplementedError

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        raise NotImplementedError


class DisabledHistoryRepository(HistoryRepository):
    """Wired when no database credentials are configured ("local mode")."""
    enabled = False

    def save(self, raw_log: str, result: AnalysisResult) -> Optional[HistoryEntry]:
        logger.debug("History not configured; skipping save")
        return None

    def fetch_recent(self) -> List[HistoryEntry]:
        return []

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        return None
