from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from netlog_web.domain.errors import ExternalServiceError, InputValidationError
from netlog_web.domain.models import AnalysisOutcome, HistoryEntry
from netlog_web.repositories.history_repository import HistoryRepository
from netlog_web.services.log_analyzer import LogAnalyzer

logger = logging.getLogger(__name__)


@dataclass
class AnalysisService:
    """
    Service layer: analyze with the model, then try to persist.
    Keeps controllers/routes thin.
    """
    analyzer: LogAnalyzer
    history_repo: HistoryRepository

    @property
    def history_enabled(self) -> bool:
        return self.history_repo.enabled

    def run(self, raw_log: str) -> AnalysisOutcome:
        # The raw text is kept as typed so a restored entry matches byte for byte.
        raw_log = raw_log or ""
        if not raw_log.strip():
            raise InputValidationError("Please enter log data before starting the analysis.")

        result = self.analyzer.analyze(raw_log)

        if not self.history_repo.enabled:
            return AnalysisOutcome(raw_log=raw_log, result=result)

        # A failed save never hides the analysis that already succeeded.
        try:
            saved = self.history_repo.save(raw_log, result)
        except ExternalServiceError as e:
            logger.error("Error saving to DB: %s", e)
            return AnalysisOutcome(raw_log=raw_log, result=result, save_error=str(e))

        return AnalysisOutcome(raw_log=raw_log, result=result, saved=saved)

    def recent_history(self) -> List[HistoryEntry]:
        if not self.history_repo.enabled:
            return []
        return self.history_repo.fetch_recent()

    def restore(self, entry_id: str) -> Optional[HistoryEntry]:
        if not self.history_repo.enabled:
            return None
        return self.history_repo.get(entry_id)
