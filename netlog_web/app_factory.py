from __future__ import annotations

import logging
from typing import Optional

from flask import Flask

from netlog_web.adapters.llm_gemini import GeminiLogAnalyzer
from netlog_web.adapters.sqlserver_history import SqlServerHistoryRepository
from netlog_web.config.ini_config import AppSettings, IniConfig
from netlog_web.repositories.history_repository import DisabledHistoryRepository, HistoryRepository
from netlog_web.services.analysis_service import AnalysisService
from netlog_web.services.log_analyzer import LogAnalyzer, UnconfiguredLogAnalyzer
from netlog_web.web.routes import create_blueprint

logger = logging.getLogger(__name__)


def build_analysis_service(settings: AppSettings) -> AnalysisService:
    """Wires the feature flags computed once in AppSettings into concrete clients."""
    if settings.analysis_enabled:
        analyzer: LogAnalyzer = GeminiLogAnalyzer(
            api_key=settings.api_key,
            model=settings.model,
            report_language=settings.report_language,
        )
    else:
        analyzer = UnconfiguredLogAnalyzer()

    if settings.history_enabled:
        history_repo: HistoryRepository = SqlServerHistoryRepository(
            db_url=settings.db_url,
            db_key=settings.db_key,
            table_name=settings.history_table,
            limit=settings.history_limit,
            login_timeout_seconds=settings.db_login_timeout_seconds,
        )
    else:
        history_repo = DisabledHistoryRepository()

    return AnalysisService(analyzer=analyzer, history_repo=history_repo)


def create_app(
    settings: Optional[AppSettings] = None,
    analysis_service: Optional[AnalysisService] = None,
) -> Flask:
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()
    if analysis_service is None:
        analysis_service = build_analysis_service(settings)

    logger.info(
        "Analysis %s (model=%s); history %s",
        "enabled" if settings.analysis_enabled else "disabled: no API key",
        settings.model,
        "enabled" if settings.history_enabled else "disabled: local mode",
    )

    app = Flask(__name__)
    app.register_blueprint(create_blueprint(analysis_service, settings))

    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    return app
