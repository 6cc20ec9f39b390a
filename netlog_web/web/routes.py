## routes.py
from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from flask import Blueprint, abort, current_app, jsonify, render_template, request, url_for

from netlog_web.config import AppSettings
from netlog_web.domain.errors import (
    ExternalServiceError,
    InputValidationError,
    MissingCredentialError,
    NetlogError,
)
from netlog_web.domain.models import AnalysisResult, HistoryEntry
from netlog_web.presentation import build_dashboard, build_history
from netlog_web.services.analysis_service import AnalysisService

DEMO_LOG = """Mar 1 10:00:01 Switch-Core-01 %LINK-3-UPDOWN: Interface GigabitEthernet0/1, changed state to down
Mar 1 10:00:03 Switch-Core-01 %LINK-3-UPDOWN: Interface GigabitEthernet0/1, changed state to up
Mar 1 10:05:12 Firewall-Edge %SEC-4-IP-SPOOF: Source IP 192.168.1.200 MAC aaaa.bbbb.cccc on interface eth1 is spoofing
Mar 1 10:10:00 Router-Main %CPU-3-HIGH: CPU utilization is 95% for 5 minutes
Mar 1 10:15:22 AP-Floor2 %DOT11-4-MAX_CLIENTS: Max clients reached on SSID "Guest-Wifi"
Mar 1 10:20:05 Switch-Access-05 %STP-2-DISPUTE: Dispute detected on interface Gi0/24, port inconsistent
Mar 1 10:20:05 Switch-Access-05 %SPANTREE-2-BLOCK_PVID_PEER: Blocking Gi0/24 on VLAN0010. Inconsistent peer vlan."""


def create_blueprint(analysis_service: AnalysisService, settings: AppSettings) -> Blueprint:
    bp = Blueprint("web", __name__)

    def load_history() -> tuple[List[HistoryEntry], Optional[str]]:
        """History problems never break the page; they become a notice in the history panel."""
        if not settings.history_enabled:
            return [], None
        try:
            return analysis_service.recent_history(), None
        except NetlogError as e:
            current_app.logger.exception("Failed to load history")
            return [], f"Failed to load history: {e}"

    def render_page(
        *,
        log_text: str,
        result: Optional[AnalysisResult] = None,
        error: Optional[str] = None,
        notice: Optional[str] = None,
        code: int = 200,
    ):
        history, history_error = load_history()
        page_model = dict(
            log_text=log_text,
            dashboard=build_dashboard(result) if result else None,
            history=build_history(history),
            history_error=history_error,
            history_enabled=settings.history_enabled,
            analysis_enabled=settings.analysis_enabled,
            model_name=settings.model,
            error=error,
            notice=notice,
        )
        return render_template("index.html", **page_model), code

    @bp.get("/")
    def index():
        return render_page(log_text=DEMO_LOG)

    @bp.post("/analyze")
    def analyze():
        log_text = request.form.get("log_text") or ""

        try:
            outcome = analysis_service.run(log_text)
        except InputValidationError as e:
            return render_page(log_text=log_text, error=str(e), code=400)
        except MissingCredentialError as e:
            current_app.logger.warning("Analysis requested without an API key")
            return render_page(log_text=log_text, error=str(e), code=503)
        except ExternalServiceError as e:
            current_app.logger.exception("Log analysis failed")
            return render_page(log_text=log_text, error=f"Analysis failed: {e}", code=502)

        data = outcome.result.dashboard_data
        current_app.logger.info(
            "Analysis done: total_logs=%d anomalies=%d saved=%s",
            data.total_logs,
            len(data.detected_anomalies),
            outcome.saved.id if outcome.saved else None,
        )

        notice = None
        if outcome.save_error:
            notice = f"The analysis could not be saved to history: {outcome.save_error}"

        return render_page(log_text=outcome.raw_log, result=outcome.result, notice=notice)

    @bp.get("/history/<entry_id>")
    def history_entry(entry_id: str):
        if not settings.history_enabled:
            abort(404)

        try:
            entry = analysis_service.restore(entry_id)
        except NetlogError as e:
            current_app.logger.exception("Failed to load history entry %s", entry_id)
            return render_page(log_text="", error=f"Failed to load history entry: {e}", code=502)

        if entry is None:
            abort(404)

        return render_page(log_text=entry.raw_log, result=entry.to_result())

    @bp.get("/api/history")
    def history_json():
        history, history_error = load_history()
        items = [
            dict(asdict(item), url=url_for("web.history_entry", entry_id=item.id))
            for item in build_history(history)
        ]
        return jsonify(enabled=settings.history_enabled, items=items, error=history_error)

    return bp
