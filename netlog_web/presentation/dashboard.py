from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List

from markupsafe import Markup

from netlog_web.domain.models import AnalysisResult, HistoryEntry, PortStatus
from netlog_web.presentation.charts import figure_html, severity_pie, top_events_bar
from netlog_web.presentation.report_formatter import render_report

PORT_BADGES = {
    "UP": "badge-up",
    "DOWN": "badge-down",
    "FLAPPING": "badge-flapping",
}
PORT_BADGE_DEFAULT = "badge-unknown"


@dataclass(frozen=True)
class StatCard:
    title: str
    value: int
    icon: str
    color_class: str


@dataclass(frozen=True)
class PortRow:
    port: str
    status: str
    badge_class: str
    details: str


@dataclass(frozen=True)
class DashboardView:
    stat_cards: List[StatCard]
    severity_chart: Markup
    top_events_chart: Markup
    port_rows: List[PortRow]
    anomalies: List[str]
    report_html: Markup


@dataclass(frozen=True)
class HistoryItemView:
    id: str
    title: str
    created_at: str
    total_logs: int
    dot_class: str


def port_badge_class(status: str) -> str:
    return PORT_BADGES.get(status, PORT_BADGE_DEFAULT)


def _port_row(p: PortStatus) -> PortRow:
    return PortRow(port=p.port, status=p.status, badge_class=port_badge_class(p.status), details=p.details or "-")


def build_dashboard(result: AnalysisResult) -> DashboardView:
    data = result.dashboard_data
    counts = data.severity_counts

    cards = [
        StatCard("Total Logs", data.total_logs, "🖥", "text-neutral"),
        StatCard("Critical Issues", counts.critical, "🛡", "text-critical"),
        StatCard("Warnings", counts.warning, "⚠", "text-warning"),
        StatCard("Detected Anomalies", len(data.detected_anomalies), "📈", "text-anomaly"),
    ]

    return DashboardView(
        stat_cards=cards,
        severity_chart=Markup(figure_html(severity_pie(counts), "severity-chart")),
        top_events_chart=Markup(figure_html(top_events_bar(data.top_events), "top-events-chart")),
        port_rows=[_port_row(p) for p in data.port_statuses],
        anomalies=list(data.detected_anomalies),
        report_html=render_report(result.report_markdown),
    )


def history_dot_class(entry: HistoryEntry) -> str:
    counts = entry.dashboard_data.severity_counts
    if counts.critical > 0:
        return "dot-critical"
    if counts.error > 0:
        return "dot-error"
    return "dot-ok"


def _display_time(created_at: str) -> str:
    # SQL Server writes a zero offset as "Z", which fromisoformat only accepts from 3.11 on
    raw = created_at[:-1] + "+00:00" if created_at.endswith("Z") else created_at
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return created_at
    if parsed.tzinfo is None:
        return parsed.strftime("%Y-%m-%d %H:%M:%S")
    return parsed.strftime("%Y-%m-%d %H:%M:%S %z")


def build_history_item(entry: HistoryEntry) -> HistoryItemView:
    return HistoryItemView(
        id=entry.id,
        title=entry.summary_title or "Untitled Log",
        created_at=_display_time(entry.created_at),
        total_logs=entry.dashboard_data.total_logs,
        dot_class=history_dot_class(entry),
    )


def build_history(entries: List[HistoryEntry]) -> List[HistoryItemView]:
    return [build_history_item(e) for e in entries]
