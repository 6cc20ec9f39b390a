######## models.py
########

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from netlog_web.domain.errors import MalformedResponseError

PORT_STATES = ("UP", "DOWN", "FLAPPING", "UNKNOWN")


def _as_int(raw: Any, name: str) -> int:
    # bool is an int subclass; the model never means True/False as a count
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise MalformedResponseError(f"{name} must be an integer, got {raw!r}")
    return raw


def _as_str(raw: Any, name: str) -> str:
    if not isinstance(raw, str):
        raise MalformedResponseError(f"{name} must be a string, got {raw!r}")
    return raw


def _as_list(raw: Any, name: str) -> list:
    if not isinstance(raw, list):
        raise MalformedResponseError(f"{name} must be a list, got {type(raw).__name__}")
    return raw


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, Mapping):
        raise MalformedResponseError(f"{where} must be an object")
    if key not in data:
        raise MalformedResponseError(f"Missing '{key}' in {where}")
    return data[key]


@dataclass(frozen=True)
class SeverityCounts:
    info: int
    warning: int
    error: int
    critical: int

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "SeverityCounts":
        return SeverityCounts(
            info=_as_int(_require(data, "info", "severityCounts"), "severityCounts.info"),
            warning=_as_int(_require(data, "warning", "severityCounts"), "severityCounts.warning"),
            error=_as_int(_require(data, "error", "severityCounts"), "severityCounts.error"),
            critical=_as_int(_require(data, "critical", "severityCounts"), "severityCounts.critical"),
        )

    def to_dict(self) -> dict:
        return {"info": self.info, "warning": self.warning, "error": self.error, "critical": self.critical}


@dataclass(frozen=True)
class EventCount:
    name: str
    value: int


@dataclass(frozen=True)
class PortStatus:
    port: str
    status: str                 # one of PORT_STATES
    details: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"port": self.port, "status": self.status}
        if self.details is not None:
            out["details"] = self.details
        return out


@dataclass(frozen=True)
class DashboardData:
    """Figures estimated by the model. Nothing here is recomputed locally."""
    total_logs: int
    severity_counts: SeverityCounts
    top_events: tuple[EventCount, ...] = ()
    detected_anomalies: tuple[str, ...] = ()
    port_statuses: tuple[PortStatus, ...] = ()

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "DashboardData":
        where = "dashboardData"
        top_events = tuple(
            EventCount(
                name=_as_str(_require(e, "name", "topEvents item"), "topEvents.name"),
                value=_as_int(_require(e, "value", "topEvents item"), "topEvents.value"),
            )
            for e in _as_list(_require(data, "topEvents", where), "topEvents")
        )

        anomalies = tuple(
            _as_str(a, "detectedAnomalies item")
            for a in _as_list(_require(data, "detectedAnomalies", where), "detectedAnomalies")
        )

        ports = []
        for p in _as_list(_require(data, "portStatuses", where), "portStatuses"):
            status = _as_str(_require(p, "status", "portStatuses item"), "portStatuses.status")
            if status not in PORT_STATES:
                raise MalformedResponseError(f"Unknown port status {status!r}")
            details = p.get("details")
            ports.append(
                PortStatus(
                    port=_as_str(_require(p, "port", "portStatuses item"), "portStatuses.port"),
                    status=status,
                    details=_as_str(details, "portStatuses.details") if details is not None else None,
                )
            )

        return DashboardData(
            total_logs=_as_int(_require(data, "totalLogs", where), "totalLogs"),
            severity_counts=SeverityCounts.from_dict(_require(data, "severityCounts", where)),
            top_events=top_events,
            detected_anomalies=anomalies,
            port_statuses=tuple(ports),
        )

    def to_dict(self) -> dict:
        return {
            "totalLogs": self.total_logs,
            "severityCounts": self.severity_counts.to_dict(),
            "topEvents": [{"name": e.name, "value": e.value} for e in self.top_events],
            "detectedAnomalies": list(self.detected_anomalies),
            "portStatuses": [p.to_dict() for p in self.port_statuses],
        }


@dataclass(frozen=True)
class AnalysisResult:
    dashboard_data: DashboardData
    report_markdown: str

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "AnalysisResult":
        return AnalysisResult(
            dashboard_data=DashboardData.from_dict(_require(data, "dashboardData", "response")),
            report_markdown=_as_str(_require(data, "reportMarkdown", "response"), "reportMarkdown"),
        )

    def to_dict(self) -> dict:
        return {"dashboardData": self.dashboard_data.to_dict(), "reportMarkdown": self.report_markdown}


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    created_at: str             # ISO-8601, as returned by the store
    raw_log: str
    dashboard_data: DashboardData
    report_markdown: str
    summary_title: Optional[str] = None

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(dashboard_data=self.dashboard_data, report_markdown=self.report_markdown)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "raw_log": self.raw_log,
            "dashboard_data": self.dashboard_data.to_dict(),
            "report_markdown": self.report_markdown,
            "summary_title": self.summary_title,
        }


@dataclass(frozen=True)
class AnalysisOutcome:
    """What one POST /analyze produced: the result, and how persistence went."""
    raw_log: str
    result: AnalysisResult
    saved: Optional[HistoryEntry] = None
    save_error: str = ""
