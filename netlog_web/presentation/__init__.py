from .dashboard import DashboardView, build_dashboard, build_history
from .report_formatter import format_report, render_report

__all__ = [
    "DashboardView",
    "build_dashboard",
    "build_history",
    "format_report",
    "render_report",
]
