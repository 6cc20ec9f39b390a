from .analysis_service import AnalysisService
from .log_analyzer import LogAnalyzer, UnconfiguredLogAnalyzer

__all__ = [
    "AnalysisService",
    "LogAnalyzer",
    "UnconfiguredLogAnalyzer",
]
