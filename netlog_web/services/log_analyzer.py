from netlog_web.domain.errors import MissingCredentialError
from netlog_web.domain.models import AnalysisResult


class LogAnalyzer:
    """Strategy interface: turns raw log text into an AnalysisResult."""
    def analyze(self, log_text: str) -> AnalysisResult:
        raise NotImplementedError


class UnconfiguredLogAnalyzer(LogAnalyzer):
    """Wired when no API key is set, so the page still loads."""
    def analyze(self, log_text: str) -> AnalysisResult:
        raise MissingCredentialError(
            "API key is missing. Set GEMINI_API_KEY (or API_KEY) in the environment and restart."
        )
