from .errors import (
    ExternalServiceError,
    InputValidationError,
    MalformedResponseError,
    MissingCredentialError,
    NetlogError,
)
from .models import AnalysisOutcome, AnalysisResult, DashboardData, HistoryEntry, PortStatus
