from __future__ import annotations

import logging
from typing import List, Literal, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel, Field, ValidationError

from netlog_web.domain.errors import ExternalServiceError, MalformedResponseError, MissingCredentialError
from netlog_web.domain.models import AnalysisResult
from netlog_web.services.log_analyzer import LogAnalyzer

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

SYSTEM_INSTRUCTION = """
You are an expert Network Engineer and Security Analyst.
Your job is to analyze logs from network devices (routers, switches, firewalls, access points, etc.).

Analyze the following topics:
1. Key events: who did what (IP/user), where, when and how
2. Port status (Up/Down/Flapping)
3. Anomalies (unauthorized access, floods, DHCP errors, STP changes, high CPU, etc.)
4. Remediation advice

The output must be a single JSON object that follows the given schema.

For the 'reportMarkdown' field write a clean, readable Markdown summary in {language} using these headings:
- 🔍 Key events summary
- 👤 Who did what (IP / MAC / Username)
- 🔌 Port Up/Down status
- ⚠️ Detected anomalies
- 🛠 Remediation
- 🧩 Risk and impact
"""


# -----------------------------
# Output schema (wire names are camelCase)
# -----------------------------
class SeverityCountsSchema(BaseModel):
    info: int
    warning: int
    error: int
    critical: int


class EventSchema(BaseModel):
    name: str
    value: int


class PortStatusSchema(BaseModel):
    port: str
    status: Literal["UP", "DOWN", "FLAPPING", "UNKNOWN"]
    details: Optional[str] = None


class DashboardSchema(BaseModel):
    totalLogs: int = Field(description="Estimated total number of log lines processed")
    severityCounts: SeverityCountsSchema
    topEvents: List[EventSchema] = Field(description="Top 5 most frequent event types for charts")
    detectedAnomalies: List[str] = Field(description="List of critical anomalies found")
    portStatuses: List[PortStatusSchema] = Field(description="Status of relevant ports mentioned in logs")


class AnalysisSchema(BaseModel):
    dashboardData: DashboardSchema
    reportMarkdown: str = Field(description="Full detailed analysis report in Markdown format")


class GeminiLogAnalyzer(LogAnalyzer):
    """One synchronous generate_content call per analysis. No retries."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        report_language: str = "English",
        client: Optional[genai.Client] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model or DEFAULT_MODEL
        self.report_language = report_language
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION.format(language=self.report_language),
            response_mime_type="application/json",
            response_schema=AnalysisSchema,
        )

    def analyze(self, log_text: str) -> AnalysisResult:
        if not self.api_key:
            raise MissingCredentialError("API key is missing. Set GEMINI_API_KEY (or API_KEY) in the environment.")

        logger.info("Sending %d chars of log text to %s", len(log_text), self.model)
        try:
            response = self._get_client().models.generate_content(
                model=self.model,
                contents=log_text,
                config=self.build_config(),
            )
        except genai_errors.APIError as e:
            logger.exception("Gemini request failed")
            raise ExternalServiceError(f"Model request failed ({e.code}): {e.message}") from e
        except Exception as e:
            logger.exception("Gemini request failed")
            raise ExternalServiceError(f"Model request failed: {e}") from e

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise MalformedResponseError("No response from AI")

        try:
            parsed = AnalysisSchema.model_validate_json(text)
        except ValidationError as e:
            logger.error("Model output did not match the schema: %s", e)
            raise MalformedResponseError(f"Model output did not match the schema: {e.error_count()} error(s)") from e

        return AnalysisResult.from_dict(parsed.model_dump())
