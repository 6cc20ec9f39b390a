from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from markupsafe import Markup

_NUMBERED = re.compile(r"^\d+\.")


@dataclass(frozen=True)
class ReportLine:
    tag: str        # h1 | h2 | h3 | li | br | p
    css: str
    text: str = ""


def _line(raw: str) -> ReportLine:
    # Checked in this order; a line matches at most one rule.
    if raw.startswith("# "):
        return ReportLine("h1", "report-h1", raw[2:])
    if raw.startswith("## "):
        return ReportLine("h2", "report-h2", raw[3:])
    if raw.startswith("### "):
        return ReportLine("h3", "report-h3", raw[4:])
    if raw.startswith("- "):
        return ReportLine("li", "report-bullet", raw[2:])
    if raw.startswith("  - "):
        return ReportLine("li", "report-subbullet", raw[4:])
    if _NUMBERED.match(raw):
        return ReportLine("li", "report-numbered", raw)
    if raw.strip() == "":
        return ReportLine("br", "")
    return ReportLine("p", "report-p", raw)


def format_report(markdown: str) -> List[ReportLine]:
    """Line-by-line markdown-ish formatting. Not a markdown parser: no inline markup, no nesting."""
    return [_line(raw) for raw in (markdown or "").split("\n")]


def render_report(markdown: str) -> Markup:
    parts = []
    for line in format_report(markdown):
        if line.tag == "br":
            parts.append(Markup("<br>"))
            continue
        parts.append(Markup('<{0} class="{1}">{2}</{0}>').format(Markup(line.tag), line.css, line.text))
    return Markup("\n").join(parts)
