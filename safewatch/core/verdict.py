"""
Verdict derivation for SafeWatch.

This module contains pure functions that turn a set of per-source
check results into a single report verdict, plus the severity
ordering used for critical-vs-warning routing.
"""

from enum import Enum
from typing import Iterable, List, Literal, Mapping

# severity levels (low -> high); critical/severe/extreme share the top rank
Severity = Literal["info", "warning", "critical", "severe", "extreme"]

SEVERITY_ORDER = {
    "info": 0,
    "warning": 1,
    "critical": 2,
    "severe": 2,
    "extreme": 2,
}


class Verdict(str, Enum):
    ALL_CLEAR = "ALL_CLEAR"
    ALERTS_FOUND = "ALERTS_FOUND"
    WARNINGS = "WARNINGS"
    CRITICAL = "CRITICAL"


class ReportKind(str, Enum):
    """safety: the monitored person's location; self: the host running the loop."""
    SAFETY = "safety"
    SELF = "self"


def severity_rank(severity: str) -> int:
    """Unknown labels rank as warning."""
    return SEVERITY_ORDER.get(str(severity).lower(), SEVERITY_ORDER["warning"])


def is_above_info(severity: str) -> bool:
    return severity_rank(severity) > SEVERITY_ORDER["info"]


def critical_alerts(checks: Mapping) -> List:
    """Alerts whose severity is literally `critical`, in source order."""
    return [
        alert
        for result in checks.values()
        for alert in result.alerts
        if alert.severity == "critical"
    ]


def derive_verdict(kind: ReportKind, checks: Mapping) -> Verdict:
    """
    Derive the verdict of a report from its checks.

    Args:
        kind: report kind
        checks: source -> CheckResult mapping

    Returns:
        ALL_CLEAR iff every check is clear. Otherwise ALERTS_FOUND for
        safety reports; for self reports CRITICAL when any alert is
        critical, else WARNINGS.
    """
    if kind == ReportKind.SELF and critical_alerts(checks):
        return Verdict.CRITICAL

    if all(result.clear for result in checks.values()):
        return Verdict.ALL_CLEAR

    return Verdict.WARNINGS if kind == ReportKind.SELF else Verdict.ALERTS_FOUND


def describe_alert(alert) -> str:
    """One-line human description of any alert variant."""
    source = getattr(alert, "source", "")
    if source == "weather":
        return alert.headline or alert.event
    if source == "seismic":
        return f"M{alert.magnitude:g} earthquake: {alert.place}"
    if source == "air_quality":
        return f"Air quality {alert.level_label} (AQI {alert.index:g})"
    if source == "news":
        return f"{alert.title} ({alert.source_domain})"
    if source == "system_health":
        return alert.message
    return str(alert)


def summarize(checks: Mapping, *, limit: int = 3) -> str:
    """
    Build the human-readable summary of the non-clear checks.

    Args:
        checks: source -> CheckResult mapping
        limit: maximum alerts listed per source

    Returns:
        Summary string, "All clear" when nothing is flagged.
    """
    parts: List[str] = []
    for source, result in checks.items():
        if result.clear:
            continue
        label = getattr(source, "value", source)
        lines: Iterable[str] = [describe_alert(a) for a in result.alerts[:limit]]
        text = "; ".join(lines) or "flagged"
        parts.append(f"[{label}] {text}")
    return " | ".join(parts) if parts else "All clear"
