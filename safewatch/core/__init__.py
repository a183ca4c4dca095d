"""
Core domain models and pure functions for SafeWatch.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    AirQualityAlert, CheckResult, EmergencyContact, ErrorResult, EscalationDecision,
    Location, NewsAlert, PendingAlert, SafetyReport, SeismicAlert, Source,
    SystemHealthAlert, TestOverride, WeatherAlert,
)
from .verdict import ReportKind, Verdict, derive_verdict, summarize
from .escalation import check_escalation
from .scenarios import build_override

__all__ = [
    "AirQualityAlert", "CheckResult", "EmergencyContact", "ErrorResult", "EscalationDecision",
    "Location", "NewsAlert", "PendingAlert", "SafetyReport", "SeismicAlert", "Source",
    "SystemHealthAlert", "TestOverride", "WeatherAlert",
    "ReportKind", "Verdict", "derive_verdict", "summarize", "check_escalation", "build_override",
]
