"""
Exception hierarchy for SafeWatch.

Only MissingLocationError is expected to escape a check run; the other
errors are raised inside adapters and stores and converted there into
fail-open results or "absent" state.
"""

from typing import Any, Dict, Optional


class SafeWatchError(Exception):
    """Base exception for all SafeWatch errors."""

    def __init__(self, message: str = "An unexpected error occurred", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UpstreamUnavailable(SafeWatchError):
    """A hazard feed could not be reached, timed out or returned garbage."""

    def __init__(self, message: str, *, url: Optional[str] = None, status: Optional[int] = None):
        details: Dict[str, Any] = {}
        if url:
            details["url"] = url
        if status is not None:
            details["status"] = status
        super().__init__(message, details=details)
        self.url = url
        self.status = status


class MissingLocationError(SafeWatchError):
    """No usable location is on file, so no report can be produced."""

    def __init__(self, message: str = "No location data available"):
        super().__init__(message)


class StateCorruptionError(SafeWatchError):
    """A persisted state record could not be read or validated."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Unreadable state record {path}: {reason}", details={"path": path})
        self.path = path
        self.reason = reason


class UnknownScenarioError(SafeWatchError):
    """The requested test scenario does not exist."""

    def __init__(self, scenario: str, available: Optional[list] = None):
        super().__init__(f"Unknown scenario: {scenario}", details={"available": available or []})
        self.scenario = scenario
