"""
Report log port interface.

This module defines the protocol for the append-only history of
check runs.
"""

from typing import Any, Dict, Optional, Protocol
from safewatch.core.models import SafetyReport

class ReportLogPort(Protocol):
    """Append-only report history"""

    async def append(self, report: SafetyReport, meta: Optional[Dict[str, Any]] = None) -> str:
        """
        Persist one report.

        Args:
            report: report to persist
            meta: extra run metadata stored alongside

        Returns:
            Key of the new record (file path or row id)
        """
        ...
