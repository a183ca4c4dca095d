"""
Feed adapter port interface.

This module defines the protocol every hazard source implements.
"""

from typing import Optional, Protocol
from safewatch.core.models import CheckResult, Location, Source

class FeedAdapterPort(Protocol):
    """Hazard feed adapter"""

    source: Source

    async def fetch(self, location: Location) -> CheckResult:
        """
        Query the source for the given location.

        Must never raise: failures come back as a clear result
        carrying an `error` description.

        Args:
            location: point to check

        Returns:
            CheckResult for this source
        """
        ...

    def endpoint(self, location: Location) -> Optional[str]:
        """Human-readable description of what was queried (for the run log)."""
        ...
