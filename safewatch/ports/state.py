"""
State store port interface.

This module defines the protocol for the small amount of state the
loop keeps between runs: the latest location, the pending alert and
the test override. Implementations treat unreadable records as absent.
"""

from typing import Optional, Protocol
from safewatch.core.models import Location, PendingAlert, TestOverride

class StateStorePort(Protocol):
    """State store interface"""

    async def load_location(self) -> Optional[Location]:
        ...

    async def save_location(self, location: Location) -> None:
        ...

    async def load_pending(self) -> Optional[PendingAlert]:
        ...

    async def save_pending(self, pending: PendingAlert) -> None:
        ...

    async def clear_pending(self) -> None:
        ...

    async def load_override(self) -> Optional[TestOverride]:
        """Return the live override; expired ones are removed and reported as None."""
        ...

    async def save_override(self, override: TestOverride) -> None:
        ...

    async def clear_override(self) -> bool:
        """Remove the override. Returns True when one existed."""
        ...
