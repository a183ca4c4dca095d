"""
In-memory state store for SafeWatch (tests and embedding).
"""

from datetime import datetime
from typing import Callable, Optional

from safewatch.common.timeutil import utcnow
from safewatch.core.models import Location, PendingAlert, TestOverride


class MemoryStateStore:
    """Process-local state store"""

    def __init__(self, *,
                 location: Optional[Location] = None,
                 pending: Optional[PendingAlert] = None,
                 override: Optional[TestOverride] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.location = location
        self.pending = pending
        self.override = override
        self.clock = clock

    async def load_location(self) -> Optional[Location]:
        return self.location

    async def save_location(self, location: Location) -> None:
        self.location = location

    async def load_pending(self) -> Optional[PendingAlert]:
        return self.pending

    async def save_pending(self, pending: PendingAlert) -> None:
        self.pending = pending

    async def clear_pending(self) -> None:
        self.pending = None

    async def load_override(self) -> Optional[TestOverride]:
        if self.override is not None and not self.override.is_live(self.clock()):
            self.override = None
        return self.override

    async def save_override(self, override: TestOverride) -> None:
        self.override = override

    async def clear_override(self) -> bool:
        existed = self.override is not None
        self.override = None
        return existed
