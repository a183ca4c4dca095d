"""
JSON file state store for SafeWatch.

This module keeps the loop's state as small JSON files in one
directory: the latest location, the pending alert and the test
override. A record that cannot be read or validated is treated as
absent so a corrupt file never stops the check loop.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Type, TypeVar

from pydantic import BaseModel

from safewatch.common.errors import StateCorruptionError
from safewatch.common.timeutil import utcnow
from safewatch.core.models import Location, PendingAlert, TestOverride
from safewatch.observability import metrics
from safewatch.observability.logging_setup import get_logger

log = get_logger("safewatch.state")

M = TypeVar("M", bound=BaseModel)

LOCATION_FILE = "location.json"
STATE_FILE = "safety-state.json"
OVERRIDE_FILE = "test-override.json"


def write_json_atomic(path: Path, text: str) -> None:
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, path)


class JsonFileStateStore:
    """File-backed state store"""

    def __init__(self, base_dir: str, *, clock: Callable[[], datetime] = utcnow):
        """
        Initialize the store.

        Args:
            base_dir: directory holding the state files (created if missing)
            clock: time source used for override expiry
        """
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.clock = clock

    @property
    def location_path(self) -> Path:
        return self.base_dir / LOCATION_FILE

    @property
    def state_path(self) -> Path:
        return self.base_dir / STATE_FILE

    @property
    def override_path(self) -> Path:
        return self.base_dir / OVERRIDE_FILE

    def _read(self, path: Path, model: Type[M]) -> M:
        try:
            return model.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StateCorruptionError(str(path), str(e)) from e

    def _load(self, path: Path, model: Type[M], record: str) -> Optional[M]:
        if not path.exists():
            return None
        try:
            return self._read(path, model)
        except StateCorruptionError as e:
            metrics.state_corruption.labels(record=record).inc()
            log.warning("state record unreadable, treating as absent", record=record, path=e.path, reason=e.reason)
            return None

    def _remove(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    async def load_location(self) -> Optional[Location]:
        return self._load(self.location_path, Location, "location")

    async def save_location(self, location: Location) -> None:
        write_json_atomic(self.location_path, location.model_dump_json(indent=2))

    async def load_pending(self) -> Optional[PendingAlert]:
        return self._load(self.state_path, PendingAlert, "pending_alert")

    async def save_pending(self, pending: PendingAlert) -> None:
        write_json_atomic(self.state_path, pending.model_dump_json(indent=2))

    async def clear_pending(self) -> None:
        self._remove(self.state_path)

    async def load_override(self) -> Optional[TestOverride]:
        override = self._load(self.override_path, TestOverride, "test_override")
        if override is None:
            return None
        if not override.is_live(self.clock()):
            log.info("test override expired, removing", scenario=override.scenario)
            self._remove(self.override_path)
            return None
        return override

    async def save_override(self, override: TestOverride) -> None:
        write_json_atomic(self.override_path, override.model_dump_json(indent=2))

    async def clear_override(self) -> bool:
        return self._remove(self.override_path)
