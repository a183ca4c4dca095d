"""
Timestamp-named JSON report log for SafeWatch.

One file per run, named `<YYYY-MM-DDTHH-MM-SS>_<kind>.json`. Files are
created exclusively and never overwritten.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from safewatch.common.timeutil import log_stamp
from safewatch.core.models import SafetyReport
from safewatch.observability.logging_setup import get_logger

log = get_logger("safewatch.reportlog")


class JsonReportLog:
    """Append-only directory of run logs"""

    def __init__(self, logs_dir: str):
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def _open_new(self, stem: str):
        path = self.logs_dir / f"{stem}.json"
        n = 1
        while True:
            try:
                return path, open(path, "x", encoding="utf-8")
            except FileExistsError:
                path = self.logs_dir / f"{stem}-{n}.json"
                n += 1

    async def append(self, report: SafetyReport, meta: Optional[Dict[str, Any]] = None) -> str:
        """
        Write one report file.

        Args:
            report: report to persist
            meta: extra run metadata (queried endpoints, ...)

        Returns:
            Path of the written file
        """
        stem = f"{log_stamp(report.generated_at)}_{report.kind.value}"
        path, fh = self._open_new(stem)
        entry = report.model_dump(mode="json")
        entry["meta"] = {"log_file": str(path), **(meta or {})}
        with fh:
            json.dump(entry, fh, indent=2, ensure_ascii=False)
        log.info("report logged", path=str(path))
        return str(path)

    def list_files(self):
        return sorted(self.logs_dir.glob("*.json"))
