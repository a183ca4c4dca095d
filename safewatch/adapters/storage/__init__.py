"""
Storage adapters for SafeWatch hexagonal architecture.

This module contains the state stores (pending alert, override,
location) and the append-only report logs.
"""

from .json_store import JsonFileStateStore
from .memory_store import MemoryStateStore
from .json_report_log import JsonReportLog
from .sqlite_report_log import SQLiteReportLog

__all__ = ["JsonFileStateStore", "MemoryStateStore", "JsonReportLog", "SQLiteReportLog"]
