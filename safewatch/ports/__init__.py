"""
Port interfaces for SafeWatch hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .feed import FeedAdapterPort
from .http import HttpFetchPort
from .state import StateStorePort
from .report_log import ReportLogPort

__all__ = ["FeedAdapterPort", "HttpFetchPort", "StateStorePort", "ReportLogPort"]
