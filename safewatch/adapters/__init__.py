"""
Adapters for SafeWatch hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .http import AiohttpFetcher
from .storage import JsonFileStateStore, MemoryStateStore, JsonReportLog, SQLiteReportLog
from .feeds import (
    WeatherAdapter, SeismicAdapter, AirQualityAdapter, NewsAdapter, SystemHealthAdapter,
)

__all__ = [
    "AiohttpFetcher", "JsonFileStateStore", "MemoryStateStore", "JsonReportLog", "SQLiteReportLog",
    "WeatherAdapter", "SeismicAdapter", "AirQualityAdapter", "NewsAdapter", "SystemHealthAdapter",
]
