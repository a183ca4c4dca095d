"""
Hazard feed adapters for SafeWatch.

Each adapter wraps one upstream provider and normalizes its payload
into a CheckResult, failing open on any error.
"""

from .base import BaseFeedAdapter
from .weather import WeatherAdapter
from .seismic import SeismicAdapter
from .air_quality import AirQualityAdapter, classify_aqi
from .news import NewsAdapter, parse_feed
from .system_health import SystemHealthAdapter

__all__ = [
    "BaseFeedAdapter", "WeatherAdapter", "SeismicAdapter", "AirQualityAdapter",
    "classify_aqi", "NewsAdapter", "parse_feed", "SystemHealthAdapter",
]
