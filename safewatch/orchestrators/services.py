"""
Service wiring for SafeWatch.

Builds the adapters, stores and orchestrators described by Settings.
Shared by the CLI and the HTTP surface.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

from safewatch.adapters.feeds import (
    AirQualityAdapter, NewsAdapter, SeismicAdapter, SystemHealthAdapter, WeatherAdapter,
)
from safewatch.adapters.http import AiohttpFetcher
from safewatch.adapters.storage import JsonFileStateStore, JsonReportLog, SQLiteReportLog
from safewatch.core.models import Location, Source
from safewatch.core.verdict import ReportKind
from safewatch.ports.http import HttpFetchPort
from safewatch.ports.report_log import ReportLogPort
from safewatch.ports.state import StateStorePort
from safewatch.settings import Settings
from .aggregator import Aggregator
from .alerting import AlertLifecycle


@dataclass
class Services:
    settings: Settings
    store: StateStorePort
    report_log: Optional[ReportLogPort]
    safety: Aggregator
    self_check: Aggregator
    lifecycle: AlertLifecycle

    def self_location(self) -> Optional[Location]:
        loc = self.settings.location
        if loc.self_lat is None or loc.self_lon is None:
            return None
        return Location(lat=loc.self_lat, lon=loc.self_lon)


def probe_timeout(settings: Settings) -> float:
    """Connectivity probe budget, kept under the per-adapter ceiling."""
    return min(settings.self_check.probe_timeout_sec, settings.feeds.timeout_sec / 2)


def build_safety_adapters(settings: Settings, fetcher: HttpFetchPort) -> List:
    m = settings.monitoring
    available = {
        Source.WEATHER.value: lambda: WeatherAdapter(fetcher),
        Source.SEISMIC.value: lambda: SeismicAdapter(
            fetcher,
            radius_km=m.earthquake_radius_km,
            min_magnitude=m.earthquake_min_magnitude,
            window=timedelta(hours=m.earthquake_window_hours),
        ),
        Source.AIR_QUALITY.value: lambda: AirQualityAdapter(fetcher),
        Source.NEWS.value: lambda: NewsAdapter(
            fetcher,
            feeds=m.news_feeds,
            location_keywords=m.location_keywords,
            max_alerts=m.news_max_alerts,
            items_per_feed=m.news_items_per_feed,
            title_prefix_len=m.title_prefix_len,
            window=timedelta(hours=m.news_window_hours),
        ),
        Source.SYSTEM_HEALTH.value: lambda: SystemHealthAdapter(
            fetcher, disk_path=settings.self_check.disk_path, probe_url=settings.self_check.probe_url,
            probe_timeout_sec=probe_timeout(settings),
        ),
    }
    unknown = [name for name in settings.feeds.enabled if name not in available]
    if unknown:
        raise ValueError(f"unknown sources enabled: {unknown}")
    return [available[name]() for name in settings.feeds.enabled]


def build_self_adapters(settings: Settings, fetcher: HttpFetchPort) -> List:
    sc = settings.self_check
    return [
        SystemHealthAdapter(fetcher, disk_path=sc.disk_path, probe_url=sc.probe_url,
                            probe_timeout_sec=probe_timeout(settings)),
        WeatherAdapter(fetcher, min_severity=sc.weather_min_severity),
        SeismicAdapter(
            fetcher,
            radius_km=sc.earthquake_radius_km,
            min_magnitude=sc.earthquake_min_magnitude,
            window=timedelta(hours=sc.earthquake_window_hours),
        ),
    ]


def build_report_log(settings: Settings) -> ReportLogPort:
    if settings.storage.report_log == "sqlite":
        return SQLiteReportLog(settings.storage.sqlite_path)
    return JsonReportLog(settings.storage.logs_dir)


def build_services(settings: Settings,
                   *,
                   store: Optional[StateStorePort] = None,
                   fetcher: Optional[HttpFetchPort] = None,
                   report_log: Optional[ReportLogPort] = None) -> Services:
    """
    Wire every component from settings.

    Args:
        settings: application settings
        store: state store override (defaults to JSON files under storage.state_dir)
        fetcher: HTTP client override
        report_log: report log override

    Returns:
        Services
    """
    store = store or JsonFileStateStore(settings.storage.state_dir)
    fetcher = fetcher or AiohttpFetcher(
        user_agent=settings.feeds.user_agent,
        timeout=settings.feeds.timeout_sec,
        max_retries=settings.feeds.max_retries,
        backoff_initial=settings.feeds.backoff_initial_sec,
    )
    if report_log is None and not settings.dry_run:
        report_log = build_report_log(settings)

    safety = Aggregator(
        build_safety_adapters(settings, fetcher), store, report_log,
        kind=ReportKind.SAFETY, timeout_sec=settings.feeds.timeout_sec,
    )
    self_check = Aggregator(
        build_self_adapters(settings, fetcher), store, report_log,
        kind=ReportKind.SELF, timeout_sec=settings.feeds.timeout_sec,
    )
    lifecycle = AlertLifecycle(
        store,
        threshold=timedelta(minutes=settings.escalation.threshold_minutes),
        contact=settings.escalation.contact,
    )
    return Services(
        settings=settings,
        store=store,
        report_log=report_log,
        safety=safety,
        self_check=self_check,
        lifecycle=lifecycle,
    )
