"""
Feed adapter unit tests

Each adapter is exercised against canned upstream payloads served by a
fake fetcher, including the fail-open paths.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from unittest.mock import patch
from collections import namedtuple

import pytest

from safewatch.adapters.feeds import (
    AirQualityAdapter, NewsAdapter, SeismicAdapter, SystemHealthAdapter, WeatherAdapter,
    classify_aqi, parse_feed,
)
from safewatch.adapters.feeds.air_quality import OPEN_METEO_AQ_URL
from safewatch.adapters.feeds.seismic import USGS_QUERY_URL
from safewatch.adapters.feeds.weather import NWS_ALERTS_URL
from safewatch.adapters.storage import MemoryStateStore
from safewatch.common.errors import UpstreamUnavailable
from safewatch.core.models import Location, Source
from safewatch.core.verdict import ReportKind, Verdict
from safewatch.orchestrators.aggregator import Aggregator

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
SEATTLE = Location(lat=47.6062, lon=-122.3321, captured_at=NOW)


def rss(*entries):
    items = "".join(
        f"<item><title>{title}</title><link>{link}</link>"
        f"<description>{desc}</description><pubDate>{format_datetime(pub)}</pubDate></item>"
        for title, link, desc, pub in entries
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel><title>Local</title>{items}</channel></rss>'


class TestFailOpen:
    """Every adapter reports clear on upstream failure"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("factory", [
        lambda f: WeatherAdapter(f),
        lambda f: SeismicAdapter(f),
        lambda f: AirQualityAdapter(f),
    ])
    async def test_upstream_error(self, make_fetcher, factory):
        fetcher = make_fetcher({"https://": UpstreamUnavailable("HTTP 503: down")})
        adapter = factory(fetcher)
        result = await adapter.fetch(SEATTLE)

        assert result.source == adapter.source
        assert result.clear is True
        assert result.alerts == []
        assert result.error == "HTTP 503: down"

    @pytest.mark.asyncio
    async def test_malformed_payload(self, make_fetcher):
        fetcher = make_fetcher({NWS_ALERTS_URL: {"features": [{"properties": {"expires": object()}}]}})
        result = await WeatherAdapter(fetcher).fetch(SEATTLE)
        assert result.clear is True
        assert result.error

    @pytest.mark.asyncio
    async def test_payload_not_a_dict(self, make_fetcher):
        fetcher = make_fetcher({USGS_QUERY_URL: ["unexpected"]})
        result = await SeismicAdapter(fetcher).fetch(SEATTLE)
        assert result.clear is True
        assert result.error is not None


class TestWeatherAdapter:
    """NWS adapter"""

    @pytest.mark.asyncio
    async def test_alerts_parsed(self, make_fetcher):
        fetcher = make_fetcher({NWS_ALERTS_URL: {"features": [
            {"properties": {
                "event": "Flood Warning", "severity": "Severe", "headline": "Flood Warning for King County",
                "description": "x" * 800, "expires": "2025-06-01T18:00:00-07:00",
            }},
            {"properties": {"event": "Special Weather Statement", "severity": "Minor"}},
        ]}})
        result = await WeatherAdapter(fetcher).fetch(SEATTLE)

        assert result.clear is False
        assert [a.event for a in result.alerts] == ["Flood Warning", "Special Weather Statement"]
        first = result.alerts[0]
        assert first.severity == "severe"
        assert len(first.description) == 500
        assert first.expires_at == datetime(2025, 6, 2, 1, 0, 0, tzinfo=timezone.utc)
        assert fetcher.calls[0][1] == {"point": "47.6062,-122.3321"}

    @pytest.mark.asyncio
    async def test_no_alerts(self, make_fetcher):
        result = await WeatherAdapter(make_fetcher({NWS_ALERTS_URL: {"features": []}})).fetch(SEATTLE)
        assert result.clear is True
        assert result.error is None

    @pytest.mark.asyncio
    async def test_min_severity(self, make_fetcher):
        fetcher = make_fetcher({NWS_ALERTS_URL: {"features": [
            {"properties": {"event": "Wind Advisory", "severity": "Moderate"}},
            {"properties": {"event": "Tornado Warning", "severity": "Extreme"}},
        ]}})
        result = await WeatherAdapter(fetcher, min_severity="severe").fetch(SEATTLE)
        assert [a.event for a in result.alerts] == ["Tornado Warning"]

    def test_endpoint(self):
        assert WeatherAdapter(None).endpoint(SEATTLE) == f"{NWS_ALERTS_URL}?point=47.6062,-122.3321"


class TestSeismicAdapter:
    """USGS adapter"""

    @staticmethod
    def feature(mag, minutes_ago, lon=-122.3, lat=47.6, place="near Seattle"):
        ts = int((NOW - timedelta(minutes=minutes_ago)).timestamp() * 1000)
        return {"properties": {"mag": mag, "time": ts, "place": place},
                "geometry": {"coordinates": [lon, lat, 10.0]}}

    @pytest.mark.asyncio
    async def test_filters(self, make_fetcher, clock):
        fetcher = make_fetcher({USGS_QUERY_URL: {"features": [
            self.feature(3.4, 30),
            self.feature(2.0, 30),                         # below magnitude
            self.feature(4.1, 60 * 30),                    # outside window
            self.feature(5.1, 10, lon=-118.2, lat=34.0),   # outside radius
            self.feature(None, 10),
        ]}})
        result = await SeismicAdapter(fetcher, clock=clock).fetch(SEATTLE)

        assert result.clear is False
        assert len(result.alerts) == 1
        alert = result.alerts[0]
        assert alert.magnitude == 3.4
        assert alert.place == "near Seattle"
        assert alert.occurred_at == NOW - timedelta(minutes=30)
        assert alert.distance_km is not None and alert.distance_km < 5

        params = fetcher.calls[0][1]
        assert params["maxradiuskm"] == 100.0
        assert params["starttime"] == "2025-05-31T12:00:00"

    @pytest.mark.asyncio
    async def test_self_check_parameters(self, make_fetcher, clock):
        fetcher = make_fetcher({USGS_QUERY_URL: {"features": [
            self.feature(3.9, 10),
            self.feature(4.5, 90),
            self.feature(5.0, 20, place="under the city"),
        ]}})
        adapter = SeismicAdapter(fetcher, radius_km=50, min_magnitude=4.0, window=timedelta(hours=1), clock=clock)
        result = await adapter.fetch(SEATTLE)
        assert [a.place for a in result.alerts] == ["under the city"]
        assert result.alerts[0].severity == "critical"


class TestAirQualityAdapter:
    """Open-Meteo adapter"""

    @pytest.mark.parametrize("aqi,label,concerning", [
        (0, "Good", False),
        (50, "Good", False),
        (51, "Moderate", False),
        (100, "Moderate", False),
        (101, "Unhealthy for Sensitive Groups", True),
        (151, "Unhealthy", True),
        (320, "Unhealthy", True),
    ])
    def test_classify(self, aqi, label, concerning):
        assert classify_aqi(aqi) == (label, concerning)

    @pytest.mark.asyncio
    async def test_unhealthy(self, make_fetcher):
        fetcher = make_fetcher({OPEN_METEO_AQ_URL: {"current": {"us_aqi": 162, "pm2_5": 80.2}}})
        result = await AirQualityAdapter(fetcher).fetch(SEATTLE)
        assert result.clear is False
        assert result.alerts[0].index == 162
        assert result.alerts[0].pm25 == 80.2
        assert result.current == {"index": 162, "level": "Unhealthy"}

    @pytest.mark.asyncio
    async def test_good_reports_current(self, make_fetcher):
        fetcher = make_fetcher({OPEN_METEO_AQ_URL: {"current": {"us_aqi": 23}}})
        result = await AirQualityAdapter(fetcher).fetch(SEATTLE)
        assert result.clear is True
        assert result.current == {"index": 23, "level": "Good"}

    @pytest.mark.asyncio
    async def test_missing_current(self, make_fetcher):
        result = await AirQualityAdapter(make_fetcher({OPEN_METEO_AQ_URL: {}})).fetch(SEATTLE)
        assert result.clear is True
        assert result.current == {"index": 0, "level": "Good"}


class TestNewsAdapter:
    """RSS adapter"""

    FEED_A = "https://a.example.com/rss"
    FEED_B = "https://b.example.org/rss"

    def test_parse_feed(self):
        text = rss(
            ("Flash flood warning in Seattle", "https://a.example.com/1", "Water rising", NOW - timedelta(minutes=20)),
            ("City council meets", "https://a.example.com/2", "Budget", NOW - timedelta(hours=2)),
        )
        items = parse_feed(text, self.FEED_A)
        assert [i.title for i in items] == ["Flash flood warning in Seattle", "City council meets"]
        assert items[0].published_at == NOW - timedelta(minutes=20)
        assert items[0].description == "Water rising"
        assert items[0].feed_url == self.FEED_A

    def test_parse_garbage(self):
        assert parse_feed("not a feed", self.FEED_A) == []

    @pytest.mark.asyncio
    async def test_partial_feed_failure(self, make_fetcher, clock):
        fetcher = make_fetcher({
            self.FEED_A: UpstreamUnavailable("Timeout"),
            self.FEED_B: rss(("Evacuate now: wildfire near Seattle suburbs", "https://b.example.org/x",
                              "", NOW - timedelta(minutes=15))),
        })
        adapter = NewsAdapter(fetcher, feeds=[self.FEED_A, self.FEED_B], location_keywords=["seattle"], clock=clock)
        result = await adapter.fetch(SEATTLE)

        assert result.error is None
        assert result.clear is False
        assert len(result.alerts) == 1
        assert result.alerts[0].source_domain == "b.example.org"
        assert result.alerts[0].age_minutes == 15

    @pytest.mark.asyncio
    async def test_duplicate_across_feeds(self, make_fetcher, clock):
        title = "Shelter in place ordered for Seattle residents near the chemical plant"
        fetcher = make_fetcher({
            self.FEED_A: rss((title, "https://a.example.com/1", "", NOW - timedelta(minutes=5))),
            self.FEED_B: rss((title.upper() + "!", "https://b.example.org/1", "", NOW - timedelta(minutes=6))),
        })
        adapter = NewsAdapter(fetcher, feeds=[self.FEED_A, self.FEED_B], location_keywords=["seattle"], clock=clock)
        result = await adapter.fetch(SEATTLE)
        assert len(result.alerts) == 1
        assert result.alerts[0].source_domain == "a.example.com"

    @pytest.mark.asyncio
    async def test_no_feeds(self, make_fetcher):
        result = await NewsAdapter(make_fetcher(), feeds=[], location_keywords=["seattle"]).fetch(SEATTLE)
        assert result.clear is True
        assert result.alerts == []


DiskUsage = namedtuple("DiskUsage", "total used free")
VirtualMemory = namedtuple("VirtualMemory", "total available")
Temp = namedtuple("Temp", "label current high critical")


class HangingFetcher:
    """Connectivity that neither answers nor refuses"""

    def __init__(self, delay):
        self.delay = delay

    async def get_text(self, url, params=None):
        await asyncio.sleep(self.delay)
        return "ok"

    async def get_json(self, url, params=None):
        await asyncio.sleep(self.delay)
        return {}


class TestSystemHealthAdapter:
    """Host health adapter"""

    @pytest.fixture
    def healthy(self):
        with patch("safewatch.adapters.feeds.system_health.psutil.disk_usage", return_value=DiskUsage(100, 50, 50)), \
             patch("safewatch.adapters.feeds.system_health.psutil.virtual_memory", return_value=VirtualMemory(100, 70)), \
             patch("safewatch.adapters.feeds.system_health.psutil.sensors_temperatures",
                   return_value={"coretemp": [Temp("Package", 55.0, 90.0, 100.0)]}, create=True), \
             patch("safewatch.adapters.feeds.system_health.psutil.boot_time",
                   return_value=datetime.now().timestamp() - 3 * 86400):
            yield

    @pytest.mark.asyncio
    async def test_healthy(self, healthy, make_fetcher):
        adapter = SystemHealthAdapter(make_fetcher({"https://api.weather.gov/": "ok"}))
        result = await adapter.fetch(SEATTLE)
        assert result.source == Source.SYSTEM_HEALTH
        assert result.clear is True
        assert result.alerts == []

    @pytest.mark.parametrize("used,severity", [(86, "warning"), (96, "critical")])
    def test_disk(self, healthy, used, severity):
        with patch("safewatch.adapters.feeds.system_health.psutil.disk_usage",
                   return_value=DiskUsage(100, used, 100 - used)):
            alert = SystemHealthAdapter().check_disk()
        assert alert.kind == "disk"
        assert alert.severity_level == severity

    @pytest.mark.parametrize("available,severity", [(35, "warning"), (15, "critical"), (45, None)])
    def test_memory(self, healthy, available, severity):
        with patch("safewatch.adapters.feeds.system_health.psutil.virtual_memory",
                   return_value=VirtualMemory(100, available)):
            alert = SystemHealthAdapter().check_memory()
        assert (alert.severity_level if alert else None) == severity

    def test_temperature(self, healthy):
        with patch("safewatch.adapters.feeds.system_health.psutil.sensors_temperatures",
                   return_value={"cpu": [Temp("core", 97.0, None, None)]}, create=True):
            alert = SystemHealthAdapter().check_temperature()
        assert alert.severity_level == "critical"

    @pytest.mark.asyncio
    async def test_uptime_is_info_only(self, healthy):
        with patch("safewatch.adapters.feeds.system_health.psutil.boot_time",
                   return_value=datetime.now().timestamp() - 45 * 86400):
            result = await SystemHealthAdapter(probe_url=None).fetch(SEATTLE)
        assert [a.kind for a in result.alerts] == ["uptime"]
        assert result.clear is True

    @pytest.mark.asyncio
    async def test_network_probe_failure(self, healthy, make_fetcher):
        adapter = SystemHealthAdapter(make_fetcher({"https://": UpstreamUnavailable("Timeout")}))
        result = await adapter.fetch(SEATTLE)
        assert result.clear is False
        assert [a.kind for a in result.alerts] == ["network"]
        assert result.alerts[0].severity == "critical"

    @pytest.mark.asyncio
    async def test_broken_sensor_is_skipped(self, healthy):
        with patch("safewatch.adapters.feeds.system_health.psutil.virtual_memory", side_effect=OSError("no /proc")):
            result = await SystemHealthAdapter(probe_url=None).fetch(SEATTLE)
        assert result.clear is True
        assert result.error is None

    @pytest.mark.asyncio
    async def test_network_probe_timeout(self, healthy):
        adapter = SystemHealthAdapter(HangingFetcher(1.0), probe_timeout_sec=0.05)
        result = await adapter.fetch(SEATTLE)
        assert result.clear is False
        assert [a.kind for a in result.alerts] == ["network"]
        assert result.alerts[0].severity == "critical"

    @pytest.mark.asyncio
    async def test_hung_network_keeps_local_alerts(self, healthy):
        adapter = SystemHealthAdapter(HangingFetcher(1.0), probe_timeout_sec=0.1)
        aggregator = Aggregator([adapter], MemoryStateStore(), kind=ReportKind.SELF, timeout_sec=0.5)
        with patch("safewatch.adapters.feeds.system_health.psutil.disk_usage",
                   return_value=DiskUsage(100, 96, 4)):
            report = await aggregator.run_check(SEATTLE)

        check = report.checks[Source.SYSTEM_HEALTH]
        assert report.verdict == Verdict.CRITICAL
        assert check.error is None
        assert [a.kind for a in check.alerts] == ["disk", "network"]
