"""
Canned test scenarios for SafeWatch.

Each scenario substitutes one or more sources with a simulated
non-clear result so the alert and escalation flow can be exercised
without a real hazard.
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, List

from safewatch.common.errors import UnknownScenarioError
from .models import (
    AirQualityAlert, CheckResult, NewsAlert, SeismicAlert, Source,
    SystemHealthAlert, TestOverride, WeatherAlert,
)

OVERRIDE_TTL = timedelta(hours=1)


def _weather(now: datetime) -> CheckResult:
    return CheckResult(source=Source.WEATHER, clear=False, alerts=[WeatherAlert(
        event="Severe Thunderstorm Warning",
        severity_level="Severe",
        headline="TEST: Severe Thunderstorm Warning for King County",
        description="This is a TEST alert. A severe thunderstorm is approaching your area "
                    "with 60mph winds and quarter-size hail.",
        expires_at=now + timedelta(hours=1),
    )])


def _earthquake(now: datetime) -> CheckResult:
    return CheckResult(source=Source.SEISMIC, clear=False, alerts=[SeismicAlert(
        magnitude=5.2,
        place="TEST: 3km NE of Redmond, Washington",
        occurred_at=now,
        distance_km=3.0,
    )])


def _aqi(now: datetime) -> CheckResult:
    return CheckResult(
        source=Source.AIR_QUALITY, clear=False,
        alerts=[AirQualityAlert(index=175, level_label="Unhealthy", pm25=95.5)],
        current={"index": 175, "level": "Unhealthy"},
    )


def _news(now: datetime) -> CheckResult:
    return CheckResult(source=Source.NEWS, clear=False, alerts=[NewsAlert(
        title="TEST: Structure fire reported near Overlake area in Redmond",
        source_domain="test-news.com",
        link="https://example.com/test-fire",
        age_minutes=10,
    )])


def _disk(now: datetime) -> CheckResult:
    return CheckResult(source=Source.SYSTEM_HEALTH, clear=False, alerts=[SystemHealthAlert(
        kind="disk", severity_level="critical", message="TEST: Disk almost full: 94% used",
    )])


def _memory(now: datetime) -> CheckResult:
    return CheckResult(source=Source.SYSTEM_HEALTH, clear=False, alerts=[SystemHealthAlert(
        kind="memory", severity_level="warning", message="TEST: Memory getting low: 25% free",
    )])


SCENARIOS: Dict[str, List[Callable[[datetime], CheckResult]]] = {
    "weather": [_weather],
    "earthquake": [_earthquake],
    "aqi": [_aqi],
    "news": [_news],
    "disk": [_disk],
    "memory": [_memory],
    "all": [_weather, _earthquake, _aqi, _news],
}


def available_scenarios() -> List[str]:
    return sorted(SCENARIOS)


def build_override(scenario: str, now: datetime, ttl: timedelta = OVERRIDE_TTL) -> TestOverride:
    """
    Build a TestOverride for a named scenario.

    Args:
        scenario: scenario name
        now: creation time
        ttl: lifetime of the override

    Returns:
        TestOverride expiring at now + ttl

    Raises:
        UnknownScenarioError: scenario is not defined
    """
    builders = SCENARIOS.get(scenario)
    if builders is None:
        raise UnknownScenarioError(scenario, available_scenarios())

    substitutes = {}
    for build in builders:
        result = build(now)
        substitutes[result.source] = result

    return TestOverride(
        scenario=scenario,
        substitutes=substitutes,
        created_at=now,
        expires_at=now + ttl,
    )
