"""
National Weather Service alerts adapter.

Any active NWS alert for the point counts as a hazard. The self-check
variant can restrict alerts to a minimum severity.
"""

from typing import Optional

from safewatch.common.timeutil import parse_timestamp
from safewatch.core.models import CheckResult, Location, Source, WeatherAlert
from safewatch.core.verdict import severity_rank
from .base import BaseFeedAdapter

NWS_ALERTS_URL = "https://api.weather.gov/alerts/active"


def _point(location: Location) -> str:
    # NWS redirects requests with more than 4 decimals
    return f"{location.lat:.4f},{location.lon:.4f}"


class WeatherAdapter(BaseFeedAdapter):
    """NWS active alerts"""

    source = Source.WEATHER

    def __init__(self, fetcher, *, min_severity: Optional[str] = None, **kwargs):
        super().__init__(fetcher, **kwargs)
        self.min_severity = min_severity

    async def _fetch(self, location: Location) -> CheckResult:
        data = await self.fetcher.get_json(NWS_ALERTS_URL, params={"point": _point(location)})

        alerts = []
        for feature in data.get("features") or []:
            props = feature.get("properties") or {}
            alert = WeatherAlert(
                event=props.get("event") or "Unknown event",
                severity_level=props.get("severity") or "Unknown",
                headline=props.get("headline"),
                description=(props.get("description") or "")[:500] or None,
                expires_at=parse_timestamp(props.get("expires")),
            )
            if self.min_severity and severity_rank(alert.severity) < severity_rank(self.min_severity):
                continue
            alerts.append(alert)

        return CheckResult.from_alerts(self.source, alerts)

    def endpoint(self, location: Location) -> Optional[str]:
        return f"{NWS_ALERTS_URL}?point={_point(location)}"
