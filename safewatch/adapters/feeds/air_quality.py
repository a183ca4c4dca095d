"""
Air quality adapter (Open-Meteo, US AQI).
"""

from typing import Optional, Tuple

from safewatch.core.models import AirQualityAlert, CheckResult, Location, Source
from .base import BaseFeedAdapter

OPEN_METEO_AQ_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"


def classify_aqi(aqi: float) -> Tuple[str, bool]:
    """
    Map a US AQI value to its level label.

    Returns:
        (label, concerning); only the two "Unhealthy" tiers are concerning
    """
    if aqi > 150:
        return "Unhealthy", True
    if aqi > 100:
        return "Unhealthy for Sensitive Groups", True
    if aqi > 50:
        return "Moderate", False
    return "Good", False


class AirQualityAdapter(BaseFeedAdapter):
    source = Source.AIR_QUALITY

    async def _fetch(self, location: Location) -> CheckResult:
        data = await self.fetcher.get_json(OPEN_METEO_AQ_URL, params={
            "latitude": location.lat,
            "longitude": location.lon,
            "current": "us_aqi,pm10,pm2_5",
        })
        current = data.get("current") or {}
        aqi = current.get("us_aqi") or 0
        level, concerning = classify_aqi(aqi)

        alerts = []
        if concerning:
            alerts.append(AirQualityAlert(index=aqi, level_label=level, pm25=current.get("pm2_5")))

        return CheckResult.from_alerts(self.source, alerts, current={"index": aqi, "level": level})

    def endpoint(self, location: Location) -> Optional[str]:
        return f"{OPEN_METEO_AQ_URL}?latitude={location.lat}&longitude={location.lon}"
