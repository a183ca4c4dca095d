"""
USGS earthquake adapter.

Counts events of at least `min_magnitude` inside the radius during
the lookback window.
"""

from datetime import timedelta
from typing import Optional

from safewatch.common.geo import haversine_distance, validate_coordinates
from safewatch.common.timeutil import from_epoch
from safewatch.core.models import CheckResult, Location, SeismicAlert, Source
from .base import BaseFeedAdapter

USGS_QUERY_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"


class SeismicAdapter(BaseFeedAdapter):
    """USGS FDSN event query"""

    source = Source.SEISMIC

    def __init__(self, fetcher, *,
                 radius_km: float = 100.0,
                 min_magnitude: float = 2.5,
                 window: timedelta = timedelta(hours=24),
                 **kwargs):
        super().__init__(fetcher, **kwargs)
        self.radius_km = radius_km
        self.min_magnitude = min_magnitude
        self.window = window

    async def _fetch(self, location: Location) -> CheckResult:
        now = self.clock()
        since = now - self.window
        data = await self.fetcher.get_json(USGS_QUERY_URL, params={
            "format": "geojson",
            "latitude": location.lat,
            "longitude": location.lon,
            "maxradiuskm": self.radius_km,
            "starttime": since.strftime("%Y-%m-%dT%H:%M:%S"),
        })

        alerts = []
        for feature in data.get("features") or []:
            props = feature.get("properties") or {}
            mag = props.get("mag")
            if mag is None or mag < self.min_magnitude:
                continue
            if props.get("time") is None:
                continue
            occurred_at = from_epoch(props["time"], millis=True)
            if occurred_at < since:
                continue

            distance = None
            coords = (feature.get("geometry") or {}).get("coordinates") or []
            if len(coords) >= 2 and validate_coordinates(coords[1], coords[0]):
                distance = round(haversine_distance(location.lat, location.lon, coords[1], coords[0]), 1)
                if distance > self.radius_km:
                    continue

            alerts.append(SeismicAlert(
                magnitude=mag,
                place=props.get("place") or "Unknown location",
                occurred_at=occurred_at,
                distance_km=distance,
            ))

        return CheckResult.from_alerts(self.source, alerts)

    def endpoint(self, location: Location) -> Optional[str]:
        return (f"{USGS_QUERY_URL}?format=geojson&latitude={location.lat}"
                f"&longitude={location.lon}&maxradiuskm={self.radius_km:g}")
