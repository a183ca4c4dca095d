"""
Core domain models for SafeWatch.

This module defines the core domain models using Pydantic v2
for type safety and validation. Hazard alerts are a closed tagged
union keyed by `source`.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from safewatch.common.timeutil import ensure_utc, from_epoch, parse_timestamp, utcnow
from .verdict import ReportKind, Severity, Verdict, derive_verdict, is_above_info


class Source(str, Enum):
    WEATHER = "weather"
    SEISMIC = "seismic"
    AIR_QUALITY = "air_quality"
    NEWS = "news"
    SYSTEM_HEALTH = "system_health"


class _UtcModel(BaseModel):
    """Normalizes every datetime field to aware UTC."""

    @field_validator("*", mode="after")
    @classmethod
    def _utc(cls, value):
        if isinstance(value, datetime):
            return ensure_utc(value)
        return value


class Location(_UtcModel):
    """Latest location fix of the monitored subject"""
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    battery: Optional[int] = None
    captured_at: datetime = Field(default_factory=utcnow)
    received_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any], *, now: Optional[datetime] = None) -> "Location":
        """
        Build a Location from a webhook payload (OwnTracks, iOS Shortcuts, ...).

        Args:
            data: decoded JSON payload
            now: receive time

        Returns:
            Location

        Raises:
            ValueError: coordinates are missing or invalid
        """
        now = now or utcnow()

        def first(*keys):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        lat = first("lat", "Lat", "latitude", "Latitude")
        lon = first("lon", "Lon", "longitude", "Longitude")
        if lat is None or lon is None:
            raise ValueError("payload has no coordinates")
        try:
            lat, lon = float(lat), float(lon)
        except (TypeError, ValueError):
            raise ValueError(f"coordinates are not numbers: {lat!r}, {lon!r}") from None
        # senders report 0,0 when they have no fix
        if lat == 0 and lon == 0:
            raise ValueError("payload has no fix (0,0)")

        if data.get("tst") is not None:
            captured_at = from_epoch(float(data["tst"]))
        else:
            captured_at = parse_timestamp(data.get("timestamp")) or now

        return cls(
            lat=lat,
            lon=lon,
            accuracy=first("acc", "accuracy"),
            altitude=first("alt", "altitude"),
            battery=data.get("batt"),
            captured_at=captured_at,
            received_at=now,
        )


# ---- hazard alert variants ----

WEATHER_SEVERITY: Dict[str, Severity] = {
    "extreme": "extreme",
    "severe": "severe",
    "moderate": "warning",
    "minor": "info",
    "unknown": "warning",
}


class WeatherAlert(_UtcModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["weather"] = "weather"
    event: str
    severity_level: str = "Unknown"
    headline: Optional[str] = None
    description: Optional[str] = None
    expires_at: Optional[datetime] = None

    @computed_field
    @property
    def severity(self) -> Severity:
        return WEATHER_SEVERITY.get(self.severity_level.lower(), "warning")


class SeismicAlert(_UtcModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["seismic"] = "seismic"
    magnitude: float
    place: str
    occurred_at: datetime
    distance_km: Optional[float] = None

    @computed_field
    @property
    def severity(self) -> Severity:
        return "critical" if self.magnitude >= 5.0 else "warning"


class AirQualityAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["air_quality"] = "air_quality"
    index: float
    level_label: str
    pm25: Optional[float] = None

    @computed_field
    @property
    def severity(self) -> Severity:
        return "severe" if self.index > 150 else "warning"


class NewsAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["news"] = "news"
    title: str
    source_domain: str
    link: str = ""
    age_minutes: int = 0

    @computed_field
    @property
    def severity(self) -> Severity:
        return "warning"


class SystemHealthAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["system_health"] = "system_health"
    kind: Literal["disk", "memory", "temperature", "uptime", "network"]
    severity_level: Severity
    message: str

    @computed_field
    @property
    def severity(self) -> Severity:
        return self.severity_level


HazardAlert = Annotated[
    Union[WeatherAlert, SeismicAlert, AirQualityAlert, NewsAlert, SystemHealthAlert],
    Field(discriminator="source"),
]


class CheckResult(BaseModel):
    """Output of one feed adapter for one run"""
    model_config = ConfigDict(frozen=True)

    source: Source
    clear: bool
    alerts: List[HazardAlert] = Field(default_factory=list)
    error: Optional[str] = None
    current: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _alerts_match_source(self):
        for alert in self.alerts:
            if alert.source != self.source.value:
                raise ValueError(f"{alert.source} alert in {self.source.value} result")
        return self

    @classmethod
    def from_alerts(cls, source: Source, alerts: List, *,
                    clear: Optional[bool] = None,
                    current: Optional[Dict[str, Any]] = None) -> "CheckResult":
        """Build a result whose `clear` flag follows from its alerts."""
        alerts = list(alerts)
        return cls(
            source=source,
            clear=(len(alerts) == 0) if clear is None else clear,
            alerts=alerts,
            current=current,
        )

    @classmethod
    def failed(cls, source: Source, error: str) -> "CheckResult":
        """Fail-open result: upstream failure reports no hazard."""
        return cls(source=source, clear=True, alerts=[], error=str(error))

    @property
    def actionable(self) -> List:
        return [a for a in self.alerts if is_above_info(a.severity)]


class SafetyReport(_UtcModel):
    """Aggregate snapshot of one check run. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    generated_at: datetime = Field(default_factory=utcnow)
    kind: ReportKind = ReportKind.SAFETY
    location: Location
    checks: Dict[Source, CheckResult]
    test_scenario: Optional[str] = None

    @computed_field
    @property
    def verdict(self) -> Verdict:
        return derive_verdict(self.kind, self.checks)

    @property
    def all_clear(self) -> bool:
        return self.verdict == Verdict.ALL_CLEAR


class PendingAlert(_UtcModel):
    """The single outstanding notification awaiting acknowledgment"""
    summary: str
    raised_at: datetime
    acknowledged_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _ack_after_raise(self):
        if self.acknowledged_at is not None and self.acknowledged_at < self.raised_at:
            raise ValueError("acknowledged_at precedes raised_at")
        return self

    @property
    def acknowledged(self) -> bool:
        return self.acknowledged_at is not None


class TestOverride(_UtcModel):
    """Time-boxed substitution of real adapter output"""
    __test__: ClassVar[bool] = False

    scenario: str
    substitutes: Dict[Source, CheckResult]
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime

    @model_validator(mode="after")
    def _keys_match(self):
        for source, result in self.substitutes.items():
            if result.source != source:
                raise ValueError(f"substitute for {source.value} carries source {result.source.value}")
        return self

    def is_live(self, now: datetime) -> bool:
        return ensure_utc(now) < self.expires_at


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class EscalationDecision(_UtcModel):
    """Result of one escalation poll"""
    action: Literal["none", "waiting", "escalate"]
    reason: Optional[str] = None
    summary: Optional[str] = None
    raised_at: Optional[datetime] = None
    elapsed_minutes: Optional[int] = None
    remaining_minutes: Optional[int] = None
    contact: Optional[EmergencyContact] = None


class ErrorResult(_UtcModel):
    """Structured "no data" result, distinct from any verdict"""
    error: str
    timestamp: datetime = Field(default_factory=utcnow)
