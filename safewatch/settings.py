# safewatch/settings.py
from __future__ import annotations
import json
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field

from safewatch.core.models import EmergencyContact

class LocationDefaults(BaseModel):
    # where the host running the loop lives (self-check)
    self_lat: Optional[float] = None
    self_lon: Optional[float] = None

class Monitoring(BaseModel):
    location_keywords: List[str] = Field(default_factory=lambda: ["seattle", "king county", "puget sound", "washington"])
    news_feeds: List[str] = Field(default_factory=lambda: [
        "https://www.king5.com/feeds/syndication/rss/news/local",
        "https://www.seattletimes.com/seattle-news/feed/",
    ])
    earthquake_radius_km: float = 100.0
    earthquake_min_magnitude: float = 2.5
    earthquake_window_hours: float = 24.0
    news_window_hours: float = 24.0
    news_max_alerts: int = 5
    news_items_per_feed: int = 15
    title_prefix_len: int = 50

class SelfCheck(BaseModel):
    weather_min_severity: str = "severe"      # Severe/Extreme only
    earthquake_radius_km: float = 50.0
    earthquake_min_magnitude: float = 4.0
    earthquake_window_hours: float = 1.0
    disk_path: str = "/"
    probe_url: str = "https://api.weather.gov/"
    probe_timeout_sec: float = 5.0

class Escalation(BaseModel):
    threshold_minutes: float = 15.0
    contact: EmergencyContact = Field(default_factory=EmergencyContact)

class Feeds(BaseModel):
    timeout_sec: float = 10.0
    max_retries: int = 1
    backoff_initial_sec: float = 0.5
    user_agent: str = "SafeWatch/0.1 (personal safety monitor)"
    enabled: List[str] = Field(default_factory=lambda: ["weather", "seismic", "air_quality", "news"])

class Storage(BaseModel):
    state_dir: str = "./data"
    logs_dir: str = "./data/logs"
    report_log: str = "files"                 # files | sqlite
    sqlite_path: str = "./data/reports.db"

class Observability(BaseModel):
    http_port: int = 18800
    metrics_enabled: bool = True
    service_name: str = "SafeWatch"
    build_version: str = "0.1.0"
    log_level: str = "INFO"

class Webhook(BaseModel):
    secret_key: str = ""

class Settings(BaseModel):
    dry_run: bool = False

    location: LocationDefaults = Field(default_factory=LocationDefaults)
    monitoring: Monitoring = Field(default_factory=Monitoring)
    self_check: SelfCheck = Field(default_factory=SelfCheck)
    escalation: Escalation = Field(default_factory=Escalation)
    feeds: Feeds = Field(default_factory=Feeds)
    storage: Storage = Field(default_factory=Storage)
    observability: Observability = Field(default_factory=Observability)
    webhook: Webhook = Field(default_factory=Webhook)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Settings":
        """Load from a JSON config file; defaults when the file is absent."""
        if path and Path(path).exists():
            return cls.model_validate(json.loads(Path(path).read_text(encoding="utf-8")))
        return cls()
