"""
Host health adapter.

Independent sub-checks (disk, memory, temperature, uptime, network)
each contribute at most one alert. A sub-check that cannot read its
sensor contributes nothing. The result is clear unless some alert is
above `info`.
"""

import asyncio
import time
from typing import Callable, List, Optional

import psutil

from safewatch.core.models import CheckResult, Location, Source, SystemHealthAlert
from safewatch.core.verdict import is_above_info
from .base import BaseFeedAdapter, log

CONNECTIVITY_PROBE_URL = "https://api.weather.gov/"
PROBE_TIMEOUT_SEC = 5.0


class SystemHealthAdapter(BaseFeedAdapter):
    """Health of the machine running the loop"""

    source = Source.SYSTEM_HEALTH

    def __init__(self, fetcher=None, *,
                 disk_path: str = "/",
                 probe_url: Optional[str] = CONNECTIVITY_PROBE_URL,
                 probe_timeout_sec: float = PROBE_TIMEOUT_SEC,
                 uptime_days_info: int = 30,
                 **kwargs):
        super().__init__(fetcher, **kwargs)
        self.disk_path = disk_path
        self.probe_url = probe_url
        self.probe_timeout_sec = probe_timeout_sec
        self.uptime_days_info = uptime_days_info

    def check_disk(self) -> Optional[SystemHealthAlert]:
        usage = psutil.disk_usage(self.disk_path)
        used_pct = round(usage.used / usage.total * 100)
        if used_pct > 95:
            return SystemHealthAlert(kind="disk", severity_level="critical", message=f"Disk almost full: {used_pct}% used")
        if used_pct > 85:
            return SystemHealthAlert(kind="disk", severity_level="warning", message=f"Disk getting full: {used_pct}% used")
        return None

    def check_memory(self) -> Optional[SystemHealthAlert]:
        memory = psutil.virtual_memory()
        free_pct = round(memory.available / memory.total * 100)
        if free_pct < 20:
            return SystemHealthAlert(kind="memory", severity_level="critical", message=f"Memory critically low: {free_pct}% free")
        if free_pct < 40:
            return SystemHealthAlert(kind="memory", severity_level="warning", message=f"Memory getting low: {free_pct}% free")
        return None

    def check_temperature(self) -> Optional[SystemHealthAlert]:
        sensors = getattr(psutil, "sensors_temperatures", None)
        if sensors is None:
            return None
        readings = [t.current for entries in (sensors() or {}).values() for t in entries if t.current]
        if not readings:
            return None
        temp = max(readings)
        if temp > 95:
            return SystemHealthAlert(kind="temperature", severity_level="critical", message=f"CPU overheating: {temp:.0f}°C")
        if temp > 85:
            return SystemHealthAlert(kind="temperature", severity_level="warning", message=f"CPU running hot: {temp:.0f}°C")
        return None

    def check_uptime(self) -> Optional[SystemHealthAlert]:
        days = int((time.time() - psutil.boot_time()) // 86400)
        if days > self.uptime_days_info:
            return SystemHealthAlert(
                kind="uptime", severity_level="info",
                message=f"System has been up {days} days - consider a restart soon",
            )
        return None

    async def check_network(self) -> Optional[SystemHealthAlert]:
        if not self.probe_url or self.fetcher is None:
            return None
        try:
            # must finish well inside the aggregator's per-adapter ceiling
            await asyncio.wait_for(self.fetcher.get_text(self.probe_url), timeout=self.probe_timeout_sec)
        except asyncio.TimeoutError:
            log.warning("connectivity probe timed out", url=self.probe_url, timeout=self.probe_timeout_sec)
            return SystemHealthAlert(kind="network", severity_level="critical",
                                     message="Internet connectivity issues detected")
        except Exception as e:
            log.warning("connectivity probe failed", url=self.probe_url, error=str(e))
            return SystemHealthAlert(kind="network", severity_level="critical",
                                     message="Internet connectivity issues detected")
        return None

    async def _fetch(self, location: Location) -> CheckResult:
        alerts: List[SystemHealthAlert] = []
        checks: List[Callable[[], Optional[SystemHealthAlert]]] = [
            self.check_disk, self.check_memory, self.check_temperature, self.check_uptime,
        ]
        for check in checks:
            try:
                alert = check()
            except Exception as e:
                log.debug("health sub-check unavailable", check=check.__name__, error=str(e))
                continue
            if alert is not None:
                alerts.append(alert)

        network = await self.check_network()
        if network is not None:
            alerts.append(network)

        clear = not any(is_above_info(a.severity) for a in alerts)
        return CheckResult.from_alerts(self.source, alerts, clear=clear)

    def endpoint(self, location: Location) -> Optional[str]:
        return f"local host (disk {self.disk_path}, probe {self.probe_url})"
