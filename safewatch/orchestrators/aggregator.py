"""
Check aggregator for SafeWatch.

This module runs every configured feed adapter concurrently for one
location, applies any live test override, derives the verdict and
persists the resulting SafetyReport.
"""

import asyncio
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from safewatch.common.errors import MissingLocationError
from safewatch.common.timeutil import utcnow
from safewatch.core.models import CheckResult, Location, SafetyReport, Source
from safewatch.core.verdict import ReportKind
from safewatch.observability import metrics
from safewatch.observability.logging_setup import get_logger, with_context
from safewatch.ports.feed import FeedAdapterPort
from safewatch.ports.report_log import ReportLogPort
from safewatch.ports.state import StateStorePort

log = get_logger("safewatch.aggregator")


class Aggregator:
    """Fan-out / join over the configured feed adapters"""

    def __init__(self,
                 adapters: Sequence[FeedAdapterPort],
                 store: StateStorePort,
                 report_log: Optional[ReportLogPort] = None,
                 *,
                 kind: ReportKind = ReportKind.SAFETY,
                 timeout_sec: float = 10.0,
                 clock: Callable[[], datetime] = utcnow):
        """
        Initialize the aggregator.

        Args:
            adapters: feed adapters; their order fixes the report's source order
            store: state store (location and test override)
            report_log: append-only report history, None to skip persistence
            kind: report kind produced
            timeout_sec: ceiling for each adapter call
            clock: time source
        """
        sources = [a.source for a in adapters]
        if len(set(sources)) != len(sources):
            raise ValueError(f"duplicate sources configured: {sources}")
        self.adapters = list(adapters)
        self.store = store
        self.report_log = report_log
        self.kind = kind
        self.timeout_sec = timeout_sec
        self.clock = clock

    @property
    def sources(self) -> List[Source]:
        return [a.source for a in self.adapters]

    async def _run_adapter(self, adapter: FeedAdapterPort, location: Location) -> CheckResult:
        try:
            return await asyncio.wait_for(adapter.fetch(location), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            metrics.source_failures.labels(source=adapter.source.value).inc()
            log.warning("feed timed out, assuming clear", source=adapter.source.value, timeout=self.timeout_sec)
            return CheckResult.failed(adapter.source, f"Timeout after {self.timeout_sec:g}s")
        except Exception as e:
            metrics.source_failures.labels(source=adapter.source.value).inc()
            log.error("feed adapter raised, assuming clear", source=adapter.source.value, error=str(e))
            return CheckResult.failed(adapter.source, str(e) or e.__class__.__name__)

    async def _apply_override(self, checks: Dict[Source, CheckResult]) -> Optional[str]:
        override = await self.store.load_override()
        if override is None or not override.is_live(self.clock()):
            return None

        applied = False
        for source, substitute in override.substitutes.items():
            if source not in checks:
                continue
            checks[source] = substitute
            applied = True
            metrics.overrides_applied.labels(source=source.value).inc()

        if not applied:
            return None
        log.warning("TEST MODE: using injected test scenario", scenario=override.scenario)
        return override.scenario

    async def _persist(self, report: SafetyReport, location: Location) -> None:
        if self.report_log is None:
            return
        try:
            meta = {
                "checks_performed": {
                    a.source.value: a.endpoint(location) for a in self.adapters if hasattr(a, "endpoint")
                }
            }
            await self.report_log.append(report, meta)
        except Exception as e:
            log.error("failed to persist report", error=str(e))

    async def run_check(self, location: Optional[Location] = None) -> SafetyReport:
        """
        Run one check.

        Args:
            location: point to check; the stored location when omitted

        Returns:
            SafetyReport

        Raises:
            MissingLocationError: no location given and none on file
        """
        if location is None:
            location = await self.store.load_location()
        if location is None:
            raise MissingLocationError()

        t0 = time.perf_counter()
        with with_context(check_kind=self.kind.value):
            log.info("running check", lat=location.lat, lon=location.lon)

            results = await asyncio.gather(*(self._run_adapter(a, location) for a in self.adapters))
            checks: Dict[Source, CheckResult] = dict(zip(self.sources, results))

            scenario = await self._apply_override(checks)

            report = SafetyReport(
                generated_at=self.clock(),
                kind=self.kind,
                location=location,
                checks=checks,
                test_scenario=scenario,
            )

            await self._persist(report, location)

            metrics.checks_total.labels(kind=self.kind.value, verdict=report.verdict.value).inc()
            metrics.check_seconds.observe(time.perf_counter() - t0)
            log.info("check complete",
                     verdict=report.verdict.value,
                     failed_sources=[s.value for s, r in checks.items() if r.error])
        return report
