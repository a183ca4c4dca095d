"""
Common behaviour of SafeWatch feed adapters.

Every adapter is fail-open: whatever goes wrong while fetching or
parsing, the adapter reports a clear result with an error string
instead of raising.
"""

import time
from typing import Callable, Optional
from datetime import datetime

from safewatch.common.timeutil import utcnow
from safewatch.core.models import CheckResult, Location, Source
from safewatch.observability import metrics
from safewatch.observability.logging_setup import get_logger

log = get_logger("safewatch.feeds")


class BaseFeedAdapter:
    """Fail-open wrapper around a source-specific `_fetch`"""

    source: Source

    def __init__(self, fetcher=None, *, clock: Callable[[], datetime] = utcnow):
        self.fetcher = fetcher
        self.clock = clock

    async def fetch(self, location: Location) -> CheckResult:
        t0 = time.perf_counter()
        try:
            result = await self._fetch(location)
        except Exception as e:
            metrics.source_failures.labels(source=self.source.value).inc()
            log.warning("feed fetch failed, assuming clear",
                        source=self.source.value,
                        error=str(e) or e.__class__.__name__)
            return CheckResult.failed(self.source, str(e) or e.__class__.__name__)
        finally:
            metrics.source_seconds.labels(source=self.source.value).observe(time.perf_counter() - t0)

        if result.alerts:
            metrics.source_alerts.labels(source=self.source.value).inc(len(result.alerts))
        log.debug("feed checked", source=self.source.value, clear=result.clear, alerts=len(result.alerts))
        return result

    async def _fetch(self, location: Location) -> CheckResult:
        raise NotImplementedError

    def endpoint(self, location: Location) -> Optional[str]:
        return None
