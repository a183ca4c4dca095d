"""
Metrics definitions for SafeWatch.

This module defines Prometheus metrics for monitoring
the check loop and the escalation state machine.
"""

from prometheus_client import Counter, Histogram, Gauge

# counters
checks_total = Counter(
    "safewatch_checks_total",
    "Number of completed check runs",
    ["kind", "verdict"]
)

source_failures = Counter(
    "safewatch_source_failures_total",
    "Feed fetches that failed open (error or timeout)",
    ["source"]
)

source_alerts = Counter(
    "safewatch_source_alerts_total",
    "Hazard alerts surfaced per source",
    ["source"]
)

news_feed_failures = Counter(
    "safewatch_news_feed_failures_total",
    "Individual news feeds skipped because they could not be fetched"
)

overrides_applied = Counter(
    "safewatch_overrides_applied_total",
    "Check results replaced by a live test override",
    ["source"]
)

state_corruption = Counter(
    "safewatch_state_corruption_total",
    "Persisted state records that were unreadable and treated as absent",
    ["record"]
)

escalation_decisions = Counter(
    "safewatch_escalation_decisions_total",
    "Escalation decisions returned by polls",
    ["action"]
)

# histograms
source_seconds = Histogram(
    "safewatch_source_duration_seconds",
    "Time spent fetching one source",
    ["source"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

check_seconds = Histogram(
    "safewatch_check_duration_seconds",
    "Total check run latency",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0]
)

# gauges
pending_alert_active = Gauge(
    "safewatch_pending_alert_active",
    "1 while an unacknowledged alert is pending"
)

uptime_seconds = Gauge(
    "safewatch_uptime_seconds",
    "Service uptime in seconds"
)
