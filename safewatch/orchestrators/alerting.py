"""
Pending alert lifecycle for SafeWatch.

This module owns the single PendingAlert: raising it when a report
first turns non-clear, recording the human acknowledgment, answering
escalation polls and clearing the record once it has been acted on.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from safewatch.common.timeutil import utcnow
from safewatch.core.escalation import ESCALATION_THRESHOLD, check_escalation
from safewatch.core.models import EmergencyContact, EscalationDecision, PendingAlert, SafetyReport
from safewatch.core.verdict import summarize
from safewatch.observability import metrics
from safewatch.observability.logging_setup import get_logger
from safewatch.ports.state import StateStorePort

log = get_logger("safewatch.alerting")


class AlertLifecycle:
    """Create / acknowledge / escalate / clear the pending alert"""

    def __init__(self,
                 store: StateStorePort,
                 *,
                 threshold: timedelta = ESCALATION_THRESHOLD,
                 contact: Optional[EmergencyContact] = None,
                 clock: Callable[[], datetime] = utcnow):
        """
        Initialize the lifecycle.

        Args:
            store: state store holding the pending alert
            threshold: acknowledgment window before escalation
            contact: secondary contact reported on escalation
            clock: time source
        """
        self.store = store
        self.threshold = threshold
        self.contact = contact
        self.clock = clock

    async def record_report(self, report: SafetyReport, now: Optional[datetime] = None) -> Optional[PendingAlert]:
        """
        Update the pending alert from a fresh report.

        An acknowledged alert is cleared on the next cycle. A non-clear
        report raises a new alert only when none is outstanding; an
        outstanding unacknowledged alert is left untouched so its
        escalation clock keeps running.

        Args:
            report: report of the run just completed
            now: evaluation time

        Returns:
            The pending alert after the update, None when there is none
        """
        now = now or self.clock()
        pending = await self.store.load_pending()

        if pending is not None and pending.acknowledged:
            log.info("clearing acknowledged alert", summary=pending.summary)
            await self.store.clear_pending()
            pending = None

        if report.all_clear:
            metrics.pending_alert_active.set(1 if pending else 0)
            return pending

        if pending is not None:
            log.info("hazard persists, alert already pending",
                     verdict=report.verdict.value,
                     raised_at=pending.raised_at.isoformat())
            return pending

        pending = PendingAlert(summary=summarize(report.checks), raised_at=now)
        await self.store.save_pending(pending)
        metrics.pending_alert_active.set(1)
        log.warning("alert raised", verdict=report.verdict.value, summary=pending.summary)
        return pending

    async def acknowledge(self, now: Optional[datetime] = None) -> Optional[PendingAlert]:
        """
        Record the human acknowledgment.

        Returns:
            The acknowledged alert, None when nothing is pending
        """
        now = now or self.clock()
        pending = await self.store.load_pending()
        if pending is None:
            return None
        if pending.acknowledged:
            return pending

        acked = pending.model_copy(update={"acknowledged_at": max(now, pending.raised_at)})
        await self.store.save_pending(acked)
        metrics.pending_alert_active.set(0)
        log.info("alert acknowledged", summary=acked.summary)
        return acked

    async def check_escalation(self, now: Optional[datetime] = None) -> EscalationDecision:
        """Read-only escalation poll."""
        pending = await self.store.load_pending()
        decision = check_escalation(
            pending,
            now or self.clock(),
            threshold=self.threshold,
            contact=self.contact,
        )
        metrics.escalation_decisions.labels(action=decision.action).inc()
        if decision.action == "escalate":
            log.warning("alert unacknowledged, escalation due",
                        elapsed_minutes=decision.elapsed_minutes,
                        summary=decision.summary)
        return decision

    async def mark_escalated(self, now: Optional[datetime] = None) -> EscalationDecision:
        """
        Clear the pending alert after the secondary contact was notified.

        The decision is re-derived first; only an alert that is due for
        escalation is cleared. A waiting or acknowledged alert stays.

        Returns:
            The decision evaluated; the alert was cleared iff its action is "escalate"
        """
        pending = await self.store.load_pending()
        decision = check_escalation(pending, now or self.clock(), threshold=self.threshold, contact=self.contact)
        if decision.action != "escalate":
            log.info("escalation not due, alert kept", action=decision.action)
            return decision
        await self.store.clear_pending()
        metrics.pending_alert_active.set(0)
        log.info("escalated alert cleared", summary=pending.summary)
        return decision

    async def raise_manual(self, summary: str, now: Optional[datetime] = None) -> PendingAlert:
        """Raise an alert directly (e.g. after a notification sent out of band)."""
        existing = await self.store.load_pending()
        if existing is not None and not existing.acknowledged:
            return existing
        pending = PendingAlert(summary=summary, raised_at=now or self.clock())
        await self.store.save_pending(pending)
        metrics.pending_alert_active.set(1)
        return pending
