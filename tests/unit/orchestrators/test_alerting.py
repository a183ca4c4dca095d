"""
Pending alert lifecycle tests
"""

from datetime import timedelta

import pytest

from safewatch.core.models import CheckResult, EmergencyContact, PendingAlert, SafetyReport, Source, WeatherAlert
from safewatch.orchestrators.alerting import AlertLifecycle


def report(seattle, now, flagged: bool, event="Severe Thunderstorm Warning") -> SafetyReport:
    alerts = [WeatherAlert(event=event, severity_level="Severe")] if flagged else []
    return SafetyReport(
        generated_at=now,
        location=seattle,
        checks={
            Source.WEATHER: CheckResult.from_alerts(Source.WEATHER, alerts),
            Source.NEWS: CheckResult.from_alerts(Source.NEWS, []),
        },
    )


@pytest.fixture
def lifecycle(memory_store, clock):
    return AlertLifecycle(
        memory_store,
        threshold=timedelta(minutes=15),
        contact=EmergencyContact(name="Sam", phone="+1-555-0100"),
        clock=clock,
    )


class TestRecordReport:
    """Raising alerts from reports"""

    @pytest.mark.asyncio
    async def test_clear_report_raises_nothing(self, lifecycle, memory_store, seattle, fixed_now):
        assert await lifecycle.record_report(report(seattle, fixed_now, False)) is None
        assert memory_store.pending is None

    @pytest.mark.asyncio
    async def test_flagged_report_raises(self, lifecycle, memory_store, seattle, fixed_now):
        pending = await lifecycle.record_report(report(seattle, fixed_now, True))
        assert pending.raised_at == fixed_now
        assert pending.summary == "[weather] Severe Thunderstorm Warning"
        assert memory_store.pending == pending

    @pytest.mark.asyncio
    async def test_outstanding_alert_kept(self, lifecycle, memory_store, seattle, fixed_now):
        first = await lifecycle.record_report(report(seattle, fixed_now, True))
        later = fixed_now + timedelta(minutes=10)
        second = await lifecycle.record_report(report(seattle, later, True, event="Flood Warning"), now=later)

        assert second == first
        assert memory_store.pending.raised_at == fixed_now
        decision = await lifecycle.check_escalation(now=fixed_now + timedelta(minutes=15))
        assert decision.action == "escalate"

    @pytest.mark.asyncio
    async def test_acknowledged_alert_cleared_next_cycle(self, lifecycle, memory_store, seattle, fixed_now):
        await lifecycle.record_report(report(seattle, fixed_now, True))
        await lifecycle.acknowledge(now=fixed_now + timedelta(minutes=2))

        assert await lifecycle.record_report(report(seattle, fixed_now, False)) is None
        assert memory_store.pending is None

    @pytest.mark.asyncio
    async def test_acknowledged_alert_replaced_when_still_flagged(self, lifecycle, memory_store, seattle, fixed_now):
        await lifecycle.record_report(report(seattle, fixed_now, True))
        await lifecycle.acknowledge(now=fixed_now + timedelta(minutes=2))

        later = fixed_now + timedelta(minutes=30)
        pending = await lifecycle.record_report(report(seattle, later, True, event="Flood Warning"), now=later)
        assert pending.raised_at == later
        assert not pending.acknowledged
        assert pending.summary == "[weather] Flood Warning"


class TestAcknowledge:
    """Human acknowledgment"""

    @pytest.mark.asyncio
    async def test_nothing_pending(self, lifecycle):
        assert await lifecycle.acknowledge() is None

    @pytest.mark.asyncio
    async def test_ack_stops_escalation(self, lifecycle, memory_store, fixed_now):
        memory_store.pending = PendingAlert(summary="s", raised_at=fixed_now - timedelta(minutes=20))
        acked = await lifecycle.acknowledge(now=fixed_now - timedelta(minutes=1))
        assert acked.acknowledged_at == fixed_now - timedelta(minutes=1)

        decision = await lifecycle.check_escalation(now=fixed_now)
        assert decision.action == "none"

    @pytest.mark.asyncio
    async def test_ack_is_set_once(self, lifecycle, memory_store, fixed_now):
        memory_store.pending = PendingAlert(summary="s", raised_at=fixed_now)
        first = await lifecycle.acknowledge(now=fixed_now + timedelta(minutes=1))
        second = await lifecycle.acknowledge(now=fixed_now + timedelta(minutes=5))
        assert second.acknowledged_at == first.acknowledged_at


class TestEscalation:
    """Escalation polling"""

    @pytest.mark.asyncio
    async def test_poll_is_read_only(self, lifecycle, memory_store, fixed_now):
        pending = PendingAlert(summary="s", raised_at=fixed_now - timedelta(minutes=16))
        memory_store.pending = pending

        first = await lifecycle.check_escalation()
        second = await lifecycle.check_escalation()

        assert first == second
        assert first.action == "escalate"
        assert first.contact.name == "Sam"
        assert memory_store.pending == pending

    @pytest.mark.asyncio
    async def test_waiting(self, lifecycle, memory_store, fixed_now):
        memory_store.pending = PendingAlert(summary="s", raised_at=fixed_now - timedelta(minutes=4))
        decision = await lifecycle.check_escalation()
        assert decision.action == "waiting"
        assert decision.remaining_minutes == 11

    @pytest.mark.asyncio
    async def test_mark_escalated_clears(self, lifecycle, memory_store, fixed_now):
        memory_store.pending = PendingAlert(summary="s", raised_at=fixed_now - timedelta(minutes=16))
        assert (await lifecycle.mark_escalated()).action == "escalate"
        assert memory_store.pending is None
        assert (await lifecycle.mark_escalated()).action == "none"
        assert (await lifecycle.check_escalation()).action == "none"

    @pytest.mark.asyncio
    async def test_mark_escalated_keeps_waiting_alert(self, lifecycle, memory_store, fixed_now):
        memory_store.pending = PendingAlert(summary="s", raised_at=fixed_now - timedelta(minutes=3))
        decision = await lifecycle.mark_escalated()
        assert decision.action == "waiting"
        assert memory_store.pending is not None

    @pytest.mark.asyncio
    async def test_mark_escalated_keeps_acknowledged_alert(self, lifecycle, memory_store, fixed_now):
        memory_store.pending = PendingAlert(summary="s", raised_at=fixed_now - timedelta(minutes=30),
                                            acknowledged_at=fixed_now - timedelta(minutes=25))
        assert (await lifecycle.mark_escalated()).action == "none"
        assert memory_store.pending.acknowledged

    @pytest.mark.asyncio
    async def test_raise_manual(self, lifecycle, memory_store, fixed_now):
        pending = await lifecycle.raise_manual("Notification sent: wildfire smoke")
        assert pending.raised_at == fixed_now
        # an outstanding alert is not replaced
        again = await lifecycle.raise_manual("something else")
        assert again.summary == "Notification sent: wildfire smoke"
