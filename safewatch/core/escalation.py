"""
Escalation decision for SafeWatch.

Escalation is a pure function of the current time and the stored
PendingAlert. Nothing records that an escalation already fired, so a
delayed or repeated poll returns the same decision; the caller clears
or acknowledges the alert once it has acted.
"""

import math
from datetime import datetime, timedelta
from typing import Optional

from safewatch.common.timeutil import ensure_utc
from .models import EmergencyContact, EscalationDecision, PendingAlert

ESCALATION_THRESHOLD = timedelta(minutes=15)


def check_escalation(
    pending: Optional[PendingAlert],
    now: datetime,
    *,
    threshold: timedelta = ESCALATION_THRESHOLD,
    contact: Optional[EmergencyContact] = None,
) -> EscalationDecision:
    """
    Decide what to do about the pending alert.

    Args:
        pending: current pending alert, None when there is none
        now: evaluation time
        threshold: acknowledgment window
        contact: secondary contact to notify on escalation

    Returns:
        none when nothing is pending or it was acknowledged,
        escalate once the window has elapsed, waiting otherwise.
    """
    if pending is None:
        return EscalationDecision(action="none", reason="no pending alert")

    if pending.acknowledged:
        return EscalationDecision(action="none", reason="already acknowledged", summary=pending.summary)

    elapsed = ensure_utc(now) - pending.raised_at
    elapsed_seconds = max(0.0, elapsed.total_seconds())
    elapsed_minutes = int(elapsed_seconds / 60 + 0.5)

    if elapsed >= threshold:
        return EscalationDecision(
            action="escalate",
            summary=pending.summary,
            raised_at=pending.raised_at,
            elapsed_minutes=elapsed_minutes,
            contact=contact,
        )

    remaining = math.ceil((threshold - elapsed).total_seconds() / 60)
    return EscalationDecision(
        action="waiting",
        summary=pending.summary,
        raised_at=pending.raised_at,
        elapsed_minutes=elapsed_minutes,
        remaining_minutes=remaining,
    )
