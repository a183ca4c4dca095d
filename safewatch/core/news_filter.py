"""
News item filtering and deduplication for SafeWatch.

This module contains pure functions deciding which local-news items
surface as hazard alerts: an item must be concerning, local and recent,
and must not read like retrospective journalism. Survivors are
deduplicated by title prefix and capped.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from .models import NewsAlert

# immediate, actionable threats only
CONCERNING_TERMS = (
    "evacuate", "evacuation order", "shelter in place",
    "active shooter", "shooting reported", "shots fired",
    "wildfire", "fire spreading", "structure fire",
    "flash flood", "flood warning", "flooding",
    "landslide", "mudslide", "road closed",
    "gas leak", "hazmat", "chemical spill",
    "police standoff", "lockdown", "manhunt",
    "amber alert", "silver alert", "emergency alert",
    "power outage", "outages reported",
)

# retrospective coverage that reuses hazard vocabulary
HISTORICAL_TERMS = (
    "verdict", "sentenced", "convicted", "trial", "lawsuit", "sued",
    "years ago", "last year", "memorial", "anniversary",
    "investigation concludes", "report finds", "study shows",
)

RECENT_WINDOW = timedelta(hours=24)
TITLE_PREFIX_LEN = 50
MAX_ALERTS = 5
ITEMS_PER_FEED = 15


@dataclass(frozen=True)
class FeedItem:
    """One parsed RSS/Atom entry"""
    title: str
    description: str
    link: str
    published_at: Optional[datetime]
    feed_url: str

    @property
    def text(self) -> str:
        return f"{self.title} {self.description}".lower()


def is_concerning(text: str) -> bool:
    return any(term in text for term in CONCERNING_TERMS)


def is_historical(text: str) -> bool:
    return any(term in text for term in HISTORICAL_TERMS)


def is_local(text: str, keywords: Iterable[str]) -> bool:
    return any(kw.lower() in text for kw in keywords if kw)


def is_recent(published_at: Optional[datetime], now: datetime, window: timedelta = RECENT_WINDOW) -> bool:
    """An item without a usable publish time is never recent."""
    if published_at is None:
        return False
    return (now - published_at) < window


def surfaces(item: FeedItem, keywords: Sequence[str], now: datetime,
             window: timedelta = RECENT_WINDOW) -> bool:
    text = item.text
    return (
        is_concerning(text)
        and is_local(text, keywords)
        and is_recent(item.published_at, now, window)
        and not is_historical(text)
    )


def to_news_alert(item: FeedItem, now: datetime) -> NewsAlert:
    age = 0
    if item.published_at is not None:
        age = max(0, int((now - item.published_at).total_seconds() / 60 + 0.5))
    return NewsAlert(
        title=item.title.strip()[:200],
        source_domain=urlparse(item.feed_url).hostname or "",
        link=item.link,
        age_minutes=age,
    )


def filter_items(items: Iterable[FeedItem], keywords: Sequence[str], now: datetime,
                 window: timedelta = RECENT_WINDOW) -> List[NewsAlert]:
    """Alerts for the items passing every predicate, in input order."""
    return [to_news_alert(item, now) for item in items if surfaces(item, keywords, now, window)]


def title_key(title: str, prefix_len: int = TITLE_PREFIX_LEN) -> str:
    return title.strip()[:prefix_len].lower()


def dedupe(alerts: Iterable[NewsAlert], prefix_len: int = TITLE_PREFIX_LEN) -> List[NewsAlert]:
    """Drop alerts whose title prefix was already seen; first occurrence wins."""
    seen = set()
    unique = []
    for alert in alerts:
        key = title_key(alert.title, prefix_len)
        if key in seen:
            continue
        seen.add(key)
        unique.append(alert)
    return unique


def cap(alerts: Sequence[NewsAlert], limit: int = MAX_ALERTS) -> List[NewsAlert]:
    return list(alerts[:max(0, limit)])


def select_alerts(per_feed_items: Iterable[Sequence[FeedItem]], keywords: Sequence[str], now: datetime, *,
                  items_per_feed: int = ITEMS_PER_FEED,
                  max_alerts: int = MAX_ALERTS,
                  prefix_len: int = TITLE_PREFIX_LEN,
                  window: timedelta = RECENT_WINDOW) -> List[NewsAlert]:
    """
    Run the full news path over items grouped by feed.

    Args:
        per_feed_items: parsed items per feed, in configured feed order
        keywords: location keywords
        now: evaluation time
        items_per_feed: only the newest N items of each feed are scanned
        max_alerts: output cap
        prefix_len: title prefix length used for deduplication
        window: recency window

    Returns:
        At most max_alerts deduplicated alerts.
    """
    candidates: List[NewsAlert] = []
    for items in per_feed_items:
        candidates.extend(filter_items(list(items)[:items_per_feed], keywords, now, window))
    return cap(dedupe(candidates, prefix_len), max_alerts)
