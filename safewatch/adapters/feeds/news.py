"""
Local news adapter.

Fetches every configured RSS/Atom feed, parses entries with feedparser
and hands them to the news filter. A feed that cannot be fetched or
parsed is skipped; the adapter only fails as a whole when something
outside the per-feed path breaks.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import feedparser

from safewatch.core.models import CheckResult, Location, Source
from safewatch.core.news_filter import (
    ITEMS_PER_FEED, MAX_ALERTS, RECENT_WINDOW, TITLE_PREFIX_LEN, FeedItem, select_alerts,
)
from safewatch.observability import metrics
from .base import BaseFeedAdapter, log


def _entry_time(entry) -> Optional[datetime]:
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                return None
    return None


def parse_feed(text: str, feed_url: str) -> List[FeedItem]:
    """
    Parse an RSS/Atom document into FeedItems, newest-first as published.

    Args:
        text: raw feed document
        feed_url: URL the document came from

    Returns:
        Parsed items (empty when the document has no entries)
    """
    parsed = feedparser.parse(text)
    items = []
    for entry in parsed.entries:
        items.append(FeedItem(
            title=entry.get("title", "") or "",
            description=entry.get("summary", entry.get("description", "")) or "",
            link=entry.get("link", "") or "",
            published_at=_entry_time(entry),
            feed_url=feed_url,
        ))
    return items


class NewsAdapter(BaseFeedAdapter):
    """Keyword-matched local news"""

    source = Source.NEWS

    def __init__(self, fetcher, *,
                 feeds: Sequence[str],
                 location_keywords: Sequence[str],
                 max_alerts: int = MAX_ALERTS,
                 items_per_feed: int = ITEMS_PER_FEED,
                 title_prefix_len: int = TITLE_PREFIX_LEN,
                 window: timedelta = RECENT_WINDOW,
                 **kwargs):
        super().__init__(fetcher, **kwargs)
        self.feeds = list(feeds)
        self.location_keywords = list(location_keywords)
        self.max_alerts = max_alerts
        self.items_per_feed = items_per_feed
        self.title_prefix_len = title_prefix_len
        self.window = window

    async def _fetch_feed(self, feed_url: str) -> List[FeedItem]:
        try:
            text = await self.fetcher.get_text(feed_url)
            return parse_feed(text, feed_url)
        except Exception as e:
            metrics.news_feed_failures.inc()
            log.debug("news feed skipped", feed=feed_url, error=str(e))
            return []

    async def _fetch(self, location: Location) -> CheckResult:
        per_feed = await asyncio.gather(*(self._fetch_feed(url) for url in self.feeds))
        alerts = select_alerts(
            per_feed,
            self.location_keywords,
            self.clock(),
            items_per_feed=self.items_per_feed,
            max_alerts=self.max_alerts,
            prefix_len=self.title_prefix_len,
            window=self.window,
        )
        return CheckResult.from_alerts(self.source, alerts)

    def endpoint(self, location: Location) -> Optional[str]:
        return ", ".join(self.feeds) or None
