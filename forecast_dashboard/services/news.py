"""
News content selection for the dashboard summary cards.

A dataset's news.json maps a month label ("January 2025") or the literal
"Future Outlook" to {summary, news: [...]}. The cards show the month selected
on the chart when the file has it, and the future outlook otherwise.
"""

import logging
from typing import Any, List, Mapping, Optional

from forecast_dashboard.models.enums import NewsContentType
from forecast_dashboard.models.schemas import NewsContent, NewsItem

logger = logging.getLogger(__name__)


FUTURE_OUTLOOK_KEY: str = "Future Outlook"
MONTHLY_SUMMARY_UNAVAILABLE: str = "Monthly summary not available"
OUTLOOK_SUMMARY_UNAVAILABLE: str = "Future outlook summary not available"

NEWS_ITEM_FIELDS = ('favicon', 'outlet', 'title', 'link', 'date', 'image')


def normalize_news_items(items: Any) -> List[NewsItem]:
    """NewsItem list from a raw `news` array; non-object items are dropped."""
    if not isinstance(items, list):
        return []
    normalized = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        normalized.append(NewsItem(**{
            name: item[name] if isinstance(item.get(name), str) else ""
            for name in NEWS_ITEM_FIELDS
        }))
    return normalized


def _content(entry: Any, title: str, fallback_summary: str, content_type: NewsContentType) -> NewsContent:
    entry = entry if isinstance(entry, Mapping) else {}
    summary = entry.get('summary')
    return NewsContent(
        title=title,
        summary=summary if isinstance(summary, str) and summary else fallback_summary,
        news=normalize_news_items(entry.get('news')),
        type=content_type,
    )


def select_news_content(
    news: Any,
    selected_month: Optional[str] = None,
    show_future_outlook: bool = True,
) -> Optional[NewsContent]:
    """
    Pick the summary card content from a news document.

    Args:
        news: Parsed news.json.
        selected_month: Month label selected on the chart, e.g. "March 2025".
        show_future_outlook: Whether the outlook may be shown as the fallback.

    Returns:
        Monthly content for selected_month when present, else the future
        outlook when allowed and present, else None.
    """
    if not isinstance(news, Mapping):
        return None

    if selected_month and news.get(selected_month):
        return _content(news[selected_month], selected_month, MONTHLY_SUMMARY_UNAVAILABLE, NewsContentType.MONTHLY)

    if show_future_outlook and news.get(FUTURE_OUTLOOK_KEY):
        return _content(
            news[FUTURE_OUTLOOK_KEY],
            FUTURE_OUTLOOK_KEY,
            OUTLOOK_SUMMARY_UNAVAILABLE,
            NewsContentType.OUTLOOK,
        )

    return None
