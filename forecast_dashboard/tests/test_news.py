"""
Test suite for news summary card selection.
"""

from forecast_dashboard.models import NewsContentType, NewsItem
from forecast_dashboard.services.news import (
    FUTURE_OUTLOOK_KEY,
    OUTLOOK_SUMMARY_UNAVAILABLE,
    normalize_news_items,
    select_news_content,
)


class TestSelectNewsContent:

    def test_selected_month(self, sample_news) -> None:
        content = select_news_content(sample_news, "March 2025")

        assert content.type == NewsContentType.MONTHLY
        assert content.title == "March 2025"
        assert content.summary == "Prices rose on strong demand."
        assert [item.title for item in content.news] == ["Demand climbs"]

    def test_unknown_month_falls_back_to_outlook(self, sample_news) -> None:
        content = select_news_content(sample_news, "April 2025")

        assert content.type == NewsContentType.OUTLOOK
        assert content.title == FUTURE_OUTLOOK_KEY
        assert content.summary == OUTLOOK_SUMMARY_UNAVAILABLE

    def test_outlook_can_be_disabled(self, sample_news) -> None:
        assert select_news_content(sample_news, "April 2025", show_future_outlook=False) is None

    def test_no_month_selected(self, sample_news) -> None:
        assert select_news_content(sample_news).type == NewsContentType.OUTLOOK

    def test_missing_document(self) -> None:
        assert select_news_content(None, "March 2025") is None
        assert select_news_content({}, "March 2025") is None


class TestNormalizeNewsItems:

    def test_missing_fields_become_empty(self) -> None:
        items = normalize_news_items([{"title": "Only title", "link": 5}])
        assert items == [NewsItem(title="Only title")]

    def test_non_list_input(self) -> None:
        assert normalize_news_items({"title": "x"}) == []
        assert normalize_news_items(None) == []
