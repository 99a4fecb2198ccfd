'''
Forecast Dashboard Backend Test Suite

Test Modules:
-------------
- test_driver_records.py: Driver Record Normalizer
  - Dropping entries without a driver name
  - Region, category, importance/direction and lag resolution
  - Per-batch coordinate assignment

- test_geo_coordinates.py: Geo-Coordinate Assigner
  - Region lookup order and World fallback
  - Grid and continent spreading, clamping to [5, 95]

- test_categories.py: Category Aggregator
  - Per-analysis importance, driver counts, dataset-wide union
  - Zero-fill merge view

- test_quantiles.py / test_forecast.py: Quantile/Sample Engine and forecast
  extraction, forecast table rows and pagination

- test_time_series.py: Time-Series Combiner, historical CSV parsing and
  time range filtering

- test_news.py, test_link_preview.py, test_validate_news_links.py: news
  cards, link previews (requests mocked) and the link validation job

- test_api.py: route handlers against a sample dataset tree

Running Tests:
--------------
    pip install -e ".[test]"
    pytest forecast_dashboard/tests/ -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
