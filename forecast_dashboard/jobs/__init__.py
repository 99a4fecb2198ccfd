"""
Batch jobs for the forecast dashboard.

- validate_news_links: HEAD-checks every article link of the datasets' news
  files and logs a validation report. Runs from the command line
  (`validate-news-links` or `python -m forecast_dashboard.jobs.validate_news_links`).
"""

from forecast_dashboard.jobs.validate_news_links import (
    build_report,
    check_link,
    collect_news_links,
    main,
    validate_links,
)

__all__ = [
    'build_report',
    'check_link',
    'collect_news_links',
    'main',
    'validate_links',
]
