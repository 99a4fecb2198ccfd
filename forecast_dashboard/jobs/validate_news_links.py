"""
News Link Validation Job.

Checks every article link found in the datasets' news files with a HEAD
request and logs a report: totals, failed links with their context, per
dataset success rates and a status code breakdown.

Checks run in batches of `max_concurrent` links on a thread pool with a pause
between batches, so news sites are not flooded with requests. Redirects are
not followed; any 2xx or 3xx status counts as success. Network failures and
timeouts are recorded with status 0.

Usage:
    python -m forecast_dashboard.jobs.validate_news_links --data-root public/data
    validate-news-links --data-root public/data

Exit status is 1 when the data root does not exist or no links are found,
0 otherwise (failed links do not change the exit status).
"""

import argparse
import json
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import requests

from forecast_dashboard.core.config import get_settings
from forecast_dashboard.models.schemas import (
    DatasetLinkStats,
    LinkCheckResult,
    NewsLink,
    ValidationReport,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

REQUEST_HEADERS: Dict[str, str] = {
    'User-Agent': 'Mozilla/5.0 (compatible; LinkValidator/1.0)',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
}

TIMEOUT_MESSAGE: str = 'Request timeout'


# =============================================================================
# Link Collection
# =============================================================================

def extract_news_links(news: object, dataset: str) -> List[NewsLink]:
    """Links of one parsed news document, in document order."""
    links: List[NewsLink] = []
    if not isinstance(news, dict):
        return links

    for month, entry in news.items():
        if not isinstance(entry, dict) or not isinstance(entry.get('news'), list):
            continue
        for index, article in enumerate(entry['news']):
            if not isinstance(article, dict):
                continue
            link = article.get('link')
            if not isinstance(link, str) or not link:
                continue
            outlet = article.get('outlet')
            title = article.get('title')
            links.append(NewsLink(
                url=link,
                dataset=dataset,
                month=str(month),
                outlet=outlet if isinstance(outlet, str) else None,
                title=title if isinstance(title, str) else None,
                index=index,
            ))
    return links


def collect_news_links(data_root: Path, news_filename: str = 'news.json') -> List[NewsLink]:
    """
    Links from the news file of every dataset under data_root.

    Datasets without a news file are skipped; unreadable files are logged and
    skipped.
    """
    links: List[NewsLink] = []
    datasets = sorted(p for p in Path(data_root).iterdir() if p.is_dir())
    logger.info(f"Found {len(datasets)} datasets: {', '.join(p.name for p in datasets)}")

    for dataset_dir in datasets:
        news_file = dataset_dir / news_filename
        if not news_file.is_file():
            logger.warning(f"No {news_filename} found in {dataset_dir.name}")
            continue
        try:
            news = json.loads(news_file.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.error(f"Error reading {dataset_dir.name}/{news_filename}: {e}")
            continue

        dataset_links = extract_news_links(news, dataset_dir.name)
        logger.info(f"{dataset_dir.name}/{news_filename}: {len(dataset_links)} URLs")
        links.extend(dataset_links)

    return links


# =============================================================================
# Link Checks
# =============================================================================

def check_link(url: str, timeout: float = 10.0) -> LinkCheckResult:
    """
    HEAD request to one URL.

    Returns:
        LinkCheckResult; success for 200 <= status < 400. Network errors and
        timeouts give status 0 with the error message.
    """
    try:
        response = requests.head(url, headers=REQUEST_HEADERS, timeout=timeout, allow_redirects=False)
    except requests.Timeout:
        return LinkCheckResult(url=url, status=0, statusText=TIMEOUT_MESSAGE, success=False, error=TIMEOUT_MESSAGE)
    except requests.RequestException as e:
        return LinkCheckResult(url=url, status=0, statusText=str(e), success=False, error=str(e))

    return LinkCheckResult(
        url=url,
        status=response.status_code,
        statusText=response.reason or '',
        success=200 <= response.status_code < 400,
    )


def validate_links(
    urls: Sequence[str],
    max_concurrent: int = 5,
    batch_delay: float = 1.0,
    timeout: float = 10.0,
) -> List[LinkCheckResult]:
    """
    Check unique URLs in batches of max_concurrent.

    Args:
        urls: URLs to check; duplicates are checked once.
        max_concurrent: Batch size and thread pool size.
        batch_delay: Seconds to wait between batches.
        timeout: HTTP timeout per request.

    Returns:
        One result per unique URL, in first-appearance order.
    """
    unique_urls = list(dict.fromkeys(urls))
    max_concurrent = max(1, max_concurrent)
    batches = [unique_urls[i:i + max_concurrent] for i in range(0, len(unique_urls), max_concurrent)]
    logger.info(f"Validating {len(unique_urls)} URLs in {len(batches)} batches")

    results: List[LinkCheckResult] = []
    with ThreadPoolExecutor(max_workers=max_concurrent) as executor:
        for batch_number, batch in enumerate(batches, start=1):
            logger.info(f"Processing batch {batch_number}/{len(batches)} ({len(batch)} URLs)")
            batch_results = list(executor.map(lambda u: check_link(u, timeout), batch))
            for result in batch_results:
                level = logging.INFO if result.success else logging.WARNING
                logger.log(level, f"  {'OK ' if result.success else 'BAD'} {result.url} - {result.status} {result.statusText}")
            results.extend(batch_results)

            if batch_number < len(batches) and batch_delay > 0:
                time.sleep(batch_delay)

    return results


# =============================================================================
# Report
# =============================================================================

def build_report(results: Sequence[LinkCheckResult], links: Sequence[NewsLink]) -> ValidationReport:
    """
    Summarize link check results.

    Per-dataset totals count every link occurrence of the dataset, so a URL
    shared by two datasets counts for both.
    """
    successful = sum(1 for r in results if r.success)
    total = len(results)
    by_url = {r.url: r for r in results}

    by_dataset: Dict[str, DatasetLinkStats] = {}
    for link in links:
        stats = by_dataset.setdefault(link.dataset, DatasetLinkStats())
        stats.total += 1
        result = by_url.get(link.url)
        if result is not None and not result.success:
            stats.failed += 1

    status_codes: Dict[int, int] = {}
    for result in results:
        status_codes[result.status] = status_codes.get(result.status, 0) + 1

    return ValidationReport(
        total=total,
        successful=successful,
        failed=total - successful,
        successRate=round(successful / total * 100, 1) if total else 0.0,
        byDataset=by_dataset,
        statusCodes=dict(sorted(status_codes.items())),
        failures=[r for r in results if not r.success],
    )


def log_report(report: ValidationReport, links: Sequence[NewsLink]) -> None:
    """Write the report to the log."""
    logger.info("=" * 80)
    logger.info("VALIDATION REPORT")
    logger.info("=" * 80)
    logger.info(f"Total URLs checked: {report.total}")
    logger.info(f"Successful: {report.successful}")
    logger.info(f"Failed: {report.failed}")
    logger.info(f"Success rate: {report.successRate:.1f}%")

    link_by_url = {}
    for link in links:
        link_by_url.setdefault(link.url, link)

    for failure in report.failures:
        link = link_by_url.get(failure.url)
        logger.warning(f"Failed: {failure.url}")
        logger.warning(f"    Dataset: {link.dataset if link else 'Unknown'}")
        logger.warning(f"    Month: {link.month if link else 'Unknown'}")
        logger.warning(f"    Outlet: {(link.outlet if link else None) or 'Unknown'}")
        logger.warning(f"    Title: {(link.title if link else None) or 'Unknown'}")
        logger.warning(f"    Status: {failure.status} {failure.statusText}")
        if failure.error:
            logger.warning(f"    Error: {failure.error}")

    logger.info("By dataset:")
    for dataset, stats in report.byDataset.items():
        rate = (stats.total - stats.failed) / stats.total * 100 if stats.total else 0.0
        logger.info(f"  {dataset}: {stats.total - stats.failed}/{stats.total} ({rate:.1f}%)")

    logger.info("Status code breakdown:")
    for code, count in report.statusCodes.items():
        logger.info(f"  {code}: {count} URLs")


# =============================================================================
# Entry Point
# =============================================================================

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Validate the article links of every dataset's news file.")
    parser.add_argument(
        '--data-root',
        default=settings.data_root,
        help=f"Dataset root directory (default: {settings.data_root})",
    )
    parser.add_argument(
        '--max-concurrent',
        type=int,
        default=settings.link_validation_max_concurrent,
        help="Links checked per batch",
    )
    parser.add_argument(
        '--batch-delay',
        type=float,
        default=settings.link_validation_batch_delay_seconds,
        help="Seconds between batches",
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=settings.link_validation_timeout_seconds,
        help="HTTP timeout per request in seconds",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the validation job.

    Returns:
        Process exit status.
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    args = parse_args(argv)
    settings = get_settings()

    data_root = Path(args.data_root)
    if not data_root.is_dir():
        logger.error(f"Data directory not found: {data_root}")
        return 1

    logger.info("Starting news link validation")
    links = collect_news_links(data_root, settings.news_filename)
    if not links:
        logger.error("No URLs found to validate")
        return 1

    results = validate_links(
        [link.url for link in links],
        max_concurrent=args.max_concurrent,
        batch_delay=args.batch_delay,
        timeout=args.timeout,
    )
    log_report(build_report(results, links), links)
    logger.info("Validation complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
