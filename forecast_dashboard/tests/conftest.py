"""
Pytest Configuration and Shared Fixtures for Forecast Dashboard Tests.

This module provides fixtures and configuration for all tests, supporting:
- Async test execution with pytest-asyncio (route handlers are awaited
  directly with explicit arguments)
- Sample drivers reports, forecast documents and news documents
- A complete dataset tree under tmp_path with a Settings instance and a
  DataStore pointed at it

Dataset tree built by `data_root`:

    Stearin/
        history.csv
        news.json
        Analyses/
            1/  forecast.json (explicit quantiles), scenario.json, drivers report
            2/  forecast.json (samples, nested under "data"), drivers report
            3/  empty
    Bare/       no CSV, no news, no Analyses folder
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from forecast_dashboard.core.config import Settings
from forecast_dashboard.core.datastore import DataStore


# ============================================================
# PYTEST PLUGINS CONFIGURATION
# ============================================================

pytest_plugins: List[str] = ['pytest_asyncio']


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - api: route handler tests run against the tmp_path dataset tree
    - network: tests around HTTP fetching (requests is always mocked)
    """
    config.addinivalue_line(
        'markers',
        'api: marks route handler tests using the sample dataset tree'
    )
    config.addinivalue_line(
        'markers',
        'network: marks tests of code that performs HTTP requests (mocked)'
    )


# ============================================================
# SAMPLE DOCUMENTS
# ============================================================

@pytest.fixture
def sample_drivers_report() -> Dict[str, Any]:
    """
    Drivers report of analysis 1.

    d3 has no driver_name and is dropped by the normalizer, but still counts
    towards category driver counts and the report's driver total.
    """
    return {
        "d1": {
            "driver_name": "Housing Starts, United States",
            "region": [{"name": "United States of America"}],
            "category": {"id": 1, "name": "Housing"},
            "is_public": True,
            "importance": {"overall": {"mean": 40}},
            "pearson_correlation": {"overall": {"mean": 0.42}, "lag_1": 0.1, "lag_3": -0.5},
        },
        "d2": {
            "driver_name": "Steel Price, China",
            "region": ["China"],
            "category": {"id": 2, "name": "Materials"},
            "pearson_correlation": {"overall": {"mean": -0.25}},
            "overall_lag": "2 month(s)",
        },
        "d3": {
            "region": ["Germany"],
            "category": {"id": 2, "name": "Materials"},
        },
        "d4": {
            "driver_name": "Global Demand",
            "category": "Macro",
            "granger_correlation": {"overall": {"mean": 0.1}},
        },
    }


@pytest.fixture
def second_drivers_report() -> Dict[str, Any]:
    """Drivers report of analysis 2, using list-shaped categories."""
    return {
        "x1": {
            "driver_name": "Oil Price, Europe",
            "category": [{"id": 3, "name": "Energy"}],
            "pearson_correlation": {"overall": {"mean": 0.6}},
        },
        "x2": {
            "driver_name": "Housing Permits",
            "category": [{"id": 1, "name": "Housing"}],
            "pearson_correlation": {"overall": {"mean": 0.0}},
        },
    }


@pytest.fixture
def quantile_forecast_document() -> Dict[str, Any]:
    """Forecast with explicit quantiles, dates deliberately out of order."""
    return {
        "forecast_series": {
            "2025-08-01": {
                "forecast": 125.0,
                "quantile_forecast": {"0.05": 110.0, "0.5": 125.0, "0.95": 140.0},
            },
            "2025-07-01": {
                "forecast": 120.0,
                "quantile_forecast": {"0.05": 105.0, "0.5": 120.0, "0.95": 135.0},
            },
        }
    }


@pytest.fixture
def sample_forecast_document() -> Dict[str, Any]:
    """Forecast with raw samples only, nested under "data"."""
    return {
        "data": {
            "forecast_series": {
                "2025-07-01": {"forecast": 118.0, "forecast_samples": [130, 100, 120, 110, 140]},
                "2025-08-01": {"forecast": 121.0, "forecast_samples": [150, 110, 130, 120, 140]},
            }
        }
    }


@pytest.fixture
def sample_news() -> Dict[str, Any]:
    return {
        "March 2025": {
            "summary": "Prices rose on strong demand.",
            "news": [
                {
                    "favicon": "https://example.com/favicon.ico",
                    "outlet": "Reuters",
                    "title": "Demand climbs",
                    "link": "https://example.com/a",
                    "date": "2025-03-02",
                },
                "not an article",
            ],
        },
        "Future Outlook": {
            "summary": "",
            "news": [{"outlet": "FT", "title": "Outlook", "link": "https://example.com/b"}],
        },
    }


HISTORY_CSV = "date,value\n2024-06-01,90\n2025-05-01,100\n2025-06-01,110\n"


# ============================================================
# DATASET TREE
# ============================================================

def _write_json(path: Path, document: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document), encoding='utf-8')


@pytest.fixture
def data_root(
    tmp_path: Path,
    sample_drivers_report: Dict[str, Any],
    second_drivers_report: Dict[str, Any],
    quantile_forecast_document: Dict[str, Any],
    sample_forecast_document: Dict[str, Any],
    sample_news: Dict[str, Any],
) -> Path:
    root = tmp_path / "data"
    dataset = root / "Stearin"
    analyses = dataset / "Analyses"

    dataset.mkdir(parents=True)
    (dataset / "history.csv").write_text(HISTORY_CSV, encoding='utf-8')
    _write_json(dataset / "news.json", sample_news)

    _write_json(analyses / "1" / "overwrite" / "drivers_report.json", sample_drivers_report)
    _write_json(analyses / "1" / "forecast.json", quantile_forecast_document)
    _write_json(analyses / "1" / "scenario.json", {"scenario": "base", "shocks": []})

    _write_json(analyses / "2" / "overwrite" / "drivers_report.json", second_drivers_report)
    _write_json(analyses / "2" / "forecast.json", sample_forecast_document)

    (analyses / "3").mkdir(parents=True)

    (root / "Bare").mkdir()
    (root / "README.txt").write_text("not a dataset", encoding='utf-8')
    return root


@pytest.fixture
def test_settings(data_root: Path) -> Settings:
    return Settings(data_root=str(data_root), link_validation_batch_delay_seconds=0)


@pytest.fixture
def store(test_settings: Settings) -> DataStore:
    return DataStore.from_settings(test_settings)
