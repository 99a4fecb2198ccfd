"""
Filesystem data store for the forecast dashboard.

This module is the only place that touches the dataset tree on disk. Services
receive the parsed documents it returns and never perform I/O themselves.

Directory contract:

    <data_root>/
        <dataset>/
            *.csv                          historical series (date,value)
            news.json                      optional monthly news + outlook
            Analyses/
                <analysis>/
                    forecast.json
                    scenario.json          optional
                    overwrite/drivers_report.json

Error Taxonomy:
- DatasetNotFoundError / AnalysisNotFoundError / DataFileNotFoundError:
  the requested folder or file does not exist (LookupError, mapped to 404)
- DataFileFormatError: the file exists but is not valid JSON (mapped to 500)

Usage:
    store = DataStore.from_settings(get_settings())
    report = store.read_drivers_report("Stearin", "2")
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from forecast_dashboard.core.config import Settings
from forecast_dashboard.models.schemas import DatasetFolder


logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class DataStoreError(Exception):
    """Base class for data store failures."""


class DatasetNotFoundError(DataStoreError, LookupError):
    """Raised when a dataset folder does not exist."""


class AnalysisNotFoundError(DataStoreError, LookupError):
    """Raised when an analysis folder does not exist."""


class DataFileNotFoundError(DataStoreError, LookupError):
    """Raised when an expected data file does not exist."""


class DataFileFormatError(DataStoreError, ValueError):
    """Raised when a data file cannot be parsed."""


# =============================================================================
# Data Store
# =============================================================================

class DataStore:
    """
    Read-only access to the dataset tree rooted at ``root``.

    All names received from request paths are validated to be single path
    components so a request can never escape the data root.
    """

    def __init__(self, root: Path, settings: Settings):
        self.root = Path(root)
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings) -> "DataStore":
        return cls(Path(settings.data_root), settings)

    # -------------------------------------------------------------------------
    # Path helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_safe_component(name: str) -> bool:
        return bool(name) and name not in ('.', '..') and '/' not in name and '\\' not in name

    def dataset_path(self, dataset: str) -> Path:
        if not self._is_safe_component(dataset):
            raise DatasetNotFoundError(f"Invalid dataset name: {dataset!r}")
        path = self.root / dataset
        if not path.is_dir():
            raise DatasetNotFoundError(f"Dataset not found: {dataset}")
        return path

    def analyses_path(self, dataset: str) -> Path:
        return self.dataset_path(dataset) / self.settings.analyses_dirname

    def analysis_path(self, dataset: str, analysis: str) -> Path:
        if not self._is_safe_component(analysis):
            raise AnalysisNotFoundError(f"Invalid analysis name: {analysis!r}")
        path = self.analyses_path(dataset) / analysis
        if not path.is_dir():
            raise AnalysisNotFoundError(f"Analysis {analysis} not found in dataset {dataset}")
        return path

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def list_datasets(self) -> List[DatasetFolder]:
        """
        List dataset folders with the CSV files each one contains.

        Returns:
            DatasetFolder entries sorted by folder name. Empty when the data
            root itself does not exist.
        """
        if not self.root.is_dir():
            logger.warning(f"Data root does not exist: {self.root}")
            return []

        folders: List[DatasetFolder] = []
        for item in sorted(self.root.iterdir(), key=lambda p: p.name):
            if not item.is_dir():
                continue
            csv_files = sorted(
                f.name for f in item.iterdir()
                if f.is_file() and f.name.endswith('.csv')
            )
            folders.append(DatasetFolder(
                title=item.name,
                url=f"#{item.name}",
                icon="folder",
                files=csv_files,
            ))
        return folders

    def list_analysis_ids(self, dataset: str) -> List[str]:
        """Analysis folder names of a dataset; empty when it has no Analyses folder."""
        analyses_dir = self.analyses_path(dataset)
        if not analyses_dir.is_dir():
            return []
        return sorted(p.name for p in analyses_dir.iterdir() if p.is_dir())

    # -------------------------------------------------------------------------
    # Readers
    # -------------------------------------------------------------------------

    def _read_json(self, path: Path) -> Any:
        if not path.is_file():
            raise DataFileNotFoundError(f"File not found: {path.relative_to(self.root)}")
        try:
            # json.loads keeps object key order, which the map layout relies on
            return json.loads(path.read_text(encoding='utf-8'))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DataFileFormatError(f"Malformed JSON in {path.relative_to(self.root)}: {e}") from e

    def read_drivers_report(self, dataset: str, analysis: str) -> Any:
        path = self.analysis_path(dataset, analysis) / self.settings.drivers_report_path
        return self._read_json(path)

    def read_forecast(self, dataset: str, analysis: str) -> Any:
        path = self.analysis_path(dataset, analysis) / self.settings.forecast_filename
        return self._read_json(path)

    def read_scenario(self, dataset: str, analysis: str) -> Any:
        path = self.analysis_path(dataset, analysis) / self.settings.scenario_filename
        return self._read_json(path)

    def read_news(self, dataset: str) -> Any:
        path = self.dataset_path(dataset) / self.settings.news_filename
        return self._read_json(path)

    def read_historical_csv(self, dataset: str, filename: Optional[str] = None) -> str:
        """
        Read a historical series CSV of a dataset as text.

        Args:
            dataset: Dataset folder name.
            filename: CSV file name; defaults to the first CSV of the folder.

        Raises:
            DataFileNotFoundError: If the folder holds no (matching) CSV file.
        """
        dataset_dir = self.dataset_path(dataset)
        if filename is None:
            csv_files = sorted(
                f.name for f in dataset_dir.iterdir()
                if f.is_file() and f.name.endswith('.csv')
            )
            if not csv_files:
                raise DataFileNotFoundError(f"No historical CSV in dataset {dataset}")
            filename = csv_files[0]
        elif not self._is_safe_component(filename):
            raise DataFileNotFoundError(f"Invalid file name: {filename!r}")

        path = dataset_dir / filename
        if not path.is_file():
            raise DataFileNotFoundError(f"File not found: {dataset}/{filename}")
        return path.read_text(encoding='utf-8')
