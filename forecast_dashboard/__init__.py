"""
Forecast Dashboard Backend Package.

FastAPI service layer for the forecast dashboard. Reads datasets stored as flat
files (CSV historical series, JSON forecast and driver reports) and turns them
into UI-ready structures: normalized driver records with map coordinates,
category aggregates, quantile queries and combined historical/forecast series.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, filesystem data store, and dependencies
    - models: Pydantic schemas and enums
    - services: Pure transformation services
    - jobs: Batch jobs (news link validation)
"""

__version__ = "1.0.0"
