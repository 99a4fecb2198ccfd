"""
Enumeration definitions for the forecast dashboard backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models in API responses.
"""

from enum import Enum


class ImpactDirection(str, Enum):
    """
    Direction of a driver's influence on the target series.

    Derived from the sign of the driver's correlation mean:
    - Positive: mean > 0
    - Negative: mean < 0
    - Neutral: mean == 0 (including drivers with no correlation data)
    """
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Continent(str, Enum):
    """
    Continent labels used by the region coordinate table.

    Drivers sharing a continent label are spread around each other on the map.
    """
    NORTH_AMERICA = "North America"
    SOUTH_AMERICA = "South America"
    AMERICAS = "Americas"
    EUROPE = "Europe"
    ASIA = "Asia"
    AFRICA = "Africa"
    OCEANIA = "Oceania"
    GLOBAL = "Global"


class TimeRange(str, Enum):
    """
    Chart time window relative to the reference date.

    Values: ['6m', '1y', '3y', '5y', 'All']
    """
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"
    THREE_YEARS = "3y"
    FIVE_YEARS = "5y"
    ALL = "All"


class NewsContentType(str, Enum):
    """Which news block the summary cards display."""
    MONTHLY = "monthly"
    OUTLOOK = "outlook"
