"""
Geo-Coordinate Assigner - Region Names to Map Marker Positions

Maps a driver's resolved regions to a position on the world map (percent of
map width/height) and keeps co-located drivers visually distinguishable.

Algorithm (per driver, in processing order):
1. Base position: look up the most specific region (last), then the first
   region, then "World" (map center) in REGION_COORDINATES.
2. Local collision check: count already-placed markers within
   COLLISION_DISTANCE on both axes. If any, move the candidate onto a square
   grid of GRID_SPACING cells centered on the base position; grid dimension is
   ceil(sqrt(collisions + 1)) and the cell index is the collision count.
3. Continent spread: count already-placed markers of the same continent and
   push the candidate CONTINENT_SPREAD_RADIUS along a circle, at 45 degree
   steps indexed by that count.
4. Clamp both axes to [MAP_MARGIN, 100 - MAP_MARGIN].

The placed set is owned by one CoordinateAssigner instance. One instance is
used per analysis batch and never shared between analyses or requests.
"""

import logging
import math
from typing import Dict, List, Sequence

from forecast_dashboard.models.enums import Continent
from forecast_dashboard.models.schemas import Coordinates

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

COLLISION_DISTANCE: float = 8.0
GRID_SPACING: float = 6.0
CONTINENT_SPREAD_RADIUS: float = 8.0
CONTINENT_SPREAD_STEP_DEGREES: float = 45.0
MAP_MARGIN: float = 5.0

WORLD_REGION: str = 'World'


# =============================================================================
# REGION TABLE
# =============================================================================

# Region name -> (x, y, continent) in percent of the map
REGION_COORDINATES: Dict[str, Coordinates] = {
    name: Coordinates(x=x, y=y, continent=continent.value)
    for name, (x, y, continent) in {
        "United States of America": (2, 45, Continent.NORTH_AMERICA),
        "Canada": (8, 30, Continent.NORTH_AMERICA),
        "Mexico": (5, 50, Continent.NORTH_AMERICA),
        "Brazil": (33, 75, Continent.SOUTH_AMERICA),
        "Argentina": (30, 82, Continent.SOUTH_AMERICA),
        "Chile": (25, 85, Continent.SOUTH_AMERICA),
        "United Kingdom of Great Britain and Northern Ireland": (40, 30, Continent.EUROPE),
        "Germany": (42, 38, Continent.EUROPE),
        "France": (41, 40, Continent.EUROPE),
        "Italy": (40, 42, Continent.EUROPE),
        "Spain": (35, 45, Continent.EUROPE),
        "Poland": (45, 40, Continent.EUROPE),
        "Cyprus": (48, 50, Continent.EUROPE),
        "Portugal": (38, 42, Continent.EUROPE),
        "Denmark": (42, 38, Continent.EUROPE),
        "Sweden": (45, 35, Continent.EUROPE),
        "Turkey": (50, 45, Continent.ASIA),
        "Finland": (48, 33, Continent.EUROPE),
        "Lithuania": (48, 42, Continent.EUROPE),
        "Myanmar": (72, 60, Continent.ASIA),
        "Slovakia": (44, 40, Continent.EUROPE),
        "Slovenia": (43, 42, Continent.EUROPE),
        "Belgium": (41, 38, Continent.EUROPE),
        "Russia": (55, 35, Continent.ASIA),
        "China": (75, 45, Continent.ASIA),
        "Japan": (85, 42, Continent.ASIA),
        "India": (68, 55, Continent.ASIA),
        "South Korea": (82, 42, Continent.ASIA),
        "Singapore": (78, 65, Continent.ASIA),
        "Indonesia": (80, 70, Continent.ASIA),
        "Australia": (82, 82, Continent.OCEANIA),
        "New Zealand": (88, 85, Continent.OCEANIA),
        "South Africa": (48, 75, Continent.AFRICA),
        "Nigeria": (45, 65, Continent.AFRICA),
        "Egypt": (52, 55, Continent.AFRICA),
        "Kenya": (55, 70, Continent.AFRICA),
        "Morocco": (42, 50, Continent.AFRICA),
        "Saudi Arabia": (60, 55, Continent.ASIA),
        "Iran": (65, 52, Continent.ASIA),
        "Pakistan": (65, 55, Continent.ASIA),
        "Thailand": (75, 65, Continent.ASIA),
        "Vietnam": (78, 65, Continent.ASIA),
        "Malaysia": (76, 68, Continent.ASIA),
        "Philippines": (82, 65, Continent.ASIA),
        "World": (50, 50, Continent.GLOBAL),
        "Americas": (25, 50, Continent.AMERICAS),
        "Europe": (48, 40, Continent.EUROPE),
        "Armenia": (52, 42, Continent.ASIA),
        "Asia": (75, 50, Continent.ASIA),
        "Africa": (50, 70, Continent.AFRICA),
        "Oceania": (85, 80, Continent.OCEANIA),
    }.items()
}


# =============================================================================
# HELPERS
# =============================================================================

def clamp(value: float, low: float = MAP_MARGIN, high: float = 100.0 - MAP_MARGIN) -> float:
    return max(low, min(high, value))


def lookup_region(regions: Sequence[str]) -> Coordinates:
    """
    Base coordinates of a region list, before collision handling.

    Tries the last (most specific) region, then the first, then "World".
    """
    if regions:
        for candidate in (regions[-1], regions[0]):
            coordinates = REGION_COORDINATES.get(candidate)
            if coordinates is not None:
                return coordinates
    return REGION_COORDINATES[WORLD_REGION]


def grid_offset(collisions: int) -> tuple:
    """
    (dx, dy) grid offset for the marker placed after `collisions` neighbours.

    The grid has ceil(sqrt(collisions + 1)) cells per side, is centered on
    the base position and filled row by row.
    """
    grid_size = math.ceil(math.sqrt(collisions + 1))
    row, col = divmod(collisions, grid_size)
    center = grid_size // 2
    return ((col - center) * GRID_SPACING, (row - center) * GRID_SPACING)


def continent_offset(same_continent: int) -> tuple:
    """(dx, dy) on the spread circle for the n-th marker of a continent."""
    angle = math.radians(same_continent * CONTINENT_SPREAD_STEP_DEGREES)
    return (
        math.cos(angle) * CONTINENT_SPREAD_RADIUS,
        math.sin(angle) * CONTINENT_SPREAD_RADIUS,
    )


# =============================================================================
# ASSIGNER
# =============================================================================

class CoordinateAssigner:
    """
    Stateful placer for one analysis batch.

    Each call to assign() depends on the markers placed by earlier calls, so
    the same drivers in the same order always produce the same layout.

    Example:
        >>> assigner = CoordinateAssigner()
        >>> assigner.assign(["United States of America"])
        Coordinates(x=5.0, y=45.0, continent='North America')
    """

    def __init__(self) -> None:
        self.placed: List[Coordinates] = []

    def assign(self, regions: Sequence[str]) -> Coordinates:
        base = lookup_region(regions)
        x, y = base.x, base.y

        collisions = sum(
            1 for p in self.placed
            if abs(p.x - base.x) < COLLISION_DISTANCE and abs(p.y - base.y) < COLLISION_DISTANCE
        )
        if collisions:
            dx, dy = grid_offset(collisions)
            x += dx
            y += dy

        same_continent = sum(1 for p in self.placed if p.continent == base.continent)
        if same_continent:
            dx, dy = continent_offset(same_continent)
            x += dx
            y += dy

        coordinates = Coordinates(x=clamp(x), y=clamp(y), continent=base.continent)
        self.placed.append(coordinates)
        return coordinates

    def reset(self) -> None:
        self.placed.clear()
