from __future__ import annotations

import logging
import math
from typing import Dict, Optional

from .graph import RegionGraph
from .metadata import DungeonMetadata
from .tiles import Point

logger = logging.getLogger(__name__)

BASE_DANGER = 0.8
DISTANCE_SPAN = 0.6
ISOLATION_BONUS = 0.15
MIN_DANGER = 0.5
MAX_DANGER = 2.0

TAG_MODIFIERS: Dict[str, float] = {
    "treasure": 0.3,
    "treasure_room": 0.3,
    "boss": 0.5,
    "boss_room": 0.5,
    "entrance": -0.3,
    "safe_zone": -0.5,
}


def calculate_danger_levels(
    metadata: DungeonMetadata,
    entrance: Optional[Point] = None,
    graph: Optional[RegionGraph] = None,
) -> Dict[int, float]:
    """Danger multiplier per region id, in [0.5, 2.0].

    Regions farther from the entrance scale from 0.8 up to 1.4; dead-end
    regions (at most one neighbour) and tagged regions get adjusted on top.
    ``entrance`` and ``graph`` default to the ones stored on ``metadata``.
    """
    entrance = entrance if entrance is not None else metadata.entrance
    if entrance is None:
        raise ValueError("An entrance position is required to compute danger levels")
    if graph is None:
        graph = metadata.region_graph or RegionGraph(metadata.regions, metadata.passages)

    def dist(p: Point) -> float:
        return math.hypot(p[0] - entrance[0], p[1] - entrance[1])

    max_dist = max([dist(r.centroid) for r in metadata.regions] + [1.0])
    levels: Dict[int, float] = {}
    for region in metadata.regions:
        danger = BASE_DANGER + dist(region.centroid) / max_dist * DISTANCE_SPAN
        if len(graph.neighbors(region.id)) <= 1:
            danger += ISOLATION_BONUS
        if region.tag:
            danger += TAG_MODIFIERS.get(region.tag.lower(), 0.0)
        levels[region.id] = round(min(MAX_DANGER, max(MIN_DANGER, danger)), 4)
    logger.debug("Computed danger levels for %d regions", len(levels))
    return levels
