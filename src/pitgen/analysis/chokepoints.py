from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Sequence

from ..context import GenerationContext
from ..metadata import NO_REGION, Chokepoint, DistanceField, TileClassification
from ..tiles import Point

logger = logging.getLogger(__name__)

SEARCH_DEPTH = 20
NARROW_PASSAGE_VALUE = 0.8


def strategic_value(width: int, region_ids: Sequence[int], total_area: int) -> float:
    """Score a chokepoint in [0, 1]; narrow, well connected and busy scores high."""
    value = 0.0
    if width == 1:
        value += 0.4
    elif width == 2:
        value += 0.2
    elif width == 3:
        value += 0.1

    if len(region_ids) >= 3:
        value += 0.3
    elif len(region_ids) == 2:
        value += 0.2

    if total_area > 200:
        value += 0.2
    elif total_area > 100:
        value += 0.1
    return min(1.0, round(value, 4))


def _reachable_regions(ctx: GenerationContext, start: Point) -> List[int]:
    md = ctx.metadata
    found = set()
    visited = {start}
    frontier = deque([start])
    for _ in range(SEARCH_DEPTH):
        if not frontier:
            break
        nxt = deque()
        for x, y in frontier:
            for nx, ny in ctx.neighbors4(x, y):
                if (nx, ny) in visited or not ctx.is_walkable(nx, ny):
                    continue
                visited.add((nx, ny))
                rid = md.region_ids[ny][nx]
                if rid != NO_REGION:
                    found.add(rid)
                else:
                    nxt.append((nx, ny))
        frontier = nxt
    return sorted(found)


def detect_chokepoints(
    ctx: GenerationContext,
    classifications: List[List[TileClassification]],
    walls: DistanceField,
) -> List[Chokepoint]:
    md = ctx.metadata
    owner: Dict[Point, int] = {}
    for p in md.passages:
        for tile in p.tiles:
            owner.setdefault(tile, p.id)

    chokepoints: List[Chokepoint] = []
    for y in range(ctx.height):
        for x in range(ctx.width):
            if classifications[y][x] != TileClassification.CHOKEPOINT:
                continue
            dist = walls.get(x, y)
            width = 1 if dist == DistanceField.UNREACHABLE else dist * 2 - 1
            connected = _reachable_regions(ctx, (x, y))
            area = sum(md.regions[rid].area for rid in connected)
            chokepoints.append(
                Chokepoint((x, y), width, strategic_value(width, connected, area), tuple(connected), owner.get((x, y)))
            )

    # Width-one passage tiles hugging a wall are bottlenecks too.
    known = {c.position for c in chokepoints}
    for p in md.passages:
        if p.min_width > 1:
            continue
        for tile in p.tiles:
            if tile in known or walls.get(*tile) != 1:
                continue
            known.add(tile)
            chokepoints.append(Chokepoint(tile, 1, NARROW_PASSAGE_VALUE, (p.region_a, p.region_b), p.id))

    md.chokepoints = chokepoints
    logger.debug("Detected %d chokepoints", len(chokepoints))
    return chokepoints
