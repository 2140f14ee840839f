from __future__ import annotations

import logging
from collections import deque
from typing import List

from ..context import GenerationContext
from ..metadata import NO_REGION, Region, RegionSource, TileClassification
from ..tiles import DIRS4, Point

logger = logging.getLogger(__name__)

SEPARATORS = (TileClassification.PASSAGE, TileClassification.CHOKEPOINT)


def detect_regions(
    ctx: GenerationContext,
    classifications: List[List[TileClassification]],
    min_region_size: int = 16,
    preserve_existing: bool = True,
) -> None:
    """Flood fill floor into regions, stopping at passage and chokepoint tiles.

    Regions registered by earlier passes are kept (pruned to floor) when
    ``preserve_existing`` is set; the remaining floor is detected from
    scratch. Areas smaller than ``min_region_size`` become alcoves and their
    tiles are reclassified as such.
    """
    md = ctx.metadata
    md.alcoves = []
    if preserve_existing and md.regions:
        md.prune_regions(lambda p: ctx.is_walkable(*p))
        md.set_regions(_connected_or_released(md.regions, min_region_size))
        logger.debug("Preserving %d registered regions", len(md.regions))
    else:
        md.set_regions([])

    regions = list(md.regions)
    visited = [[rid != NO_REGION for rid in row] for row in md.region_ids]
    for y in range(ctx.height):
        for x in range(ctx.width):
            if visited[y][x] or not ctx.is_walkable(x, y) or classifications[y][x] in SEPARATORS:
                continue
            area = _flood(ctx, classifications, visited, (x, y))
            if len(area) >= min_region_size:
                regions.append(Region.from_tiles(len(regions), area, RegionSource.DETECTED))
            else:
                md.alcoves.append(Region.from_tiles(NO_REGION, area, RegionSource.DETECTED))
    md.set_regions(regions)

    for alcove in md.alcoves:
        for ax, ay in alcove.tiles:
            classifications[ay][ax] = TileClassification.ALCOVE


def _flood(
    ctx: GenerationContext,
    classifications: List[List[TileClassification]],
    visited: List[List[bool]],
    start: Point,
) -> List[Point]:
    area = []
    q = deque([start])
    visited[start[1]][start[0]] = True
    while q:
        x, y = q.popleft()
        area.append((x, y))
        for nx, ny in ctx.neighbors4(x, y):
            if visited[ny][nx] or not ctx.is_walkable(nx, ny):
                continue
            if classifications[ny][nx] in SEPARATORS:
                continue
            visited[ny][nx] = True
            q.append((nx, ny))
    return area


def _components(tiles: List[Point]) -> List[List[Point]]:
    remaining = set(tiles)
    parts = []
    for start in tiles:
        if start not in remaining:
            continue
        remaining.discard(start)
        part = []
        q = deque([start])
        while q:
            x, y = q.popleft()
            part.append((x, y))
            for dx, dy in DIRS4:
                n = (x + dx, y + dy)
                if n in remaining:
                    remaining.discard(n)
                    q.append(n)
        parts.append(part)
    return parts


def _connected_or_released(regions: List[Region], min_region_size: int) -> List[Region]:
    """Cut registered regions down to their largest connected piece.

    Regions whose largest piece is below ``min_region_size`` are dropped so
    their tiles go through detection again like any other floor.
    """
    kept = []
    for region in regions:
        largest = max(_components(region.tiles), key=len)
        if len(largest) < min_region_size:
            logger.debug("Releasing region %d: largest piece is %d tiles", region.id, len(largest))
            continue
        if len(largest) < region.area:
            keep = set(largest)
            region.retain(lambda p: p in keep)
        kept.append(region)
    return kept
