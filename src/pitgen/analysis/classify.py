from __future__ import annotations

from typing import List

from ..context import GenerationContext
from ..metadata import DistanceField, TileClassification
from ..tiles import DIRS4, Tile

# Tiles farther than this from a wall are never part of a passage.
NARROW_DISTANCE = 2
NARROW_REACH = 2


def _is_wall(ctx: GenerationContext, x: int, y: int) -> bool:
    return ctx.get_tile(x, y) == Tile.WALL


def _is_narrow(ctx: GenerationContext, x: int, y: int) -> bool:
    reach = range(1, NARROW_REACH + 1)
    horizontal = any(_is_wall(ctx, x - d, y) for d in reach) and any(_is_wall(ctx, x + d, y) for d in reach)
    vertical = any(_is_wall(ctx, x, y - d) for d in reach) and any(_is_wall(ctx, x, y + d) for d in reach)
    return horizontal or vertical


def _has_opposite_walls(ctx: GenerationContext, x: int, y: int) -> bool:
    return (_is_wall(ctx, x, y - 1) and _is_wall(ctx, x, y + 1)) or (
        _is_wall(ctx, x - 1, y) and _is_wall(ctx, x + 1, y)
    )


def classify_tile(
    ctx: GenerationContext, walls: DistanceField, x: int, y: int, narrow_distance: int = NARROW_DISTANCE
) -> TileClassification:
    if _is_wall(ctx, x, y):
        return TileClassification.WALL
    dist = walls.get(x, y)
    if dist == DistanceField.UNREACHABLE:
        return TileClassification.OPEN

    adjacent_walls = sum(1 for dx, dy in DIRS4 if _is_wall(ctx, x + dx, y + dy))
    if adjacent_walls >= 3:
        return TileClassification.DEAD_END

    if dist <= narrow_distance and _is_narrow(ctx, x, y):
        if dist == 1 and 4 - adjacent_walls == 2:
            return TileClassification.CHOKEPOINT
        return TileClassification.PASSAGE

    if dist == 1 and adjacent_walls >= 2 and not _has_opposite_walls(ctx, x, y):
        return TileClassification.CORNER
    if dist == 1:
        return TileClassification.EDGE
    return TileClassification.OPEN


def classify_all(
    ctx: GenerationContext, walls: DistanceField, narrow_distance: int = NARROW_DISTANCE
) -> List[List[TileClassification]]:
    return [[classify_tile(ctx, walls, x, y, narrow_distance) for x in range(ctx.width)] for y in range(ctx.height)]
