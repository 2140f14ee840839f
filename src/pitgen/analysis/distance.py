from __future__ import annotations

from collections import deque
from typing import Iterable

from ..context import GenerationContext
from ..metadata import DistanceField
from ..tiles import DIRS4, Point, Tile


def _expand(ctx: GenerationContext, field: DistanceField, q: deque) -> DistanceField:
    while q:
        x, y = q.popleft()
        d = field.values[y][x]
        for nx, ny in ctx.neighbors4(x, y):
            if ctx.grid[ny][nx] == Tile.FLOOR and field.values[ny][nx] == DistanceField.UNREACHABLE:
                field.values[ny][nx] = d + 1
                q.append((nx, ny))
    return field


def wall_distance(ctx: GenerationContext) -> DistanceField:
    """Orthogonal step distance from every floor tile to its nearest wall.

    Walls read 0 and floor tiles touching a wall read 1. Off-grid cells count
    as wall.
    """
    field = DistanceField(ctx.width, ctx.height)
    q: deque = deque()
    for y in range(ctx.height):
        for x in range(ctx.width):
            if ctx.grid[y][x] == Tile.WALL:
                field.values[y][x] = 0
            elif any(ctx.get_tile(x + dx, y + dy) == Tile.WALL for dx, dy in DIRS4):
                field.values[y][x] = 1
                q.append((x, y))
    return _expand(ctx, field, q)


def distance_from(ctx: GenerationContext, sources: Iterable[Point]) -> DistanceField:
    """Multi-source BFS over floor tiles. Non-floor sources are ignored."""
    field = DistanceField(ctx.width, ctx.height)
    q: deque = deque()
    for x, y in sources:
        if ctx.is_walkable(x, y) and field.values[y][x] != 0:
            field.values[y][x] = 0
            q.append((x, y))
    return _expand(ctx, field, q)
