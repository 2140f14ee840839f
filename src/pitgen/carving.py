"""Carving helpers shared by the generators and repair passes.

All helpers carve only interior tiles, so the one-tile wall border survives
whatever a pass does with them.
"""
from __future__ import annotations

from typing import List

from .context import GenerationContext
from .tiles import Point, Rect, Tile


def carve(ctx: GenerationContext, x: int, y: int) -> bool:
    if not ctx.in_interior(x, y) or ctx.grid[y][x] == Tile.FLOOR:
        return False
    ctx.grid[y][x] = Tile.FLOOR
    return True


def carve_rect(ctx: GenerationContext, rect: Rect) -> int:
    return sum(1 for x, y in rect.points() if carve(ctx, x, y))


def carve_h_corridor(ctx: GenerationContext, x1: int, x2: int, y: int, width: int = 1) -> List[Point]:
    if x2 < x1:
        x1, x2 = x2, x1
    carved = []
    for x in range(x1, x2 + 1):
        for i in range(width):
            yy = y + i - width // 2
            if ctx.in_interior(x, yy):
                ctx.grid[yy][x] = Tile.FLOOR
                carved.append((x, yy))
    return carved


def carve_v_corridor(ctx: GenerationContext, y1: int, y2: int, x: int, width: int = 1) -> List[Point]:
    if y2 < y1:
        y1, y2 = y2, y1
    carved = []
    for y in range(y1, y2 + 1):
        for i in range(width):
            xx = x + i - width // 2
            if ctx.in_interior(xx, y):
                ctx.grid[y][xx] = Tile.FLOOR
                carved.append((xx, y))
    return carved


def carve_l_corridor(ctx: GenerationContext, a: Point, b: Point, width: int = 1, horizontal_first: bool = True) -> List[Point]:
    (x1, y1), (x2, y2) = a, b
    if horizontal_first:
        return carve_h_corridor(ctx, x1, x2, y1, width) + carve_v_corridor(ctx, y1, y2, x2, width)
    return carve_v_corridor(ctx, y1, y2, x1, width) + carve_h_corridor(ctx, x1, x2, y2, width)


def line_points(a: Point, b: Point) -> List[Point]:
    """Bresenham line from ``a`` to ``b`` inclusive.

    Diagonal steps get an extra corner tile so the line is 4-connected.
    """
    (x0, y0), (x1, y1) = a, b
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    points = []
    while True:
        points.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        moved_x = False
        if e2 >= dy:
            err += dy
            x0 += sx
            moved_x = True
        if e2 <= dx:
            if moved_x:
                points.append((x0, y0))
            err += dx
            y0 += sy
    return points


def carve_line(ctx: GenerationContext, a: Point, b: Point, width: int = 1) -> List[Point]:
    carved = []
    half = width // 2
    for x, y in line_points(a, b):
        for oy in range(-half, width - half):
            for ox in range(-half, width - half):
                if ctx.in_interior(x + ox, y + oy):
                    ctx.grid[y + oy][x + ox] = Tile.FLOOR
                    carved.append((x + ox, y + oy))
    return carved


def ensure_border_walls(ctx: GenerationContext) -> None:
    h, w = ctx.height, ctx.width
    for x in range(w):
        ctx.grid[0][x] = Tile.WALL
        ctx.grid[h - 1][x] = Tile.WALL
    for y in range(h):
        ctx.grid[y][0] = Tile.WALL
        ctx.grid[y][w - 1] = Tile.WALL


def carve_corridor(
    ctx: GenerationContext, a: Point, b: Point, width: int = 1, l_shaped: bool = True
) -> List[Point]:
    """L-shaped corridor with a random bend, or a straight line when ``l_shaped`` is off."""
    if l_shaped:
        return carve_l_corridor(ctx, a, b, width, horizontal_first=ctx.random.randrange(2) == 0)
    return carve_line(ctx, a, b, width)
