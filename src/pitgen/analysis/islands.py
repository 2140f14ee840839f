from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from ..carving import carve_l_corridor
from ..context import GenerationContext
from ..tiles import Point, Tile, manhattan

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 50


@dataclass
class IslandReport:
    islands: List[List[Point]] = field(default_factory=list)
    largest_index: int = -1

    @property
    def is_fully_connected(self) -> bool:
        return len(self.islands) <= 1


def find_islands(ctx: GenerationContext) -> IslandReport:
    """Split the floor into 4-connected islands, in row-major discovery order."""
    report = IslandReport()
    visited = [[False] * ctx.width for _ in range(ctx.height)]
    for y in range(ctx.height):
        for x in range(ctx.width):
            if visited[y][x] or ctx.grid[y][x] != Tile.FLOOR:
                continue
            island = []
            q = deque([(x, y)])
            visited[y][x] = True
            while q:
                cx, cy = q.popleft()
                island.append((cx, cy))
                for nx, ny in ctx.neighbors4(cx, cy):
                    if not visited[ny][nx] and ctx.grid[ny][nx] == Tile.FLOOR:
                        visited[ny][nx] = True
                        q.append((nx, ny))
            report.islands.append(island)
            if report.largest_index < 0 or len(island) > len(report.islands[report.largest_index]):
                report.largest_index = len(report.islands) - 1
    return report


def _sample(tiles: Sequence[Point]) -> Sequence[Point]:
    step = max(1, len(tiles) // SAMPLE_SIZE)
    return tiles[::step]


def closest_pair(a: Sequence[Point], b: Sequence[Point]) -> Tuple[Point, Point, int]:
    """Approximate closest tile pair between two islands (Manhattan), on sampled tiles."""
    best = (a[0], b[0], manhattan(a[0], b[0]))
    for pa in _sample(a):
        for pb in _sample(b):
            d = manhattan(pa, pb)
            if d < best[2]:
                best = (pa, pb, d)
    return best


def repair_mst(ctx: GenerationContext, report: IslandReport, max_corridor_length: int = 0) -> int:
    """Join islands with a Prim spanning tree grown from the largest island.

    Corridors longer than ``max_corridor_length`` are skipped with a warning
    (0 disables the limit). Returns the number of corridors carved.
    """
    if report.is_fully_connected:
        return 0
    islands = report.islands
    connected = [report.largest_index]
    remaining = [i for i in range(len(islands)) if i != report.largest_index]
    carved = 0
    while remaining:
        best = None
        for src in connected:
            for dst in remaining:
                a, b, d = closest_pair(islands[src], islands[dst])
                if best is None or d < best[4]:
                    best = (src, dst, a, b, d)
        src, dst, a, b, d = best
        if max_corridor_length and d > max_corridor_length:
            ctx.note(
                f"connectivity: island {dst} too far to connect ({d} > {max_corridor_length})",
                logging.WARNING,
            )
        else:
            carve_l_corridor(ctx, a, b, 1, horizontal_first=ctx.random.randrange(2) == 0)
            carved += 1
            logger.debug("Connected island %d to %d (distance %d)", dst, src, d)
        remaining.remove(dst)
        connected.append(dst)
    return carved
