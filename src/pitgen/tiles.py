from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Tuple

Point = Tuple[int, int]
Grid = List[List["Tile"]]

# Orthogonal neighbour offsets, in a fixed order so traversals stay deterministic.
DIRS4: Tuple[Point, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIRS8: Tuple[Point, ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)


class Tile(IntEnum):
    WALL = 0
    FLOOR = 1


def new_grid(width: int, height: int, fill: Tile = Tile.WALL) -> Grid:
    return [[fill for _ in range(width)] for _ in range(height)]


def copy_grid(grid: Grid) -> Grid:
    return [row[:] for row in grid]


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w - 1

    @property
    def bottom(self) -> int:
        return self.y + self.h - 1

    def center(self) -> Point:
        return (self.x + self.w // 2, self.y + self.h // 2)

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def intersects(self, other: "Rect", padding: int = 0) -> bool:
        return not (
            self.x + self.w + padding <= other.x
            or other.x + other.w + padding <= self.x
            or self.y + self.h + padding <= other.y
            or other.y + other.h + padding <= self.y
        )

    def points(self) -> Iterator[Point]:
        for y in range(self.y, self.y + self.h):
            for x in range(self.x, self.x + self.w):
                yield (x, y)

    @classmethod
    def bounding(cls, points) -> "Rect":
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        if not xs:
            return cls(0, 0, 0, 0)
        return cls(min(xs), min(ys), max(xs) - min(xs) + 1, max(ys) - min(ys) + 1)


def manhattan(a: Point, b: Point) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
