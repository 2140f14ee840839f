from __future__ import annotations

import logging
import random
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from .metadata import DungeonMetadata
from .tiles import DIRS4, Grid, Point, Tile, new_grid

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GenerationContext:
    """Mutable state shared by the passes of one generation run.

    Holds the tile grid (``grid[y][x]``), the seeded random source every pass
    must draw from, the metadata accumulator and a string keyed store for
    handing data from one pass to a later one.
    """

    def __init__(self, width: int, height: int, seed: int) -> None:
        self.width = width
        self.height = height
        self.seed = seed
        self.random = random.Random(seed)
        self.grid: Grid = new_grid(width, height, Tile.WALL)
        self.metadata = DungeonMetadata(width, height)
        self.base_generator_name: Optional[str] = None
        self.diagnostics: List[str] = []
        self._pass_data: Dict[str, Any] = {}

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def in_interior(self, x: int, y: int) -> bool:
        return 0 < x < self.width - 1 and 0 < y < self.height - 1

    def get_tile(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            return Tile.WALL
        return self.grid[y][x]

    def set_tile(self, x: int, y: int, tile: Tile) -> None:
        if self.in_bounds(x, y):
            self.grid[y][x] = tile

    def is_walkable(self, x: int, y: int) -> bool:
        return self.get_tile(x, y) == Tile.FLOOR

    def neighbors4(self, x: int, y: int) -> Iterator[Point]:
        for dx, dy in DIRS4:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield (nx, ny)

    def floor_tiles(self) -> List[Point]:
        return [(x, y) for y, row in enumerate(self.grid) for x, t in enumerate(row) if t == Tile.FLOOR]

    def count_floor(self) -> int:
        return sum(1 for row in self.grid for t in row if t == Tile.FLOOR)

    def note(self, message: str, level: int = logging.INFO) -> None:
        """Log ``message`` and keep it in the run diagnostics."""
        logger.log(level, message)
        self.diagnostics.append(message)

    def set_pass_data(self, key: str, value: Any) -> None:
        self._pass_data[key] = value

    def has_pass_data(self, key: str) -> bool:
        return key in self._pass_data

    def get_pass_data(self, key: str, default: Optional[T] = None, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        """Read a value left by an earlier pass.

        Returns ``default`` when the key is missing or, if ``expected_type`` is
        given (or can be inferred from ``default``), when the stored value has
        another type.
        """
        if key not in self._pass_data:
            return default
        value = self._pass_data[key]
        kind = expected_type if expected_type is not None else (type(default) if default is not None else None)
        if kind is not None and not isinstance(value, kind):
            logger.debug("Pass data '%s' is %s, expected %s", key, type(value).__name__, kind.__name__)
            return default
        return value
