from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from pydantic import Field, field_validator

from ..carving import ensure_border_walls
from ..config import PassSettings
from ..context import GenerationContext
from ..metadata import Region, RegionSource
from ..tiles import DIRS8, Tile, copy_grid
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)

TARGET_KINDS = ("random", "all", "tagged")


class RegionFilter(PassSettings):
    min_area: int = 0


class TargetRegions(PassSettings):
    kind: str = Field("random", alias="type")
    count: int = 1
    tag: Optional[str] = None
    region_filter: RegionFilter = Field(default_factory=RegionFilter, alias="filter")

    @field_validator("kind")
    @classmethod
    def lower_kind(cls, v: str) -> str:
        return v.strip().lower()


class CellularSettings(PassSettings):
    fill_percent: int = 45
    iterations: int = 5
    birth_limit: int = 4
    death_limit: int = 3
    smoothing_iterations: int = 2
    target_regions: Optional[TargetRegions] = None

    def check(self) -> Tuple[bool, Optional[str]]:
        if not 0 <= self.fill_percent <= 100:
            return False, "fillPercent must be between 0 and 100"
        if self.iterations < 0 or self.smoothing_iterations < 0:
            return False, "iteration counts must not be negative"
        if not (0 <= self.birth_limit <= 8 and 0 <= self.death_limit <= 8):
            return False, "birthLimit and deathLimit must be between 0 and 8"
        if self.target_regions is not None:
            if self.target_regions.kind not in TARGET_KINDS:
                return False, f"unknown targetRegions.type '{self.target_regions.kind}'"
            if self.target_regions.count < 0:
                return False, "targetRegions.count must not be negative"
        return True, None


def _floor_neighbours(grid, x: int, y: int) -> int:
    count = 0
    for dx, dy in DIRS8:
        nx, ny = x + dx, y + dy
        if 0 <= ny < len(grid) and 0 <= nx < len(grid[0]) and grid[ny][nx] == Tile.FLOOR:
            count += 1
    return count


class CellularAutomataPass(GenerationPass):
    """Cave generation with a birth/death cellular automaton.

    As a Base pass it fills the interior with noise and evolves it. With
    ``role: modifier`` it reshapes the bounding boxes of regions registered
    by an earlier pass and marks them as caves.
    """

    name = "cellular_automata"
    default_role = PassRole.BASE
    settings_class = CellularSettings

    def can_execute(self, ctx: GenerationContext) -> bool:
        if self.role == PassRole.MODIFIER:
            return len(ctx.metadata.regions) > 0
        return True

    def execute(self, ctx: GenerationContext) -> None:
        if self.role == PassRole.BASE:
            self._execute_as_base(ctx)
        else:
            self._execute_as_modifier(ctx)

    def _execute_as_base(self, ctx: GenerationContext) -> None:
        s = self.settings
        logger.info("CellularAutomataPass: fill=%d%% iterations=%d", s.fill_percent, s.iterations)
        for y in range(1, ctx.height - 1):
            for x in range(1, ctx.width - 1):
                ctx.grid[y][x] = Tile.FLOOR if ctx.random.randrange(100) < s.fill_percent else Tile.WALL

        bounds = (1, 1, ctx.width - 1, ctx.height - 1)
        for _ in range(s.iterations):
            self._step(ctx, bounds)
        for _ in range(s.smoothing_iterations):
            self._smooth(ctx, bounds)
        ensure_border_walls(ctx)

    def _execute_as_modifier(self, ctx: GenerationContext) -> None:
        targets = self._select_targets(ctx)
        logger.info("CellularAutomataPass: modifying %d region(s)", len(targets))
        for region in targets:
            box = region.bounding_box
            bounds = (
                max(1, box.x - 1),
                max(1, box.y - 1),
                min(ctx.width - 1, box.x + box.w + 1),
                min(ctx.height - 1, box.y + box.h + 1),
            )
            for _ in range(self.settings.iterations):
                self._step(ctx, bounds)
            region.source = RegionSource.CAVE
            logger.debug("Transformed region %d to cave", region.id)

        # Regions only ever lose tiles here; keep them floor-only.
        ctx.metadata.prune_regions(lambda p: ctx.is_walkable(*p))

    def _select_targets(self, ctx: GenerationContext) -> List[Region]:
        regions = ctx.metadata.regions
        wanted = self.settings.target_regions
        if wanted is None:
            return [regions[ctx.random.randrange(len(regions))]] if regions else []

        candidates = [r for r in regions if r.area >= wanted.region_filter.min_area]
        if wanted.kind == "all":
            return candidates
        if wanted.kind == "tagged":
            return [r for r in candidates if r.tag == wanted.tag]
        shuffled = list(candidates)
        ctx.random.shuffle(shuffled)
        return shuffled[: wanted.count]

    def _step(self, ctx: GenerationContext, bounds: Tuple[int, int, int, int]) -> None:
        x0, y0, x1, y1 = bounds
        s = self.settings
        src = copy_grid(ctx.grid)
        for y in range(y0, y1):
            for x in range(x0, x1):
                n = _floor_neighbours(src, x, y)
                if src[y][x] == Tile.WALL:
                    if n >= s.birth_limit:
                        ctx.grid[y][x] = Tile.FLOOR
                elif n < s.death_limit:
                    ctx.grid[y][x] = Tile.WALL

    @staticmethod
    def _smooth(ctx: GenerationContext, bounds: Tuple[int, int, int, int]) -> None:
        x0, y0, x1, y1 = bounds
        src = copy_grid(ctx.grid)
        for y in range(y0, y1):
            for x in range(x0, x1):
                n = _floor_neighbours(src, x, y)
                if src[y][x] == Tile.FLOOR and n < 2:
                    ctx.grid[y][x] = Tile.WALL
                elif src[y][x] == Tile.WALL and n > 6:
                    ctx.grid[y][x] = Tile.FLOOR
