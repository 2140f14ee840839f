from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..carving import ensure_border_walls
from ..config import PassSettings
from ..context import GenerationContext
from ..metadata import RegionSource
from ..tiles import Point, Rect, Tile
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)

# North, east, south, west; turning adds 1 (right) or 3 (left) modulo 4.
DIRECTIONS: Tuple[Point, ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
ROOM_TAG = "tunnel_room"
MIN_GRID = 10


class DrunkardSettings(PassSettings):
    target_floor_percent: int = 40
    walker_count: int = 1
    max_steps_per_walker: int = 10000
    tunnel_width: int = 1
    turn_chance: int = 50
    start_from_center: bool = True
    room_chance: int = 5
    min_room_size: int = 4
    max_room_size: int = 8

    def check(self) -> Tuple[bool, Optional[str]]:
        if not 10 <= self.target_floor_percent <= 90:
            return False, "targetFloorPercent must be between 10 and 90"
        if self.walker_count < 1:
            return False, "walkerCount must be at least 1"
        if self.max_steps_per_walker < 100:
            return False, "maxStepsPerWalker must be at least 100"
        if not 1 <= self.tunnel_width <= 5:
            return False, "tunnelWidth must be between 1 and 5"
        if not (0 <= self.turn_chance <= 100 and 0 <= self.room_chance <= 100):
            return False, "turnChance and roomChance must be between 0 and 100"
        if self.min_room_size < 3:
            return False, "minRoomSize must be at least 3"
        if self.max_room_size < self.min_room_size:
            return False, "maxRoomSize must be >= minRoomSize"
        return True, None


@dataclass
class Walker:
    x: int
    y: int
    direction: int
    path: List[Point]


class DrunkardWalkPass(GenerationPass):
    """Random-walk tunnels with occasional burst rooms.

    Walkers wander until the target share of the interior is floor or the
    step budget (``maxStepsPerWalker`` times ``walkerCount``) runs out, so the
    pass always terminates.
    """

    name = "drunkard_walk"
    default_role = PassRole.BASE
    settings_class = DrunkardSettings

    def can_execute(self, ctx: GenerationContext) -> bool:
        if ctx.width < MIN_GRID or ctx.height < MIN_GRID:
            logger.warning("DrunkardWalkPass: grid %dx%d is smaller than %dx%d", ctx.width, ctx.height, MIN_GRID, MIN_GRID)
            return False
        return True

    def execute(self, ctx: GenerationContext) -> None:
        s = self.settings
        rng = ctx.random
        interior = (ctx.width - 2) * (ctx.height - 2)
        target = int(interior * s.target_floor_percent / 100)
        floors = ctx.count_floor()
        budget = s.max_steps_per_walker * s.walker_count

        walkers: List[Walker] = []
        for i in range(s.walker_count):
            if s.start_from_center or i == 0:
                x, y = ctx.width // 2, ctx.height // 2
            else:
                x, y = rng.randrange(2, ctx.width - 2), rng.randrange(2, ctx.height - 2)
            walkers.append(Walker(x, y, rng.randrange(4), [(x, y)]))

        rooms: List[Rect] = []
        steps = 0
        while floors < target and steps < budget:
            for walker in walkers:
                floors += self._step(ctx, walker, rooms)
                steps += 1
                walker.path.append((walker.x, walker.y))
                if floors >= target or steps >= budget:
                    break

        ensure_border_walls(ctx)
        for room in rooms:
            tiles = [p for p in room.points() if ctx.grid[p[1]][p[0]] == Tile.FLOOR]
            ctx.metadata.add_region(tiles, RegionSource.CAVE, tag=ROOM_TAG, centroid=room.center())

        reached = floors >= target
        ctx.set_pass_data("drunkard_walk.paths", [w.path for w in walkers])
        ctx.set_pass_data("drunkard_walk.rooms", rooms)
        ctx.set_pass_data(
            "drunkard_walk.stats",
            {"steps": steps, "floor_tiles": floors, "target": target, "target_reached": reached},
        )
        if not reached:
            ctx.note(
                f"drunkard_walk: step budget exhausted at {floors}/{target} floor tiles after {steps} steps",
                logging.WARNING,
            )
        logger.info(
            "DrunkardWalkPass: %d floor tiles (%.1f%%), %d rooms, %d steps",
            floors, 100.0 * floors / interior, len(rooms), steps,
        )

    def _step(self, ctx: GenerationContext, walker: Walker, rooms: List[Rect]) -> int:
        s = self.settings
        rng = ctx.random
        if rng.randrange(100) < s.turn_chance:
            walker.direction = (walker.direction + (1 if rng.randrange(2) == 0 else 3)) % 4
        dx, dy = DIRECTIONS[walker.direction]
        nx, ny = walker.x + dx, walker.y + dy
        if not ctx.in_interior(nx, ny):
            walker.direction = (walker.direction + 2) % 4
            return 0
        walker.x, walker.y = nx, ny

        carved = self._carve_tunnel(ctx, nx, ny)
        if rng.randrange(100) < s.room_chance:
            carved += self._burst_room(ctx, nx, ny, rooms)
        return carved

    def _carve_tunnel(self, ctx: GenerationContext, cx: int, cy: int) -> int:
        radius = self.settings.tunnel_width // 2
        carved = 0
        for y in range(cy - radius, cy + radius + 1):
            for x in range(cx - radius, cx + radius + 1):
                if ctx.in_interior(x, y) and ctx.grid[y][x] != Tile.FLOOR:
                    ctx.grid[y][x] = Tile.FLOOR
                    carved += 1
        return carved

    def _burst_room(self, ctx: GenerationContext, cx: int, cy: int, rooms: List[Rect]) -> int:
        s = self.settings
        w = ctx.random.randint(s.min_room_size, s.max_room_size)
        h = ctx.random.randint(s.min_room_size, s.max_room_size)
        x0 = max(1, min(cx - w // 2, ctx.width - w - 1))
        y0 = max(1, min(cy - h // 2, ctx.height - h - 1))
        x1 = min(x0 + w, ctx.width - 1)
        y1 = min(y0 + h, ctx.height - 1)
        carved = 0
        for y in range(y0, y1):
            for x in range(x0, x1):
                if ctx.grid[y][x] != Tile.FLOOR:
                    ctx.grid[y][x] = Tile.FLOOR
                    carved += 1
        if carved:
            rooms.append(Rect(x0, y0, x1 - x0, y1 - y0))
        return carved
