from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..carving import carve_corridor, carve_rect, ensure_border_walls
from ..config import PassSettings
from ..context import GenerationContext
from ..metadata import RegionSource
from ..tiles import Rect, manhattan
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)


class RoomPlacementSettings(PassSettings):
    room_attempts: int = 30
    min_rooms: int = 5
    max_rooms: int = 15
    min_room_width: int = 5
    max_room_width: int = 12
    min_room_height: int = 5
    max_room_height: int = 12
    room_spacing: int = 2
    corridor_width: int = 1
    l_shaped: bool = True
    extra_connection_chance: int = 15

    def check(self) -> Tuple[bool, Optional[str]]:
        if self.room_attempts < 1:
            return False, "roomAttempts must be at least 1"
        if self.min_rooms < 1 or self.max_rooms < self.min_rooms:
            return False, "room counts must satisfy 1 <= minRooms <= maxRooms"
        if self.min_room_width < 3 or self.min_room_height < 3:
            return False, "minimum room size must be at least 3"
        if self.max_room_width < self.min_room_width or self.max_room_height < self.min_room_height:
            return False, "maximum room size must be >= minimum room size"
        if self.room_spacing < 0:
            return False, "roomSpacing must not be negative"
        if self.corridor_width < 1:
            return False, "corridorWidth must be at least 1"
        if not 0 <= self.extra_connection_chance <= 100:
            return False, "extraConnectionChance must be between 0 and 100"
        return True, None


class SimpleRoomPlacementPass(GenerationPass):
    """Rejection-sampled rooms joined by a minimum spanning tree of corridors.

    Extra corridors between nearby rooms are added at random to create loops.
    """

    name = "simple_rooms"
    default_role = PassRole.BASE
    settings_class = RoomPlacementSettings

    def min_grid_size(self) -> int:
        s = self.settings
        return s.max_room_width + s.room_spacing * 2 + 2

    def can_execute(self, ctx: GenerationContext) -> bool:
        need = self.min_grid_size()
        if ctx.width < need or ctx.height < need:
            logger.warning("SimpleRoomPlacementPass: grid %dx%d too small, need %dx%d", ctx.width, ctx.height, need, need)
            return False
        return True

    def execute(self, ctx: GenerationContext) -> None:
        s = self.settings
        rooms = self._place_rooms(ctx)
        if len(rooms) < s.min_rooms:
            ctx.note(f"simple_rooms: placed {len(rooms)} of {s.min_rooms} requested rooms", logging.WARNING)

        if len(rooms) >= 2:
            self._connect_mst(ctx, rooms)
            self._add_loops(ctx, rooms)
        ensure_border_walls(ctx)

        for room in rooms:
            ctx.metadata.add_region(room.points(), RegionSource.ROOM, centroid=room.center())
        ctx.set_pass_data("simple_rooms.rooms", rooms)
        logger.info("SimpleRoomPlacementPass: placed %d rooms", len(rooms))

    def _place_rooms(self, ctx: GenerationContext) -> List[Rect]:
        s = self.settings
        rng = ctx.random
        rooms: List[Rect] = []
        attempts = 0
        while attempts < s.room_attempts and len(rooms) < s.max_rooms:
            attempts += 1
            w = rng.randint(s.min_room_width, s.max_room_width)
            h = rng.randint(s.min_room_height, s.max_room_height)
            max_x = ctx.width - w - 1
            max_y = ctx.height - h - 1
            if max_x < 1 or max_y < 1:
                continue
            room = Rect(rng.randint(1, max_x), rng.randint(1, max_y), w, h)
            if any(room.intersects(other, padding=s.room_spacing) for other in rooms):
                continue
            carve_rect(ctx, room)
            rooms.append(room)
            # Keep sampling until the minimum is met.
            if len(rooms) < s.min_rooms:
                attempts = 0
        return rooms

    def _connect_mst(self, ctx: GenerationContext, rooms: List[Rect]) -> None:
        connected = [0]
        pending = list(range(1, len(rooms)))
        while pending:
            best = None
            for a in connected:
                for b in pending:
                    d = manhattan(rooms[a].center(), rooms[b].center())
                    if best is None or d < best[2]:
                        best = (a, b, d)
            a, b, _ = best
            self._corridor(ctx, rooms[a], rooms[b])
            connected.append(b)
            pending.remove(b)

    def _add_loops(self, ctx: GenerationContext, rooms: List[Rect]) -> None:
        s = self.settings
        if s.extra_connection_chance <= 0 or len(rooms) < 3:
            return
        for i in range(len(rooms)):
            for j in range(i + 2, len(rooms)):
                if ctx.random.randrange(100) < s.extra_connection_chance:
                    if manhattan(rooms[i].center(), rooms[j].center()) < ctx.width // 3:
                        self._corridor(ctx, rooms[i], rooms[j])

    def _corridor(self, ctx: GenerationContext, a: Rect, b: Rect) -> None:
        carve_corridor(ctx, a.center(), b.center(), self.settings.corridor_width, self.settings.l_shaped)
