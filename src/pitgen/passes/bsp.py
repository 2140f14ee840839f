from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..carving import carve_l_corridor, carve_rect, ensure_border_walls
from ..config import PassSettings
from ..context import GenerationContext
from ..metadata import RegionSource
from ..tiles import Rect
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)

# Aspect ratio beyond which a partition is always cut across its long side.
SPLIT_RATIO = 1.25


class BSPSettings(PassSettings):
    min_partition_size: int = 8
    max_partition_size: int = 14
    min_room_width: int = 6
    max_room_width: int = 12
    min_room_height: int = 6
    max_room_height: int = 12
    corridor_width: int = 1
    max_depth: int = 10

    def check(self) -> Tuple[bool, Optional[str]]:
        if self.min_partition_size < 4:
            return False, "minPartitionSize must be at least 4"
        if self.max_partition_size < self.min_partition_size:
            return False, "maxPartitionSize must be >= minPartitionSize"
        if self.min_room_width < 3 or self.min_room_height < 3:
            return False, "minimum room size must be at least 3"
        if self.max_room_width < self.min_room_width or self.max_room_height < self.min_room_height:
            return False, "maximum room size must be >= minimum room size"
        if self.corridor_width < 1:
            return False, "corridorWidth must be at least 1"
        if self.max_depth < 1:
            return False, "maxDepth must be at least 1"
        return True, None


@dataclass
class BSPNode:
    rect: Rect
    depth: int = 0
    left: Optional["BSPNode"] = None
    right: Optional["BSPNode"] = None
    room: Optional[Rect] = None

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def leaves(self) -> List["BSPNode"]:
        if self.is_leaf():
            return [self]
        out: List[BSPNode] = []
        for child in (self.left, self.right):
            if child is not None:
                out.extend(child.leaves())
        return out


class BSPPass(GenerationPass):
    """Binary space partition rooms joined by L-shaped corridors.

    The interior is split recursively until partitions fit the configured
    bounds, every leaf gets one room and each pair of sibling subtrees is
    connected through a randomly chosen room on either side.
    """

    name = "bsp"
    default_role = PassRole.BASE
    settings_class = BSPSettings

    def execute(self, ctx: GenerationContext) -> None:
        rng = ctx.random
        root = BSPNode(Rect(1, 1, ctx.width - 2, ctx.height - 2))
        self._split(root, rng)

        rooms: List[Rect] = []
        for leaf in root.leaves():
            leaf.room = self._make_room(leaf.rect, rng)
            carve_rect(ctx, leaf.room)
            rooms.append(leaf.room)

        self._connect(root, ctx)
        ensure_border_walls(ctx)

        for room in rooms:
            ctx.metadata.add_region(room.points(), RegionSource.BSP_ROOM, centroid=room.center())

        ctx.set_pass_data("bsp.tree", root)
        ctx.set_pass_data("bsp.rooms", rooms)
        logger.debug("BSPPass: generated %d rooms", len(rooms))

    def _split(self, node: BSPNode, rng: random.Random) -> None:
        s = self.settings
        r = node.rect
        if node.depth >= s.max_depth:
            return
        wide = r.w > s.max_partition_size
        tall = r.h > s.max_partition_size
        if not wide and not tall:
            return
        can_cut_width = r.w >= s.min_partition_size * 2
        can_cut_height = r.h >= s.min_partition_size * 2
        if not can_cut_width and not can_cut_height:
            return

        if not can_cut_height:
            horizontal = False
        elif not can_cut_width:
            horizontal = True
        elif wide and not tall:
            horizontal = False
        elif tall and not wide:
            horizontal = True
        elif r.w > r.h * SPLIT_RATIO:
            horizontal = False
        elif r.h > r.w * SPLIT_RATIO:
            horizontal = True
        else:
            horizontal = rng.randrange(2) == 0

        if horizontal:
            lo, hi = r.y + s.min_partition_size, r.y + r.h - s.min_partition_size
            if hi <= lo:
                return
            cut = rng.randrange(lo, hi)
            node.left = BSPNode(Rect(r.x, r.y, r.w, cut - r.y), node.depth + 1)
            node.right = BSPNode(Rect(r.x, cut, r.w, r.y + r.h - cut), node.depth + 1)
        else:
            lo, hi = r.x + s.min_partition_size, r.x + r.w - s.min_partition_size
            if hi <= lo:
                return
            cut = rng.randrange(lo, hi)
            node.left = BSPNode(Rect(r.x, r.y, cut - r.x, r.h), node.depth + 1)
            node.right = BSPNode(Rect(cut, r.y, r.x + r.w - cut, r.h), node.depth + 1)

        self._split(node.left, rng)
        self._split(node.right, rng)

    def _make_room(self, part: Rect, rng: random.Random) -> Rect:
        s = self.settings
        max_w = max(1, min(s.max_room_width, part.w - 1))
        max_h = max(1, min(s.max_room_height, part.h - 1))
        w = rng.randint(min(s.min_room_width, max_w), max_w)
        h = rng.randint(min(s.min_room_height, max_h), max_h)
        x = part.x + rng.randint(0, max(0, part.w - w - 1))
        y = part.y + rng.randint(0, max(0, part.h - h - 1))
        return Rect(x, y, w, h)

    def _pick_room(self, node: BSPNode, rng: random.Random) -> Optional[Rect]:
        if node.is_leaf():
            return node.room
        left = self._pick_room(node.left, rng) if node.left else None
        right = self._pick_room(node.right, rng) if node.right else None
        if left is None or right is None:
            return left or right
        return left if rng.randrange(2) == 0 else right

    def _connect(self, node: BSPNode, ctx: GenerationContext) -> None:
        if node.is_leaf():
            return
        self._connect(node.left, ctx)
        self._connect(node.right, ctx)
        a = self._pick_room(node.left, ctx.random)
        b = self._pick_room(node.right, ctx.random)
        if a is not None and b is not None:
            horizontal_first = ctx.random.randrange(2) == 0
            carve_l_corridor(ctx, a.center(), b.center(), self.settings.corridor_width, horizontal_first)
