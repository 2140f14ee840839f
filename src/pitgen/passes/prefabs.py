from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from pydantic import Field, field_validator

from ..config import PassSettings
from ..context import GenerationContext
from ..metadata import Region, RegionSource, SpawnHint
from ..tiles import Point, Tile
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)

LEGEND_KINDS = ("floor", "wall", "spawn_point")
WALL_CHARS = "# "


class LegendEntry(PassSettings):
    kind: str = Field("floor", alias="type")
    tag: Optional[str] = None
    weight: float = 1.0

    @field_validator("kind")
    @classmethod
    def lower_kind(cls, v: str) -> str:
        return v.strip().lower()


class PrefabDefinition(PassSettings):
    """A hand-authored room stamped into a generated region.

    ``tiles`` rows use ``#`` (or space) for wall and anything else for
    floor unless ``legend`` maps the character. Legend entries of type
    ``spawn_point`` are floor and produce a spawn hint tagged ``tag``.
    """

    name: str
    tiles: List[str]
    legend: Dict[str, LegendEntry] = Field(default_factory=dict)
    weight: int = 1
    min_region_size: int = 0
    required_tags: List[str] = Field(default_factory=list)
    excluded_tags: List[str] = Field(default_factory=list)

    @property
    def width(self) -> int:
        return max((len(row) for row in self.tiles), default=0)

    @property
    def height(self) -> int:
        return len(self.tiles)

    def _char(self, x: int, y: int) -> Optional[str]:
        if 0 <= y < len(self.tiles) and 0 <= x < len(self.tiles[y]):
            return self.tiles[y][x]
        return None

    def tile_at(self, x: int, y: int) -> Tile:
        c = self._char(x, y)
        if c is None:
            return Tile.WALL
        entry = self.legend.get(c)
        if entry is not None:
            return Tile.WALL if entry.kind == "wall" else Tile.FLOOR
        return Tile.WALL if c in WALL_CHARS else Tile.FLOOR

    def spawn_points(self) -> List[Tuple[LegendEntry, Point]]:
        """Spawn legend entries with their position relative to the prefab origin."""
        points = []
        for y in range(self.height):
            for x in range(self.width):
                entry = self.legend.get(self._char(x, y) or "")
                if entry is not None and entry.kind == "spawn_point":
                    points.append((entry, (x, y)))
        return points

    def matches_tags(self, region: Region) -> bool:
        if self.required_tags and region.tag not in self.required_tags:
            return False
        if region.tag and region.tag in self.excluded_tags:
            return False
        return True


class PrefabSettings(PassSettings):
    budget: int = 2
    prefabs: List[PrefabDefinition] = Field(default_factory=list)

    def check(self) -> Tuple[bool, Optional[str]]:
        if self.budget < 0:
            return False, "budget must not be negative"
        for prefab in self.prefabs:
            if not prefab.tiles or prefab.width == 0:
                return False, f"prefab '{prefab.name}' has no tiles"
            if prefab.weight < 1:
                return False, f"prefab '{prefab.name}' weight must be at least 1"
            for char, entry in prefab.legend.items():
                if entry.kind not in LEGEND_KINDS:
                    return False, f"prefab '{prefab.name}' legend '{char}' has unknown type '{entry.kind}'"
                if entry.kind == "spawn_point" and not entry.tag:
                    return False, f"prefab '{prefab.name}' spawn point '{char}' needs a tag"
        return True, None


class PrefabInsertionPass(GenerationPass):
    """Stamps prefabs into the regions that fit them best.

    The target region is retagged with the prefab name, marked as a prefab
    and given the prefab's spawn hints in grid coordinates. Each region
    receives at most one prefab.
    """

    name = "prefabs"
    default_role = PassRole.MODIFIER
    settings_class = PrefabSettings

    def can_execute(self, ctx: GenerationContext) -> bool:
        return len(ctx.metadata.regions) > 0

    def execute(self, ctx: GenerationContext) -> None:
        chosen = self._select(ctx)
        if not chosen:
            logger.info("PrefabInsertionPass: no prefabs to insert")
            ctx.set_pass_data("prefabs.placed", [])
            return

        used = set()
        placed: List[Tuple[str, Region]] = []
        for prefab in chosen:
            region = self._find_region(ctx, prefab, used)
            if region is None:
                ctx.note(f"prefabs: no suitable region for '{prefab.name}'", logging.WARNING)
                continue
            self._stamp(ctx, prefab, region)
            used.add(id(region))
            placed.append((prefab.name, region))
            logger.debug("Inserted prefab '%s' into region %d", prefab.name, region.id)

        # Stamped walls may have eaten region tiles; ids are renumbered here.
        ctx.metadata.prune_regions(lambda p: ctx.is_walkable(*p))
        ctx.set_pass_data("prefabs.placed", [(name, region.id) for name, region in placed])
        logger.info("PrefabInsertionPass: inserted %d of %d prefab(s)", len(placed), len(chosen))

    def _select(self, ctx: GenerationContext) -> List[PrefabDefinition]:
        """Weighted draw without replacement, up to the budget."""
        pool = list(self.settings.prefabs)
        chosen: List[PrefabDefinition] = []
        while pool and len(chosen) < self.settings.budget:
            pick = ctx.random.choices(pool, weights=[p.weight for p in pool])[0]
            pool.remove(pick)
            chosen.append(pick)
        return chosen

    @staticmethod
    def _find_region(ctx: GenerationContext, prefab: PrefabDefinition, used) -> Optional[Region]:
        area = prefab.width * prefab.height
        candidates = [
            r
            for r in ctx.metadata.regions
            if id(r) not in used
            and r.area >= max(area, prefab.min_region_size)
            and r.bounding_box.w >= prefab.width
            and r.bounding_box.h >= prefab.height
            and prefab.matches_tags(r)
        ]
        if not candidates:
            return None
        # Closest fit first, random tiebreak.
        keyed = [(r.area - area, ctx.random.random(), r) for r in candidates]
        keyed.sort(key=lambda k: (k[0], k[1]))
        return keyed[0][2]

    @staticmethod
    def _stamp(ctx: GenerationContext, prefab: PrefabDefinition, region: Region) -> None:
        box = region.bounding_box
        x0 = max(1, min(box.x + (box.w - prefab.width) // 2, ctx.width - prefab.width - 1))
        y0 = max(1, min(box.y + (box.h - prefab.height) // 2, ctx.height - prefab.height - 1))

        floors = []
        for py in range(prefab.height):
            for px in range(prefab.width):
                x, y = x0 + px, y0 + py
                if not ctx.in_interior(x, y):
                    continue
                tile = prefab.tile_at(px, py)
                ctx.set_tile(x, y, tile)
                if tile == Tile.FLOOR:
                    floors.append((x, y))

        ctx.metadata.claim_tiles(region, floors)
        region.source = RegionSource.PREFAB
        region.tag = prefab.name
        for entry, (px, py) in prefab.spawn_points():
            region.spawn_hints.append(SpawnHint(entry.tag, entry.weight, (x0 + px, y0 + py)))
