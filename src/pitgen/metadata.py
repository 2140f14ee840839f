from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from .tiles import DIRS4, Point, Rect

if TYPE_CHECKING:  # pragma: no cover
    from .graph import RegionGraph

logger = logging.getLogger(__name__)

NO_REGION = -1


class TileClassification(Enum):
    WALL = "wall"
    OPEN = "open"
    EDGE = "edge"
    CORNER = "corner"
    PASSAGE = "passage"
    CHOKEPOINT = "chokepoint"
    DEAD_END = "dead_end"
    ALCOVE = "alcove"


class RegionSource(Enum):
    DETECTED = "detected"
    BSP_ROOM = "bsp_room"
    ROOM = "room"
    CAVE = "cave"
    PREFAB = "prefab"


@dataclass
class SpawnHint:
    """Suggestion for the spawning layer, e.g. ``SpawnHint("treasure", 2.0)``."""

    kind: str
    weight: float = 1.0
    position: Optional[Point] = None


@dataclass
class Region:
    """A contiguous floor area.

    Passes may annotate a region (tag, spawn hints, custom data) but never
    split or merge it once registered.
    """

    id: int
    tiles: List[Point]
    bounding_box: Rect
    centroid: Point
    edge_tiles: List[Point] = field(default_factory=list)
    source: RegionSource = RegionSource.DETECTED
    tag: Optional[str] = None
    spawn_hints: List[SpawnHint] = field(default_factory=list)
    custom_data: Dict[str, Any] = field(default_factory=dict)
    _tile_set: Set[Point] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._tile_set = set(self.tiles)

    @property
    def area(self) -> int:
        return len(self.tiles)

    def contains(self, pos: Point) -> bool:
        return pos in self._tile_set

    def add_spawn_hint(self, kind: str, weight: float = 1.0, position: Optional[Point] = None) -> SpawnHint:
        hint = SpawnHint(kind, weight, position)
        self.spawn_hints.append(hint)
        return hint

    def retain(self, keep: Callable[[Point], bool]) -> List[Point]:
        """Drop tiles failing ``keep`` and recompute the derived geometry.

        Returns the removed tiles.
        """
        removed = [t for t in self.tiles if not keep(t)]
        if removed:
            self.tiles = [t for t in self.tiles if keep(t)]
            self._refresh()
        return removed

    def extend(self, tiles: Iterable[Point]) -> None:
        """Add tiles not already in the region and recompute the derived geometry."""
        added = [t for t in tiles if t not in self._tile_set]
        if added:
            self.tiles = self.tiles + added
            self._refresh()

    def _refresh(self) -> None:
        self._tile_set = set(self.tiles)
        self.edge_tiles = _edge_tiles(self.tiles, self._tile_set)
        if self.tiles:
            self.bounding_box = Rect.bounding(self.tiles)
            self.centroid = _mean_point(self.tiles)

    @classmethod
    def from_tiles(
        cls,
        region_id: int,
        tiles: Iterable[Point],
        source: RegionSource = RegionSource.DETECTED,
        tag: Optional[str] = None,
    ) -> "Region":
        tiles = list(tiles)
        tile_set = set(tiles)
        return cls(
            id=region_id,
            tiles=tiles,
            bounding_box=Rect.bounding(tiles),
            centroid=_mean_point(tiles) if tiles else (0, 0),
            edge_tiles=_edge_tiles(tiles, tile_set),
            source=source,
            tag=tag,
        )

    @classmethod
    def from_rect(cls, region_id: int, rect: Rect, source: RegionSource, tag: Optional[str] = None) -> "Region":
        region = cls.from_tiles(region_id, rect.points(), source, tag)
        region.centroid = rect.center()
        return region


def _mean_point(tiles: List[Point]) -> Point:
    n = len(tiles)
    return (sum(t[0] for t in tiles) // n, sum(t[1] for t in tiles) // n)


def _edge_tiles(tiles: List[Point], tile_set: Set[Point]) -> List[Point]:
    edges = []
    for x, y in tiles:
        if any((x + dx, y + dy) not in tile_set for dx, dy in DIRS4):
            edges.append((x, y))
    return edges


@dataclass
class Passage:
    id: int
    region_a: int
    region_b: int
    length: int
    tiles: Tuple[Point, ...] = ()
    min_width: int = 1

    def __post_init__(self) -> None:
        if self.region_a == self.region_b:
            raise ValueError(f"Passage {self.id} cannot link region {self.region_a} to itself")
        self.tiles = tuple(self.tiles)

    def other(self, region_id: int) -> int:
        return self.region_b if region_id == self.region_a else self.region_a


@dataclass
class Chokepoint:
    position: Point
    width: int
    strategic_value: float
    connected_region_ids: Tuple[int, ...] = ()
    passage_id: Optional[int] = None


class DistanceField:
    """Per-tile BFS distance. Walls read 0, unreached floor UNREACHABLE."""

    UNREACHABLE = sys.maxsize

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.values: List[List[int]] = [[self.UNREACHABLE] * width for _ in range(height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            return self.UNREACHABLE
        return self.values[y][x]

    def set(self, x: int, y: int, value: int) -> None:
        if self.in_bounds(x, y):
            self.values[y][x] = value

    def is_reachable(self, x: int, y: int) -> bool:
        return self.get(x, y) != self.UNREACHABLE

    def max_distance(self) -> int:
        best = 0
        for row in self.values:
            for v in row:
                if v != self.UNREACHABLE and v > best:
                    best = v
        return best

    def tiles_at(self, distance: int) -> List[Point]:
        return [(x, y) for y, row in enumerate(self.values) for x, v in enumerate(row) if v == distance]

    def tiles_within(self, distance: int) -> List[Point]:
        return [(x, y) for y, row in enumerate(self.values) for x, v in enumerate(row) if v <= distance]


@dataclass
class DungeonMetadata:
    """Spatial annotations accumulated during a generation run."""

    width: int
    height: int
    regions: List[Region] = field(default_factory=list)
    alcoves: List[Region] = field(default_factory=list)
    passages: List[Passage] = field(default_factory=list)
    chokepoints: List[Chokepoint] = field(default_factory=list)
    region_ids: List[List[int]] = field(default_factory=list)
    classifications: List[List[TileClassification]] = field(default_factory=list)
    wall_distance: Optional[DistanceField] = None
    entrance_distance: Optional[DistanceField] = None
    exit_distance: Optional[DistanceField] = None
    entrance: Optional[Point] = None
    exit: Optional[Point] = None
    region_graph: Optional["RegionGraph"] = None
    analyzed: bool = False

    def __post_init__(self) -> None:
        if not self.region_ids:
            self.region_ids = [[NO_REGION] * self.width for _ in range(self.height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def add_region(
        self,
        tiles: Iterable[Point],
        source: RegionSource,
        tag: Optional[str] = None,
        centroid: Optional[Point] = None,
    ) -> Optional[Region]:
        """Register a region built from ``tiles``.

        Tiles already owned by another region are left out so regions stay
        disjoint. Returns None when nothing is left to register.
        """
        free = [t for t in tiles if self.in_bounds(*t) and self.region_ids[t[1]][t[0]] == NO_REGION]
        if not free:
            return None
        region = Region.from_tiles(len(self.regions), free, source, tag)
        if centroid is not None:
            region.centroid = centroid
        for x, y in free:
            self.region_ids[y][x] = region.id
        self.regions.append(region)
        return region

    def claim_tiles(self, region: Region, tiles: Iterable[Point]) -> int:
        """Grow ``region`` by the tiles no region owns yet. Returns how many were added."""
        free = [t for t in tiles if self.in_bounds(*t) and self.region_ids[t[1]][t[0]] == NO_REGION]
        if free:
            region.extend(free)
            for x, y in free:
                self.region_ids[y][x] = region.id
        return len(free)

    def set_regions(self, regions: List[Region]) -> None:
        """Replace the region list, renumbering ids to match list positions."""
        self.region_ids = [[NO_REGION] * self.width for _ in range(self.height)]
        for index, region in enumerate(regions):
            region.id = index
            for x, y in region.tiles:
                self.region_ids[y][x] = index
        self.regions = regions

    def prune_regions(self, keep: Callable[[Point], bool]) -> int:
        """Drop region tiles failing ``keep``; empty regions are removed and ids renumbered."""
        removed = 0
        for region in self.regions:
            removed += len(region.retain(keep))
        if removed:
            self.set_regions([r for r in self.regions if r.tiles])
            logger.debug("Pruned %d tiles from registered regions", removed)
        return removed

    def get_region(self, region_id: int) -> Optional[Region]:
        if 0 <= region_id < len(self.regions):
            return self.regions[region_id]
        return None

    def region_id_at(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            return NO_REGION
        return self.region_ids[y][x]

    def region_at(self, x: int, y: int) -> Optional[Region]:
        return self.get_region(self.region_id_at(x, y))

    def classification_at(self, x: int, y: int) -> TileClassification:
        if not self.in_bounds(x, y) or not self.classifications:
            return TileClassification.WALL
        return self.classifications[y][x]

    def passages_for(self, region_id: int) -> List[Passage]:
        return [p for p in self.passages if region_id in (p.region_a, p.region_b)]

    def spawnable_regions(self) -> List[Region]:
        return [r for r in self.regions if r.spawn_hints]

    def strategic_positions(self, threshold: float = 0.5) -> List[Chokepoint]:
        return [c for c in self.chokepoints if c.strategic_value > threshold]

    def regions_with_tag(self, tag: str) -> List[Region]:
        return [r for r in self.regions if r.tag == tag]
