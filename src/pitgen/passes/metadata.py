from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..analysis.chokepoints import detect_chokepoints
from ..analysis.classify import classify_all
from ..analysis.distance import distance_from, wall_distance
from ..analysis.passages import detect_passages
from ..analysis.regions import detect_regions
from ..config import PassSettings
from ..context import GenerationContext
from ..graph import RegionGraph
from ..metadata import DistanceField
from ..tiles import Point
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)


class MetadataSettings(PassSettings):
    min_region_size: int = 16
    max_passage_width: int = 2
    preserve_regions: bool = True
    place_entrance_exit: bool = True

    def check(self) -> Tuple[bool, Optional[str]]:
        if self.min_region_size < 1:
            return False, "minRegionSize must be at least 1"
        if self.max_passage_width < 1:
            return False, "maxPassageWidth must be at least 1"
        return True, None


def _farthest(field: DistanceField) -> Optional[Point]:
    best: Optional[Point] = None
    best_d = -1
    for y, row in enumerate(field.values):
        for x, d in enumerate(row):
            if d != DistanceField.UNREACHABLE and d > best_d:
                best, best_d = (x, y), d
    return best


class MetadataAnalysisPass(GenerationPass):
    """Derives the spatial metadata of the finished layout.

    Steps, in order: wall distance field, tile classification, region
    detection (keeping regions registered by generators), passages,
    chokepoints, entrance/exit placement with their distance fields and
    finally the region graph. Run it after every pass that changes the grid.
    """

    name = "metadata"
    default_role = PassRole.POST_PROCESS
    settings_class = MetadataSettings

    def execute(self, ctx: GenerationContext) -> None:
        s = self.settings
        md = ctx.metadata

        walls = wall_distance(ctx)
        md.wall_distance = walls
        classes = classify_all(ctx, walls, s.max_passage_width)
        detect_regions(ctx, classes, s.min_region_size, s.preserve_regions)
        md.classifications = classes
        detect_passages(ctx, walls)
        detect_chokepoints(ctx, classes, walls)

        if s.place_entrance_exit:
            self._place_entrance_exit(ctx)

        graph = RegionGraph(md.regions, md.passages)
        md.region_graph = graph
        md.analyzed = True
        logger.info(
            "MetadataAnalysisPass: regions=%d alcoves=%d passages=%d chokepoints=%d fully_connected=%s",
            len(md.regions), len(md.alcoves), len(md.passages), len(md.chokepoints), graph.is_fully_connected(),
        )

    @staticmethod
    def _place_entrance_exit(ctx: GenerationContext) -> None:
        md = ctx.metadata
        if md.entrance is None or not ctx.is_walkable(*md.entrance):
            floors = ctx.floor_tiles()
            if not floors:
                logger.warning("MetadataAnalysisPass: no floor tiles, entrance and exit left unset")
                return
            # Two BFS sweeps: the far end of the first sweep starts the second.
            start = ctx.random.choice(floors)
            md.entrance = _farthest(distance_from(ctx, [start]))
            md.exit = None
        md.entrance_distance = distance_from(ctx, [md.entrance])
        if md.exit is None or not ctx.is_walkable(*md.exit):
            md.exit = _farthest(md.entrance_distance)
        md.exit_distance = distance_from(ctx, [md.exit])
        logger.debug("Entrance at %s, exit at %s", md.entrance, md.exit)
