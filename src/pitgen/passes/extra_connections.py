from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..carving import carve_corridor
from ..config import PassSettings
from ..context import GenerationContext
from ..tiles import manhattan
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)


class ExtraConnectionsSettings(PassSettings):
    connection_chance: int = 20
    max_distance: int = 25
    corridor_width: int = 1
    l_shaped: bool = True

    def check(self) -> Tuple[bool, Optional[str]]:
        if not 0 <= self.connection_chance <= 100:
            return False, "connectionChance must be between 0 and 100"
        if self.max_distance < 1:
            return False, "maxDistance must be at least 1"
        if self.corridor_width < 1:
            return False, "corridorWidth must be at least 1"
        return True, None


class ExtraConnectionsPass(GenerationPass):
    """Adds loop corridors between nearby, non-consecutive regions."""

    name = "extra_connections"
    default_role = PassRole.MODIFIER
    settings_class = ExtraConnectionsSettings

    def can_execute(self, ctx: GenerationContext) -> bool:
        return len(ctx.metadata.regions) >= 2

    def execute(self, ctx: GenerationContext) -> None:
        s = self.settings
        regions = ctx.metadata.regions
        added = 0
        # j starts at i + 2 so consecutive (usually sibling) regions are skipped.
        for i in range(len(regions)):
            for j in range(i + 2, len(regions)):
                if ctx.random.randrange(100) >= s.connection_chance:
                    continue
                a, b = regions[i].centroid, regions[j].centroid
                if manhattan(a, b) > s.max_distance:
                    continue
                carve_corridor(ctx, a, b, s.corridor_width, s.l_shaped)
                added += 1
        ctx.set_pass_data("extra_connections.added", added)
        logger.info("ExtraConnectionsPass: added %d extra connections", added)
