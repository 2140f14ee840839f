from __future__ import annotations

import logging
from typing import Optional, Tuple

from pydantic import field_validator

from ..analysis.islands import find_islands, repair_mst
from ..config import PassSettings
from ..context import GenerationContext
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)


class ConnectivitySettings(PassSettings):
    max_corridor_length: int = 0
    repair_strategy: str = "mst"

    @field_validator("repair_strategy")
    @classmethod
    def lower_strategy(cls, v: str) -> str:
        return v.strip().lower()

    def check(self) -> Tuple[bool, Optional[str]]:
        if self.max_corridor_length < 0:
            return False, "maxCorridorLength must not be negative"
        if self.repair_strategy != "mst":
            return False, f"unknown repairStrategy '{self.repair_strategy}'"
        return True, None


class ConnectivityPass(GenerationPass):
    """Joins disconnected floor islands with corridors.

    The only post-process pass allowed to change the grid.
    """

    name = "connectivity"
    default_role = PassRole.POST_PROCESS
    settings_class = ConnectivitySettings
    repairs_topology = True

    def execute(self, ctx: GenerationContext) -> None:
        report = find_islands(ctx)
        if report.is_fully_connected:
            logger.debug("ConnectivityPass: %d island(s), nothing to repair", len(report.islands))
            ctx.set_pass_data("connectivity.corridors", 0)
            return

        logger.info("ConnectivityPass: repairing %d disconnected islands", len(report.islands))
        carved = repair_mst(ctx, report, self.settings.max_corridor_length)
        ctx.set_pass_data("connectivity.corridors", carved)

        after = find_islands(ctx)
        if after.is_fully_connected:
            logger.info("ConnectivityPass: carved %d corridor(s), dungeon is fully connected", carved)
        else:
            ctx.note(
                f"connectivity: {len(after.islands)} islands remain after carving {carved} corridor(s)",
                logging.WARNING,
            )
