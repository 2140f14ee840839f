from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..config import PassSettings
from ..context import GenerationContext
from .base import GenerationPass, PassRole

logger = logging.getLogger(__name__)


class ValidationSettings(PassSettings):
    min_walkable_percent: float = 20.0
    max_walkable_percent: float = 60.0
    min_regions: int = 1
    max_regions: int = 0
    min_region_size: int = 0

    def check(self) -> Tuple[bool, Optional[str]]:
        if not 0 <= self.min_walkable_percent <= self.max_walkable_percent <= 100:
            return False, "walkable bounds must satisfy 0 <= min <= max <= 100"
        if self.min_regions < 0 or self.max_regions < 0 or self.min_region_size < 0:
            return False, "region constraints must not be negative"
        return True, None


class ValidationPass(GenerationPass):
    """Reports quality problems without touching the grid.

    Failures are appended to the run diagnostics and stored under
    ``validation.failures``; nothing is repaired and nothing is raised.
    Region checks only run once region metadata exists. A zero bound
    disables the matching check.
    """

    name = "validation"
    default_role = PassRole.POST_PROCESS
    settings_class = ValidationSettings

    def execute(self, ctx: GenerationContext) -> None:
        failures: List[str] = []
        self._check_walkable(ctx, failures)
        self._check_regions(ctx, failures)

        for failure in failures:
            ctx.note(f"validation: {failure}", logging.WARNING)
        if not failures:
            logger.info("ValidationPass: all checks passed")
        ctx.set_pass_data("validation.failures", failures)

    def _check_walkable(self, ctx: GenerationContext, failures: List[str]) -> None:
        s = self.settings
        total = ctx.width * ctx.height
        pct = ctx.count_floor() / total * 100.0
        logger.debug("ValidationPass: walkable %.1f%%", pct)
        if pct < s.min_walkable_percent:
            failures.append(f"walkable percentage {pct:.1f}% is below minimum {s.min_walkable_percent:g}%")
        if pct > s.max_walkable_percent:
            failures.append(f"walkable percentage {pct:.1f}% exceeds maximum {s.max_walkable_percent:g}%")

    def _check_regions(self, ctx: GenerationContext, failures: List[str]) -> None:
        s = self.settings
        md = ctx.metadata
        if not md.analyzed and not md.regions:
            logger.info("ValidationPass: no region metadata yet, skipping region checks")
            return
        count = len(md.regions)
        if s.min_regions and count < s.min_regions:
            failures.append(f"region count {count} is below minimum {s.min_regions}")
        if s.max_regions and count > s.max_regions:
            failures.append(f"region count {count} exceeds maximum {s.max_regions}")
        if s.min_region_size:
            small = [r.id for r in md.regions if r.area < s.min_region_size]
            if small:
                failures.append(f"{len(small)} region(s) smaller than {s.min_region_size} tiles: {small}")
