from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .config import PipelineConfig
from .context import GenerationContext
from .errors import ConfigurationError
from .metadata import DungeonMetadata
from .passes.base import GenerationPass, PassRole
from .registry import PassRegistry, registry as default_registry
from .tiles import Grid, Tile, copy_grid

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class GenerationResult:
    grid: Grid
    metadata: DungeonMetadata
    seed: int
    base_generator: Optional[str]
    passes_executed: Tuple[str, ...]
    diagnostics: Tuple[str, ...]

    @property
    def width(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def height(self) -> int:
        return len(self.grid)

    def count_floor_tiles(self) -> int:
        return sum(1 for row in self.grid for t in row if t == Tile.FLOOR)

    def walkable_percent(self) -> float:
        total = self.width * self.height
        return self.count_floor_tiles() / total * 100.0 if total else 0.0

    def to_ascii(self, floor: str = ".", wall: str = "#") -> str:
        return "\n".join("".join(floor if t == Tile.FLOOR else wall for t in row) for row in self.grid)


class GenerationPipeline:
    """Runs an ordered set of passes against a fresh context.

    Structural problems (unknown pass types, anything but exactly one Base
    pass) raise ConfigurationError before the grid exists. Everything after
    that ends in a result; skipped passes and quality warnings are reported
    through the result diagnostics.
    """

    def __init__(self, passes: List[GenerationPass], width: int, height: int, seed: int) -> None:
        self.passes = list(passes)
        self.width = width
        self.height = height
        self.seed = seed
        self.state = PipelineState.IDLE

    @classmethod
    def from_config(cls, config: PipelineConfig, registry: Optional[PassRegistry] = None) -> "GenerationPipeline":
        reg = registry or default_registry
        passes = [reg.create(pc, config.strict_pass_config) for pc in config.passes]
        return cls(passes, config.width, config.height, config.resolve_seed())

    def validate(self) -> GenerationPass:
        """Check pass cardinality and return the single Base pass."""
        self.state = PipelineState.VALIDATING
        bases = [p for p in self.passes if p.role == PassRole.BASE]
        if not bases:
            self.state = PipelineState.IDLE
            raise ConfigurationError(
                "Pipeline has no base pass; add one of the generators (bsp, cellular_automata, "
                "drunkard_walk, simple_rooms)"
            )
        if len(bases) > 1:
            self.state = PipelineState.IDLE
            names = ", ".join(p.name for p in bases)
            raise ConfigurationError(f"Pipeline has {len(bases)} base passes ({names}); exactly one is allowed")
        return bases[0]

    def ordered(self) -> List[GenerationPass]:
        return sorted(self.passes, key=lambda p: p.priority)

    def summary(self) -> str:
        lines = [f"Pipeline {self.width}x{self.height} seed={self.seed}"]
        for p in self.ordered():
            lines.append(f"  [{p.priority:>4}] {p.name} ({p.role.value})")
        return "\n".join(lines)

    def execute(self) -> GenerationResult:
        base = self.validate()
        ctx = GenerationContext(self.width, self.height, self.seed)
        self.state = PipelineState.EXECUTING
        logger.info("Generating %dx%d dungeon with seed %d", self.width, self.height, self.seed)

        executed: List[str] = []
        for p in self.ordered():
            if not p.can_execute(ctx):
                ctx.note(f"{p.name}: skipped, readiness check failed", logging.WARNING)
                continue
            guard = p.role == PassRole.POST_PROCESS and not p.repairs_topology
            before = copy_grid(ctx.grid) if guard else None
            logger.debug("Running pass %s (priority %d)", p.name, p.priority)
            p.execute(ctx)
            executed.append(p.name)
            if p is base:
                ctx.base_generator_name = p.name
            if before is not None and before != ctx.grid:
                ctx.note(f"{p.name}: post-process pass changed the grid", logging.WARNING)

        self.state = PipelineState.COMPLETE
        return GenerationResult(
            grid=ctx.grid,
            metadata=ctx.metadata,
            seed=ctx.seed,
            base_generator=ctx.base_generator_name,
            passes_executed=tuple(executed),
            diagnostics=tuple(ctx.diagnostics),
        )


def generate(config: PipelineConfig, registry: Optional[PassRegistry] = None) -> GenerationResult:
    return GenerationPipeline.from_config(config, registry).execute()
