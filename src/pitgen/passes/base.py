from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Type

from ..config import PassConfig, PassRole, PassSettings
from ..context import GenerationContext

__all__ = ["GenerationPass", "PassRole"]


class GenerationPass(ABC):
    """Abstract base for a single stage of the generation pipeline.

    Subclasses set ``name`` (the registry key), ``default_role`` and
    ``settings_class``. Only passes with ``repairs_topology`` may change the
    grid while running as post-process.
    """

    name: ClassVar[str] = "pass"
    default_role: ClassVar[PassRole] = PassRole.BASE
    settings_class: ClassVar[Type[PassSettings]] = PassSettings
    repairs_topology: ClassVar[bool] = False

    def __init__(self, pass_config: Optional[PassConfig] = None, strict: bool = False) -> None:
        self.pass_config = pass_config or PassConfig(pass_type=self.name)
        self.priority = self.pass_config.priority
        self.role = self.pass_config.role_override or self.default_role
        self.settings = self.settings_class.from_block(self.pass_config.config, self.name, strict)

    def can_execute(self, ctx: GenerationContext) -> bool:
        """Readiness check; a pass returning False is skipped."""
        return True

    @abstractmethod
    def execute(self, ctx: GenerationContext) -> None:
        """Run the pass against ``ctx`` in place."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.priority}, role={self.role.value})"
