from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .config import PassConfig
from .errors import ConfigurationError
from .passes.base import GenerationPass

logger = logging.getLogger(__name__)

PassFactory = Callable[[PassConfig, bool], GenerationPass]


def _builtin_factories() -> Dict[str, PassFactory]:
    from .passes.bsp import BSPPass
    from .passes.cellular import CellularAutomataPass
    from .passes.connectivity import ConnectivityPass
    from .passes.drunkard import DrunkardWalkPass
    from .passes.extra_connections import ExtraConnectionsPass
    from .passes.metadata import MetadataAnalysisPass
    from .passes.prefabs import PrefabInsertionPass
    from .passes.rooms import SimpleRoomPlacementPass
    from .passes.validation import ValidationPass

    classes = (
        BSPPass,
        CellularAutomataPass,
        DrunkardWalkPass,
        SimpleRoomPlacementPass,
        ExtraConnectionsPass,
        PrefabInsertionPass,
        ValidationPass,
        ConnectivityPass,
        MetadataAnalysisPass,
    )
    return {cls.name: cls for cls in classes}


class PassRegistry:
    """Case-insensitive map of pass type names to pass factories.

    Built-in passes are registered on first use. A factory is any callable
    taking ``(pass_config, strict)`` and returning a GenerationPass.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, PassFactory] = {}
        self._seeded = False

    def _ensure_builtins(self) -> None:
        if not self._seeded:
            self._seeded = True
            for name, factory in _builtin_factories().items():
                self._factories.setdefault(name, factory)

    def register(self, name: str, factory: PassFactory) -> None:
        self._ensure_builtins()
        key = name.strip().lower()
        if key in self._factories:
            logger.info("Replacing registered pass '%s'", key)
        self._factories[key] = factory

    def unregister(self, name: str) -> None:
        self._ensure_builtins()
        self._factories.pop(name.strip().lower(), None)

    def is_registered(self, name: str) -> bool:
        self._ensure_builtins()
        return name.strip().lower() in self._factories

    def names(self) -> List[str]:
        self._ensure_builtins()
        return sorted(self._factories)

    def create(self, pass_config: PassConfig, strict: bool = False) -> GenerationPass:
        self._ensure_builtins()
        key = pass_config.pass_type.strip().lower()
        factory: Optional[PassFactory] = self._factories.get(key)
        if factory is None:
            raise ConfigurationError(
                f"Unknown pass type '{pass_config.pass_type}'. Registered passes: {', '.join(self.names())}"
            )
        return factory(pass_config, strict)

    def reset(self) -> None:
        """Drop custom registrations; built-ins come back on next use."""
        self._factories.clear()
        self._seeded = False


registry = PassRegistry()
