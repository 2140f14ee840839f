from __future__ import annotations

import logging
import secrets
from enum import Enum
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

RANDOM_SEED = -1
DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 70
MIN_DIMENSION = 3

S = TypeVar("S", bound="PassSettings")


class PassRole(str, Enum):
    BASE = "base"
    MODIFIER = "modifier"
    POST_PROCESS = "post_process"

    @classmethod
    def parse(cls, value: Union[str, "PassRole"]) -> "PassRole":
        if isinstance(value, PassRole):
            return value
        key = str(value).strip().lower().replace("-", "").replace("_", "")
        for role in cls:
            if role.value.replace("_", "") == key:
                return role
        raise ConfigurationError(f"Unknown pass role '{value}'. Expected one of: base, modifier, post_process")


class PassSettings(BaseModel):
    """Base class for per-pass settings.

    Keys are read in camelCase (``minRoomWidth``) or snake_case. Unknown keys,
    including the ``role`` override, are ignored here.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def check(self) -> Tuple[bool, Optional[str]]:
        """Cross-field validation. Returns (ok, error message)."""
        return True, None

    @classmethod
    def from_block(cls: Type[S], block: Optional[Dict[str, Any]], owner: str, strict: bool = False) -> S:
        """Build settings from a raw config block.

        Invalid blocks fall back to the defaults with a warning, unless
        ``strict`` is set, in which case ConfigurationError is raised.
        """
        try:
            settings = cls.model_validate(block or {})
        except ValidationError as e:
            if strict:
                raise ConfigurationError(f"Invalid settings for pass '{owner}': {e}") from e
            logger.warning("Invalid settings for pass '%s', using defaults: %s", owner, e)
            return cls()
        ok, error = settings.check()
        if not ok:
            if strict:
                raise ConfigurationError(f"Invalid settings for pass '{owner}': {error}")
            logger.warning("Invalid settings for pass '%s', using defaults: %s", owner, error)
            return cls()
        return settings


class PassConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pass_type: str = Field(..., alias="pass", description="Registered pass name")
    priority: int = Field(0, description="Execution order, ascending")
    config: Dict[str, Any] = Field(default_factory=dict, description="Pass specific settings")

    @field_validator("pass_type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("pass type must not be empty")
        return v

    @field_validator("config", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def role_override(self) -> Optional[PassRole]:
        """Role forced by a ``role`` key in the pass block, if any."""
        override = self.config.get("role")
        return None if override is None else PassRole.parse(override)


class PipelineConfig(BaseModel):
    """Ordered pass list plus map dimensions and seed.

    A seed of None or -1 means "pick one at random"; the chosen value is
    reported on the generation result so the run can be replayed.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field("unnamed", description="Pipeline name")
    description: str = Field("", description="Free-form description")
    width: int = Field(DEFAULT_WIDTH, ge=MIN_DIMENSION, description="Grid width in tiles")
    height: int = Field(DEFAULT_HEIGHT, ge=MIN_DIMENSION, description="Grid height in tiles")
    seed: Optional[int] = Field(None, description="Random seed, -1 or null for random")
    strict_pass_config: bool = Field(False, description="Raise instead of falling back on bad pass settings")
    passes: List[PassConfig] = Field(default_factory=list, description="Passes to run")

    @model_validator(mode="before")
    @classmethod
    def lift_dimensions(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("dimensions"), dict):
            data = dict(data)
            dims = data.pop("dimensions")
            for key in ("width", "height"):
                if key in dims:
                    data.setdefault(key, dims[key])
        return data

    @property
    def is_random_seed(self) -> bool:
        return self.seed is None or self.seed == RANDOM_SEED

    def resolve_seed(self) -> int:
        if not self.is_random_seed:
            return int(self.seed)
        seed = secrets.randbits(31)
        logger.info("No seed provided; generated random seed: %d", seed)
        return seed

    def with_overrides(self, **updates: Any) -> "PipelineConfig":
        data = self.model_dump()
        data.update({k: v for k, v in updates.items() if v is not None})
        return self.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: Any) -> "PipelineConfig":
        if not isinstance(data, dict):
            raise ConfigurationError(f"Pipeline config must be a mapping, got {type(data).__name__}")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid pipeline config: {e}") from e


def load_pipeline(path: Union[str, Path]) -> PipelineConfig:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    logger.debug("Loaded pipeline config from path: %s", path)
    return PipelineConfig.from_mapping(data or {})


def available_presets() -> List[str]:
    root = resource_files("pitgen.presets")
    return sorted(p.name[: -len(".yaml")] for p in root.iterdir() if p.name.endswith(".yaml"))


def load_preset(name: str) -> PipelineConfig:
    resource = resource_files("pitgen.presets").joinpath(f"{name}.yaml")
    if not resource.is_file():
        raise ConfigurationError(f"Unknown preset '{name}'. Available presets: {', '.join(available_presets())}")
    data = yaml.safe_load(resource.read_text(encoding="utf-8"))
    logger.debug("Loaded embedded preset: %s", name)
    return PipelineConfig.from_mapping(data or {})
