import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


@pytest.fixture(autouse=True)
def clean_registry():
    from pitgen.registry import registry

    registry.reset()
    yield
    registry.reset()


@pytest.fixture
def make_config():
    from pitgen.config import PipelineConfig

    def _make(passes, width=60, height=40, seed=12345, **extra):
        data = {"width": width, "height": height, "seed": seed, "passes": passes}
        data.update(extra)
        return PipelineConfig.from_mapping(data)

    return _make
