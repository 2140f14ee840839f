import logging

import pytest

from pitgen.config import PassConfig, PassRole, PipelineConfig, available_presets, load_pipeline, load_preset
from pitgen.errors import ConfigurationError
from pitgen.passes.bsp import BSPSettings
from pitgen.passes.drunkard import DrunkardSettings


def test_pipeline_mapping_with_dimensions_block():
    cfg = PipelineConfig.from_mapping(
        {
            "name": "demo",
            "seed": 7,
            "dimensions": {"width": 50, "height": 30},
            "passes": [{"pass": "BSP", "priority": 10, "config": {"minRoomWidth": 4}}],
        }
    )
    assert (cfg.width, cfg.height, cfg.seed) == (50, 30, 7)
    assert cfg.passes[0].pass_type == "bsp"
    assert cfg.passes[0].config["minRoomWidth"] == 4


def test_defaults_and_random_seed():
    cfg = PipelineConfig()
    assert (cfg.width, cfg.height) == (80, 70)
    assert cfg.is_random_seed
    assert isinstance(cfg.resolve_seed(), int)

    assert PipelineConfig(seed=-1).is_random_seed
    assert PipelineConfig(seed=99).resolve_seed() == 99


def test_malformed_pipeline_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        PipelineConfig.from_mapping({"width": "wide"})
    with pytest.raises(ConfigurationError):
        PipelineConfig.from_mapping(["not", "a", "mapping"])
    with pytest.raises(ConfigurationError):
        PipelineConfig.from_mapping({"passes": [{"priority": 1}]})


def test_role_override():
    assert PassConfig(pass_type="cellular_automata").role_override is None
    pc = PassConfig(pass_type="cellular_automata", config={"role": "Modifier"})
    assert pc.role_override == PassRole.MODIFIER
    assert PassRole.parse("postprocess") == PassRole.POST_PROCESS
    with pytest.raises(ConfigurationError):
        PassConfig(pass_type="bsp", config={"role": "sideways"}).role_override


def test_invalid_settings_fall_back_to_defaults(caplog):
    with caplog.at_level(logging.WARNING):
        s = BSPSettings.from_block({"minPartitionSize": 10, "maxPartitionSize": 5}, "bsp")
    assert s == BSPSettings()
    assert "using defaults" in caplog.text

    s = DrunkardSettings.from_block({"walkerCount": "many"}, "drunkard_walk")
    assert s.walker_count == 1


def test_strict_settings_raise():
    with pytest.raises(ConfigurationError):
        BSPSettings.from_block({"corridorWidth": 0}, "bsp", strict=True)


def test_settings_accept_camel_and_snake_case():
    assert BSPSettings.from_block({"maxDepth": 3}, "bsp").max_depth == 3
    assert BSPSettings.from_block({"max_depth": 4}, "bsp").max_depth == 4


def test_load_pipeline_from_yaml(tmp_path):
    path = tmp_path / "pipe.yaml"
    path.write_text(
        "seed: 5\n"
        "dimensions: {width: 40, height: 30}\n"
        "passes:\n"
        "  - pass: cellular_automata\n"
        "    priority: 100\n",
        encoding="utf-8",
    )
    cfg = load_pipeline(path)
    assert cfg.seed == 5
    assert cfg.width == 40
    assert cfg.passes[0].pass_type == "cellular_automata"


def test_presets_are_packaged():
    names = available_presets()
    assert {"bsp_standard", "caves", "tunnels", "rooms"} <= set(names)
    cfg = load_preset("bsp_standard")
    assert cfg.passes[0].pass_type == "bsp"
    with pytest.raises(ConfigurationError):
        load_preset("does_not_exist")


def test_with_overrides_revalidates():
    cfg = PipelineConfig(seed=1).with_overrides(seed=2, width=None)
    assert cfg.seed == 2 and cfg.width == 80
    with pytest.raises(ConfigurationError):
        cfg.with_overrides(width=1)
