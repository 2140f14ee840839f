import json

from pitgen import cli


def test_main_prints_json_summary(capsys):
    code = cli.main(["--preset", "bsp_standard", "--seed", "12345", "--width", "60", "--height", "40"])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["seed"] == 12345
    assert (data["width"], data["height"]) == (60, 40)
    assert data["base_generator"] == "bsp"
    assert data["passes"][0] == "bsp"
    assert data["regions"] > 0
    assert data["fully_connected"] is True
    assert set(data["danger"]) == {str(i) for i in range(data["regions"])}


def test_main_is_deterministic(capsys):
    cli.main(["--preset", "caves", "--seed", "7"])
    first = capsys.readouterr().out
    cli.main(["--preset", "caves", "--seed", "7"])
    assert capsys.readouterr().out == first


def test_ascii_output(capsys):
    cli.main(["--preset", "tunnels", "--seed", "3", "--width", "30", "--height", "20", "--ascii"])
    out = capsys.readouterr().out
    lines = out.rstrip("\n").splitlines()
    assert lines[-1] == "#" * 30
    assert len(lines[-20]) == 30


def test_list_presets(capsys):
    assert cli.main(["--list-presets"]) == 0
    assert capsys.readouterr().out.split() == ["bsp_standard", "caves", "rooms", "tunnels"]


def test_config_file(tmp_path, capsys):
    path = tmp_path / "mini.yaml"
    path.write_text(
        "dimensions: {width: 40, height: 30}\n"
        "seed: 5\n"
        "passes:\n"
        "  - pass: cellular_automata\n"
        "  - {pass: metadata, priority: 10}\n",
        encoding="utf-8",
    )
    assert cli.main(["--config", str(path)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert (data["width"], data["height"], data["seed"]) == (40, 30, 5)


def test_bad_preset_returns_2(capsys):
    assert cli.main(["--preset", "nope"]) == 2
    err = capsys.readouterr().err
    assert "error: Unknown preset 'nope'" in err
    assert "bsp_standard" in err


def test_invalid_pipeline_returns_2(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("passes:\n  - pass: metadata\n", encoding="utf-8")
    assert cli.main(["--config", str(path)]) == 2
    assert "no base pass" in capsys.readouterr().err
