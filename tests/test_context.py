from pitgen.context import GenerationContext
from pitgen.tiles import Tile


def test_out_of_bounds_reads_wall_and_writes_are_ignored():
    ctx = GenerationContext(10, 8, seed=1)
    ctx.set_tile(3, 3, Tile.FLOOR)

    assert ctx.get_tile(3, 3) == Tile.FLOOR
    assert ctx.get_tile(-1, 0) == Tile.WALL
    assert ctx.get_tile(10, 0) == Tile.WALL
    assert ctx.get_tile(0, 8) == Tile.WALL

    ctx.set_tile(-1, -1, Tile.FLOOR)
    ctx.set_tile(10, 8, Tile.FLOOR)
    assert ctx.count_floor() == 1
    assert ctx.is_walkable(3, 3)
    assert not ctx.is_walkable(99, 99)


def test_grid_starts_as_walls():
    ctx = GenerationContext(5, 4, seed=0)
    assert all(t == Tile.WALL for row in ctx.grid for t in row)
    assert len(ctx.grid) == 4 and len(ctx.grid[0]) == 5


def test_pass_data_defaults_on_miss_and_type_mismatch():
    ctx = GenerationContext(5, 5, seed=0)
    ctx.set_pass_data("rooms", [1, 2, 3])

    assert ctx.get_pass_data("rooms") == [1, 2, 3]
    assert ctx.get_pass_data("missing", 7) == 7
    assert ctx.get_pass_data("missing") is None
    # Stored list, int requested: caller default wins instead of raising
    assert ctx.get_pass_data("rooms", 0) == 0
    assert ctx.get_pass_data("rooms", None, expected_type=dict) is None
    assert ctx.get_pass_data("rooms", None, expected_type=list) == [1, 2, 3]
    assert ctx.has_pass_data("rooms")


def test_note_records_diagnostics():
    ctx = GenerationContext(5, 5, seed=0)
    ctx.note("something odd")
    assert ctx.diagnostics == ["something odd"]
