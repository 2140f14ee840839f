import pytest

from pitgen.analysis.distance import distance_from, wall_distance
from pitgen.config import PassConfig
from pitgen.context import GenerationContext
from pitgen.metadata import NO_REGION, DistanceField, RegionSource, TileClassification
from pitgen.passes.metadata import MetadataAnalysisPass
from pitgen.pipeline import generate
from pitgen.tiles import Rect, Tile


def _carve(ctx, rect):
    for x, y in rect.points():
        ctx.set_tile(x, y, Tile.FLOOR)


def two_rooms_and_corridor():
    """Two 8x8 rooms joined by a five tile corridor on row 5."""
    ctx = GenerationContext(25, 12, seed=11)
    _carve(ctx, Rect(2, 2, 8, 8))
    _carve(ctx, Rect(15, 2, 8, 8))
    _carve(ctx, Rect(10, 5, 5, 1))
    return ctx


def test_wall_distance_field():
    ctx = two_rooms_and_corridor()
    field = wall_distance(ctx)
    assert field.get(0, 0) == 0
    assert field.get(2, 2) == 1
    assert field.get(3, 3) == 2
    assert field.get(12, 5) == 1
    assert field.get(-5, 0) == DistanceField.UNREACHABLE


def test_distance_from_sources_and_queries():
    ctx = two_rooms_and_corridor()
    field = distance_from(ctx, [(2, 2)])
    assert field.get(2, 2) == 0
    assert field.get(5, 2) == 3
    assert field.get(0, 0) == DistanceField.UNREACHABLE
    assert (3, 2) in field.tiles_at(1)
    assert set(field.tiles_within(1)) == {(2, 2), (3, 2), (2, 3)}
    assert field.max_distance() > 0


def test_two_rooms_analysis():
    ctx = two_rooms_and_corridor()
    MetadataAnalysisPass().execute(ctx)
    md = ctx.metadata

    assert md.analyzed
    assert len(md.regions) == 2
    assert [r.area for r in md.regions] == [64, 64]
    assert md.regions[0].bounding_box == Rect(2, 2, 8, 8)
    assert md.regions[0].centroid == (5, 5)
    assert md.region_at(3, 3) is md.regions[0]
    assert md.region_at(16, 3) is md.regions[1]
    assert md.region_id_at(12, 5) == NO_REGION

    assert md.classification_at(12, 5) == TileClassification.CHOKEPOINT
    assert md.classification_at(2, 2) == TileClassification.CORNER
    assert md.classification_at(2, 4) == TileClassification.EDGE
    assert md.classification_at(5, 6) == TileClassification.OPEN
    assert md.classification_at(0, 0) == TileClassification.WALL
    assert md.classification_at(-1, 40) == TileClassification.WALL

    assert len(md.passages) == 1
    passage = md.passages[0]
    assert (passage.region_a, passage.region_b) == (0, 1)
    assert passage.length == 5
    assert passage.min_width == 1

    corridor = {(x, 5) for x in range(10, 15)}
    assert {c.position for c in md.chokepoints} == corridor
    for choke in md.chokepoints:
        assert choke.width == 1
        assert choke.connected_region_ids == (0, 1)
        assert choke.passage_id == 0
        assert choke.strategic_value == pytest.approx(0.7)
    assert len(md.strategic_positions()) == 5

    assert md.region_graph.find_path(0, 1) == [0, 1]
    assert md.region_graph.is_fully_connected()

    assert md.entrance is not None and md.exit is not None
    assert ctx.is_walkable(*md.entrance) and ctx.is_walkable(*md.exit)
    assert md.entrance_distance.get(*md.entrance) == 0
    assert md.exit_distance.get(*md.exit) == 0
    assert md.entrance_distance.get(*md.exit) == md.entrance_distance.max_distance()


def test_small_areas_become_alcoves():
    ctx = GenerationContext(12, 12, seed=0)
    _carve(ctx, Rect(2, 2, 4, 4))
    MetadataAnalysisPass(PassConfig(pass_type="metadata", config={"minRegionSize": 20})).execute(ctx)
    md = ctx.metadata

    assert md.regions == []
    assert len(md.alcoves) == 1 and md.alcoves[0].area == 16
    assert md.alcoves[0].id == NO_REGION
    assert md.classification_at(3, 3) == TileClassification.ALCOVE
    assert md.region_graph.is_fully_connected()


def test_dead_end_classification():
    ctx = GenerationContext(10, 10, seed=0)
    _carve(ctx, Rect(2, 2, 5, 5))
    ctx.set_tile(7, 4, Tile.FLOOR)
    MetadataAnalysisPass().execute(ctx)
    assert ctx.metadata.classification_at(7, 4) == TileClassification.DEAD_END


def test_existing_entrance_is_kept():
    ctx = two_rooms_and_corridor()
    ctx.metadata.entrance = (3, 3)
    MetadataAnalysisPass().execute(ctx)
    assert ctx.metadata.entrance == (3, 3)
    assert ctx.metadata.exit[0] >= 15


def test_generator_regions_are_preserved(make_config):
    result = generate(make_config([{"pass": "bsp", "priority": 1}, {"pass": "metadata", "priority": 2}]))
    sources = {r.source for r in result.metadata.regions}
    assert RegionSource.BSP_ROOM in sources
    rooms = [r for r in result.metadata.regions if r.source == RegionSource.BSP_ROOM]
    assert all(r.id == i for i, r in enumerate(rooms)), "Registered rooms keep the leading ids"


PIPELINES = [
    [{"pass": "bsp", "priority": 100}],
    [{"pass": "cellular_automata", "priority": 100}],
    [{"pass": "drunkard_walk", "priority": 100, "config": {"walkerCount": 3, "startFromCenter": False}}],
    [
        {"pass": "simple_rooms", "priority": 100},
        {"pass": "cellular_automata", "priority": 150, "config": {"role": "modifier", "targetRegions": {"type": "all"}}},
    ],
]


@pytest.mark.parametrize("passes", PIPELINES)
@pytest.mark.parametrize("seed", [1, 77, 4242])
def test_region_invariants_and_full_connectivity(make_config, passes, seed):
    passes = passes + [{"pass": "connectivity", "priority": 500}, {"pass": "metadata", "priority": 900}]
    result = generate(make_config(passes, width=64, height=48, seed=seed))
    md = result.metadata

    for index, region in enumerate(md.regions):
        assert region.id == index
        for x, y in region.tiles:
            assert result.grid[y][x] == Tile.FLOOR, "Region tiles must be floor"
            assert md.region_ids[y][x] == index
    for y, row in enumerate(md.region_ids):
        for x, rid in enumerate(row):
            if rid != NO_REGION:
                assert md.regions[rid].contains((x, y))

    for passage in md.passages:
        assert passage.region_a != passage.region_b

    assert md.region_graph.is_fully_connected(), "Connectivity plus metadata must yield a connected region graph"


def _is_connected(tiles):
    tiles = set(tiles)
    start = next(iter(tiles))
    seen, stack = {start}, [start]
    while stack:
        x, y = stack.pop()
        for n in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if n in tiles and n not in seen:
                seen.add(n)
                stack.append(n)
    return len(seen) == len(tiles)


def test_registered_region_is_cut_to_its_largest_piece():
    ctx = GenerationContext(30, 14, seed=0)
    _carve(ctx, Rect(2, 2, 6, 6))
    _carve(ctx, Rect(20, 2, 2, 2))
    _carve(ctx, Rect(20, 8, 3, 3))
    tiles = list(Rect(2, 2, 6, 6).points()) + list(Rect(20, 2, 2, 2).points())
    ctx.metadata.add_region(tiles, RegionSource.ROOM)
    ctx.metadata.add_region(Rect(20, 8, 3, 3).points(), RegionSource.ROOM, tag="closet")

    MetadataAnalysisPass().execute(ctx)
    md = ctx.metadata

    assert len(md.regions) == 1
    room = md.regions[0]
    assert room.source == RegionSource.ROOM
    assert room.area == 36 and _is_connected(room.tiles)
    assert md.region_id_at(20, 2) == NO_REGION
    # The 3x3 closet is too small to stay a region.
    assert md.regions_with_tag("closet") == []
    assert md.region_id_at(21, 9) == NO_REGION


@pytest.mark.parametrize("seed", range(1, 6))
def test_burst_room_regions_are_whole_and_large_enough(make_config, seed):
    passes = [
        {"pass": "drunkard_walk", "priority": 100, "config": {"walkerCount": 3, "roomChance": 20}},
        {"pass": "connectivity", "priority": 500},
        {"pass": "metadata", "priority": 900},
    ]
    result = generate(make_config(passes, width=64, height=48, seed=seed))
    for region in result.metadata.regions:
        assert region.area >= 16, f"region {region.id} has {region.area} tiles"
        assert _is_connected(region.tiles), f"region {region.id} is split"


def test_prefab_regions_survive_analysis(make_config):
    from pitgen.danger import calculate_danger_levels

    passes = [
        {"pass": "simple_rooms", "priority": 100},
        {
            "pass": "prefabs",
            "priority": 200,
            "config": {
                "budget": 1,
                "prefabs": [
                    {
                        "name": "boss_room",
                        "tiles": ["....", ".B..", "...."],
                        "legend": {"B": {"type": "spawn_point", "tag": "boss"}},
                    }
                ],
            },
        },
        {"pass": "connectivity", "priority": 500},
        {"pass": "metadata", "priority": 900},
    ]
    result = generate(make_config(passes, width=70, height=50, seed=21))
    md = result.metadata

    spawnable = md.spawnable_regions()
    assert len(spawnable) == 1
    boss = spawnable[0]
    assert boss.tag == "boss_room" and boss.source == RegionSource.PREFAB
    x, y = boss.spawn_hints[0].position
    assert result.grid[y][x] == Tile.FLOOR

    levels = calculate_danger_levels(md)
    others = [levels[r.id] for r in md.regions if r is not boss]
    assert levels[boss.id] >= 1.3 - 1e-9
    assert all(v <= 1.4 + 0.15 for v in others)
