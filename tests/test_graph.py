import pytest

from pitgen.graph import RegionGraph
from pitgen.metadata import Passage, Region


def _regions(*points):
    return [Region.from_tiles(i, [p]) for i, p in enumerate(points)]


def test_path_through_chain():
    regions = _regions((1, 1), (5, 1), (9, 1))
    passages = [Passage(0, 0, 1, 2), Passage(1, 1, 2, 3)]
    graph = RegionGraph(regions, passages)

    assert graph.find_path(0, 2) == [0, 1, 2]
    assert graph.find_path(2, 0) == [2, 1, 0]
    assert graph.find_path(1, 1) == [1]
    assert graph.neighbors(1) == [0, 2]
    assert [c.passage_id for c in graph.connections(1)] == [0, 1]
    assert list(graph.breadth_first_from(0)) == [0, 1, 2]
    assert graph.is_fully_connected()


def test_unreachable_region():
    regions = _regions((1, 1), (5, 1), (9, 1))
    graph = RegionGraph(regions, [Passage(0, 0, 1, 3)])
    assert graph.find_path(0, 2) == []
    assert not graph.is_fully_connected()


def test_parallel_passages_count_once_as_neighbour():
    regions = _regions((1, 1), (5, 1))
    graph = RegionGraph(regions, [Passage(0, 0, 1, 3), Passage(1, 0, 1, 0)])
    assert graph.neighbors(0) == [1]
    assert len(graph.connections(0)) == 2


def test_empty_graph_is_connected():
    assert RegionGraph([], []).is_fully_connected()


def test_passage_rejects_self_link():
    with pytest.raises(ValueError):
        Passage(0, 2, 2, 4)
