from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence

from .metadata import Passage, Region

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegionConnection:
    from_region: int
    to_region: int
    passage_id: int
    distance: int


class RegionGraph:
    """Undirected region adjacency built from passages.

    Every passage becomes a pair of directed connections, one per direction.
    """

    def __init__(self, regions: Sequence[Region], passages: Sequence[Passage]) -> None:
        self.regions = list(regions)
        self._connections: Dict[int, List[RegionConnection]] = {r.id: [] for r in self.regions}
        for p in passages:
            self._connections.setdefault(p.region_a, []).append(
                RegionConnection(p.region_a, p.region_b, p.id, p.length)
            )
            self._connections.setdefault(p.region_b, []).append(
                RegionConnection(p.region_b, p.region_a, p.id, p.length)
            )

    def connections(self, region_id: int) -> List[RegionConnection]:
        return list(self._connections.get(region_id, ()))

    def neighbors(self, region_id: int) -> List[int]:
        seen: List[int] = []
        for c in self._connections.get(region_id, ()):
            if c.to_region not in seen:
                seen.append(c.to_region)
        return seen

    def find_path(self, start: int, goal: int) -> List[int]:
        """Fewest-hop region path from ``start`` to ``goal``; [] if unreachable."""
        if start == goal:
            return [start]
        parent: Dict[int, int] = {start: start}
        q = deque([start])
        while q:
            cur = q.popleft()
            for c in self._connections.get(cur, ()):
                nxt = c.to_region
                if nxt in parent:
                    continue
                parent[nxt] = cur
                if nxt == goal:
                    path = [goal]
                    while path[-1] != start:
                        path.append(parent[path[-1]])
                    path.reverse()
                    return path
                q.append(nxt)
        return []

    def breadth_first_from(self, start: int) -> Iterator[int]:
        visited = {start}
        q = deque([start])
        while q:
            cur = q.popleft()
            yield cur
            for c in self._connections.get(cur, ()):
                if c.to_region not in visited:
                    visited.add(c.to_region)
                    q.append(c.to_region)

    def is_fully_connected(self) -> bool:
        if not self.regions:
            return True
        reached = set(self.breadth_first_from(self.regions[0].id))
        return all(r.id in reached for r in self.regions)
