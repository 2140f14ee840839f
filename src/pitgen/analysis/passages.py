from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Set, Tuple

from ..context import GenerationContext
from ..metadata import NO_REGION, DistanceField, Passage
from ..tiles import Point

logger = logging.getLogger(__name__)


def detect_passages(ctx: GenerationContext, walls: DistanceField) -> List[Passage]:
    """Link regions through the floor that belongs to no region.

    Each connected cluster of unassigned floor (passages, chokepoints,
    alcoves) joins every region it touches; a cluster touching several
    regions links the lowest id to each of the others. Regions that touch
    directly get a zero-length passage whose width is the contact length.
    """
    md = ctx.metadata
    passages: List[Passage] = []
    seen: Set[Point] = set()

    for y in range(ctx.height):
        for x in range(ctx.width):
            if (x, y) in seen or not ctx.is_walkable(x, y) or md.region_ids[y][x] != NO_REGION:
                continue
            cluster, touched = _cluster(ctx, (x, y), seen)
            if len(touched) < 2:
                continue
            min_width = min(max(1, walls.get(cx, cy) * 2 - 1) for cx, cy in cluster)
            hub, others = touched[0], touched[1:]
            for other in others:
                passages.append(Passage(len(passages), hub, other, len(cluster), tuple(cluster), min_width))

    contacts: Dict[Tuple[int, int], int] = {}
    for y in range(ctx.height):
        for x in range(ctx.width):
            rid = md.region_ids[y][x]
            if rid == NO_REGION:
                continue
            for nx, ny in ((x + 1, y), (x, y + 1)):
                nid = md.region_id_at(nx, ny)
                if nid != NO_REGION and nid != rid:
                    key = (min(rid, nid), max(rid, nid))
                    contacts[key] = contacts.get(key, 0) + 1
    for (a, b), width in sorted(contacts.items()):
        passages.append(Passage(len(passages), a, b, 0, (), width))

    md.passages = passages
    logger.debug("Detected %d passages (%d direct contacts)", len(passages), len(contacts))
    return passages


def _cluster(ctx: GenerationContext, start: Point, seen: Set[Point]) -> Tuple[List[Point], List[int]]:
    md = ctx.metadata
    cluster = []
    touched: Set[int] = set()
    q = deque([start])
    seen.add(start)
    while q:
        x, y = q.popleft()
        cluster.append((x, y))
        for nx, ny in ctx.neighbors4(x, y):
            if not ctx.is_walkable(nx, ny):
                continue
            rid = md.region_ids[ny][nx]
            if rid != NO_REGION:
                touched.add(rid)
            elif (nx, ny) not in seen:
                seen.add((nx, ny))
                q.append((nx, ny))
    return cluster, sorted(touched)
