"""Layered layout for construct diagrams.

Nodes are assigned a level (longest-path depth from a node with no incoming
edges) and placed in columns by level, left to right. Within a column nodes
keep their input order, so identical inputs always give identical positions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .models import DiagramEdge, DiagramNode, Geometry, InvalidInputError, Position, TheoryModel

logger = logging.getLogger(__name__)


def _checked_ids(nodes: Sequence[DiagramNode]) -> List[str]:
    ids: List[str] = []
    seen = set()
    for node in nodes:
        if not node.id:
            logger.debug(f"Skipping node without id (label={node.full_name or node.display_label!r})")
            continue
        if node.id in seen:
            raise InvalidInputError(f"duplicate node id {node.id!r}")
        seen.add(node.id)
        ids.append(node.id)
    return ids


def build_predecessors(node_ids: Sequence[str], edges: Iterable[DiagramEdge]) -> Dict[str, List[str]]:
    """Map each node id to its distinct predecessors, in first-seen edge order.

    Edges with an unknown endpoint and self-loops are dropped. A repeated
    edge contributes a single predecessor relation.
    """
    known = set(node_ids)
    preds: Dict[str, List[str]] = {n: [] for n in node_ids}
    dropped = 0
    for e in edges:
        if e.source not in known or e.target not in known or e.source == e.target:
            dropped += 1
            continue
        if e.source not in preds[e.target]:
            preds[e.target].append(e.source)
    if dropped:
        logger.debug(f"Ignored {dropped} edge(s) with unknown endpoints or self-loops")
    return preds


def compute_levels(node_ids: Sequence[str], predecessors: Dict[str, List[str]]) -> Dict[str, int]:
    """Longest-path level per node: 0 without predecessors, else 1 + max(level of predecessors).

    A predecessor still being resolved (the node is its own ancestor) is
    skipped, so cycles terminate with an approximate level. Resolution walks
    nodes in input order with an explicit stack.
    """
    levels: Dict[str, int] = {}
    resolving = set()
    back_edges = 0

    for root in node_ids:
        if root in levels:
            continue
        best: Dict[str, int] = {root: -1}
        resolving.add(root)
        stack = [(root, iter(predecessors.get(root, ())))]
        while stack:
            node, pending = stack[-1]
            descended = False
            for p in pending:
                if p in levels:
                    best[node] = max(best[node], levels[p])
                elif p in resolving:
                    back_edges += 1
                else:
                    resolving.add(p)
                    best[p] = -1
                    stack.append((p, iter(predecessors.get(p, ()))))
                    descended = True
                    break
            if descended:
                continue
            stack.pop()
            resolving.discard(node)
            levels[node] = best.pop(node) + 1
            if stack:
                parent = stack[-1][0]
                best[parent] = max(best[parent], levels[node])

    if back_edges:
        logger.debug(f"Cycle detected: skipped {back_edges} back-edge contribution(s) while assigning levels")
    return levels


def group_by_level(node_ids: Sequence[str], levels: Dict[str, int]) -> List[Tuple[int, List[str]]]:
    """Return ``[(level, [ids...]), ...]`` sorted by level, input order kept inside each level."""
    groups: Dict[int, List[str]] = {}
    for n in node_ids:
        groups.setdefault(levels[n], []).append(n)
    return sorted(groups.items())


def layout_levels(nodes: Sequence[DiagramNode], edges: Sequence[DiagramEdge]) -> Dict[str, int]:
    ids = _checked_ids(nodes)
    return compute_levels(ids, build_predecessors(ids, edges))


def compute_layout(
    nodes: Sequence[DiagramNode],
    edges: Sequence[DiagramEdge],
    geometry: Optional[Geometry] = None,
) -> Dict[str, Position]:
    """Compute a left-to-right layered layout.

    Parameters
    ----------
    nodes: ordered node sequence; ids must be unique. Nodes with an empty id
        are left out of the result.
    edges: directed edges by node id. Unknown endpoints, self-loops and
        repeats are tolerated.
    geometry: box sizes and gaps; defaults to the configured layout geometry.

    Raises
    ------
    InvalidInputError
        On duplicate node ids or non-positive geometry.
    """
    geometry = geometry or Geometry.from_config()
    geometry.validate()

    ids = _checked_ids(nodes)
    levels = compute_levels(ids, build_predecessors(ids, edges))

    column = geometry.node_width + geometry.level_gap
    row = geometry.node_height + geometry.node_gap
    positions: Dict[str, Position] = {}
    for level, members in group_by_level(ids, levels):
        x = float(level * column + geometry.margin)
        ys = np.arange(len(members)) * row + geometry.margin
        for node_id, y in zip(members, ys):
            positions[node_id] = Position(x=x, y=float(y))
    return positions


# --- Theory map ---

MAP_MARGIN = 20.0
MAP_MODEL_SPACING = 80.0
MAP_CONSTRUCT_X = 120.0
MAP_CONSTRUCT_SPACING = 60.0
MAP_SECTION_GAP = 40.0

_WS_RE = re.compile(r"\s+")


@dataclass
class TheoryMap:
    nodes: List[DiagramNode] = field(default_factory=list)
    edges: List[DiagramEdge] = field(default_factory=list)
    positions: Dict[str, Position] = field(default_factory=dict)
    model_ids: List[str] = field(default_factory=list)


def shared_constructs(models: Sequence[TheoryModel]) -> List[Tuple[str, List[str]]]:
    """Constructs used by more than one model, with the abbreviations of the models using them."""
    users: Dict[str, List[str]] = {}
    for m in models:
        for c in m.constructs:
            users.setdefault(c, []).append(m.abbreviation)
    return [(c, abbrevs) for c, abbrevs in users.items() if len(abbrevs) > 1]


def compute_theory_map(
    models: Sequence[TheoryModel],
    construct_to_slug: Optional[Dict[str, str]] = None,
    base: str = '/',
) -> TheoryMap:
    """Lay out models in one column and the constructs they share in a second column."""
    construct_to_slug = construct_to_slug or {}
    tm = TheoryMap()
    by_abbrev: Dict[str, str] = {}

    for i, m in enumerate(models):
        tm.nodes.append(DiagramNode(id=m.id, display_label=m.abbreviation, full_name=m.name,
                                    href=f"{base}models/{m.id}.html"))
        tm.positions[m.id] = Position(x=MAP_MARGIN, y=MAP_MARGIN + i * MAP_MODEL_SPACING)
        tm.model_ids.append(m.id)
        by_abbrev.setdefault(m.abbreviation, m.id)

    top = MAP_MARGIN + len(models) * MAP_MODEL_SPACING + MAP_SECTION_GAP
    owners: Dict[str, str] = {}
    linked = set()
    for construct, abbrevs in shared_constructs(models):
        node_id = f"construct-{_WS_RE.sub('-', construct)}"
        if node_id in owners:
            # Names differing only in whitespace share one node rather than overwrite its position.
            logger.warning(f"Theory map: construct '{construct}' merged into '{owners[node_id]}' (both map to {node_id})")
        else:
            owners[node_id] = construct
            slug = construct_to_slug.get(construct)
            tm.nodes.append(DiagramNode(id=node_id, display_label=construct, full_name=construct,
                                        href=f"{base}constructs/{slug}/" if slug else '#'))
            tm.positions[node_id] = Position(x=MAP_CONSTRUCT_X, y=top + (len(owners) - 1) * MAP_CONSTRUCT_SPACING)
        for abbrev in abbrevs:
            model_id = by_abbrev.get(abbrev)
            if model_id and (model_id, node_id) not in linked:
                linked.add((model_id, node_id))
                tm.edges.append(DiagramEdge(source=model_id, target=node_id))
    logger.debug(f"Theory map: {len(models)} models, {len(owners)} shared constructs")
    return tm
