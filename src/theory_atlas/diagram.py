"""Turn a theory model into a drawable diagram.

The positioned form feeds the SVG renderer. When the model cannot be laid out
reliably (for example two constructs derive the same id) the builder falls
back to an unpositioned list of constructs and relationships.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from .identifiers import resolve_node_ids
from .layout import compute_layout
from .models import DiagramEdge, DiagramNode, Geometry, InvalidInputError, Position, TheoryModel

logger = logging.getLogger(__name__)

STATIC_LABEL_LENGTH = 12


@dataclass
class DiagramEdgeView:
    id: str
    source: str
    target: str


@dataclass
class ModelDiagram:
    model_id: str
    geometry: Geometry
    nodes: List[DiagramNode] = field(default_factory=list)
    edges: List[DiagramEdgeView] = field(default_factory=list)
    positions: Dict[str, Position] = field(default_factory=dict)
    positioned: bool = True
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def width(self) -> float:
        if not self.positions:
            return 0.0
        return max(p.x for p in self.positions.values()) + self.geometry.node_width + self.geometry.margin

    @property
    def height(self) -> float:
        if not self.positions:
            return 0.0
        return max(p.y for p in self.positions.values()) + self.geometry.node_height + self.geometry.margin


def _href(construct: str, construct_to_slug: Dict[str, str], base: str) -> str:
    slug = construct_to_slug.get(construct)
    return f"{base}constructs/{slug}/" if slug else '#'


def _edge_views(edges: List[DiagramEdge]) -> List[DiagramEdgeView]:
    return [DiagramEdgeView(id=f"e{i}", source=e.source, target=e.target) for i, e in enumerate(edges)]


def build_static_diagram(model: TheoryModel, construct_to_slug: Dict[str, str], geometry: Geometry,
                         base: str = '/', error: Optional[str] = None) -> ModelDiagram:
    nodes = [
        DiagramNode(
            id=name,
            display_label=model.construct_abbreviations.get(name) or name[:STATIC_LABEL_LENGTH],
            full_name=name,
            href=_href(name, construct_to_slug, base),
        )
        for name in model.constructs
    ]
    return ModelDiagram(model_id=model.id, geometry=geometry, nodes=nodes,
                        edges=_edge_views(model.relationships), positioned=False, error=error)


def build_model_diagram(
    model: TheoryModel,
    construct_to_slug: Optional[Dict[str, str]] = None,
    geometry: Optional[Geometry] = None,
    base: str = '/',
) -> ModelDiagram:
    construct_to_slug = construct_to_slug or {}
    geometry = geometry or Geometry.from_config()

    try:
        ids = resolve_node_ids(model.constructs, model.construct_abbreviations)
        nodes = [
            DiagramNode(id=node_id, display_label=model.label_for(name), full_name=name,
                        href=_href(name, construct_to_slug, base))
            for node_id, name in zip(ids, model.constructs)
        ]
        positions = compute_layout(nodes, model.relationships, geometry)
    except InvalidInputError as e:
        logger.warning(f"Cannot lay out model '{model.id}', using list presentation: {e}")
        return build_static_diagram(model, construct_to_slug, geometry, base=base, error=str(e))

    fallback = Position(x=geometry.margin, y=geometry.margin)
    for node in nodes:
        positions.setdefault(node.id, fallback)
    return ModelDiagram(model_id=model.id, geometry=geometry, nodes=nodes,
                        edges=_edge_views(model.relationships), positions=positions)
