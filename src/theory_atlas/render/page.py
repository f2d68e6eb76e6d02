from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..diagram import ModelDiagram
from ..layout import TheoryMap
from ..models import DiaryEntry, Position, TheoryModel

TEMPLATES_DIR = Path(__file__).with_name('templates')

MAP_NODE_WIDTH = 160.0
MAP_NODE_HEIGHT = 40.0


def get_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(['html', 'xml', 'j2']),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals['edge_path'] = edge_path
    return env


def edge_path(source: Position, target: Position, width: float, height: float) -> Tuple[float, float, float, float]:
    """Arrow from the right-middle of the source box to the left-middle of the target box."""
    return (source.x + width, source.y + height / 2, target.x, target.y + height / 2)


def render_model_page(model: TheoryModel, diagram: ModelDiagram,
                      construct_to_slug: Optional[Dict[str, str]] = None, base: str = '/') -> str:
    """Render one model page: description, diagram (SVG or list fallback), constructs and citations."""
    template = get_environment().get_template('model_page.html.j2')
    return template.render(
        model=model,
        diagram=diagram,
        geometry=diagram.geometry,
        construct_to_slug=construct_to_slug or {},
        base=base,
    )


def render_theory_map(theory_map: TheoryMap, base: str = '/') -> str:
    positions = theory_map.positions
    width = max((p.x for p in positions.values()), default=0.0) + MAP_NODE_WIDTH + 20
    height = max((p.y for p in positions.values()), default=0.0) + MAP_NODE_HEIGHT + 20
    template = get_environment().get_template('theory_map.html.j2')
    return template.render(
        theory_map=theory_map,
        node_width=MAP_NODE_WIDTH,
        node_height=MAP_NODE_HEIGHT,
        width=width,
        height=height,
        base=base,
    )


def render_diary(entries: Iterable[DiaryEntry], base: str = '/') -> str:
    template = get_environment().get_template('diary.html.j2')
    return template.render(entries=list(entries), base=base)


def render_models_index(models: Iterable[TheoryModel], base: str = '/') -> str:
    """Card grid of all models, each linking to its own page."""
    template = get_environment().get_template('models.html.j2')
    return template.render(models=list(models), base=base)
