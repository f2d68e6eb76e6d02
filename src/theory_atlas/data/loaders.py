"""Content loaders for theory models, construct pages and diary seed entries.

Documents are authored as JSON with the camelCase keys the site uses. These
functions read them and normalize records into typed models so that
diagram and page code can stay thin.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..identifiers import slugify
from ..models import Citation, DiagramEdge, DiaryEntry, InvalidInputError, TheoryModel

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except UnicodeDecodeError as e:
        raise InvalidInputError(f"{path.name}: not UTF-8 text ({e})") from e
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"{path.name}: invalid JSON ({e})") from e


def _edges(raw: Any) -> List[DiagramEdge]:
    edges = []
    for r in raw or []:
        if not isinstance(r, dict):
            raise InvalidInputError(f"relationship must be an object with 'from' and 'to', got {r!r}")
        src = r.get('from', r.get('source'))
        tgt = r.get('to', r.get('target'))
        if not src or not tgt:
            raise InvalidInputError(f"relationship needs 'from' and 'to': {r!r}")
        edges.append(DiagramEdge(source=str(src), target=str(tgt)))
    return edges


def _citations(raw: Any) -> List[Citation]:
    citations = []
    for c in raw or []:
        if not isinstance(c, dict):
            raise InvalidInputError(f"citation must be an object, got {c!r}")
        citations.append(Citation(authors=c.get('authors', ''), title=c.get('title', ''), doi=c.get('doi')))
    return citations


def _year(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"year must be a number, got {raw!r}") from e


def normalize_model(record: Dict[str, Any]) -> TheoryModel:
    if not isinstance(record, dict):
        raise InvalidInputError(f"model document must be an object, got {type(record).__name__}")
    missing = [k for k in ('id', 'name') if not record.get(k)]
    if missing:
        raise InvalidInputError(f"model document missing {', '.join(missing)}")
    return TheoryModel(
        id=str(record['id']),
        name=str(record['name']),
        abbreviation=record.get('abbreviation') or '',
        year=_year(record.get('year')),
        authors=list(record.get('authors') or []),
        description=record.get('description') or '',
        constructs=list(record.get('constructs') or []),
        construct_abbreviations=dict(record.get('constructAbbreviations') or {}),
        relationships=_edges(record.get('relationships')),
        key_citations=_citations(record.get('keyCitations')),
        diagram_type=record.get('diagramType'),
        notes=record.get('notes'),
    )


def load_models(directory: PathLike) -> List[TheoryModel]:
    """Load every ``models/*.json`` document, ordered by year then name."""
    models_dir = Path(directory) / 'models'
    models = []
    for path in sorted(models_dir.glob('*.json')):
        record = _read_json(path)
        try:
            models.append(normalize_model(record))
        except InvalidInputError as e:
            raise InvalidInputError(f"{path.name}: {e}") from e
    logger.info(f"Loaded {len(models)} model(s) from {models_dir}")
    return sorted(models, key=lambda m: (m.year if m.year is not None else 9999, m.name))


def load_constructs(directory: PathLike) -> List[Dict[str, Any]]:
    constructs_dir = Path(directory) / 'constructs'
    constructs = []
    for path in sorted(constructs_dir.glob('*.json')):
        record = _read_json(path)
        if not isinstance(record, dict) or not record.get('name'):
            raise InvalidInputError(f"{path.name}: construct document needs a 'name'")
        constructs.append(record)
    return constructs


def construct_slug_map(constructs: List[Dict[str, Any]]) -> Dict[str, str]:
    return {c['name']: c.get('slug') or slugify(c['name']) for c in constructs}


def load_diary_seed(directory: PathLike) -> List[DiaryEntry]:
    """Return the authored diary entries from ``diary.json``, or an empty list."""
    path = Path(directory) / 'diary.json'
    if not path.exists():
        return []
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise InvalidInputError(f"{path.name}: expected a list of entries")
    return [DiaryEntry.from_dict(r) for r in raw]
