"""Node id and slug derivation for constructs."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from .models import InvalidInputError

MAX_ID_LENGTH = 15

_WS_RE = re.compile(r"\s+")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def construct_to_id(name: str, abbreviations: Optional[Dict[str, str]] = None, max_length: int = MAX_ID_LENGTH) -> str:
    """Return the diagram node id for a construct name.

    An explicit abbreviation wins. Otherwise whitespace runs become '-' and
    the result is cut to ``max_length`` characters.
    """
    if abbreviations and abbreviations.get(name):
        return abbreviations[name]
    return _WS_RE.sub('-', name or '')[:max_length]


def resolve_node_ids(names: Sequence[str], abbreviations: Optional[Dict[str, str]] = None) -> List[str]:
    """Derive ids for ``names`` in order, failing on empty ids or collisions.

    Two distinct names collapsing to one id would silently overwrite one
    node's position with the other's, so that is reported instead.
    """
    owners: Dict[str, str] = {}
    ids: List[str] = []
    for name in names:
        node_id = construct_to_id(name, abbreviations)
        if not node_id:
            raise InvalidInputError(f"construct {name!r} derives an empty id")
        if node_id in owners:
            other = owners[node_id]
            if other == name:
                raise InvalidInputError(f"construct {name!r} is listed twice")
            raise InvalidInputError(f"constructs {other!r} and {name!r} both derive id {node_id!r}")
        owners[node_id] = name
        ids.append(node_id)
    return ids


def slugify(text: str) -> str:
    return _SLUG_RE.sub('-', (text or '').lower()).strip('-')
