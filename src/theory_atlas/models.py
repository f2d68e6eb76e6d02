"""Lightweight typed data models for clarity in function signatures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import CONFIG, LayoutConfig


class InvalidInputError(ValueError):
    """Input that cannot be laid out or stored reliably (duplicate ids, bad geometry, malformed records)."""


@dataclass(frozen=True)
class DiagramNode:
    id: str
    display_label: str = ''
    full_name: str = ''
    href: str = '#'


@dataclass(frozen=True)
class DiagramEdge:
    source: str
    target: str


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def as_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class Geometry:
    node_width: float = 180.0
    node_height: float = 56.0
    level_gap: float = 80.0
    node_gap: float = 24.0
    margin: float = 20.0

    @classmethod
    def from_config(cls, cfg: Optional[LayoutConfig] = None) -> 'Geometry':
        cfg = cfg or CONFIG.layout
        return cls(
            node_width=cfg.node_width,
            node_height=cfg.node_height,
            level_gap=cfg.level_gap,
            node_gap=cfg.node_gap,
            margin=cfg.margin,
        )

    def validate(self) -> None:
        for name in ('node_width', 'node_height', 'level_gap', 'node_gap'):
            value = getattr(self, name)
            if not value > 0:
                raise InvalidInputError(f"geometry.{name} must be positive, got {value!r}")
        if self.margin < 0:
            raise InvalidInputError(f"geometry.margin must not be negative, got {self.margin!r}")


@dataclass
class Citation:
    authors: str
    title: str
    doi: Optional[str] = None

    @property
    def doi_url(self) -> Optional[str]:
        return f"https://doi.org/{self.doi}" if self.doi else None


@dataclass
class TheoryModel:
    id: str
    name: str
    abbreviation: str = ''
    year: Optional[int] = None
    authors: List[str] = field(default_factory=list)
    description: str = ''
    constructs: List[str] = field(default_factory=list)
    construct_abbreviations: Dict[str, str] = field(default_factory=dict)
    relationships: List[DiagramEdge] = field(default_factory=list)
    key_citations: List[Citation] = field(default_factory=list)
    diagram_type: Optional[str] = None
    notes: Optional[str] = None

    def label_for(self, construct: str) -> str:
        return self.construct_abbreviations.get(construct) or construct


@dataclass
class DiaryEntry:
    id: str
    date: str
    summary: str
    detailed_reflection: str = ''
    tags: List[str] = field(default_factory=list)
    linked_constructs: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys used by the stored diary file."""
        return {
            'id': self.id,
            'date': self.date,
            'summary': self.summary,
            'detailedReflection': self.detailed_reflection,
            'tags': list(self.tags),
            'linkedConstructs': list(self.linked_constructs),
        }

    @classmethod
    def from_dict(cls, record: dict) -> 'DiaryEntry':
        try:
            return cls(
                id=str(record['id']),
                date=str(record['date']),
                summary=str(record.get('summary') or ''),
                detailed_reflection=record.get('detailedReflection') or record.get('detailed_reflection') or '',
                tags=list(record.get('tags') or []),
                linked_constructs=list(record.get('linkedConstructs') or record.get('linked_constructs') or []),
            )
        except (KeyError, TypeError) as e:
            raise InvalidInputError(f"malformed diary entry: {e}") from e
