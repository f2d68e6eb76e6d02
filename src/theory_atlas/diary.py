"""Research diary: filtering, entry creation and a small JSON-file store.

Authored entries ship with the content; entries added locally are kept in a
separate JSON file and merged on load.
"""

from __future__ import annotations

from datetime import date, datetime
import json
import logging
from pathlib import Path
import re
import time
from typing import Iterable, List, Optional, Sequence, Union

from .models import DiaryEntry, InvalidInputError

logger = logging.getLogger(__name__)

TAG_OPTIONS = ['theory', 'meeting', 'coding', 'writing', 'idea', 'literature', 'supervision', 'methods']

_SPLIT_RE = re.compile(r"[,;]")


def _matches(entry: DiaryEntry, query: str) -> bool:
    q = query.lower()
    return (
        q in entry.summary.lower()
        or q in (entry.detailed_reflection or '').lower()
        or any(q in t.lower() for t in entry.tags)
        or any(q in c.lower() for c in entry.linked_constructs)
    )


def filter_entries(entries: Iterable[DiaryEntry], search: str = '', tag: str = '',
                   date_from: str = '', date_to: str = '') -> List[DiaryEntry]:
    """Filter entries by free-text search, exact tag and inclusive ISO date bounds."""
    out = []
    for e in entries:
        if search and not _matches(e, search):
            continue
        if tag and tag not in e.tags:
            continue
        if date_from and e.date < date_from:
            continue
        if date_to and e.date > date_to:
            continue
        out.append(e)
    return out


def parse_linked_constructs(text: str) -> List[str]:
    return [s.strip() for s in _SPLIT_RE.split(text or '') if s.strip()]


def sort_entries(entries: Iterable[DiaryEntry]) -> List[DiaryEntry]:
    return sorted(entries, key=lambda e: e.date, reverse=True)


def create_entry(summary: str, detailed_reflection: str = '', tags: Sequence[str] = (),
                 linked_constructs: str = '', today: Optional[date] = None,
                 entry_id: Optional[str] = None) -> DiaryEntry:
    summary = (summary or '').strip()
    if not summary:
        raise InvalidInputError("diary entry needs a summary")
    unknown = [t for t in tags if t not in TAG_OPTIONS]
    if unknown:
        raise InvalidInputError(f"unknown tag(s): {', '.join(unknown)}")
    today = today or datetime.now().date()
    return DiaryEntry(
        id=entry_id or f"custom-{int(time.time() * 1000)}",
        date=today.isoformat(),
        summary=summary,
        detailed_reflection=detailed_reflection or '',
        tags=list(dict.fromkeys(tags)),
        linked_constructs=parse_linked_constructs(linked_constructs),
    )


def merge_entries(initial: Sequence[DiaryEntry], stored: Iterable[DiaryEntry]) -> List[DiaryEntry]:
    """Authored entries plus stored ones with unseen ids, newest first."""
    merged = list(initial)
    seen = {e.id for e in merged}
    for e in stored:
        if e.id not in seen:
            merged.append(e)
            seen.add(e.id)
    return sort_entries(merged)


class DiaryStore:
    """Persist locally added diary entries to a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> List[DiaryEntry]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding='utf-8'))
            return [DiaryEntry.from_dict(r) for r in raw]
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError, InvalidInputError) as e:
            logger.warning(f"Ignoring unreadable diary file {self.path}: {e}")
            return []

    def save(self, entries: Iterable[DiaryEntry], initial: Sequence[DiaryEntry] = ()) -> List[DiaryEntry]:
        authored = {e.id for e in initial}
        custom = [e for e in entries if e.id not in authored]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([e.to_dict() for e in custom], ensure_ascii=False, indent=2),
                             encoding='utf-8')
        logger.info(f"Saved {len(custom)} diary entr{'y' if len(custom) == 1 else 'ies'} to {self.path}")
        return custom

    def entries(self, initial: Sequence[DiaryEntry] = ()) -> List[DiaryEntry]:
        return merge_entries(initial, self.load())

    def add(self, entry: DiaryEntry, initial: Sequence[DiaryEntry] = ()) -> List[DiaryEntry]:
        updated = sort_entries([entry] + self.entries(initial))
        self.save(updated, initial)
        return updated
