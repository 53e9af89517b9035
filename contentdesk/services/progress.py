"""Read-time derived values and completion-state rules for projects and tasks.

Everything here works on plain values or duck-typed records so the same
rules cover ORM rows, request payloads and test doubles. Callers decide what
"done" means for their status enum; nothing in this module touches the
database or the model layer.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from contentdesk.db.base import as_utc, utcnow

SECONDS_PER_DAY = 86400


def days_until_due(due_date: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    if due_date is None:
        return None
    now = as_utc(now) or utcnow()
    delta = as_utc(due_date) - now
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def is_overdue(due_date: Optional[datetime], *, done: bool, now: Optional[datetime] = None) -> bool:
    if done or due_date is None:
        return False
    return as_utc(due_date) < (as_utc(now) or utcnow())


def sync_completion(
    record: Any,
    completed: bool,
    *,
    force_progress: bool = False,
    now: Optional[datetime] = None,
) -> None:
    """Keep ``completed_date`` (and optionally ``progress``) in step with status.

    Entering the completed state stamps ``completed_date`` once; leaving it
    clears the stamp and leaves ``progress`` untouched.
    """
    if completed:
        if record.completed_date is None:
            record.completed_date = now or utcnow()
            if force_progress:
                record.progress = 100
    elif record.completed_date is not None:
        record.completed_date = None


def checklist_progress(items: Sequence[Any]) -> int:
    if not items:
        return 0
    done = sum(1 for item in items if _field(item, "completed"))
    # Half-up, so 1 of 8 reports 13 rather than 12.
    return math.floor(done * 100 / len(items) + 0.5)


@dataclass
class ChecklistEntry:
    item: str
    completed: bool
    completed_at: Optional[datetime]


def _field(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _previous_entry(existing: Sequence[Any], incoming: Any, position: int) -> Optional[Any]:
    wanted_id = _field(incoming, "id")
    if wanted_id is not None:
        for entry in existing:
            if _field(entry, "id") == wanted_id:
                return entry
        return None
    if position < len(existing) and _field(existing[position], "item") == _field(incoming, "item"):
        return existing[position]
    return None


def merge_checklist(
    existing: Sequence[Any],
    incoming: Iterable[Any],
    now: Optional[datetime] = None,
) -> List[ChecklistEntry]:
    """Resolve completed_at for a replacement checklist.

    A completed item keeps the timestamp it already had (matched by id, or
    by position when the text is unchanged); a newly completed one is
    stamped with ``now``; an unchecked one always loses its timestamp.
    """
    now = now or utcnow()
    merged: List[ChecklistEntry] = []
    for position, entry in enumerate(incoming):
        completed = bool(_field(entry, "completed", False))
        completed_at = None
        if completed:
            previous = _previous_entry(existing, entry, position)
            if previous is not None and _field(previous, "completed"):
                completed_at = _field(previous, "completed_at")
            completed_at = completed_at or _field(entry, "completed_at") or now
        merged.append(ChecklistEntry(item=_field(entry, "item"), completed=completed, completed_at=completed_at))
    return merged
