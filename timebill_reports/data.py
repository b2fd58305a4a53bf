from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from timebill.aggregation import EntryFilter, filter_entries
from timebill.models import TimeEntry
from timebill.repository import Repository

LOCATION_LABELS = {"on_site": "On-site", "remote": "Remote"}


@dataclass(frozen=True)
class Directory:
    """Display names for every entity referenced by time entries, keyed by id."""

    clients: Dict[int, str] = field(default_factory=dict)
    consultants: Dict[int, str] = field(default_factory=dict)
    services: Dict[int, str] = field(default_factory=dict)
    sectors: Dict[int, str] = field(default_factory=dict)
    service_types: Dict[int, str] = field(default_factory=dict)
    projects: Dict[int, str] = field(default_factory=dict)
    locations: Dict[str, str] = field(default_factory=lambda: dict(LOCATION_LABELS))

    def name(self, kind: str, key: Optional[int], default: str = "") -> str:
        if key is None:
            return default
        return getattr(self, kind).get(key, default)


def load_directory(repository: Repository) -> Directory:
    return Directory(
        clients={c.id: c.name for c in repository.clients.list()},
        consultants={c.id: c.name for c in repository.consultants.list()},
        services={s.id: s.description for s in repository.services.list()},
        sectors={s.id: s.description for s in repository.sectors.list()},
        service_types={s.id: s.code for s in repository.service_types.list()},
        projects={p.id: p.name for p in repository.projects.list()},
    )


def load_entries(repository: Repository, entry_filter: Optional[EntryFilter] = None) -> List[TimeEntry]:
    entry_filter = entry_filter or EntryFilter()
    entries = repository.entries_between(entry_filter.start_date, entry_filter.end_date)
    return filter_entries(entries, entry_filter)


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """First and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
