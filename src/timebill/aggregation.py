from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple

from .calculator import money, quantize_hours
from .models import TimeEntry

UNSPECIFIED_LABEL = "Unspecified"
ZERO = Decimal("0")


class Dimension(str, Enum):
    CLIENT = "client"
    CONSULTANT = "consultant"
    PROJECT = "project"
    SECTOR = "sector"
    SERVICE_TYPE = "service_type"
    SERVICE = "service"
    LOCATION = "location"


DIMENSION_FIELDS = {
    Dimension.CLIENT: "client_id",
    Dimension.CONSULTANT: "consultant_id",
    Dimension.PROJECT: "project_id",
    Dimension.SECTOR: "sector_id",
    Dimension.SERVICE_TYPE: "service_type_id",
    Dimension.SERVICE: "service_id",
    Dimension.LOCATION: "location",
}


@dataclass(frozen=True)
class EntryFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_id: Optional[int] = None
    consultant_id: Optional[int] = None


@dataclass(frozen=True)
class GroupTotals:
    key: Optional[Hashable]
    label: str
    hours: Decimal
    value: Decimal
    entries: int


@dataclass(frozen=True)
class SkippedEntry:
    entry_id: Optional[int]
    reason: str


@dataclass
class Aggregation:
    dimension: Dimension
    groups: List[GroupTotals] = field(default_factory=list)
    total_hours: Decimal = ZERO
    total_value: Decimal = ZERO
    total_entries: int = 0
    skipped: List[SkippedEntry] = field(default_factory=list)

    def group(self, key: Optional[Hashable]) -> Optional[GroupTotals]:
        return next((g for g in self.groups if g.key == key), None)


def filter_entries(entries: Iterable[TimeEntry], entry_filter: Optional[EntryFilter] = None) -> List[TimeEntry]:
    """Filter entries by inclusive date range, client and consultant."""
    if entry_filter is None:
        return list(entries)

    def matches(entry: TimeEntry) -> bool:
        if entry_filter.start_date and entry.date < entry_filter.start_date:
            return False
        if entry_filter.end_date and entry.date > entry_filter.end_date:
            return False
        if entry_filter.client_id is not None and entry.client_id != entry_filter.client_id:
            return False
        if entry_filter.consultant_id is not None and entry.consultant_id != entry_filter.consultant_id:
            return False
        return True

    return [entry for entry in entries if matches(entry)]


def _invalid_reason(entry: TimeEntry) -> Optional[str]:
    if entry.total_hours is None or entry.total_value is None:
        return "missing derived totals"
    try:
        hours, value = Decimal(entry.total_hours), Decimal(entry.total_value)
    except (InvalidOperation, TypeError):
        return "non-numeric derived totals"
    if hours < 0 or value < 0:
        return "negative derived totals"
    return None


def group_key(entry: TimeEntry, dimension: Dimension) -> Any:
    key = getattr(entry, DIMENSION_FIELDS[Dimension(dimension)])
    if isinstance(key, Enum):
        return key.value
    return key


def aggregate(
    entries: Iterable[TimeEntry],
    dimension: Dimension,
    labels: Optional[Mapping[Any, str]] = None,
) -> Aggregation:
    """Sum hours, value and entry counts per group of ``dimension``.

    Entries with no key, or whose key is absent from ``labels`` (a deleted or
    unknown entity), are folded into a single ``Unspecified`` group keyed by
    ``None``. Entries without usable totals are listed in ``skipped`` and left
    out of both the groups and the grand totals.
    """
    dimension = Dimension(dimension)
    result = Aggregation(dimension=dimension)
    buckets: Dict[Optional[Hashable], Dict[str, Any]] = defaultdict(
        lambda: {"hours": ZERO, "value": ZERO, "entries": 0}
    )

    for entry in entries:
        reason = _invalid_reason(entry)
        if reason:
            result.skipped.append(SkippedEntry(entry_id=entry.id, reason=reason))
            continue
        key = group_key(entry, dimension)
        if key is not None and labels is not None and key not in labels:
            key = None
        bucket = buckets[key]
        bucket["hours"] += Decimal(entry.total_hours)
        bucket["value"] += Decimal(entry.total_value)
        bucket["entries"] += 1
        result.total_hours += Decimal(entry.total_hours)
        result.total_value += Decimal(entry.total_value)
        result.total_entries += 1

    for key, bucket in buckets.items():
        if key is None:
            label = UNSPECIFIED_LABEL
        elif labels is not None:
            label = labels[key]
        else:
            label = str(key)
        result.groups.append(
            GroupTotals(
                key=key,
                label=label,
                hours=bucket["hours"],
                value=bucket["value"],
                entries=bucket["entries"],
            )
        )

    result.groups.sort(key=lambda g: (-g.value, -g.hours, g.label, str(g.key)))
    return result


def grand_totals(entries: Iterable[TimeEntry]) -> Tuple[Decimal, Decimal]:
    hours = ZERO
    value = ZERO
    for entry in entries:
        if _invalid_reason(entry):
            continue
        hours += Decimal(entry.total_hours)
        value += Decimal(entry.total_value)
    return quantize_hours(hours), money(value)
