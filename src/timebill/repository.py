from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Dict, Generic, List, Optional, Protocol, TypeVar

from .errors import ConflictError
from .models import Client, Consultant, Project, Sector, Service, ServiceType, TimeEntry

T = TypeVar("T")


class Collection(Protocol[T]):
    def list(self) -> List[T]: ...

    def get(self, record_id: int) -> Optional[T]: ...

    def get_by_code(self, code: str) -> Optional[T]: ...

    def find(self, **criteria) -> List[T]: ...

    def add(self, record: T) -> T: ...

    def update(self, record_id: int, **changes) -> Optional[T]: ...

    def delete(self, record_id: int) -> bool: ...


class Repository(Protocol):
    clients: Collection[Client]
    consultants: Collection[Consultant]
    services: Collection[Service]
    sectors: Collection[Sector]
    service_types: Collection[ServiceType]
    projects: Collection[Project]
    time_entries: Collection[TimeEntry]

    def entries_between(self, start: Optional[date], end: Optional[date]) -> List[TimeEntry]: ...


class InMemoryCollection(Generic[T]):
    def __init__(self, unique: tuple[str, ...] = ("code",)) -> None:
        self.records: Dict[int, T] = {}
        self.unique = unique
        self._next_id = 1

    def list(self) -> List[T]:
        return [self.records[key] for key in sorted(self.records)]

    def get(self, record_id: int) -> Optional[T]:
        return self.records.get(record_id)

    def get_by_code(self, code: str) -> Optional[T]:
        return next((r for r in self.list() if getattr(r, "code", None) == code), None)

    def find(self, **criteria) -> List[T]:
        return [
            record
            for record in self.list()
            if all(getattr(record, name) == value for name, value in criteria.items())
        ]

    def _check_unique(self, record: T, record_id: Optional[int]) -> None:
        for name in self.unique:
            value = getattr(record, name, None)
            if value is None:
                continue
            for other_id, other in self.records.items():
                if other_id != record_id and getattr(other, name, None) == value:
                    raise ConflictError(f"{type(record).__name__} {name} already exists")

    def add(self, record: T) -> T:
        self._check_unique(record, None)
        stored = replace(record, id=self._next_id)
        self.records[stored.id] = stored
        self._next_id += 1
        return stored

    def update(self, record_id: int, **changes) -> Optional[T]:
        current = self.records.get(record_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self._check_unique(updated, record_id)
        self.records[record_id] = updated
        return updated

    def delete(self, record_id: int) -> bool:
        return self.records.pop(record_id, None) is not None


class InMemoryRepository:
    """Dict-backed store used by tests and local demos."""

    def __init__(self) -> None:
        self.clients: InMemoryCollection[Client] = InMemoryCollection(unique=("code", "tax_id"))
        self.consultants: InMemoryCollection[Consultant] = InMemoryCollection()
        self.services: InMemoryCollection[Service] = InMemoryCollection()
        self.sectors: InMemoryCollection[Sector] = InMemoryCollection()
        self.service_types: InMemoryCollection[ServiceType] = InMemoryCollection()
        self.projects: InMemoryCollection[Project] = InMemoryCollection()
        self.time_entries: InMemoryCollection[TimeEntry] = InMemoryCollection(unique=())

    def entries_between(self, start: Optional[date], end: Optional[date]) -> List[TimeEntry]:
        entries = self.time_entries.list()
        if start:
            entries = [e for e in entries if e.date >= start]
        if end:
            entries = [e for e in entries if e.date <= end]
        return sorted(entries, key=lambda e: (e.date, e.id))
