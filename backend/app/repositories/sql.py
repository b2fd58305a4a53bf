from __future__ import annotations

from dataclasses import fields
from datetime import date
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models import (
    ClientRow,
    ConsultantRow,
    ProjectRow,
    SectorRow,
    ServiceRow,
    ServiceTypeRow,
    TimeEntryRow,
)
from timebill.errors import ConflictError
from timebill.models import (
    Client,
    Consultant,
    Project,
    ProjectStatus,
    Sector,
    Service,
    ServiceLocation,
    ServiceType,
    TimeEntry,
)

T = TypeVar("T")
logger = get_logger(__name__)

ENUM_FIELDS: Dict[str, Type[Enum]] = {"status": ProjectStatus, "location": ServiceLocation}


class SqlCollection(Generic[T]):
    def __init__(
        self,
        session: Session,
        row_cls: type,
        record_cls: Type[T],
        unique: tuple[str, ...] = ("code",),
    ) -> None:
        self.session = session
        self.row_cls = row_cls
        self.record_cls = record_cls
        self.unique = unique
        self.names = [f.name for f in fields(record_cls)]

    def _to_record(self, row: Any) -> T:
        values = {name: getattr(row, name) for name in self.names}
        for name, enum_cls in ENUM_FIELDS.items():
            if values.get(name) is not None:
                values[name] = enum_cls(values[name])
        return self.record_cls(**values)

    @staticmethod
    def _column_value(value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    def _check_unique(self, values: Dict[str, Any], record_id: Optional[int]) -> None:
        for name in self.unique:
            if values.get(name) is None:
                continue
            query = self.session.query(self.row_cls).filter(getattr(self.row_cls, name) == values[name])
            if record_id is not None:
                query = query.filter(self.row_cls.id != record_id)
            if query.first() is not None:
                raise ConflictError(f"{self.record_cls.__name__} {name} already exists")

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("integrity_error", entity=self.record_cls.__name__, action=action, error=str(exc.orig))
            raise ConflictError(f"{self.record_cls.__name__} could not be {action}") from exc

    def list(self) -> List[T]:
        rows = self.session.query(self.row_cls).order_by(self.row_cls.id.asc()).all()
        return [self._to_record(row) for row in rows]

    def get(self, record_id: int) -> Optional[T]:
        row = self.session.get(self.row_cls, record_id)
        return self._to_record(row) if row else None

    def get_by_code(self, code: str) -> Optional[T]:
        row = self.session.query(self.row_cls).filter(self.row_cls.code == code).one_or_none()
        return self._to_record(row) if row else None

    def find(self, **criteria) -> List[T]:
        rows = (
            self.session.query(self.row_cls)
            .filter_by(**{k: self._column_value(v) for k, v in criteria.items()})
            .order_by(self.row_cls.id.asc())
            .all()
        )
        return [self._to_record(row) for row in rows]

    def add(self, record: T) -> T:
        values = {
            name: self._column_value(getattr(record, name))
            for name in self.names
            if name != "id" and getattr(record, name) is not None
        }
        self._check_unique(values, None)
        row = self.row_cls(**values)
        self.session.add(row)
        self._commit("created")
        self.session.refresh(row)
        return self._to_record(row)

    def update(self, record_id: int, **changes) -> Optional[T]:
        row = self.session.get(self.row_cls, record_id)
        if row is None:
            return None
        values = {name: self._column_value(value) for name, value in changes.items() if name != "id"}
        self._check_unique(values, record_id)
        for name, value in values.items():
            setattr(row, name, value)
        self._commit("updated")
        self.session.refresh(row)
        return self._to_record(row)

    def delete(self, record_id: int) -> bool:
        row = self.session.get(self.row_cls, record_id)
        if row is None:
            return False
        self.session.delete(row)
        self._commit("deleted")
        return True


class SqlRepository:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.clients = SqlCollection(session, ClientRow, Client, unique=("code", "tax_id"))
        self.consultants = SqlCollection(session, ConsultantRow, Consultant)
        self.services = SqlCollection(session, ServiceRow, Service)
        self.sectors = SqlCollection(session, SectorRow, Sector)
        self.service_types = SqlCollection(session, ServiceTypeRow, ServiceType)
        self.projects = SqlCollection(session, ProjectRow, Project)
        self.time_entries = SqlCollection(session, TimeEntryRow, TimeEntry, unique=())

    def entries_between(self, start: Optional[date], end: Optional[date]) -> List[TimeEntry]:
        query = self.session.query(TimeEntryRow)
        if start:
            query = query.filter(TimeEntryRow.date >= start)
        if end:
            query = query.filter(TimeEntryRow.date <= end)
        rows = query.order_by(TimeEntryRow.date.asc(), TimeEntryRow.id.asc()).all()
        return [self.time_entries._to_record(row) for row in rows]
