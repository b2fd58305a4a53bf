from __future__ import annotations

from dataclasses import fields, replace
from hashlib import sha256
from hmac import compare_digest
from typing import Any, Dict, Mapping, Optional

import structlog

from .calculator import compute_totals
from .errors import NotFoundError, TimebillError, ValidationError
from .models import Consultant, EntryTotals, RecalculationResult, Service, TimeEntry
from .repository import Repository

logger = structlog.get_logger(__name__)

TIME_FIELDS = ("start_time", "end_time", "break_start", "break_end")
DERIVED_FIELDS = ("total_hours", "total_value")
REQUIRED_FIELDS = ("date", "consultant_id", "client_id", "service_id", "start_time", "end_time")
ENTRY_FIELDS = {f.name for f in fields(TimeEntry)} - {"id"}


def hash_password(raw: str) -> str:
    return sha256(raw.encode("utf-8")).hexdigest()


def _clean(values: Mapping[str, Any]) -> Dict[str, Any]:
    cleaned = {key: value for key, value in values.items() if key in ENTRY_FIELDS and key not in DERIVED_FIELDS}
    for key in ("break_start", "break_end"):
        if key in cleaned and cleaned[key] == "":
            cleaned[key] = None
    return cleaned


class TimesheetService:
    def __init__(self, repository: Repository):
        self.repository = repository

    def _service(self, service_id: int) -> Service:
        service = self.repository.services.get(service_id)
        if service is None:
            raise NotFoundError("Service", service_id)
        return service

    def _check_references(self, entry: TimeEntry, changed: set[str]) -> None:
        repo = self.repository
        if "client_id" in changed and repo.clients.get(entry.client_id) is None:
            raise NotFoundError("Client", entry.client_id)
        if "consultant_id" in changed and repo.consultants.get(entry.consultant_id) is None:
            raise NotFoundError("Consultant", entry.consultant_id)

        if changed & {"service_id", "client_id"}:
            service = self._service(entry.service_id)
            if service.client_id != entry.client_id:
                raise ValidationError("Service does not belong to the selected client")

        if entry.sector_id is not None and changed & {"sector_id", "client_id"}:
            sector = repo.sectors.get(entry.sector_id)
            if sector is None:
                raise NotFoundError("Sector", entry.sector_id)
            if sector.client_id is not None and sector.client_id != entry.client_id:
                raise ValidationError("Sector does not belong to the selected client")

        if entry.service_type_id is not None and "service_type_id" in changed:
            if repo.service_types.get(entry.service_type_id) is None:
                raise NotFoundError("Service type", entry.service_type_id)

        if entry.project_id is not None and changed & {"project_id", "client_id"}:
            project = repo.projects.get(entry.project_id)
            if project is None:
                raise NotFoundError("Project", entry.project_id)
            if project.client_id != entry.client_id:
                raise ValidationError("Project does not belong to the selected client")

    def totals_for(self, entry: TimeEntry) -> EntryTotals:
        service = self._service(entry.service_id)
        return compute_totals(
            entry.start_time,
            entry.end_time,
            entry.break_start,
            entry.break_end,
            service.hourly_rate,
        )

    def create_entry(self, draft: Mapping[str, Any]) -> TimeEntry:
        values = _clean(draft)
        missing = [name for name in REQUIRED_FIELDS if values.get(name) is None]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        entry = TimeEntry(total_hours=None, total_value=None, **values)
        self._check_references(entry, set(ENTRY_FIELDS))
        totals = self.totals_for(entry)
        stored = self.repository.time_entries.add(
            replace(entry, total_hours=totals.hours, total_value=totals.value)
        )
        logger.info(
            "time_entry_created",
            entry_id=stored.id,
            client_id=stored.client_id,
            hours=str(stored.total_hours),
            value=str(stored.total_value),
        )
        return stored

    def update_entry(self, entry_id: int, changes: Mapping[str, Any]) -> Optional[TimeEntry]:
        current = self.repository.time_entries.get(entry_id)
        if current is None:
            return None

        values = _clean(changes)
        merged = replace(current, **values)
        self._check_references(merged, set(values))

        if set(values) & (set(TIME_FIELDS) | {"service_id"}):
            totals = self.totals_for(merged)
            values["total_hours"] = totals.hours
            values["total_value"] = totals.value

        updated = self.repository.time_entries.update(entry_id, **values)
        logger.info("time_entry_updated", entry_id=entry_id, fields=sorted(values))
        return updated

    def delete_entry(self, entry_id: int) -> bool:
        return self.repository.time_entries.delete(entry_id)

    def recalculate_all(self) -> RecalculationResult:
        """Recompute derived totals for every entry against current service rates.

        A failing entry is recorded and skipped; the remaining entries are still
        processed.
        """
        result = RecalculationResult()
        for entry in self.repository.time_entries.list():
            try:
                totals = self.totals_for(entry)
            except TimebillError as exc:
                logger.warning("recalculation_failed", entry_id=entry.id, error=str(exc))
                result.failed[entry.id] = str(exc)
                continue

            if totals.hours == entry.total_hours and totals.value == entry.total_value:
                result.unchanged.append(entry.id)
                continue
            self.repository.time_entries.update(
                entry.id, total_hours=totals.hours, total_value=totals.value
            )
            result.updated.append(entry.id)

        logger.info(
            "recalculation_complete",
            updated=len(result.updated),
            unchanged=len(result.unchanged),
            failed=len(result.failed),
        )
        return result

    def authenticate(self, code: str, password: str) -> Optional[Consultant]:
        consultant = self.repository.consultants.get_by_code(code.strip())
        if consultant is None:
            return None
        if not compare_digest(consultant.password_hash, hash_password(password)):
            return None
        return consultant
