from datetime import date
from decimal import Decimal

import pytest

from timebill.errors import ConflictError, NotFoundError, ValidationError
from timebill.models import Client, Consultant, Project, Sector, Service, ServiceType
from timebill.repository import InMemoryRepository
from timebill.timesheet import TimesheetService, hash_password


@pytest.fixture
def repo():
    repository = InMemoryRepository()
    repository.clients.add(Client(code="CLI001", name="SkyStone", tax_id="12.345", email="a@sky.com"))
    repository.clients.add(Client(code="CLI002", name="TechCorp", tax_id="98.765", email="b@tech.com"))
    repository.consultants.add(Consultant(code="LEON", name="Leon", password_hash=hash_password("secret")))
    repository.services.add(Service(code="DEV", client_id=1, description="Development", hourly_rate=Decimal("142")))
    repository.services.add(Service(code="SUP", client_id=2, description="Support", hourly_rate=Decimal("120")))
    repository.sectors.add(Sector(code="TI", description="IT", client_id=1))
    repository.sectors.add(Sector(code="FIN", description="Finance", client_id=2))
    repository.service_types.add(ServiceType(code="CONS", description="Consulting"))
    repository.projects.add(Project(code="ERP", client_id=1, name="ERP rollout"))
    return repository


def draft(**overrides):
    values = {
        "date": date(2024, 12, 1),
        "consultant_id": 1,
        "client_id": 1,
        "service_id": 1,
        "start_time": "08:00",
        "end_time": "17:00",
        "break_start": "12:00",
        "break_end": "13:00",
    }
    values.update(overrides)
    return values


def test_create_entry_derives_totals(repo):
    entry = TimesheetService(repo).create_entry(draft())

    assert entry.id == 1
    assert entry.total_hours == Decimal("8.00")
    assert entry.total_value == Decimal("1136.00")
    assert repo.time_entries.get(1) == entry


def test_client_supplied_totals_are_ignored(repo):
    entry = TimesheetService(repo).create_entry(draft(total_hours=Decimal("99"), total_value=Decimal("1")))

    assert entry.total_hours == Decimal("8.00")
    assert entry.total_value == Decimal("1136.00")


def test_empty_break_strings_mean_no_break(repo):
    entry = TimesheetService(repo).create_entry(draft(start_time="08:30", end_time="16:30", break_start="", break_end=""))

    assert entry.break_start is None
    assert entry.total_hours == Decimal("8.00")


def test_missing_required_fields_are_reported(repo):
    with pytest.raises(ValidationError, match="service_id, start_time"):
        TimesheetService(repo).create_entry(draft(service_id=None, start_time=None))


def test_unknown_service_is_not_found(repo):
    with pytest.raises(NotFoundError) as excinfo:
        TimesheetService(repo).create_entry(draft(service_id=42))

    assert excinfo.value.entity == "Service"
    assert repo.time_entries.list() == []


def test_service_of_another_client_is_rejected(repo):
    with pytest.raises(ValidationError, match="Service does not belong"):
        TimesheetService(repo).create_entry(draft(service_id=2))


def test_sector_and_project_must_match_client(repo):
    service = TimesheetService(repo)

    with pytest.raises(ValidationError, match="Sector"):
        service.create_entry(draft(sector_id=2))
    with pytest.raises(NotFoundError):
        service.create_entry(draft(project_id=9))

    entry = service.create_entry(draft(sector_id=1, project_id=1, service_type_id=1))
    assert entry.project_id == 1


def test_invalid_times_never_reach_the_store(repo):
    with pytest.raises(ValidationError):
        TimesheetService(repo).create_entry(draft(start_time="18:00"))

    assert repo.time_entries.list() == []


def test_update_recomputes_when_times_change(repo):
    service = TimesheetService(repo)
    entry = service.create_entry(draft())

    updated = service.update_entry(entry.id, {"end_time": "18:00"})

    assert updated.total_hours == Decimal("9.00")
    assert updated.total_value == Decimal("1278.00")


def test_update_can_clear_the_break(repo):
    service = TimesheetService(repo)
    entry = service.create_entry(draft())

    updated = service.update_entry(entry.id, {"break_start": None, "break_end": None})

    assert updated.break_start is None
    assert updated.total_hours == Decimal("9.00")


def test_update_without_time_changes_keeps_totals(repo):
    service = TimesheetService(repo)
    entry = service.create_entry(draft())
    repo.services.update(1, hourly_rate=Decimal("200"))

    updated = service.update_entry(entry.id, {"description": "Sprint review", "completed": True})

    assert updated.description == "Sprint review"
    assert updated.total_value == Decimal("1136.00")


def test_update_unknown_entry_returns_none(repo):
    assert TimesheetService(repo).update_entry(77, {"end_time": "18:00"}) is None


def test_failed_update_leaves_entry_untouched(repo):
    service = TimesheetService(repo)
    entry = service.create_entry(draft())

    with pytest.raises(ValidationError):
        service.update_entry(entry.id, {"end_time": "07:00"})

    assert repo.time_entries.get(entry.id) == entry


def test_recalculate_all_applies_new_rates_and_reports_failures(repo):
    service = TimesheetService(repo)
    first = service.create_entry(draft())
    second = service.create_entry(draft(date=date(2024, 12, 2)))
    repo.services.update(1, hourly_rate=Decimal("150"))
    # simulate an entry whose service was removed afterwards
    repo.time_entries.update(second.id, service_id=99)
    third = service.create_entry(draft(date=date(2024, 12, 3), client_id=2, service_id=2))

    result = service.recalculate_all()

    assert result.updated == [first.id]
    assert result.unchanged == [third.id]
    assert result.failed == {second.id: "Service not found"}
    assert repo.time_entries.get(first.id).total_value == Decimal("1200.00")


def test_delete_entry(repo):
    service = TimesheetService(repo)
    entry = service.create_entry(draft())

    assert service.delete_entry(entry.id) is True
    assert service.delete_entry(entry.id) is False


def test_authenticate_checks_code_and_password(repo):
    service = TimesheetService(repo)

    assert service.authenticate(" LEON ", "secret").name == "Leon"
    assert service.authenticate("LEON", "wrong") is None
    assert service.authenticate("NOBODY", "secret") is None


def test_duplicate_codes_conflict(repo):
    with pytest.raises(ConflictError):
        repo.clients.add(Client(code="CLI001", name="Other", tax_id="000", email="x@y.com"))
    with pytest.raises(ConflictError):
        repo.clients.update(2, tax_id="12.345")
