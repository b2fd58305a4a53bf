from datetime import date
from decimal import Decimal

from app.core.logging import get_logger
from timebill.models import Client, Consultant, Sector, Service, ServiceType
from timebill.repository import Repository
from timebill.timesheet import TimesheetService, hash_password

logger = get_logger(__name__)

DEMO_PASSWORD = "demo1234"


def seed(repository: Repository) -> bool:
    """Load demo master data and three sample entries into an empty store.

    Returns False without writing anything when clients already exist.
    """
    if repository.clients.list():
        logger.info("seed_skipped", reason="clients already present")
        return False

    sky = repository.clients.add(
        Client(code="CLI001", name="SkyStone Brasil", tax_id="12.345.678/0001-90", email="contato@skystone.com.br")
    )
    tech = repository.clients.add(
        Client(code="CLI002", name="TechCorp", tax_id="98.765.432/0001-10", email="contato@techcorp.com")
    )
    repository.clients.add(
        Client(code="CLI003", name="InnovaSoft", tax_id="11.222.333/0001-44", email="contato@innovasoft.com")
    )

    repository.consultants.add(
        Consultant(code="CON001", name="João Silva", password_hash=hash_password(DEMO_PASSWORD))
    )
    leon = repository.consultants.add(
        Consultant(code="LEON", name="Leon T. Firme", password_hash=hash_password(DEMO_PASSWORD))
    )

    erp = repository.services.add(
        Service(code="DEV001", client_id=sky.id, description="ERP development", hourly_rate=Decimal("142.00"))
    )
    process = repository.services.add(
        Service(code="CONS001", client_id=sky.id, description="Process consulting", hourly_rate=Decimal("142.00"))
    )
    repository.services.add(
        Service(code="SUP001", client_id=tech.id, description="Technical support", hourly_rate=Decimal("120.00"))
    )

    it = repository.sectors.add(Sector(code="TI", description="Information technology", client_id=sky.id))
    finance = repository.sectors.add(Sector(code="FIN", description="Finance", client_id=sky.id))
    repository.sectors.add(Sector(code="ADM", description="Administration"))

    consulting = repository.service_types.add(ServiceType(code="CONS", description="Consulting"))
    implementation = repository.service_types.add(ServiceType(code="IMPL", description="Implementation"))
    support = repository.service_types.add(ServiceType(code="SUPT", description="Technical support"))
    repository.service_types.add(ServiceType(code="TREI", description="Training"))

    timesheet = TimesheetService(repository)
    base = {"consultant_id": leon.id, "client_id": sky.id}
    timesheet.create_entry(
        dict(
            base,
            date=date(2024, 12, 1),
            service_id=erp.id,
            sector_id=it.id,
            service_type_id=consulting.id,
            start_time="08:00",
            end_time="17:00",
            break_start="12:00",
            break_end="13:00",
            description="ERP feature development",
            completed=True,
        )
    )
    timesheet.create_entry(
        dict(
            base,
            date=date(2024, 12, 2),
            service_id=process.id,
            sector_id=finance.id,
            service_type_id=implementation.id,
            start_time="09:00",
            end_time="18:00",
            break_start="12:30",
            break_end="13:30",
            description="Billing process review",
            completed=True,
        )
    )
    timesheet.create_entry(
        dict(
            base,
            date=date(2024, 12, 3),
            service_id=erp.id,
            service_type_id=support.id,
            start_time="08:30",
            end_time="16:30",
            description="Preventive maintenance",
        )
    )
    logger.info("seed_complete", clients=3, entries=3)
    return True
