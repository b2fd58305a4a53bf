from .client import ClientRow
from .consultant import ConsultantRow
from .project import ProjectRow
from .sector import SectorRow
from .service import ServiceRow
from .service_type import ServiceTypeRow
from .time_entry import TimeEntryRow

__all__ = [
    "ClientRow",
    "ConsultantRow",
    "ServiceRow",
    "SectorRow",
    "ServiceTypeRow",
    "ProjectRow",
    "TimeEntryRow",
]
