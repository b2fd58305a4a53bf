from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_session
from app.repositories.sql import SqlRepository
from timebill.timesheet import TimesheetService


def get_repository(db: Session = Depends(get_session)) -> SqlRepository:
    return SqlRepository(db)


def get_timesheet(repository: SqlRepository = Depends(get_repository)) -> TimesheetService:
    return TimesheetService(repository)
