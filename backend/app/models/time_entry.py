from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, Text

from app.db.session import Base


class TimeEntryRow(Base):
    __tablename__ = "time_entries"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    consultant_id = Column(Integer, ForeignKey("consultants.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    sector_id = Column(Integer, ForeignKey("sectors.id"), nullable=True)
    service_type_id = Column(Integer, ForeignKey("service_types.id"), nullable=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    break_start = Column(String(5), nullable=True)
    break_end = Column(String(5), nullable=True)
    description = Column(Text, nullable=False, default="")
    # Derived from the time fields and the service rate; written together with them
    total_hours = Column(Numeric(5, 2), nullable=False)
    total_value = Column(Numeric(10, 2), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    delivery_forecast = Column(Date, nullable=True)
    actual_delivery = Column(Date, nullable=True)
    location = Column(String(20), nullable=True)  # on_site|remote
