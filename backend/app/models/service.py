from sqlalchemy import Column, ForeignKey, Integer, Numeric, String

from app.db.session import Base


class ServiceRow(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
