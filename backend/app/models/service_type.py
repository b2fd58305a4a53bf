from sqlalchemy import Column, Integer, String

from app.db.session import Base


class ServiceTypeRow(Base):
    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True)
    description = Column(String(255), nullable=False)
