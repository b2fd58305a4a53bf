from sqlalchemy import Column, ForeignKey, Integer, String

from app.db.session import Base


class SectorRow(Base):
    __tablename__ = "sectors"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True)
    # Null for sectors shared by every client
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    description = Column(String(255), nullable=False)
