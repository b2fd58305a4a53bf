from sqlalchemy import Column, Integer, String

from app.db.session import Base


class ClientRow(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    tax_id = Column(String(32), nullable=False, unique=True)  # company registration number
    email = Column(String(255), nullable=False)
