from sqlalchemy import Column, Integer, String

from app.db.session import Base


class ConsultantRow(Base):
    __tablename__ = "consultants"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    password_hash = Column(String(255), nullable=False)
