from sqlalchemy import Column, Integer, String, Date, Boolean
from synergy_ems.database import Base

class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    date = Column(Date, unique=True, index=True, nullable=False)
    is_optional = Column(Boolean, nullable=False, default=False) # Optional holidays still count as working days
    description = Column(String, nullable=True)
