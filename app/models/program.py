# app/models/program.py

from sqlalchemy import Column, String, Integer, Float, DateTime, Text
from sqlalchemy.sql import func
import uuid

from app.database import Base

class Program(Base):
    __tablename__ = "programs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="published")  # draft, published, archived

    application_fee = Column(Float, nullable=False, default=0)  # in Naira
    registration_fee = Column(Float, nullable=False, default=0)  # in Naira

    # Only ever changed through an atomic SQL increment on first registration settlement
    enrolled_count = Column(Integer, nullable=False, default=0)
    max_capacity = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Program {self.title}: {self.enrolled_count} enrolled>"
