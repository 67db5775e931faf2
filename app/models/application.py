# app/models/application.py

from sqlalchemy import Column, String, Boolean, DateTime, Enum, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime
import uuid

from app.database import Base

class Application(Base):
    __tablename__ = "applications"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    trainee_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    program_id = Column(String, ForeignKey("programs.id"), nullable=False, index=True)

    status = Column(
        Enum("pending", "approved", "rejected", name="application_status", create_constraint=True),
        nullable=False,
        default="pending",
    )
    application_fee_paid = Column(Boolean, nullable=False, default=False)
    registration_fee_paid = Column(Boolean, nullable=False, default=False)
    submitted = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(DateTime, nullable=True)

    # Assigned once, on the first successful registration fee settlement
    registration_number = Column(String(50), unique=True, nullable=True)
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    trainee = relationship("Profile")
    program = relationship("Program")

    def __repr__(self):
        return f"<Application {self.id}: {self.status}>"
