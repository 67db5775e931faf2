# app/models/profile.py

from sqlalchemy import Column, String, Boolean, Date, DateTime, Text
from sqlalchemy.sql import func
from datetime import datetime
import uuid

from app.database import Base

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default="trainee")  # trainee, instructor, admin, super_admin

    # Identity
    full_name = Column(String(150), nullable=False, default="")
    phone = Column(String(30), nullable=True)

    # Completeness-relevant fields
    avatar_url = Column(String(500), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)

    # Set explicitly by the profile form once the trainee confirms their details
    onboarding_completed = Column(Boolean, nullable=True, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Profile {self.email} ({self.role})>"
