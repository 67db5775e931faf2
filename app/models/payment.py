# app/models/payment.py
from sqlalchemy import Column, String, Float, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from app.database import Base
import uuid

class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    application_id = Column(String, ForeignKey("applications.id"), nullable=False, index=True)
    trainee_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)  # in Naira (what user paid)
    payment_type = Column(String(30), nullable=False)  # application_fee, registration_fee
    provider = Column(String(20), nullable=False)  # paystack, flutterwave
    status = Column(String(20), nullable=False, default="pending")  # pending, completed, failed, refunded
    provider_reference = Column(String, index=True, nullable=True)

    # Raw provider payload stored on settlement
    payment_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Payment {self.provider_reference or self.id}: {self.payment_type} - ₦{self.amount:,}>"

