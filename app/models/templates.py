# app/models/templates.py
"""
Admin-editable configuration rows consumed by the settlement pipeline:
email templates, the receipt template singleton and the site config singleton.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Text
from sqlalchemy.sql import func
from app.database import Base
import uuid

class EmailTemplate(Base):
    __tablename__ = "email_templates"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    template_key = Column(String(100), nullable=False, unique=True, index=True)
    template_name = Column(String(200), nullable=False)
    subject_template = Column(String(500), nullable=False)
    html_template = Column(Text, nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ReceiptTemplate(Base):
    __tablename__ = "receipt_template"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    organization_name = Column(String(200), nullable=False, default="Training Center")
    send_email_on_verification = Column(Boolean, nullable=False, default=False)
    email_subject_template = Column(String(500), nullable=False, default="Payment Receipt - {{payment_type}}")
    email_body_template = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SiteConfig(Base):
    __tablename__ = "site_config"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    site_name = Column(String(200), nullable=False, default="Training Center")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
