# app/schemas/onboarding.py
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date
from enum import Enum

class OnboardingStep(str, Enum):
    SELECT_PROGRAM = "select_program"
    COMPLETE_PROFILE = "complete_profile"
    FILL_APPLICATION = "fill_application"
    PENDING_APPROVAL = "pending_approval"
    PAY_REGISTRATION_FEE = "pay_registration_fee"
    FULLY_ENROLLED = "fully_enrolled"
    REJECTED = "rejected"

class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProfileSnapshot(BaseModel):
    id: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    onboarding_completed: Optional[bool] = None

    class Config:
        from_attributes = True


class ApplicationSnapshot(BaseModel):
    id: Optional[str] = None
    program_id: Optional[str] = None
    program_title: Optional[str] = None
    registration_fee: Optional[float] = None
    status: Optional[ApplicationStatus] = ApplicationStatus.PENDING
    application_fee_paid: bool = False
    registration_fee_paid: bool = False
    submitted: bool = False
    registration_number: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator("status", mode="before")
    @classmethod
    def unknown_status_is_none(cls, value):
        # Rows written outside the enum resolve to the fallback stage instead of failing
        if value is None or isinstance(value, ApplicationStatus):
            return value
        try:
            return ApplicationStatus(value)
        except ValueError:
            return None


class ProfileSummary(BaseModel):
    is_complete: bool = False
    has_photo: bool = False


class ApplicationSummary(BaseModel):
    exists: bool = False
    status: Optional[ApplicationStatus] = None
    application_fee_paid: bool = False
    registration_fee_paid: bool = False
    submitted: bool = False
    application_id: Optional[str] = None
    program_id: Optional[str] = None
    program_title: Optional[str] = None
    registration_fee: Optional[float] = None
    registration_number: Optional[str] = None


class OnboardingStatus(BaseModel):
    current_step: OnboardingStep
    profile: ProfileSummary = ProfileSummary()
    application: ApplicationSummary = ApplicationSummary()
    can_access_dashboard: bool = False
    can_access_id_card: bool = False
