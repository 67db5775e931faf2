# app/services/onboarding_service.py
"""
Derives a trainee's onboarding stage from their profile and latest application.

`resolve_onboarding_status` is pure: it performs no I/O and never raises.
Missing data maps to the earliest stage. `get_onboarding_status` is the
loader that fetches the snapshots from the database.
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session, joinedload

from app.models.application import Application
from app.models.profile import Profile
from app.schemas.onboarding import (
    ApplicationSnapshot,
    ApplicationStatus,
    ApplicationSummary,
    OnboardingStatus,
    OnboardingStep,
    ProfileSnapshot,
    ProfileSummary,
)

logger = logging.getLogger(__name__)

REQUIRED_PROFILE_FIELDS = ("full_name", "phone", "avatar_url", "date_of_birth", "gender", "address")


def is_profile_complete(profile: Optional[ProfileSnapshot]) -> bool:
    if profile is None:
        return False
    if not all(getattr(profile, field) for field in REQUIRED_PROFILE_FIELDS):
        return False
    return bool(profile.onboarding_completed)


def _determine_step(profile: ProfileSnapshot, application: Optional[ApplicationSnapshot]) -> OnboardingStep:
    # Rule order matters: the first match wins.
    if application is None or not application.application_fee_paid:
        return OnboardingStep.SELECT_PROGRAM
    if not is_profile_complete(profile):
        return OnboardingStep.COMPLETE_PROFILE
    if not application.submitted:
        return OnboardingStep.FILL_APPLICATION
    if application.status == ApplicationStatus.PENDING:
        return OnboardingStep.PENDING_APPROVAL
    if application.status == ApplicationStatus.REJECTED:
        return OnboardingStep.REJECTED
    if application.status == ApplicationStatus.APPROVED and not application.registration_fee_paid:
        return OnboardingStep.PAY_REGISTRATION_FEE
    if application.status == ApplicationStatus.APPROVED and application.registration_fee_paid:
        return OnboardingStep.FULLY_ENROLLED

    logger.warning(f"⚠️ Unresolvable onboarding state for application {application.id}: {application.status}")
    return OnboardingStep.SELECT_PROGRAM


def resolve_onboarding_status(
    profile: Optional[ProfileSnapshot],
    application: Optional[ApplicationSnapshot],
) -> OnboardingStatus:
    """
    Compute the onboarding stage and access flags for one trainee.

    With no profile (unauthenticated or not yet loaded) the trainee is sent to
    `complete_profile` with every flag false.
    """
    if profile is None:
        return OnboardingStatus(current_step=OnboardingStep.COMPLETE_PROFILE)

    step = _determine_step(profile, application)
    fully_enrolled = step == OnboardingStep.FULLY_ENROLLED

    if application is not None:
        application_summary = ApplicationSummary(
            exists=True,
            status=application.status,
            application_fee_paid=application.application_fee_paid,
            registration_fee_paid=application.registration_fee_paid,
            submitted=application.submitted,
            application_id=application.id,
            program_id=application.program_id,
            program_title=application.program_title,
            registration_fee=application.registration_fee,
            registration_number=application.registration_number,
        )
    else:
        application_summary = ApplicationSummary()

    return OnboardingStatus(
        current_step=step,
        profile=ProfileSummary(
            is_complete=is_profile_complete(profile),
            has_photo=bool(profile.avatar_url),
        ),
        application=application_summary,
        can_access_dashboard=fully_enrolled,
        can_access_id_card=fully_enrolled and application is not None and application.registration_number is not None,
    )


def get_latest_application(db: Session, trainee_id: str) -> Optional[Application]:
    return (
        db.query(Application)
        .options(joinedload(Application.program))
        .filter(Application.trainee_id == trainee_id)
        .order_by(Application.created_at.desc())
        .first()
    )


def get_onboarding_status(db: Session, trainee_id: Optional[str]) -> OnboardingStatus:
    """Load the trainee's profile and latest application, then resolve."""
    profile_row = db.query(Profile).filter(Profile.id == trainee_id).first() if trainee_id else None
    if profile_row is None:
        return resolve_onboarding_status(None, None)

    application_row = get_latest_application(db, trainee_id)
    application = None
    if application_row is not None:
        application = ApplicationSnapshot.model_validate(application_row)
        if application_row.program is not None:
            application.program_title = application_row.program.title
            application.registration_fee = application_row.program.registration_fee

    return resolve_onboarding_status(ProfileSnapshot.model_validate(profile_row), application)
