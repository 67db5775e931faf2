import itertools
from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from app.models import Application
from app.schemas.onboarding import (
    ApplicationSnapshot,
    ApplicationStatus,
    OnboardingStep,
    ProfileSnapshot,
)
from app.services.onboarding_service import (
    get_onboarding_status,
    is_profile_complete,
    resolve_onboarding_status,
)
from tests.conftest import auth_headers, make_application, make_profile, make_program


def complete_profile(**overrides):
    values = dict(
        id="p1",
        full_name="Ada Trainee",
        phone="+2348012345678",
        avatar_url="https://cdn.example.com/ada.jpg",
        date_of_birth=date(1998, 4, 2),
        gender="female",
        address="12 Marina Road, Lagos",
        onboarding_completed=True,
    )
    values.update(overrides)
    return ProfileSnapshot(**values)


def application(**overrides):
    values = dict(id="a1", program_id="prog1", program_title="Web Development", registration_fee=50000)
    values.update(overrides)
    return ApplicationSnapshot(**values)


# --- examples ---

def test_unauthenticated_goes_to_complete_profile():
    status = resolve_onboarding_status(None, None)
    assert status.current_step == OnboardingStep.COMPLETE_PROFILE
    assert status.can_access_dashboard is False
    assert status.can_access_id_card is False
    assert status.profile.is_complete is False
    assert status.application.exists is False


def test_no_application_selects_program():
    status = resolve_onboarding_status(complete_profile(), None)
    assert status.current_step == OnboardingStep.SELECT_PROGRAM
    assert status.profile.is_complete is True
    assert status.profile.has_photo is True
    assert status.application.exists is False


def test_unpaid_application_fee_selects_program():
    status = resolve_onboarding_status(complete_profile(), application(application_fee_paid=False))
    assert status.current_step == OnboardingStep.SELECT_PROGRAM


def test_paid_fee_with_missing_photo_completes_profile():
    status = resolve_onboarding_status(
        complete_profile(avatar_url=None),
        application(application_fee_paid=True),
    )
    assert status.current_step == OnboardingStep.COMPLETE_PROFILE
    assert status.profile.has_photo is False


def test_profile_needs_explicit_completion_flag():
    assert is_profile_complete(complete_profile()) is True
    assert is_profile_complete(complete_profile(onboarding_completed=False)) is False
    assert is_profile_complete(complete_profile(onboarding_completed=None)) is False
    assert is_profile_complete(complete_profile(address="")) is False
    assert is_profile_complete(None) is False


def test_unsubmitted_application_fills_form():
    status = resolve_onboarding_status(complete_profile(), application(application_fee_paid=True, submitted=False))
    assert status.current_step == OnboardingStep.FILL_APPLICATION


def test_submitted_pending_awaits_approval():
    status = resolve_onboarding_status(
        complete_profile(),
        application(application_fee_paid=True, submitted=True, status=ApplicationStatus.PENDING),
    )
    assert status.current_step == OnboardingStep.PENDING_APPROVAL


def test_rejected_application():
    status = resolve_onboarding_status(
        complete_profile(),
        application(application_fee_paid=True, submitted=True, status=ApplicationStatus.REJECTED),
    )
    assert status.current_step == OnboardingStep.REJECTED
    assert status.can_access_dashboard is False


def test_approved_unpaid_registration():
    status = resolve_onboarding_status(
        complete_profile(),
        application(application_fee_paid=True, submitted=True, status=ApplicationStatus.APPROVED),
    )
    assert status.current_step == OnboardingStep.PAY_REGISTRATION_FEE
    assert status.application.registration_fee == 50000
    assert status.application.program_title == "Web Development"


def test_fully_enrolled_with_registration_number():
    status = resolve_onboarding_status(
        complete_profile(),
        application(
            application_fee_paid=True,
            submitted=True,
            status=ApplicationStatus.APPROVED,
            registration_fee_paid=True,
            registration_number="WD/2026/000123",
        ),
    )
    assert status.current_step == OnboardingStep.FULLY_ENROLLED
    assert status.can_access_dashboard is True
    assert status.can_access_id_card is True
    assert status.application.registration_number == "WD/2026/000123"


def test_enrolled_without_number_cannot_open_id_card():
    status = resolve_onboarding_status(
        complete_profile(),
        application(application_fee_paid=True, submitted=True, status=ApplicationStatus.APPROVED, registration_fee_paid=True),
    )
    assert status.current_step == OnboardingStep.FULLY_ENROLLED
    assert status.can_access_dashboard is True
    assert status.can_access_id_card is False


def test_incomplete_profile_wins_over_enrollment():
    status = resolve_onboarding_status(
        complete_profile(phone=None),
        application(
            application_fee_paid=True,
            submitted=True,
            status=ApplicationStatus.APPROVED,
            registration_fee_paid=True,
            registration_number="WD/2026/000123",
        ),
    )
    assert status.current_step == OnboardingStep.COMPLETE_PROFILE
    assert status.can_access_dashboard is False
    assert status.can_access_id_card is False


# --- properties over every snapshot combination ---

def all_snapshots():
    profiles = [complete_profile(), complete_profile(onboarding_completed=False), complete_profile(avatar_url=None)]
    applications = [None]
    for fee_paid, submitted, reg_paid, status, number in itertools.product(
        (False, True), (False, True), (False, True), list(ApplicationStatus), (None, "WD/2026/000001")
    ):
        applications.append(application(
            application_fee_paid=fee_paid,
            submitted=submitted,
            registration_fee_paid=reg_paid,
            status=status,
            registration_number=number,
        ))
    return itertools.product(profiles, applications)


def test_access_flags_follow_the_step():
    for profile, app_snapshot in all_snapshots():
        status = resolve_onboarding_status(profile, app_snapshot)
        assert status.can_access_dashboard == (status.current_step == OnboardingStep.FULLY_ENROLLED)
        if status.can_access_id_card:
            assert status.can_access_dashboard
            assert app_snapshot.registration_number is not None


def test_paid_complete_profile_never_falls_back_to_select_program():
    for profile, app_snapshot in all_snapshots():
        if app_snapshot is None or not app_snapshot.application_fee_paid or not is_profile_complete(profile):
            continue
        status = resolve_onboarding_status(profile, app_snapshot)
        assert status.current_step != OnboardingStep.SELECT_PROGRAM


def test_resolver_is_deterministic():
    for profile, app_snapshot in all_snapshots():
        assert resolve_onboarding_status(profile, app_snapshot) == resolve_onboarding_status(profile, app_snapshot)


def test_stage_never_moves_backwards_along_the_happy_path():
    order = [
        OnboardingStep.SELECT_PROGRAM,
        OnboardingStep.COMPLETE_PROFILE,
        OnboardingStep.FILL_APPLICATION,
        OnboardingStep.PENDING_APPROVAL,
        OnboardingStep.PAY_REGISTRATION_FEE,
        OnboardingStep.FULLY_ENROLLED,
    ]
    incomplete = complete_profile(onboarding_completed=False)
    complete = complete_profile()
    journey = [
        (incomplete, None),
        (incomplete, application(application_fee_paid=False)),
        (incomplete, application(application_fee_paid=True)),
        (complete, application(application_fee_paid=True)),
        (complete, application(application_fee_paid=True, submitted=True)),
        (complete, application(application_fee_paid=True, submitted=True, status=ApplicationStatus.APPROVED)),
        (complete, application(
            application_fee_paid=True, submitted=True, status=ApplicationStatus.APPROVED,
            registration_fee_paid=True, registration_number="WD/2026/000001",
        )),
    ]
    positions = [order.index(resolve_onboarding_status(p, a).current_step) for p, a in journey]
    assert positions == sorted(positions)
    assert positions[-1] == order.index(OnboardingStep.FULLY_ENROLLED)


# --- loader and route ---

def test_loader_uses_most_recent_application(db):
    trainee = make_profile(db)
    old_program = make_program(db, title="Data Science")
    new_program = make_program(db, title="Web Development")
    make_application(db, trainee, old_program, age_minutes=60, application_fee_paid=True, submitted=True, status="rejected")
    make_application(db, trainee, new_program, age_minutes=1)

    status = get_onboarding_status(db, trainee.id)

    assert status.current_step == OnboardingStep.SELECT_PROGRAM
    assert status.application.program_title == "Web Development"
    assert status.application.registration_fee == 50000


def test_loader_for_unknown_trainee(db):
    status = get_onboarding_status(db, "missing")
    assert status.current_step == OnboardingStep.COMPLETE_PROFILE


def test_status_route_anonymous(client):
    response = client.get("/onboarding/status")
    assert response.status_code == 200
    body = response.json()
    assert body["current_step"] == "complete_profile"
    assert body["can_access_dashboard"] is False


def test_status_route_for_trainee(client, db):
    trainee = make_profile(db)
    program = make_program(db)
    make_application(db, trainee, program, application_fee_paid=True, submitted=True, status="approved")

    response = client.get("/onboarding/status", headers=auth_headers(trainee))

    assert response.status_code == 200
    body = response.json()
    assert body["current_step"] == "pay_registration_fee"
    assert body["application"]["exists"] is True
    assert body["profile"]["is_complete"] is True


def test_status_route_rejects_bad_token(client):
    response = client.get("/onboarding/status", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_approved_and_paid_is_enrolled_whatever_the_rest():
    for profile, app_snapshot in all_snapshots():
        if app_snapshot is None or not is_profile_complete(profile):
            continue
        if not (app_snapshot.application_fee_paid and app_snapshot.submitted):
            continue
        if app_snapshot.status == ApplicationStatus.APPROVED and app_snapshot.registration_fee_paid:
            assert resolve_onboarding_status(profile, app_snapshot).current_step == OnboardingStep.FULLY_ENROLLED


# --- unexpected application status ---

def test_unknown_status_falls_back_to_select_program():
    row = SimpleNamespace(
        id="a9",
        program_id="prog1",
        program_title="Web Development",
        registration_fee=50000,
        status="under_review",
        application_fee_paid=True,
        registration_fee_paid=False,
        submitted=True,
        registration_number=None,
    )
    snapshot = ApplicationSnapshot.model_validate(row)
    assert snapshot.status is None

    status = resolve_onboarding_status(complete_profile(), snapshot)

    assert status.current_step == OnboardingStep.SELECT_PROGRAM
    assert status.can_access_dashboard is False


def test_known_status_strings_are_parsed():
    assert ApplicationSnapshot.model_validate({"status": "approved"}).status == ApplicationStatus.APPROVED
    assert ApplicationSnapshot().status == ApplicationStatus.PENDING


def test_database_rejects_unknown_application_status(db):
    trainee = make_profile(db)
    program = make_program(db)
    db.add(Application(trainee_id=trainee.id, program_id=program.id, status="under_review"))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    assert db.query(Application).count() == 0
