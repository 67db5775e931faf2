from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import get_optional_user
from app.database import get_db
from app.models.profile import Profile
from app.schemas.onboarding import OnboardingStatus
from app.services.onboarding_service import get_onboarding_status

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


@router.get("/status", response_model=OnboardingStatus)
def onboarding_status(
    current_user: Optional[Profile] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Current onboarding stage for the signed-in trainee (complete_profile when anonymous)."""
    return get_onboarding_status(db, current_user.id if current_user else None)
