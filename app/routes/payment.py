from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from app.auth.dependencies import get_current_trainee, get_current_user
from app.database import get_db
from app.models.profile import Profile
from app.schemas.payment import PaymentInitialize, PaymentInitializeResponse, PaymentVerify, SettlementStatus
from app.services.payment_service import get_settlement_pipeline, initialize_payment
from app.services.settlement_service import SettlementPipeline

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["Payment"])


@router.post("/initialize", response_model=PaymentInitializeResponse)
async def initialize(
    data: PaymentInitialize,
    current_user: Profile = Depends(get_current_trainee),
    pipeline: SettlementPipeline = Depends(get_settlement_pipeline),
    db: Session = Depends(get_db)
):
    logger.info(f"Payment request received from {current_user.email}: {data.provider.value} {data.payment_type.value}")
    return await initialize_payment(db, current_user, data, pipeline.providers)


@router.post("/verify")
async def verify(
    data: PaymentVerify,
    current_user: Profile = Depends(get_current_user),
    pipeline: SettlementPipeline = Depends(get_settlement_pipeline),
    db: Session = Depends(get_db)
):
    payment = pipeline.find_payment(db, data.reference, data.payment_id)
    if payment is not None and current_user.role == "trainee" and payment.trainee_id != current_user.id:
        logger.warning(f"{current_user.email} tried to verify payment {payment.id} of another trainee")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")

    result = await pipeline.settle(db, reference=data.reference, provider=data.provider, payment_id=data.payment_id)

    if result.status == SettlementStatus.INVALID_REQUEST:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    if result.status == SettlementStatus.VERIFICATION_FAILED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    if result.status == SettlementStatus.INTERNAL_ERROR:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.message)

    return {
        "success": True,
        "status": "completed",
        "settlement_status": result.status.value,
        "already_processed": result.already_processed,
        "message": result.message,
        "payment_id": result.payment_id,
        "payment_type": result.payment_type.value if result.payment_type else None,
        "receipt_number": result.receipt_number,
        "registration_number": result.registration_number,
    }
