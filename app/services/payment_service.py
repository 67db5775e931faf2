import time
import logging
from typing import Dict
from sqlalchemy.orm import Session
from fastapi import HTTPException

from app.config import settings
from app.models.application import Application
from app.models.payment import Payment
from app.models.profile import Profile
from app.schemas.payment import PaymentInitialize, PaymentInitializeResponse, PaymentStatus
from app.services.email_service import EmailService
from app.services.payment_providers import PaymentProvider, ProviderConfigurationError
from app.services.settlement_service import SettlementConfig, SettlementPipeline

logger = logging.getLogger(__name__)


def get_settlement_pipeline() -> SettlementPipeline:
    """FastAPI dependency: pipeline wired from process settings."""
    return SettlementPipeline(
        config=SettlementConfig.from_settings(settings),
        mailer=EmailService.from_settings(settings),
    )


async def initialize_payment(
    db: Session,
    trainee: Profile,
    data: PaymentInitialize,
    providers: Dict[str, PaymentProvider],
) -> PaymentInitializeResponse:
    application = db.query(Application).filter(
        Application.id == data.application_id,
        Application.trainee_id == trainee.id,
    ).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")

    adapter = providers.get(data.provider.value)
    if adapter is None:
        raise HTTPException(status_code=400, detail="Invalid payment provider")

    payment = Payment(
        application_id=application.id,
        trainee_id=trainee.id,
        amount=data.amount,
        payment_type=data.payment_type.value,
        provider=data.provider.value,
        status=PaymentStatus.PENDING.value,
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(f"Payment record created: {payment.id}")

    reference = f"PAY-{payment.id}-{int(time.time() * 1000)}"
    try:
        result = await adapter.initialize({
            "email": trainee.email,
            "amount": data.amount,
            "reference": reference,
            "callback_url": data.callback_url,
            "metadata": {
                "payment_id": payment.id,
                "payment_type": data.payment_type.value,
                "application_id": application.id,
                "trainee_id": trainee.id,
                "trainee_email": trainee.email,
                "callback_url": data.callback_url,
            },
        })
    except ProviderConfigurationError as e:
        payment.status = PaymentStatus.FAILED.value
        db.commit()
        logger.error(f"❌ {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not result.success:
        payment.status = PaymentStatus.FAILED.value
        db.commit()
        raise HTTPException(status_code=502, detail=result.error or "Payment initialization failed")

    # Store the reference immediately so we can verify later
    payment.provider_reference = result.reference
    db.commit()
    logger.info(f"Stored provider reference: {result.reference} for payment: {payment.id}")

    return PaymentInitializeResponse(
        authorization_url=result.authorization_url or "",
        reference=result.reference,
        payment_id=payment.id,
    )
