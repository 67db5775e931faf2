import hashlib
import hmac
import json
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.payment import SettlementStatus
from app.services.payment_service import get_settlement_pipeline
from app.services.settlement_service import SettlementPipeline

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


def paystack_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()


def _parse_body(body: bytes) -> dict:
    try:
        event = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")
    return event


def _raise_for_result(status: SettlementStatus, message: str):
    # Non-2xx makes the provider retry the delivery later
    if status == SettlementStatus.INTERNAL_ERROR:
        raise HTTPException(status_code=500, detail=message)
    if status in (SettlementStatus.VERIFICATION_FAILED, SettlementStatus.INVALID_REQUEST):
        raise HTTPException(status_code=400, detail=message)


@router.post("/paystack")
async def paystack_webhook(
    request: Request,
    pipeline: SettlementPipeline = Depends(get_settlement_pipeline),
    db: Session = Depends(get_db)
):
    secret = pipeline.config.paystack_secret_key
    if not secret:
        logger.error("PAYSTACK_SECRET_KEY not configured; rejecting webhook")
        raise HTTPException(status_code=500, detail="Server configuration error")

    body = await request.body()
    signature = request.headers.get("x-paystack-signature")
    if not signature or not hmac.compare_digest(signature, paystack_signature(secret, body)):
        logger.warning("Invalid Paystack signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    event = _parse_body(body)
    logger.info(f"Paystack webhook event: {event.get('event')}")

    if event.get("event") == "charge.success":
        data = event.get("data") or {}
        metadata = data.get("metadata") or {}
        result = await pipeline.settle(
            db,
            reference=data.get("reference"),
            provider="paystack",
            payment_id=metadata.get("payment_id"),
        )
        _raise_for_result(result.status, result.message)

    return {"received": True}


@router.post("/flutterwave")
async def flutterwave_webhook(
    request: Request,
    pipeline: SettlementPipeline = Depends(get_settlement_pipeline),
    db: Session = Depends(get_db)
):
    expected_hash = pipeline.config.flutterwave_webhook_hash
    if not expected_hash:
        logger.error("FLUTTERWAVE_WEBHOOK_HASH not configured; rejecting webhook")
        raise HTTPException(status_code=500, detail="Server configuration error")

    secret_hash = request.headers.get("verif-hash")
    if not secret_hash or not hmac.compare_digest(secret_hash, expected_hash):
        logger.warning("Invalid Flutterwave verif-hash")
        raise HTTPException(status_code=401, detail="Invalid signature")

    event = _parse_body(await request.body())
    logger.info(f"Flutterwave webhook event: {event.get('event')}")

    data = event.get("data") or {}
    if event.get("event") == "charge.completed" and data.get("status") == "successful":
        meta = data.get("meta") or {}
        result = await pipeline.settle(
            db,
            reference=data.get("tx_ref"),
            provider="flutterwave",
            payment_id=meta.get("payment_id"),
        )
        _raise_for_result(result.status, result.message)

    return {"received": True}
