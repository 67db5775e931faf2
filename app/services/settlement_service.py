# app/services/settlement_service.py
"""
Payment verification & settlement.

A settlement confirms a charge with its provider, then commits the payment,
application, program counter and receipt writes as one transaction. Notifications
and emails are dispatched only after that commit, and their failures are logged,
never raised.

Both the provider webhook and the client "verify" call run this pipeline for the
same transaction, so every write is guarded:
  * the payment moves to `completed` through a compare-and-set on its status,
  * the registration number is written only where it is still NULL,
  * the enrolled count is incremented in SQL, and only when that number was assigned here.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from app.models.application import Application
from app.models.payment import Payment
from app.models.profile import Profile
from app.models.program import Program
from app.models.receipt import Receipt
from app.models.templates import ReceiptTemplate, SiteConfig
from app.schemas.payment import PaymentStatus, PaymentType, SettlementResult, SettlementStatus
from app.services.email_service import render_default_template
from app.services.notification_service import NotificationService
from app.services.payment_providers import PaymentProvider, ProviderConfigurationError, build_providers
from app.utils.numbers import generate_receipt_number, generate_registration_number
from app.utils.template import render_placeholders

logger = logging.getLogger(__name__)


class SettlementConfig(BaseModel):
    paystack_secret_key: str = ""
    flutterwave_secret_key: str = ""
    flutterwave_webhook_hash: str = ""
    provider_timeout: float = 15.0
    frontend_url: str = ""

    @classmethod
    def from_settings(cls, settings) -> "SettlementConfig":
        return cls(
            paystack_secret_key=settings.PAYSTACK_SECRET_KEY,
            flutterwave_secret_key=settings.FLUTTERWAVE_SECRET_KEY,
            flutterwave_webhook_hash=settings.FLUTTERWAVE_WEBHOOK_HASH,
            provider_timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            frontend_url=settings.FRONTEND_URL,
        )


@dataclass
class _Settlement:
    payment: Payment
    application: Application
    program_title: str
    receipt_number: str
    registration_number: Optional[str] = None


def _value(item: Any) -> Any:
    return item.value if isinstance(item, Enum) else item


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{amount:,.0f}"
    return f"{amount:,.2f}"


class SettlementPipeline:
    def __init__(
        self,
        config: SettlementConfig,
        providers: Optional[Dict[str, PaymentProvider]] = None,
        mailer=None,
        notifier: Optional[NotificationService] = None,
    ):
        self.config = config
        self.providers = providers if providers is not None else build_providers(config)
        self.mailer = mailer
        self.notifier = notifier or NotificationService()

    @staticmethod
    def find_payment(db: Session, reference: Optional[str], payment_id: Optional[str]) -> Optional[Payment]:
        if payment_id:
            return db.query(Payment).filter(Payment.id == payment_id).first()
        if reference:
            return db.query(Payment).filter(Payment.provider_reference == reference).first()
        return None

    def _already_completed(self, db: Session, payment: Payment) -> SettlementResult:
        receipt = db.query(Receipt).filter(Receipt.payment_id == payment.id).first()
        return SettlementResult(
            status=SettlementStatus.ALREADY_COMPLETED,
            message="Payment already verified",
            payment_id=payment.id,
            payment_type=payment.payment_type,
            receipt_number=receipt.receipt_number if receipt else None,
        )

    async def settle(
        self,
        db: Session,
        reference: Optional[str] = None,
        provider: Optional[str] = None,
        payment_id: Optional[str] = None,
    ) -> SettlementResult:
        provider = _value(provider)
        logger.info(f"Verifying payment: reference={reference} provider={provider} payment_id={payment_id}")

        if not reference and not payment_id:
            return SettlementResult(status=SettlementStatus.INVALID_REQUEST, message="Reference or payment_id required")

        # 1. Idempotency check
        payment = self.find_payment(db, reference, payment_id)
        if payment is not None and payment.status == PaymentStatus.COMPLETED.value:
            logger.info(f"✅ Payment {payment.id} already verified as completed")
            return self._already_completed(db, payment)

        provider_name = provider or (payment.provider if payment else None)
        if not provider_name:
            return SettlementResult(status=SettlementStatus.INVALID_REQUEST, message="Payment provider not found")
        adapter = self.providers.get(provider_name)
        if adapter is None:
            return SettlementResult(status=SettlementStatus.INVALID_REQUEST, message=f"Unsupported payment provider: {provider_name}")

        payment_reference = reference or (payment.provider_reference if payment else None)
        if not payment_reference:
            return SettlementResult(
                status=SettlementStatus.VERIFICATION_FAILED,
                message="No payment reference found. Payment may still be processing.",
                payment_id=payment.id if payment else None,
            )

        # 2. Provider confirmation
        try:
            verification = await adapter.verify(payment_reference)
        except ProviderConfigurationError as e:
            logger.error(f"❌ {e}")
            return SettlementResult(status=SettlementStatus.INTERNAL_ERROR, message=str(e))

        if not verification.success:
            logger.info(f"Payment verification failed for {payment_reference}: {verification.error}")
            return SettlementResult(
                status=SettlementStatus.VERIFICATION_FAILED,
                message=verification.error or "Payment not successful",
                payment_id=payment.id if payment else None,
            )

        provider_data = verification.data
        echoed_id = adapter.metadata_from(provider_data).get("payment_id")
        if payment is None:
            payment = db.query(Payment).filter(Payment.id == echoed_id).first() if echoed_id else None
            if payment is None:
                logger.error(f"❌ Verified transaction {payment_reference} has no matching payment record")
                return SettlementResult(status=SettlementStatus.INTERNAL_ERROR, message="Payment not found")
            if payment.status == PaymentStatus.COMPLETED.value:
                return self._already_completed(db, payment)

        mismatch = self._charge_mismatch(adapter, provider_data, payment, echoed_id)
        if mismatch:
            logger.warning(f"⚠️ Transaction {payment_reference} rejected for payment {payment.id}: {mismatch}")
            return SettlementResult(status=SettlementStatus.VERIFICATION_FAILED, message=mismatch, payment_id=payment.id)

        # 3-5. Settle payment, update application, issue receipt: one transaction
        try:
            settled = self._commit_settlement(db, payment, payment_reference, provider_data)
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Settlement of payment {payment.id} failed, rolled back: {e}", exc_info=True)
            return SettlementResult(status=SettlementStatus.INTERNAL_ERROR, message="Failed to record payment", payment_id=payment.id)

        if settled is None:
            logger.info(f"Payment {payment.id} was settled concurrently; skipping side effects")
            return self._already_completed(db, payment)

        # 6. Notifications and emails, after commit
        amount = adapter.amount_from(provider_data) or settled.payment.amount
        await self._dispatch_side_effects(db, settled, adapter, payment_reference, amount)

        payment_type = settled.payment.payment_type
        logger.info(f"✅ Payment {payment.id} verified and settled ({payment_type})")
        return SettlementResult(
            status=SettlementStatus.VERIFIED_AND_SETTLED,
            message=(
                "Application fee verified. Please complete your profile."
                if payment_type == PaymentType.APPLICATION_FEE.value
                else "Registration complete! You can now access your dashboard."
            ),
            payment_id=payment.id,
            payment_type=payment_type,
            receipt_number=settled.receipt_number,
            registration_number=settled.registration_number,
        )

    @staticmethod
    def _charge_mismatch(adapter: PaymentProvider, provider_data: Dict[str, Any], payment: Payment, echoed_id: Optional[str]) -> Optional[str]:
        """A verified charge settles only the payment it was made for, and only in full."""
        if echoed_id and str(echoed_id) != payment.id:
            return "Transaction does not belong to this payment"
        paid = adapter.amount_from(provider_data)
        if paid < payment.amount:
            return f"Amount paid ({format_amount(paid)}) is less than amount due ({format_amount(payment.amount)})"
        return None

    def _commit_settlement(self, db: Session, payment: Payment, reference: str, provider_data: Dict[str, Any]) -> Optional[_Settlement]:
        claimed = db.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.status != PaymentStatus.COMPLETED.value)
            .values({
                Payment.status: PaymentStatus.COMPLETED.value,
                Payment.provider_reference: reference,
                Payment.payment_metadata: provider_data,
            })
        )
        if claimed.rowcount == 0:
            db.rollback()
            return None

        application = (
            db.query(Application)
            .options(joinedload(Application.program))
            .filter(Application.id == payment.application_id)
            .first()
        )
        if application is None:
            raise LookupError(f"Application {payment.application_id} not found for payment {payment.id}")

        program_title = application.program.title if application.program else "Training Program"
        registration_number = None

        if payment.payment_type == PaymentType.APPLICATION_FEE.value:
            db.execute(
                update(Application)
                .where(Application.id == application.id)
                .values({Application.application_fee_paid: True})
            )

        elif payment.payment_type == PaymentType.REGISTRATION_FEE.value:
            registration_number = application.registration_number
            if not registration_number:
                candidate = generate_registration_number(db, application.program.title if application.program else "")
                assigned = db.execute(
                    update(Application)
                    .where(Application.id == application.id, Application.registration_number.is_(None))
                    .values({Application.registration_number: candidate, Application.registration_fee_paid: True})
                )
                if assigned.rowcount == 1:
                    registration_number = candidate
                    logger.info(f"Generated registration number: {registration_number}")
                    db.execute(
                        update(Program)
                        .where(Program.id == application.program_id)
                        .values({Program.enrolled_count: Program.enrolled_count + 1})
                    )
                else:
                    registration_number = db.query(Application.registration_number).filter(
                        Application.id == application.id
                    ).scalar()

            db.execute(
                update(Application)
                .where(Application.id == application.id)
                .values({Application.registration_fee_paid: True})
            )

        else:
            raise ValueError(f"Unknown payment type: {payment.payment_type}")

        receipt = Receipt(
            payment_id=payment.id,
            trainee_id=payment.trainee_id,
            receipt_number=generate_receipt_number(),
        )
        db.add(receipt)
        db.commit()
        db.refresh(payment)

        return _Settlement(
            payment=payment,
            application=application,
            program_title=program_title,
            receipt_number=receipt.receipt_number,
            registration_number=registration_number,
        )

    async def _dispatch_side_effects(self, db: Session, settled: _Settlement, adapter: PaymentProvider, reference: str, amount: float):
        payment = settled.payment
        trainee = db.query(Profile).filter(Profile.id == payment.trainee_id).first()

        try:
            if payment.payment_type == PaymentType.APPLICATION_FEE.value:
                self.notifier.create_notification(
                    db,
                    user_id=payment.trainee_id,
                    type="payment_success",
                    title="Application Fee Paid ✓",
                    message="Your application fee has been received. Please complete your profile to continue.",
                    metadata={
                        "payment_id": payment.id,
                        "application_id": payment.application_id,
                        "amount": amount,
                        "next_step": "complete_profile",
                    },
                )
            else:
                self.notifier.create_notification(
                    db,
                    user_id=payment.trainee_id,
                    type="registration_complete",
                    title="Registration Complete! 🎓",
                    message=(
                        f"Congratulations! You are now enrolled in {settled.program_title}. "
                        f"Your registration number is {settled.registration_number}. "
                        "Visit your ID Card page to download your trainee ID."
                    ),
                    metadata={
                        "payment_id": payment.id,
                        "application_id": payment.application_id,
                        "registration_number": settled.registration_number,
                        "program_title": settled.program_title,
                    },
                )
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating notification for payment {payment.id}: {e}", exc_info=True)

        if self.mailer is None or trainee is None or not trainee.email:
            return

        base_url = self.config.frontend_url.rstrip("/")

        if payment.payment_type == PaymentType.REGISTRATION_FEE.value:
            try:
                sent = await self.mailer.send_template(db, trainee.email, "registration_complete", {
                    "name": trainee.full_name or "Trainee",
                    "program": settled.program_title,
                    "registration_number": settled.registration_number or "",
                    "dashboard_url": f"{base_url}/dashboard",
                    "id_card_url": f"{base_url}/dashboard/id-card",
                    "year": str(datetime.utcnow().year),
                })
                if not sent:
                    logger.error(f"Failed to send registration email to {trainee.email}")
            except Exception as e:
                logger.error(f"Error sending registration email: {e}", exc_info=True)

        await self._send_receipt_email(db, settled, trainee, adapter, reference, amount)

    async def _send_receipt_email(self, db: Session, settled: _Settlement, trainee: Profile, adapter: PaymentProvider, reference: str, amount: float):
        try:
            receipt_template = db.query(ReceiptTemplate).first()
            if receipt_template is None or not receipt_template.send_email_on_verification:
                return

            site_config = db.query(SiteConfig).first()
            now = datetime.utcnow()
            payment_type = settled.payment.payment_type
            data = {
                "name": trainee.full_name or "Trainee",
                "email": trainee.email,
                "payment_type": "Application Fee" if payment_type == PaymentType.APPLICATION_FEE.value else "Registration Fee",
                "amount": format_amount(amount),
                "receipt_number": settled.receipt_number,
                "program": settled.program_title,
                "provider": adapter.display_name,
                "reference": reference or "N/A",
                "date": f"{now:%B} {now.day}, {now.year}",
                "dashboard_url": f"{self.config.frontend_url.rstrip('/')}/dashboard/payments",
                "site_name": (site_config.site_name if site_config else None) or receipt_template.organization_name or "Training Center",
                "year": str(now.year),
            }

            subject = render_placeholders(receipt_template.email_subject_template or "Payment Receipt - {{payment_type}}", data)
            if receipt_template.email_body_template:
                html = render_placeholders(receipt_template.email_body_template, data)
            else:
                html = render_default_template("payment_receipt", data)

            sent = await self.mailer.send_email(trainee.email, subject, html)
            if sent:
                logger.info(f"Receipt email sent successfully to: {trainee.email}")
            else:
                logger.error(f"Failed to send receipt email to {trainee.email}")
        except Exception as e:
            logger.error(f"Error sending receipt email: {e}", exc_info=True)
