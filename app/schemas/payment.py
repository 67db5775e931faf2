# app/schemas/payment.py
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

class PaymentProviderName(str, Enum):
    PAYSTACK = "paystack"
    FLUTTERWAVE = "flutterwave"

class PaymentType(str, Enum):
    APPLICATION_FEE = "application_fee"
    REGISTRATION_FEE = "registration_fee"

class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

class SettlementStatus(str, Enum):
    ALREADY_COMPLETED = "already_completed"
    VERIFIED_AND_SETTLED = "verified_and_settled"
    VERIFICATION_FAILED = "verification_failed"
    INTERNAL_ERROR = "internal_error"
    INVALID_REQUEST = "invalid_request"


class PaymentInitialize(BaseModel):
    provider: PaymentProviderName
    amount: float = Field(..., gt=0, description="Amount in Naira")
    payment_type: PaymentType
    application_id: str
    callback_url: Optional[str] = None


class PaymentInitializeResponse(BaseModel):
    success: bool = True
    authorization_url: str
    reference: str
    payment_id: str


class PaymentVerify(BaseModel):
    reference: Optional[str] = None
    provider: Optional[PaymentProviderName] = None
    payment_id: Optional[str] = None


class SettlementResult(BaseModel):
    status: SettlementStatus
    message: str = ""
    payment_id: Optional[str] = None
    payment_type: Optional[PaymentType] = None
    receipt_number: Optional[str] = None
    registration_number: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status in (SettlementStatus.ALREADY_COMPLETED, SettlementStatus.VERIFIED_AND_SETTLED)

    @property
    def already_processed(self) -> bool:
        return self.status == SettlementStatus.ALREADY_COMPLETED
