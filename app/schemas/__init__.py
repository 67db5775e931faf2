# app/schemas/__init__.py
from .onboarding import (
    OnboardingStep,
    ApplicationStatus,
    ProfileSnapshot,
    ApplicationSnapshot,
    OnboardingStatus,
)
from .payment import (
    PaymentProviderName,
    PaymentType,
    PaymentStatus,
    SettlementStatus,
    PaymentInitialize,
    PaymentInitializeResponse,
    PaymentVerify,
    SettlementResult,
)

__all__ = [
    "OnboardingStep",
    "ApplicationStatus",
    "ProfileSnapshot",
    "ApplicationSnapshot",
    "OnboardingStatus",
    "PaymentProviderName",
    "PaymentType",
    "PaymentStatus",
    "SettlementStatus",
    "PaymentInitialize",
    "PaymentInitializeResponse",
    "PaymentVerify",
    "SettlementResult",
]
