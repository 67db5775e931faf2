# Import all routes
from .onboarding import router as onboarding_router
from .payment import router as payment_router
from .webhooks import router as webhooks_router

# All routers that should be included in main app
__all__ = [
    "onboarding_router",
    "payment_router",
    "webhooks_router",
]
