# app/models/__init__.py

from .profile import Profile
from .program import Program
from .application import Application
from .payment import Payment
from .receipt import Receipt
from .notification import Notification
from .templates import EmailTemplate, ReceiptTemplate, SiteConfig

__all__ = [
    "Profile",
    "Program",
    "Application",
    "Payment",
    "Receipt",
    "Notification",
    "EmailTemplate",
    "ReceiptTemplate",
    "SiteConfig",
]
