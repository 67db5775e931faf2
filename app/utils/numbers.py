# app/utils/numbers.py
import random
import string
import time
from datetime import datetime
from sqlalchemy.orm import Session

from app.models.application import Application

BASE36 = string.digits + string.ascii_uppercase


def generate_receipt_number() -> str:
    """RCP-<epoch millis>-<9 random base36 chars>"""
    suffix = "".join(random.choices(BASE36, k=9))
    return f"RCP-{int(time.time() * 1000)}-{suffix}"


def program_prefix(program_title: str) -> str:
    words = [w for w in "".join(c if c.isalnum() else " " for c in (program_title or "")).split() if w]
    if not words:
        return "PROG"
    return "".join(w[0] for w in words[:4]).upper()


def generate_registration_number(db: Session, program_title: str, max_attempts: int = 20) -> str:
    """
    Build a registration number such as `WD/2026/048213` for "Web Development".
    Retries until the value is not held by any application.
    """
    prefix = program_prefix(program_title)
    year = datetime.utcnow().year

    for _ in range(max_attempts):
        candidate = f"{prefix}/{year}/{random.randint(0, 999999):06d}"
        exists = db.query(Application.id).filter(Application.registration_number == candidate).first()
        if not exists:
            return candidate

    raise RuntimeError(f"Could not generate a unique registration number for {program_title!r}")
