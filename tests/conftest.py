import json
import uuid
import os
from datetime import date, datetime, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Application, Payment, Profile, Program
from app.services.payment_providers import FlutterwaveProvider, PaystackProvider
from app.services.payment_service import get_settlement_pipeline
from app.services.settlement_service import SettlementConfig, SettlementPipeline
from app.utils.jwt_handler import create_access_token

PAYSTACK_SECRET = "sk_test_paystack"
FLUTTERWAVE_SECRET = "FLWSECK_TEST-flutterwave"
FLUTTERWAVE_HASH = "flw-webhook-hash"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


class FakeMailer:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []
        self.templates = []

    async def send_email(self, to_email, subject, html):
        if self.fail:
            raise RuntimeError("SMTP down")
        self.sent.append({"to": to_email, "subject": subject, "html": html})
        return True

    async def send_template(self, db, to_email, template_key, data):
        if self.fail:
            raise RuntimeError("SMTP down")
        self.templates.append({"to": to_email, "template": template_key, "data": data})
        return True


class ProviderStub:
    """
    httpx.MockTransport handler emulating the Paystack and Flutterwave APIs.
    `outcome` is "success", "failed" or "error" (connection failure).
    """

    def __init__(self, outcome="success", amount=None, metadata=None):
        self.outcome = outcome
        self.amount = amount
        self.metadata = metadata or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.outcome == "error":
            raise httpx.ConnectError("connection refused", request=request)

        host = request.url.host
        path = request.url.path

        if host == "api.paystack.co" and path.startswith("/transaction/verify/"):
            reference = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={
                "status": True,
                "message": "Verification successful",
                "data": {
                    "status": "success" if self.outcome == "success" else "abandoned",
                    "reference": reference,
                    "amount": self.amount if self.amount is not None else 5000000,
                    "metadata": self.metadata,
                },
            })

        if host == "api.paystack.co" and path == "/transaction/initialize":
            body = json.loads(request.content)
            if self.outcome != "success":
                return httpx.Response(400, json={"status": False, "message": "Invalid key"})
            return httpx.Response(200, json={
                "status": True,
                "data": {"authorization_url": "https://checkout.paystack.com/test", "reference": body["reference"]},
            })

        if host == "api.flutterwave.com" and path == "/v3/transactions/verify_by_reference":
            return httpx.Response(200, json={
                "status": "success",
                "message": "Transaction fetched successfully",
                "data": {
                    "status": "successful" if self.outcome == "success" else "failed",
                    "tx_ref": request.url.params.get("tx_ref"),
                    "amount": self.amount if self.amount is not None else 50000,
                    "meta": self.metadata,
                },
            })

        if host == "api.flutterwave.com" and path == "/v3/payments":
            if self.outcome != "success":
                return httpx.Response(400, json={"status": "error", "message": "Invalid key"})
            return httpx.Response(200, json={"status": "success", "data": {"link": "https://checkout.flutterwave.com/test"}})

        return httpx.Response(404, json={"status": False, "message": "Not found"})

    @property
    def verify_calls(self):
        return [r for r in self.requests if "verify" in r.url.path]


@pytest.fixture
def provider_stub():
    return ProviderStub()


@pytest.fixture
def mailer():
    return FakeMailer()


def make_pipeline(stub, mailer=None, notifier=None, **config_overrides):
    values = {
        "paystack_secret_key": PAYSTACK_SECRET,
        "flutterwave_secret_key": FLUTTERWAVE_SECRET,
        "flutterwave_webhook_hash": FLUTTERWAVE_HASH,
        "frontend_url": "https://portal.example.com",
    }
    values.update(config_overrides)
    config = SettlementConfig(**values)
    transport = httpx.MockTransport(stub)
    providers = {
        "paystack": PaystackProvider(config.paystack_secret_key, transport=transport),
        "flutterwave": FlutterwaveProvider(config.flutterwave_secret_key, transport=transport),
    }
    return SettlementPipeline(config=config, providers=providers, mailer=mailer, notifier=notifier)


@pytest.fixture
def pipeline(provider_stub, mailer):
    return make_pipeline(provider_stub, mailer=mailer)


@pytest.fixture
def client(db, pipeline):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_settlement_pipeline] = lambda: pipeline
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(profile):
    token = create_access_token({"sub": profile.id, "role": profile.role})
    return {"Authorization": f"Bearer {token}"}


# --- factories ---

def make_profile(db, complete=True, **overrides):
    values = {
        "email": f"trainee-{uuid.uuid4().hex[:10]}@example.com",
        "full_name": "Ada Trainee",
        "role": "trainee",
    }
    if complete:
        values.update({
            "phone": "+2348012345678",
            "avatar_url": "https://cdn.example.com/ada.jpg",
            "date_of_birth": date(1998, 4, 2),
            "gender": "female",
            "address": "12 Marina Road, Lagos",
            "onboarding_completed": True,
        })
    values.update(overrides)
    profile = Profile(**values)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def make_program(db, title="Web Development", **overrides):
    program = Program(title=title, application_fee=5000, registration_fee=50000, **overrides)
    db.add(program)
    db.commit()
    db.refresh(program)
    return program


def make_application(db, trainee, program, age_minutes=0, **overrides):
    values = {
        "trainee_id": trainee.id,
        "program_id": program.id,
        "created_at": datetime.utcnow() - timedelta(minutes=age_minutes),
    }
    values.update(overrides)
    application = Application(**values)
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


def make_payment(db, application, payment_type="application_fee", provider="paystack", reference="ref-001", **overrides):
    values = {
        "application_id": application.id,
        "trainee_id": application.trainee_id,
        "amount": 5000,
        "payment_type": payment_type,
        "provider": provider,
        "status": "pending",
        "provider_reference": reference,
    }
    values.update(overrides)
    payment = Payment(**values)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment
