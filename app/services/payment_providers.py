# app/services/payment_providers.py
"""
Paystack and Flutterwave adapters behind one verification interface.

Adapters never raise for provider or network trouble. They return a
VerificationResult / InitializationResult failure instead. The one exception is a
missing secret key, which raises ProviderConfigurationError because it is an
operator problem rather than a payment outcome.
"""
import httpx
import logging
from urllib.parse import quote
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ProviderConfigurationError(Exception):
    """Raised when a provider is used without its secret key."""


@dataclass
class VerificationResult:
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Dict[str, Any]) -> "VerificationResult":
        return cls(success=True, data=data or {})

    @classmethod
    def failed(cls, error: str, data: Optional[Dict[str, Any]] = None) -> "VerificationResult":
        return cls(success=False, data=data or {}, error=error)


@dataclass
class InitializationResult:
    success: bool
    authorization_url: Optional[str] = None
    reference: Optional[str] = None
    error: Optional[str] = None


class PaymentProvider:
    """Common interface for payment gateways."""

    name = ""
    display_name = ""
    base_url = ""

    def __init__(self, secret_key: str, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.secret_key = secret_key
        self.timeout = timeout
        self.transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        if not self.secret_key:
            raise ProviderConfigurationError(f"{self.display_name} not configured")
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def verify(self, reference: str) -> VerificationResult:
        raise NotImplementedError

    async def initialize(self, payload: Dict[str, Any]) -> InitializationResult:
        raise NotImplementedError

    def metadata_from(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Our own metadata echoed back by the provider (payment_id, application_id, ...)."""
        raise NotImplementedError

    def amount_from(self, data: Dict[str, Any]) -> float:
        raise NotImplementedError

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> VerificationResult:
        headers = self.headers
        try:
            async with self._client() as client:
                response = await client.get(path, headers=headers, params=params)
            body = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"[{self.display_name}] Timeout: {e}")
            return VerificationResult.failed("Verification timed out")
        except httpx.RequestError as e:
            logger.error(f"[{self.display_name}] Request error: {e}")
            return VerificationResult.failed("Network error while verifying payment")
        except ValueError as e:
            logger.error(f"[{self.display_name}] Invalid JSON response: {e}")
            return VerificationResult.failed("Invalid response from payment provider")

        if not isinstance(body, dict):
            return VerificationResult.failed("Invalid response from payment provider")
        return VerificationResult(success=True, data=body)

    async def _post_json(self, path: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        headers = self.headers
        try:
            async with self._client() as client:
                response = await client.post(path, headers=headers, json=payload)
            body = response.json()
        except httpx.RequestError as e:
            logger.error(f"[{self.display_name}] Request error: {e}")
            return None
        except ValueError as e:
            logger.error(f"[{self.display_name}] Invalid JSON response: {e}")
            return None
        return body if isinstance(body, dict) else None


class PaystackProvider(PaymentProvider):
    name = "paystack"
    display_name = "Paystack"
    base_url = "https://api.paystack.co"

    async def verify(self, reference: str) -> VerificationResult:
        logger.info(f"Verifying with Paystack, reference: {reference}")
        fetched = await self._get_json(f"/transaction/verify/{quote(reference, safe='')}")
        if not fetched.success:
            return fetched

        body = fetched.data
        if body.get("status") is not True:
            return VerificationResult.failed(body.get("message") or "Payment verification failed")

        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        if data.get("status") == "success":
            return VerificationResult.ok(data)
        return VerificationResult.failed(f"Payment not successful: {data.get('status')}", data)

    async def initialize(self, payload: Dict[str, Any]) -> InitializationResult:
        request = {
            "email": payload["email"],
            "amount": round(payload["amount"] * 100),  # Paystack uses kobo
            "reference": payload["reference"],
            "callback_url": payload.get("callback_url"),
            "metadata": payload.get("metadata", {}),
        }
        body = await self._post_json("/transaction/initialize", request)
        if not body or not body.get("status"):
            message = (body or {}).get("message") or "Paystack initialization failed"
            logger.error(f"Paystack initialization failed: {message}")
            return InitializationResult(success=False, error=message)

        data = body.get("data") or {}
        return InitializationResult(
            success=True,
            authorization_url=data.get("authorization_url"),
            reference=data.get("reference") or payload["reference"],
        )

    def metadata_from(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return data.get("metadata") or {}

    def amount_from(self, data: Dict[str, Any]) -> float:
        return (data.get("amount") or 0) / 100


class FlutterwaveProvider(PaymentProvider):
    name = "flutterwave"
    display_name = "Flutterwave"
    base_url = "https://api.flutterwave.com/v3"

    async def verify(self, reference: str) -> VerificationResult:
        logger.info(f"Verifying with Flutterwave, reference: {reference}")
        fetched = await self._get_json("/transactions/verify_by_reference", params={"tx_ref": reference})
        if not fetched.success:
            return fetched

        body = fetched.data
        if body.get("status") != "success":
            return VerificationResult.failed(body.get("message") or "Payment verification failed")

        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        if data.get("status") == "successful":
            return VerificationResult.ok(data)
        return VerificationResult.failed(f"Payment not successful: {data.get('status')}", data)

    async def initialize(self, payload: Dict[str, Any]) -> InitializationResult:
        payment_type = payload.get("metadata", {}).get("payment_type")
        request = {
            "tx_ref": payload["reference"],
            "amount": payload["amount"],
            "currency": "NGN",
            "redirect_url": payload.get("callback_url"),
            "customer": {"email": payload["email"]},
            "meta": payload.get("metadata", {}),
            "customizations": {
                "title": "Training Program Payment",
                "description": "Application Fee" if payment_type == "application_fee" else "Registration Fee",
            },
        }
        body = await self._post_json("/payments", request)
        if not body or body.get("status") != "success":
            message = (body or {}).get("message") or "Flutterwave initialization failed"
            logger.error(f"Flutterwave initialization failed: {message}")
            return InitializationResult(success=False, error=message)

        data = body.get("data") or {}
        return InitializationResult(
            success=True,
            authorization_url=data.get("link"),
            reference=payload["reference"],
        )

    def metadata_from(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return data.get("meta") or {}

    def amount_from(self, data: Dict[str, Any]) -> float:
        return data.get("amount") or 0


def build_providers(config, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, PaymentProvider]:
    """One adapter per supported provider, keyed by provider name."""
    return {
        PaystackProvider.name: PaystackProvider(config.paystack_secret_key, config.provider_timeout, transport),
        FlutterwaveProvider.name: FlutterwaveProvider(config.flutterwave_secret_key, config.provider_timeout, transport),
    }
