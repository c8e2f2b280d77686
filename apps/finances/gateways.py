"""
Payment gateway integration

The engine never moves money itself; it asks a PaymentGateway to create a
charge (returning the processor's reference) or to refund part of one.

- SimulatedPaymentGateway: used when no processor key is configured. It
  derives ``sim_`` references from the ledger entry id it is given, so the
  same request always yields the same reference, and refunds are no-ops.
- StripePaymentGateway: talks to the Stripe REST API with ``requests``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
import logging

import requests
from django.conf import settings  # type: ignore

from apps.finances.domain.errors import GatewayFailureError

logger = logging.getLogger(__name__)

SIMULATED_PREFIX = "sim_"


def to_minor_units(amount: Decimal) -> int:
    """Amount in cents, as payment processors expect."""
    return int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))


class PaymentGateway(ABC):
    """Abstract payment processor."""

    @abstractmethod
    def create_charge(self, amount: Decimal, currency: str, metadata: dict[str, str]) -> str:
        """Create a charge intent and return its external reference.

        Raises:
            GatewayFailureError: If the processor call fails.
        """
        ...

    @abstractmethod
    def create_refund(self, reference: str, amount: Decimal) -> None:
        """Refund ``amount`` of the charge identified by ``reference``.

        Raises:
            GatewayFailureError: If the processor call fails.
        """
        ...


class SimulatedPaymentGateway(PaymentGateway):
    """Local stand-in used when no processor is configured."""

    def create_charge(self, amount: Decimal, currency: str, metadata: dict[str, str]) -> str:
        entry_id = metadata.get("entry_id")
        if not entry_id:
            raise GatewayFailureError("create charge", "entry_id metadata is required")
        reference = f"{SIMULATED_PREFIX}{entry_id.replace('-', '')}"
        logger.info(
            f"Simulated charge {reference} for reservation "
            f"{metadata.get('reservation_id')}: {amount} {currency}"
        )
        return reference

    def create_refund(self, reference: str, amount: Decimal) -> None:
        logger.info(f"Simulated refund of {amount} against {reference}")


class StripePaymentGateway(PaymentGateway):
    """Stripe PaymentIntents / Refunds over HTTPS."""

    def __init__(self, secret_key: str, base_url: str = "https://api.stripe.com/v1/", timeout: float = 30):
        self._secret_key = secret_key
        self._base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self._timeout = timeout

    def _post(self, path: str, data: dict[str, Any], operation: str) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._secret_key}",
            "Accept": "application/json",
        }
        try:
            response = requests.post(
                f"{self._base_url}{path}",
                data=data,
                headers=headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Stripe request to {path} failed: {e}")
            raise GatewayFailureError(operation, str(e)) from e
        except ValueError as e:
            logger.error(f"Stripe returned a non-JSON body for {path}: {e}")
            raise GatewayFailureError(operation, "invalid response body") from e

    def create_charge(self, amount: Decimal, currency: str, metadata: dict[str, str]) -> str:
        data: dict[str, Any] = {
            "amount": to_minor_units(amount),
            "currency": currency.lower(),
        }
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = value

        result = self._post("payment_intents", data, "create charge")
        reference = result.get("id")
        if not reference:
            raise GatewayFailureError("create charge", "response has no id")

        logger.info(f"Created Stripe payment intent {reference} for {amount} {currency}")
        return reference

    def create_refund(self, reference: str, amount: Decimal) -> None:
        if reference.startswith(SIMULATED_PREFIX):
            logger.info(f"Skipping Stripe refund for simulated reference {reference}")
            return

        self._post(
            "refunds",
            {"payment_intent": reference, "amount": to_minor_units(amount)},
            "process refund",
        )
        logger.info(f"Created Stripe refund of {amount} against {reference}")


def stripe_enabled(secret_key: str | None) -> bool:
    return bool(secret_key and secret_key.strip() and "placeholder" not in secret_key)


def get_payment_gateway() -> PaymentGateway:
    """Build the gateway configured in settings."""
    secret_key = getattr(settings, "STRIPE_SECRET_KEY", "")
    if not stripe_enabled(secret_key):
        logger.warning("No Stripe key configured; using simulated payment gateway")
        return SimulatedPaymentGateway()

    return StripePaymentGateway(
        secret_key=secret_key,
        base_url=getattr(settings, "STRIPE_API_BASE_URL", "https://api.stripe.com/v1/"),
        timeout=getattr(settings, "PAYMENT_GATEWAY_TIMEOUT", 30),
    )
