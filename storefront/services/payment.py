# storefront/services/payment.py
# Payment gateway adapter over Stripe charges.
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import stripe

from storefront.core.config import settings
from storefront.core.errors import PaymentFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChargeResult:
    id: str
    amount: int


class PaymentGateway(ABC):
    """Interface the checkout relies on."""

    @abstractmethod
    def charge(self, amount: int, currency: str, source: str) -> ChargeResult:
        ...

    @abstractmethod
    def refund(self, charge_id: str) -> None:
        ...


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or settings.STRIPE_SECRET

    def charge(self, amount: int, currency: str, source: str) -> ChargeResult:
        logger.info(f"Charging {amount} {currency}")
        try:
            charge = stripe.Charge.create(
                amount=amount,
                currency=currency,
                source=source,
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.warning(f"Charge of {amount} {currency} declined: {e}")
            raise PaymentFailure(e.user_message or "Payment failed") from e
        return ChargeResult(id=charge.id, amount=charge.amount)

    def refund(self, charge_id: str) -> None:
        logger.info(f"Refunding charge {charge_id}")
        try:
            stripe.Refund.create(charge=charge_id, api_key=self.api_key)
        except stripe.StripeError as e:
            raise PaymentFailure(f"Refund of {charge_id} failed") from e
