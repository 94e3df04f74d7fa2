# storefront/services/context.py
# Per-request state handed explicitly to every service.
from dataclasses import dataclass

from sqlalchemy.orm import Session

from storefront.core.errors import Unauthorized
from storefront.models.user import User
from storefront.services.mail import Mailer
from storefront.services.payment import PaymentGateway


@dataclass
class RequestContext:
    db: Session
    gateway: PaymentGateway
    mailer: Mailer
    caller: User | None = None

    def require_caller(self) -> User:
        if self.caller is None:
            raise Unauthorized("You must be signed in to do that")
        return self.caller
