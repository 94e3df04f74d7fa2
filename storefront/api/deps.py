# storefront/api/deps.py
# FastAPI dependencies that build the per-request context.
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from storefront.core import security
from storefront.core.config import settings
from storefront.db.session import get_db
from storefront.models.user import User
from storefront.services.context import RequestContext
from storefront.services.mail import Mailer
from storefront.services.payment import PaymentGateway, StripeGateway


def get_payment_gateway() -> PaymentGateway:
    return StripeGateway()


def get_mailer() -> Mailer:
    return Mailer()


def get_request_context(
    request: Request,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    mailer: Mailer = Depends(get_mailer),
) -> RequestContext:
    """Resolves the caller from the session cookie; unknown or bad tokens mean anonymous."""
    caller = None
    user_id = security.decode_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))
    if user_id is not None:
        caller = db.get(User, user_id)
    return RequestContext(db=db, gateway=gateway, mailer=mailer, caller=caller)
