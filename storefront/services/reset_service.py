# storefront/services/reset_service.py
# Password recovery: single-use reset tokens valid for a limited window.
import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from storefront.core import security
from storefront.core.config import settings
from storefront.core.errors import (
    InvalidOrExpiredToken,
    MailDeliveryFailure,
    NotFound,
    ValidationError,
)
from storefront.models.user import User
from storefront.services.auth_service import normalize_email
from storefront.services.context import RequestContext
from storefront.services.mail import make_email_body

logger = logging.getLogger(__name__)


class ResetService:
    def __init__(self, ctx: RequestContext):
        self.ctx = ctx
        self.db = ctx.db

    def request_reset(self, email: str) -> str:
        """
        Stores a fresh reset token on the user and mails the recovery link.
        Returns the acknowledgement message.
        """
        email = normalize_email(email)
        user = self.db.query(User).filter(User.email == email).first()
        if user is None:
            raise NotFound(f"No such user found for email {email}")

        user_id = user.id
        token = security.generate_reset_token()
        user.reset_token = token
        user.reset_token_expiry = datetime.now(timezone.utc) + timedelta(
            minutes=settings.RESET_TOKEN_TTL_MINUTES
        )

        # the token is only stored once the link is on its way
        link = f"{settings.FRONTEND_URL}/reset?{urlencode({'resetToken': token})}"
        try:
            self.ctx.mailer.send_mail(
                to=email,
                subject="Your Password Reset Token",
                html=make_email_body(
                    f'Your Password Reset Token is here!\n\n<a href="{link}">Click Here to Reset</a>'
                ),
            )
        except OSError as e:
            self.db.rollback()
            logger.error(f"Could not mail reset link to user {user_id}: {e}")
            raise MailDeliveryFailure("We could not send the reset email, please try again later") from e
        self.db.commit()
        logger.info(f"Password reset issued for user {user_id}")
        return "Thanks! A password reset link has been sent"

    def reset_password(self, reset_token: str, password: str, confirm_password: str) -> User:
        if password != confirm_password:
            raise ValidationError("Your passwords don't match")

        if not reset_token:
            raise InvalidOrExpiredToken("This token is either invalid or expired")

        now = datetime.now(timezone.utc)
        user = (
            self.db.query(User)
            .filter(
                User.reset_token == reset_token,
                User.reset_token_expiry >= now,
            )
            .first()
        )
        if user is None:
            raise InvalidOrExpiredToken("This token is either invalid or expired")

        user.password = security.get_password_hash(password)
        user.reset_token = None
        user.reset_token_expiry = None
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Password reset completed for user {user.id}")
        return user
