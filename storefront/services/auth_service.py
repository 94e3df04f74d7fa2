# storefront/services/auth_service.py
# Account creation and sign-in.
import logging

from sqlalchemy.exc import IntegrityError

from storefront.core import security
from storefront.core.errors import NotFound, Unauthorized, ValidationError
from storefront.models.user import Permission, User
from storefront.services.context import RequestContext

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(self, ctx: RequestContext):
        self.ctx = ctx
        self.db = ctx.db

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def signup(self, email: str, password: str, name: str | None = None) -> User:
        """
        Creates a user with the default {USER} permission set.
        Duplicate e-mails are reported by the unique constraint.
        """
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = User(
            email=email,
            name=name,
            password=security.get_password_hash(password),
            permissions=[Permission.USER.value],
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError(f"Email {email} is already in use")
        self.db.refresh(user)

        logger.info(f"User {user.id} signed up")
        return user

    def signin(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if user is None:
            raise NotFound(f"No such user found for email {normalize_email(email)}")

        valid = security.verify_password(password, user.password)
        if valid is not True:
            logger.info(f"Rejected sign-in for user {user.id}")
            raise Unauthorized("Invalid password")

        logger.info(f"User {user.id} signed in")
        return user
