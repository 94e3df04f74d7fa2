# storefront/models/user.py
# User: email, password hash, permission set, password-reset token.
from sqlalchemy import Column, Integer, String, DateTime, JSON
from datetime import datetime, timezone
from storefront.db.base import Base
import enum


class Permission(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    ITEMCREATE = "ITEMCREATE"
    ITEMUPDATE = "ITEMUPDATE"
    ITEMDELETE = "ITEMDELETE"
    PERMISSIONUPDATE = "PERMISSIONUPDATE"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    password = Column(String, nullable=False)
    # list of Permission values; always reassigned, never mutated in place
    permissions = Column(JSON, nullable=False, default=lambda: [Permission.USER.value])
    reset_token = Column(String, unique=True, nullable=True)
    reset_token_expiry = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def permission_set(self) -> set[Permission]:
        return {Permission(p) for p in (self.permissions or [])}

    def set_permissions(self, permissions) -> None:
        self.permissions = sorted(Permission(p).value for p in permissions)
