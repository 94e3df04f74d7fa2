# storefront/services/permissions.py
# Permission checks and the ownership-or-permission rule.
import logging
from typing import Iterable

from storefront.core.errors import Forbidden, NotFound, ValidationError
from storefront.models.user import Permission, User
from storefront.services.context import RequestContext

logger = logging.getLogger(__name__)


def has_permission(user: User, required: Iterable[Permission]) -> None:
    """Raises Forbidden unless the user holds at least one of `required`."""
    required = {Permission(p) for p in required}
    if not user.permission_set & required:
        needed = ", ".join(sorted(p.value for p in required))
        held = ", ".join(sorted(p.value for p in user.permission_set))
        raise Forbidden(
            f"You do not have sufficient permissions: {needed}. You have: {held}"
        )


def require_owner_or_permission(
    caller: User, owner_id: int, override: Iterable[Permission]
) -> None:
    if owner_id == caller.id:
        return
    has_permission(caller, override)


def list_users(ctx: RequestContext) -> list[User]:
    caller = ctx.require_caller()
    has_permission(caller, [Permission.ADMIN, Permission.PERMISSIONUPDATE])
    return ctx.db.query(User).order_by(User.id).all()


def update_permissions(
    ctx: RequestContext, target_user_id: int, permissions: Iterable[Permission]
) -> User:
    """Replaces (does not merge) the target's permission set."""
    caller = ctx.require_caller()
    has_permission(caller, [Permission.ADMIN, Permission.PERMISSIONUPDATE])

    new_permissions = {Permission(p) for p in permissions}
    if not new_permissions:
        raise ValidationError("A user must keep at least one permission")

    target = ctx.db.get(User, target_user_id)
    if target is None:
        raise NotFound(f"No user found for id {target_user_id}")

    target.set_permissions(new_permissions)
    ctx.db.commit()
    ctx.db.refresh(target)

    logger.info(
        f"User {caller.id} set permissions of user {target.id} to {target.permissions}"
    )
    return target
