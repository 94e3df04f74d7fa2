# storefront/api/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import get_request_context
from storefront.schemas import PermissionsIn, UserOut
from storefront.services import permissions
from storefront.services.context import RequestContext

router = APIRouter()


@router.get("/me", response_model=Optional[UserOut])
def me(ctx: RequestContext = Depends(get_request_context)):
    """The signed-in user, or null for anonymous callers."""
    return ctx.caller


@router.get("/users", response_model=List[UserOut])
def users(ctx: RequestContext = Depends(get_request_context)):
    return permissions.list_users(ctx)


@router.put("/users/{user_id}/permissions", response_model=UserOut)
def update_permissions(
    user_id: int,
    payload: PermissionsIn,
    ctx: RequestContext = Depends(get_request_context),
):
    return permissions.update_permissions(ctx, user_id, payload.permissions)
