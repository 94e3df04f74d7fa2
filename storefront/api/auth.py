# storefront/api/auth.py
# Sign-up, sign-in, sign-out and password reset routes.
from fastapi import APIRouter, Depends, Response

from storefront.api.deps import get_request_context
from storefront.core import security
from storefront.schemas import (
    MessageOut,
    RequestResetIn,
    ResetPasswordIn,
    SigninIn,
    SignupIn,
    UserOut,
)
from storefront.services.auth_service import AuthService
from storefront.services.context import RequestContext
from storefront.services.reset_service import ResetService

router = APIRouter()


@router.post("/signup", response_model=UserOut, status_code=201)
def signup(payload: SignupIn, response: Response, ctx: RequestContext = Depends(get_request_context)):
    """Creates the account and signs it in."""
    user = AuthService(ctx).signup(payload.email, payload.password, payload.name)
    security.set_session_cookie(response, user.id)
    return user


@router.post("/signin", response_model=UserOut)
def signin(payload: SigninIn, response: Response, ctx: RequestContext = Depends(get_request_context)):
    user = AuthService(ctx).signin(payload.email, payload.password)
    security.set_session_cookie(response, user.id)
    return user


@router.post("/signout", response_model=MessageOut)
def signout(response: Response):
    security.clear_session_cookie(response)
    return {"message": "Goodbye!"}


@router.post("/request-reset", response_model=MessageOut)
def request_reset(payload: RequestResetIn, ctx: RequestContext = Depends(get_request_context)):
    return {"message": ResetService(ctx).request_reset(payload.email)}


@router.post("/reset", response_model=UserOut)
def reset_password(
    payload: ResetPasswordIn,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
):
    user = ResetService(ctx).reset_password(
        payload.reset_token, payload.password, payload.confirm_password
    )
    security.set_session_cookie(response, user.id)
    return user
