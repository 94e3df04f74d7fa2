# storefront/api/cart.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_request_context
from storefront.schemas import CartItemOut
from storefront.services.cart_service import CartService
from storefront.services.context import RequestContext

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=List[CartItemOut])
def cart(ctx: RequestContext = Depends(get_request_context)):
    return CartService(ctx).get_cart()


@router.post("/{item_id}", response_model=CartItemOut)
def add_to_cart(item_id: int, ctx: RequestContext = Depends(get_request_context)):
    return CartService(ctx).add_to_cart(item_id)


@router.delete("/{cart_item_id}", response_model=CartItemOut)
def remove_from_cart(cart_item_id: int, ctx: RequestContext = Depends(get_request_context)):
    return CartService(ctx).remove_from_cart(cart_item_id)
