# storefront/api/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_request_context
from storefront.schemas import CheckoutIn, OrderOut
from storefront.services.context import RequestContext
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderOut, status_code=201)
def create_order(payload: CheckoutIn, ctx: RequestContext = Depends(get_request_context)):
    """Charges the cart and turns it into an order."""
    return OrderService(ctx).create_order(payload.token)


@router.get("", response_model=List[OrderOut])
def orders(ctx: RequestContext = Depends(get_request_context)):
    return OrderService(ctx).list_orders()


@router.get("/{order_id}", response_model=OrderOut)
def order(order_id: int, ctx: RequestContext = Depends(get_request_context)):
    return OrderService(ctx).get_order(order_id)
