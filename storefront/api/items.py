# storefront/api/items.py
from typing import List

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_request_context
from storefront.schemas import CountOut, ItemIn, ItemOut, ItemUpdate
from storefront.services.context import RequestContext
from storefront.services.item_service import ItemService

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=List[ItemOut])
def items(
    skip: int = Query(0, ge=0),
    first: int | None = Query(None, ge=1),
    ctx: RequestContext = Depends(get_request_context),
):
    return ItemService(ctx).list_items(skip=skip, first=first)


@router.get("/count", response_model=CountOut)
def items_connection(ctx: RequestContext = Depends(get_request_context)):
    return {"count": ItemService(ctx).count_items()}


@router.get("/{item_id}", response_model=ItemOut)
def item(item_id: int, ctx: RequestContext = Depends(get_request_context)):
    return ItemService(ctx).get_item(item_id)


@router.post("", response_model=ItemOut, status_code=201)
def create_item(payload: ItemIn, ctx: RequestContext = Depends(get_request_context)):
    return ItemService(ctx).create_item(**payload.model_dump())


@router.patch("/{item_id}", response_model=ItemOut)
def update_item(item_id: int, payload: ItemUpdate, ctx: RequestContext = Depends(get_request_context)):
    return ItemService(ctx).update_item(item_id, **payload.model_dump(exclude_unset=True))


@router.delete("/{item_id}", response_model=ItemOut)
def delete_item(item_id: int, ctx: RequestContext = Depends(get_request_context)):
    return ItemService(ctx).delete_item(item_id)
