# storefront/services/item_service.py
# Catalog reads and owner-checked catalog mutations.
import logging

from sqlalchemy import func

from storefront.core.errors import NotFound
from storefront.models.item import Item
from storefront.models.user import Permission
from storefront.services.context import RequestContext
from storefront.services.permissions import require_owner_or_permission

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "price", "image", "large_image")


class ItemService:
    def __init__(self, ctx: RequestContext):
        self.ctx = ctx
        self.db = ctx.db

    def list_items(self, skip: int = 0, first: int | None = None) -> list[Item]:
        query = self.db.query(Item).order_by(Item.created_at.desc(), Item.id.desc()).offset(skip)
        if first is not None:
            query = query.limit(first)
        return query.all()

    def count_items(self) -> int:
        return self.db.query(func.count(Item.id)).scalar()

    def get_item(self, item_id: int) -> Item:
        item = self.db.get(Item, item_id)
        if item is None:
            raise NotFound(f"No item found for id {item_id}")
        return item

    def create_item(self, **fields) -> Item:
        caller = self.ctx.require_caller()
        item = Item(user_id=caller.id, **fields)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"User {caller.id} created item {item.id}")
        return item

    def update_item(self, item_id: int, **updates) -> Item:
        caller = self.ctx.require_caller()
        item = self.get_item(item_id)
        require_owner_or_permission(caller, item.user_id, [Permission.ADMIN, Permission.ITEMUPDATE])

        for field, value in updates.items():
            # the id and owner are never updated
            if field in UPDATABLE_FIELDS:
                setattr(item, field, value)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"User {caller.id} updated item {item.id}")
        return item

    def delete_item(self, item_id: int) -> Item:
        caller = self.ctx.require_caller()
        item = self.get_item(item_id)
        require_owner_or_permission(caller, item.user_id, [Permission.ADMIN, Permission.ITEMDELETE])

        # order snapshots carry no reference to the item; cart rows go with it
        self.db.delete(item)
        self.db.commit()
        logger.info(f"User {caller.id} deleted item {item_id}")
        return item
