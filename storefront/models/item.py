# storefront/models/item.py
# Catalog item. Price is an integer in the smallest currency unit.
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from storefront.db.base import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Integer, nullable=False)
    image = Column(String, nullable=True)
    large_image = Column(String, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    user = relationship("User", backref="items")
    cart_items = relationship("CartItem", back_populates="item", cascade="all, delete-orphan")
