from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Float, DateTime

from .authz import Base
from tailor_ops.utils.timeutils import utcnow


class InventoryItem(Base):
    __tablename__ = 'inventory_items'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    unit: Mapped[str] = mapped_column(String(16), default='meter')
    remaining_stock: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    reorder_level: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_low_stock(self) -> bool:
        return (self.remaining_stock or 0) < (self.reorder_level or 0)
