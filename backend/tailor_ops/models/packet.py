from __future__ import annotations
from datetime import datetime
from typing import Optional, List
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, JSON, DateTime, ForeignKey

from .authz import Base
from tailor_ops.constants.statuses import PacketStatus
from tailor_ops.utils.timeutils import utcnow


class Packet(Base):
    """Materials gathered by fabrication for one or more sections of an order item.

    JSON list columns are replaced wholesale on change so the ORM notices the update.
    """
    __tablename__ = 'packets'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_item_id: Mapped[int] = mapped_column(ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=PacketStatus.PENDING)
    assigned_to: Mapped[Optional[int]] = mapped_column(Integer)
    assigned_to_name: Mapped[Optional[str]] = mapped_column(String(128))
    sections_included: Mapped[List[str]] = mapped_column(JSON, default=list)
    invalidated_sections: Mapped[List[dict]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    def includes_section(self, name: str) -> bool:
        return name.lower() in {s.lower() for s in (self.sections_included or [])}
