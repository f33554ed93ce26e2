from __future__ import annotations
from datetime import datetime, date
from typing import Optional, List, Dict
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy import Integer, String, Float, JSON, DateTime, Date, Text, ForeignKey, UniqueConstraint

from .authz import Base
from tailor_ops.constants.statuses import OrderStatus, OrderItemStatus, Priority
from tailor_ops.utils.timeutils import utcnow


class Order(Base):
    __tablename__ = 'orders'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_number: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(128))
    customer_phone: Mapped[Optional[str]] = mapped_column(String(32))
    destination: Mapped[Optional[str]] = mapped_column(String(128))
    priority: Mapped[str] = mapped_column(String(16), default=Priority.NORMAL)
    fwd_date: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=OrderStatus.RECEIVED, index=True)
    dispatch_data: Mapped[Optional[dict]] = mapped_column(JSON)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    completed_by: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan', order_by='OrderItem.id')


class OrderItem(Base):
    __tablename__ = 'order_items'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(128), nullable=False)
    product_sku: Mapped[Optional[str]] = mapped_column(String(64))
    size: Mapped[Optional[str]] = mapped_column(String(16))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    status: Mapped[str] = mapped_column(String(40), nullable=False, default=OrderItemStatus.RECEIVED, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
    # optimistic lock; concurrent transitions on one item fail with StaleDataError
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    order = relationship('Order', back_populates='items')
    sections = relationship('ItemSection', back_populates='order_item', cascade='all, delete-orphan', order_by='ItemSection.id')
    materials = relationship('MaterialRequirement', back_populates='order_item', cascade='all, delete-orphan', order_by='MaterialRequirement.id')
    timeline = relationship('TimelineEntry', back_populates='order_item', cascade='all, delete-orphan', order_by='TimelineEntry.id')
    packets = relationship('Packet', cascade='all, delete-orphan', order_by='Packet.id')

    __mapper_args__ = {'version_id_col': version_id}

    def section_map(self) -> Dict[str, 'ItemSection']:
        return {s.name: s for s in self.sections}

    def section_statuses(self) -> List[str]:
        return [s.status for s in self.sections]

    def materials_for(self, section_name: str) -> List['MaterialRequirement']:
        key = section_name.lower()
        return [m for m in self.materials if (m.piece or '').lower() == key]


class ItemSection(Base):
    """Per-piece status record (shirt, dupatta, trouser...) of a multi-section item."""
    __tablename__ = 'item_sections'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_item_id: Mapped[int] = mapped_column(ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    dyeing_round: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    dyeing_accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    dyeing_accepted_by: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    dyeing_accepted_by_name: Mapped[Optional[str]] = mapped_column(String(128))
    dyeing_started_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    dyeing_completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    dyeing_completed_by: Mapped[Optional[int]] = mapped_column(Integer)

    dyeing_rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    dyeing_rejected_by: Mapped[Optional[int]] = mapped_column(Integer)
    dyeing_rejected_by_name: Mapped[Optional[str]] = mapped_column(String(128))
    dyeing_rejection_reason_code: Mapped[Optional[str]] = mapped_column(String(40))
    dyeing_rejection_reason: Mapped[Optional[str]] = mapped_column(String(255))
    dyeing_rejection_notes: Mapped[Optional[str]] = mapped_column(Text)

    packet_created_by: Mapped[Optional[int]] = mapped_column(Integer)
    packet_created_by_name: Mapped[Optional[str]] = mapped_column(String(128))
    previous_fabrication_user_id: Mapped[Optional[int]] = mapped_column(Integer)
    previous_fabrication_user_name: Mapped[Optional[str]] = mapped_column(String(128))
    inventory_check_result: Mapped[Optional[dict]] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    order_item = relationship('OrderItem', back_populates='sections')

    __table_args__ = (UniqueConstraint('order_item_id', 'name', name='uq_item_section_name'),)

    @property
    def display_name(self) -> str:
        return self.name[:1].upper() + self.name[1:]


class MaterialRequirement(Base):
    __tablename__ = 'material_requirements'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_item_id: Mapped[int] = mapped_column(ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False, index=True)
    piece: Mapped[str] = mapped_column(String(64), nullable=False)
    inventory_item_id: Mapped[int] = mapped_column(ForeignKey('inventory_items.id'), nullable=False)
    inventory_item_name: Mapped[Optional[str]] = mapped_column(String(128))
    required_qty: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(String(16))

    order_item = relationship('OrderItem', back_populates='materials')


class TimelineEntry(Base):
    """Append-only activity log of an order item."""
    __tablename__ = 'timeline_entries'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_item_id: Mapped[int] = mapped_column(ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False, index=True)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    user: Mapped[str] = mapped_column(String(128), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    details: Mapped[Optional[list]] = mapped_column(JSON)

    order_item = relationship('OrderItem', back_populates='timeline')
