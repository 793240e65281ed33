"""Order and order line models (written by the point of sale, read here)."""
import enum
from sqlalchemy import Column, BigInteger, String, Text, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base, BigIntPK


class OrderStatus(enum.Enum):
    """Order lifecycle."""
    DRAFT = 'draft'
    CONFIRMED = 'confirmed'
    PREPARING = 'preparing'
    READY = 'ready'
    COMPLETED = 'completed'
    VOID = 'void'


class OrderType(enum.Enum):
    DINE_IN = 'dine_in'
    TAKEAWAY = 'takeaway'
    DELIVERY = 'delivery'


def _money(value):
    return float(value) if value is not None else 0.0


class Order(Base):
    """Order placed at the point of sale."""

    __tablename__ = 'order'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    order_number = Column(String(40), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.DRAFT.value)
    type = Column(String(20), nullable=False, default=OrderType.DINE_IN.value)
    total_gross = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    discount_reason = Column(String, nullable=True)
    waiter_name = Column(String(120), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    tenant = relationship('Tenant')
    lines = relationship('OrderLine', back_populates='order', cascade='all, delete-orphan',
                         order_by='OrderLine.id')

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.order_number}', status='{self.status}')>"

    def to_dict(self, include_lines=False):
        data = {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'order_number': self.order_number,
            'status': self.status,
            'type': self.type,
            'total_gross': _money(self.total_gross),
            'discount_amount': _money(self.discount_amount),
            'discount_reason': self.discount_reason,
            'waiter_name': self.waiter_name,
            'note': self.note,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_lines:
            data['order_lines'] = [line.to_dict() for line in self.lines]
        return data


class OrderLine(Base):
    """
    Order line.

    product_id and variant_id survive as null when the catalog entry is
    gone; unit_price is the price charged at the time of the order.
    """

    __tablename__ = 'order_line'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False)
    order_id = Column(BigInteger, ForeignKey('order.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(BigInteger, ForeignKey('product.id', ondelete='SET NULL'), nullable=True)
    variant_id = Column(BigInteger, ForeignKey('product_variant.id', ondelete='SET NULL'), nullable=True)
    qty = Column(Numeric(10, 3), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    order = relationship('Order', back_populates='lines')

    def __repr__(self):
        return f"<OrderLine(id={self.id}, order_id={self.order_id}, product_id={self.product_id}, qty={self.qty})>"

    @property
    def line_total(self):
        return (self.qty or 0) * (self.unit_price or 0)

    def to_dict(self):
        return {
            'id': self.id,
            'order_id': self.order_id,
            'product_id': self.product_id,
            'variant_id': self.variant_id,
            'qty': _money(self.qty),
            'unit_price': _money(self.unit_price),
            'line_total': _money(self.line_total),
            'status': self.status,
        }
