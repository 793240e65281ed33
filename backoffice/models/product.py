"""Product and variant models."""
from sqlalchemy import Column, BigInteger, String, Boolean, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base, BigIntPK


class Product(Base):
    """Product model. name is the untranslated base name."""
    
    __tablename__ = 'product'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    category_id = Column(BigInteger, ForeignKey('category.id'), nullable=True)
    name = Column(String, nullable=False)
    type = Column(String(20), nullable=False, default='retail')
    price = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    is_available = Column(Boolean, nullable=False, default=True)
    barcode = Column(String, nullable=True)
    sku = Column(String, nullable=True)
    brand = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    
    # Relationships
    tenant = relationship('Tenant')
    category = relationship('Category', foreign_keys=[category_id])
    variants = relationship('ProductVariant', back_populates='product', cascade="all, delete-orphan")
    media = relationship('ProductMedia', back_populates='product', cascade="all, delete-orphan",
                         order_by='ProductMedia.position')
    translations = relationship('ProductTranslation', back_populates='product', cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', sku='{self.sku}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'category_id': self.category_id,
            'name': self.name,
            'type': self.type,
            'price': float(self.price) if self.price is not None else None,
            'is_available': self.is_available,
            'barcode': self.barcode,
            'sku': self.sku,
            'brand': self.brand,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class ProductVariant(Base):
    """Variant of a product (size, flavour...). price_mod is added to the product price."""

    __tablename__ = 'product_variant'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product_id = Column(BigInteger, ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String, nullable=False)
    price_mod = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    barcode = Column(String, nullable=True)
    sku = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    product = relationship('Product', back_populates='variants')
    translations = relationship('VariantTranslation', back_populates='variant', cascade="all, delete-orphan")

    def __repr__(self):
        return f"<ProductVariant(id={self.id}, product_id={self.product_id}, name='{self.name}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'name': self.name,
            'price_mod': float(self.price_mod) if self.price_mod is not None else 0.0,
            'barcode': self.barcode,
            'sku': self.sku,
        }
