"""Category model."""
import enum
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base, BigIntPK


class CategoryType(enum.Enum):
    """Business line a category belongs to."""
    RETAIL = 'retail'
    HOSPITALITY = 'hospitality'
    SERVICE = 'service'


class Category(Base):
    """
    Product Category.

    parent_id is a plain self reference; nothing at the database level
    prevents cycles, the tree builder copes with them on read.
    """
    
    __tablename__ = 'category'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    type = Column(String(20), nullable=False, default=CategoryType.RETAIL.value)
    parent_id = Column(BigInteger, ForeignKey('category.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    
    # Relationships
    tenant = relationship('Tenant')
    translations = relationship('CategoryTranslation', back_populates='category', cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'name': self.name,
            'type': self.type,
            'parent_id': self.parent_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
