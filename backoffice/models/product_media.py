"""ProductMedia model - ordered images of a product."""
from sqlalchemy import Column, BigInteger, String, Boolean, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base, BigIntPK


class ProductMedia(Base):
    """
    Image attached to a product.

    The file itself lives in the external object store; only the bucket
    and object key are kept here.
    """

    __tablename__ = 'product_media'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product_id = Column(BigInteger, ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    storage_bucket = Column(String(100), nullable=False, default='product-media')
    storage_path = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    alt_text = Column(String(255), nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    product = relationship('Product', back_populates='media')

    def __repr__(self):
        return f"<ProductMedia(id={self.id}, product_id={self.product_id}, position={self.position})>"

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'storage_bucket': self.storage_bucket,
            'storage_path': self.storage_path,
            'position': self.position,
            'alt_text': self.alt_text,
            'is_primary': self.is_primary,
        }
