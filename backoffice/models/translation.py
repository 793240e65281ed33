"""Translation models for products, categories and variants."""
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base, BigIntPK


class TranslationMixin:
    """
    Shared behaviour of translation rows.

    Subclasses set ENTITY_COLUMN to the name of their foreign key and
    TRANSLATABLE_FIELDS to the localized columns.
    """

    ENTITY_COLUMN = None
    TRANSLATABLE_FIELDS = ('name',)

    @property
    def entity_id(self):
        return getattr(self, self.ENTITY_COLUMN)

    @classmethod
    def entity_column(cls):
        return getattr(cls, cls.ENTITY_COLUMN)

    def to_dict(self):
        data = {
            'id': self.id,
            'entity_id': self.entity_id,
            self.ENTITY_COLUMN: self.entity_id,
            'language_code': self.language_code,
        }
        for field in self.TRANSLATABLE_FIELDS:
            data[field] = getattr(self, field)
        return data


class ProductTranslation(TranslationMixin, Base):
    __tablename__ = 'product_translation'
    __table_args__ = (UniqueConstraint('product_id', 'language_code', name='uq_product_translation_lang'),)

    ENTITY_COLUMN = 'product_id'
    TRANSLATABLE_FIELDS = ('name', 'short_description', 'long_description', 'seo_title', 'seo_description')

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product_id = Column(BigInteger, ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    language_code = Column(String(8), ForeignKey('language.code'), nullable=False)
    name = Column(String, nullable=False)
    short_description = Column(Text, nullable=True)
    long_description = Column(Text, nullable=True)
    seo_title = Column(String(255), nullable=True)
    seo_description = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    product = relationship('Product', back_populates='translations')

    def __repr__(self):
        return f"<ProductTranslation(product_id={self.product_id}, lang='{self.language_code}')>"


class CategoryTranslation(TranslationMixin, Base):
    __tablename__ = 'category_translation'
    __table_args__ = (UniqueConstraint('category_id', 'language_code', name='uq_category_translation_lang'),)

    ENTITY_COLUMN = 'category_id'
    TRANSLATABLE_FIELDS = ('name', 'description')

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    category_id = Column(BigInteger, ForeignKey('category.id', ondelete='CASCADE'), nullable=False, index=True)
    language_code = Column(String(8), ForeignKey('language.code'), nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    category = relationship('Category', back_populates='translations')

    def __repr__(self):
        return f"<CategoryTranslation(category_id={self.category_id}, lang='{self.language_code}')>"


class VariantTranslation(TranslationMixin, Base):
    __tablename__ = 'variant_translation'
    __table_args__ = (UniqueConstraint('variant_id', 'language_code', name='uq_variant_translation_lang'),)

    ENTITY_COLUMN = 'variant_id'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    variant_id = Column(BigInteger, ForeignKey('product_variant.id', ondelete='CASCADE'), nullable=False, index=True)
    language_code = Column(String(8), ForeignKey('language.code'), nullable=False)
    name = Column(String, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    variant = relationship('ProductVariant', back_populates='translations')

    def __repr__(self):
        return f"<VariantTranslation(variant_id={self.variant_id}, lang='{self.language_code}')>"
