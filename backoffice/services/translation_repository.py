"""
Typed access to translation rows.

TranslationSource is the only thing the resolver depends on; the SQL
implementation below is what the application wires in, tests can pass
any object with the same fetch() signature.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError

from backoffice.exceptions import BusinessLogicError, NotFoundError, TranslationBackendError
from backoffice.models import (
    Language, Product, ProductVariant, Category,
    ProductTranslation, CategoryTranslation, VariantTranslation,
)

logger = logging.getLogger(__name__)

# Entity kind -> (translation model, owning entity model)
TRANSLATION_MODELS = {
    'product': (ProductTranslation, Product),
    'category': (CategoryTranslation, Category),
    'variant': (VariantTranslation, ProductVariant),
}


def get_translation_model(kind: str):
    """Translation model for an entity kind, NotFoundError for unknown kinds."""
    try:
        return TRANSLATION_MODELS[kind][0]
    except KeyError:
        raise NotFoundError(f'Unknown translatable entity "{kind}"')


class TranslationSource:
    """Interface: fetch translation rows of one language for a set of entities."""

    def fetch(self, entity_ids: Iterable[Any], language_code: str) -> List[Any]:
        """
        Return rows whose entity_id is in entity_ids and whose
        language_code matches. Raise TranslationBackendError on failure.
        """
        raise NotImplementedError


class SqlTranslationSource(TranslationSource):
    """TranslationSource reading one translation table through SQLAlchemy."""

    def __init__(self, session, model: Type):
        self.session = session
        self.model = model

    def fetch(self, entity_ids: Iterable[Any], language_code: str) -> List[Any]:
        ids = list(entity_ids)
        if not ids:
            return []
        column = self.model.entity_column()
        try:
            return self.session.query(self.model).filter(
                column.in_(ids),
                self.model.language_code == language_code
            ).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise TranslationBackendError(self.model.__tablename__, language_code, e) from e


class TranslationRepository:
    """
    Per-entity access to translation rows: sources for the resolver plus
    the write operations used by the admin screens.
    """

    def __init__(self, session):
        self.session = session

    # Sources -------------------------------------------------------------

    def source(self, kind: str) -> SqlTranslationSource:
        return SqlTranslationSource(self.session, get_translation_model(kind))

    @property
    def product_translations(self) -> SqlTranslationSource:
        return self.source('product')

    @property
    def category_translations(self) -> SqlTranslationSource:
        return self.source('category')

    @property
    def variant_translations(self) -> SqlTranslationSource:
        return self.source('variant')

    def get_product_translations(self, product_ids, language_code: str) -> List[ProductTranslation]:
        return self.product_translations.fetch(product_ids, language_code)

    def get_category_translations(self, category_ids, language_code: str) -> List[CategoryTranslation]:
        return self.category_translations.fetch(category_ids, language_code)

    def get_variant_translations(self, variant_ids, language_code: str) -> List[VariantTranslation]:
        return self.variant_translations.fetch(variant_ids, language_code)

    # CRUD ----------------------------------------------------------------

    def list_translations(self, kind: str, entity_id) -> List[Any]:
        """All translations of one entity, ordered by language code."""
        model = get_translation_model(kind)
        return self.session.query(model).filter(
            model.entity_column() == entity_id
        ).order_by(model.language_code).all()

    def upsert_translation(self, kind: str, entity_id, language_code: str, fields: Dict[str, Any],
                           tenant_id: Optional[int] = None):
        """
        Insert or update the (entity_id, language_code) translation.

        Only the model's translatable fields are taken from `fields`; a
        name is mandatory.
        """
        model = get_translation_model(kind)
        self._check_entity(kind, entity_id, tenant_id)
        self._check_language(language_code)

        name = (fields.get('name') or '').strip()
        if not name:
            raise BusinessLogicError('Translation name is required')

        translation = self.session.query(model).filter(
            model.entity_column() == entity_id,
            model.language_code == language_code
        ).first()
        created = translation is None
        if created:
            translation = model(language_code=language_code)
            setattr(translation, model.ENTITY_COLUMN, entity_id)
            self.session.add(translation)

        for field in model.TRANSLATABLE_FIELDS:
            if field in fields:
                value = fields[field]
                setattr(translation, field, value.strip() if isinstance(value, str) else value)
        translation.name = name

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[I18N] Error saving {kind} translation {entity_id}/{language_code}: {e}")
            raise BusinessLogicError(f'Error saving translation: {e}')

        logger.info(f"[I18N] {'Created' if created else 'Updated'} {kind} translation {entity_id}/{language_code}")
        return translation

    def delete_translation(self, kind: str, entity_id, language_code: str,
                           tenant_id: Optional[int] = None) -> None:
        model = get_translation_model(kind)
        self._check_entity(kind, entity_id, tenant_id)
        translation = self.session.query(model).filter(
            model.entity_column() == entity_id,
            model.language_code == language_code
        ).first()
        if not translation:
            raise NotFoundError(f'No {language_code} translation for {kind} {entity_id}')
        try:
            self.session.delete(translation)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[I18N] Error deleting {kind} translation {entity_id}/{language_code}: {e}")
            raise BusinessLogicError(f'Error deleting translation: {e}')

    def _check_language(self, language_code: str) -> None:
        if not self.session.query(Language).filter(Language.code == language_code).first():
            raise BusinessLogicError(f'Unknown language "{language_code}"')

    def _check_entity(self, kind: str, entity_id, tenant_id: Optional[int]) -> None:
        """Entity must exist and, when tenant_id is given, belong to that tenant."""
        if tenant_id is None:
            return
        entity_model = TRANSLATION_MODELS[kind][1]
        query = self.session.query(entity_model).filter(entity_model.id == entity_id)
        if entity_model is ProductVariant:
            query = query.join(Product, Product.id == ProductVariant.product_id).filter(
                Product.tenant_id == tenant_id
            )
        else:
            query = query.filter(entity_model.tenant_id == tenant_id)
        if not query.first():
            raise NotFoundError(f'{kind.capitalize()} {entity_id} not found')
