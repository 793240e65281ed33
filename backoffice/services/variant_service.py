"""Product variants (sizes, flavours...). Tenant scope comes from the parent product."""

import logging
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from backoffice.exceptions import BusinessLogicError, NotFoundError
from backoffice.models import ProductVariant
from backoffice.services.product_service import get_product, parse_amount

logger = logging.getLogger(__name__)

VARIANT_FIELDS = ('name', 'price_mod', 'barcode', 'sku')


def list_variants(session, tenant_id: int, product_id: int) -> List[ProductVariant]:
    """Variants of a product sorted by name."""
    get_product(session, tenant_id, product_id)
    return session.query(ProductVariant).filter(
        ProductVariant.product_id == product_id
    ).order_by(ProductVariant.name, ProductVariant.id).all()


def get_variant(session, tenant_id: int, product_id: int, variant_id: int) -> ProductVariant:
    get_product(session, tenant_id, product_id)
    variant = session.query(ProductVariant).filter(
        ProductVariant.id == variant_id,
        ProductVariant.product_id == product_id
    ).first()
    if not variant:
        raise NotFoundError(f'Variant {variant_id} not found for product {product_id}')
    return variant


def _validate(data: Dict[str, Any], creating: bool) -> Dict[str, Any]:
    data = {k: v for k, v in data.items() if k in VARIANT_FIELDS}
    if 'name' in data or creating:
        name = (data.get('name') or '').strip()
        if not name:
            raise BusinessLogicError('Variant name is required')
        data['name'] = name
    if 'price_mod' in data:
        # Negative modifiers are discounts on the base price
        data['price_mod'] = parse_amount(data['price_mod'], 'price_mod', allow_negative=True)
    for field in ('barcode', 'sku'):
        if field in data:
            value = data[field].strip() if isinstance(data[field], str) else data[field]
            data[field] = value or None
    return data


def _commit(session, product_id: int, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error on variant {action} (product {product_id}): {e}")
        raise BusinessLogicError(f'Error on variant {action}: {e}')


def create_variant(session, tenant_id: int, product_id: int, data: Dict[str, Any]) -> ProductVariant:
    get_product(session, tenant_id, product_id)
    data = _validate(data, creating=True)
    variant = ProductVariant(
        product_id=product_id,
        name=data['name'],
        price_mod=data.get('price_mod', Decimal('0.00')),
        barcode=data.get('barcode'),
        sku=data.get('sku'),
    )
    session.add(variant)
    _commit(session, product_id, 'create')
    return variant


def update_variant(session, tenant_id: int, product_id: int, variant_id: int,
                   data: Dict[str, Any]) -> ProductVariant:
    variant = get_variant(session, tenant_id, product_id, variant_id)
    for key, value in _validate(data, creating=False).items():
        setattr(variant, key, value)
    _commit(session, product_id, 'update')
    return variant


def delete_variant(session, tenant_id: int, product_id: int, variant_id: int) -> None:
    """Delete a variant and its translations. Past order lines keep a null variant_id."""
    variant = get_variant(session, tenant_id, product_id, variant_id)
    session.delete(variant)
    _commit(session, product_id, 'delete')
