"""Product management (tenant-scoped)."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from backoffice.exceptions import BusinessLogicError, NotFoundError
from backoffice.models import Category, CategoryType, OrderLine, Product
from backoffice.services.pagination import DEFAULT_PAGE_SIZE, paginate

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ('name', 'type', 'price', 'category_id', 'barcode', 'sku', 'brand', 'is_available')
PRODUCT_TYPES = {t.value for t in CategoryType}


def parse_amount(value: Any, field: str, allow_negative: bool = False) -> Decimal:
    """Money value rounded to cents."""
    try:
        amount = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError):
        raise BusinessLogicError(f'{field} must be a number')
    if amount < 0 and not allow_negative:
        raise BusinessLogicError(f'{field} can not be negative')
    return amount


def _clean_code(value: Any) -> Optional[str]:
    value = (value or '').strip() if isinstance(value, str) else value
    return value or None


def get_product(session, tenant_id: int, product_id: int) -> Product:
    product = session.query(Product).filter(
        Product.id == product_id,
        Product.tenant_id == tenant_id
    ).first()
    if not product:
        raise NotFoundError(f'Product {product_id} not found')
    return product


def list_products(session, tenant_id: int, category_id: Optional[int] = None, search: str = '',
                  is_available: Optional[bool] = None, page: int = 1,
                  page_size: int = DEFAULT_PAGE_SIZE) -> Tuple[List[Product], int]:
    """
    One page of a tenant's products sorted by name, with the total count.

    search matches name, SKU or barcode, case-insensitively.
    """
    query = session.query(Product).filter(Product.tenant_id == tenant_id)

    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if search:
        pattern = f'%{search.lower()}%'
        query = query.filter(or_(
            func.lower(Product.name).like(pattern),
            func.lower(Product.sku).like(pattern),
            func.lower(Product.barcode).like(pattern)
        ))
    if is_available is not None:
        query = query.filter(Product.is_available == is_available)

    return paginate(query.order_by(Product.name, Product.id), page, page_size)


def _validate(session, tenant_id: int, data: Dict[str, Any], product_id: Optional[int] = None) -> None:
    if 'name' in data or product_id is None:
        name = (data.get('name') or '').strip()
        if not name:
            raise BusinessLogicError('Product name is required')
        data['name'] = name

    if 'type' in data and data['type'] not in PRODUCT_TYPES:
        raise BusinessLogicError(f'Invalid product type "{data["type"]}"')

    if 'price' in data:
        data['price'] = parse_amount(data['price'], 'price')

    if 'is_available' in data and not isinstance(data['is_available'], bool):
        raise BusinessLogicError('is_available must be true or false')

    for field in ('barcode', 'sku', 'brand'):
        if field in data:
            data[field] = _clean_code(data[field])

    if data.get('category_id') is not None:
        category = session.query(Category.id).filter(
            Category.id == data['category_id'],
            Category.tenant_id == tenant_id
        ).first()
        if category is None:
            raise BusinessLogicError('Category not found')

    if data.get('sku'):
        duplicate = session.query(Product.id).filter(
            Product.tenant_id == tenant_id,
            Product.sku == data['sku']
        )
        if product_id is not None:
            duplicate = duplicate.filter(Product.id != product_id)
        if duplicate.first() is not None:
            raise BusinessLogicError(f'SKU "{data["sku"]}" is already used by another product')


def _commit(session, tenant_id: int, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error on product {action} (tenant {tenant_id}): {e}")
        raise BusinessLogicError(f'Error on product {action}: {e}')


def create_product(session, tenant_id: int, data: Dict[str, Any]) -> Product:
    data = {k: v for k, v in data.items() if k in PRODUCT_FIELDS}
    _validate(session, tenant_id, data)
    product = Product(
        tenant_id=tenant_id,
        name=data['name'],
        type=data.get('type') or CategoryType.RETAIL.value,
        price=data.get('price', Decimal('0.00')),
        category_id=data.get('category_id'),
        barcode=data.get('barcode'),
        sku=data.get('sku'),
        brand=data.get('brand'),
        is_available=data.get('is_available', True),
    )
    session.add(product)
    _commit(session, tenant_id, 'create')
    return product


def update_product(session, tenant_id: int, product_id: int, data: Dict[str, Any]) -> Product:
    """Partial update; only keys present in data are touched."""
    product = get_product(session, tenant_id, product_id)
    data = {k: v for k, v in data.items() if k in PRODUCT_FIELDS}
    _validate(session, tenant_id, data, product_id)
    for key, value in data.items():
        setattr(product, key, value)
    _commit(session, tenant_id, 'update')
    return product


def set_availability(session, tenant_id: int, product_id: int, is_available: bool) -> Product:
    """Mark a product as orderable or sold out."""
    return update_product(session, tenant_id, product_id, {'is_available': is_available})


def delete_product(session, tenant_id: int, product_id: int) -> None:
    """
    Delete a product with its variants, images and translations.

    Refused once an order line references it: mark it unavailable instead.
    """
    product = get_product(session, tenant_id, product_id)

    line_count = session.query(func.count(OrderLine.id)).filter(
        OrderLine.tenant_id == tenant_id,
        OrderLine.product_id == product_id
    ).scalar()
    if line_count > 0:
        raise BusinessLogicError(
            f'Product "{product.name}" appears in {line_count} order line(s); mark it unavailable instead'
        )

    session.delete(product)
    _commit(session, tenant_id, 'delete')
