"""Category management and tree reads (tenant-scoped)."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from backoffice.exceptions import BusinessLogicError, NotFoundError
from backoffice.models import Category, CategoryType, Product
from backoffice.services.cache_service import get_cache
from backoffice.services.category_tree import CategoryNode, build_category_tree

logger = logging.getLogger(__name__)

CACHE_MODULE = 'categories'
CATEGORY_TYPES = {t.value for t in CategoryType}


def invalidate_categories_cache(tenant_id: int) -> None:
    """Drop the cached category list of a tenant."""
    try:
        get_cache().invalidate_module(tenant_id, CACHE_MODULE)
    except RuntimeError:
        logger.debug("[CACHE] Cache not initialized, nothing to invalidate")


def _load_categories(session, tenant_id: int) -> List[Dict[str, Any]]:
    categories = session.query(Category).filter(
        Category.tenant_id == tenant_id
    ).order_by(Category.name, Category.id).all()
    return [category.to_dict() for category in categories]


def list_categories(session, tenant_id: int, ttl: Optional[int] = None) -> List[Dict[str, Any]]:
    """Flat category list of a tenant, sorted by name, served from Redis when possible."""
    try:
        cache = get_cache()
    except RuntimeError:
        return _load_categories(session, tenant_id)
    return cache.memoize(tenant_id, CACHE_MODULE, 'all', lambda: _load_categories(session, tenant_id), ttl)


def get_category_tree(session, tenant_id: int, ttl: Optional[int] = None) -> List[CategoryNode]:
    """Category forest of a tenant. Recomputed on every call from the flat list."""
    return build_category_tree(list_categories(session, tenant_id, ttl))


def get_category(session, tenant_id: int, category_id: int) -> Category:
    category = session.query(Category).filter(
        Category.id == category_id,
        Category.tenant_id == tenant_id
    ).first()
    if not category:
        raise NotFoundError(f'Category {category_id} not found')
    return category


def _is_descendant(session, tenant_id: int, ancestor_id: int, candidate_id: int) -> bool:
    """True when candidate_id sits somewhere below ancestor_id."""
    parents = dict(session.query(Category.id, Category.parent_id).filter(
        Category.tenant_id == tenant_id
    ).all())
    seen = set()
    current = parents.get(candidate_id)
    while current is not None and current not in seen:
        if current == ancestor_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


def _validate(session, tenant_id: int, data: Dict[str, Any], category_id: Optional[int] = None) -> None:
    if 'name' in data or category_id is None:
        name = (data.get('name') or '').strip()
        if not name:
            raise BusinessLogicError('Category name is required')
        if len(name) > 120:
            raise BusinessLogicError('Category name must be at most 120 characters')
        data['name'] = name

    if 'type' in data and data['type'] not in CATEGORY_TYPES:
        raise BusinessLogicError(f'Invalid category type "{data["type"]}"')

    parent_id = data.get('parent_id')
    if parent_id is None:
        return
    if category_id is not None and parent_id == category_id:
        raise BusinessLogicError('Category cannot be its own parent')
    _check_parent_exists(session, tenant_id, parent_id)
    if category_id is not None and _is_descendant(session, tenant_id, category_id, parent_id):
        raise BusinessLogicError('Cannot set a descendant category as parent')


def _check_parent_exists(session, tenant_id: int, parent_id: int) -> None:
    exists = session.query(Category.id).filter(
        Category.id == parent_id,
        Category.tenant_id == tenant_id
    ).first()
    if exists is None:
        raise BusinessLogicError('Parent category not found')


def _commit(session, tenant_id: int, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error on category {action} (tenant {tenant_id}): {e}")
        raise BusinessLogicError(f'Error on category {action}: {e}')
    invalidate_categories_cache(tenant_id)


def create_category(session, tenant_id: int, data: Dict[str, Any]) -> Category:
    data = dict(data)
    _validate(session, tenant_id, data)
    category = Category(
        tenant_id=tenant_id,
        name=data['name'],
        type=data.get('type') or CategoryType.RETAIL.value,
        parent_id=data.get('parent_id'),
    )
    session.add(category)
    _commit(session, tenant_id, 'create')
    return category


def update_category(session, tenant_id: int, category_id: int, data: Dict[str, Any]) -> Category:
    """Partial update; only keys present in data are touched."""
    category = get_category(session, tenant_id, category_id)
    data = {k: v for k, v in data.items() if k in ('name', 'type', 'parent_id')}
    _validate(session, tenant_id, data, category_id)
    for key, value in data.items():
        setattr(category, key, value)
    _commit(session, tenant_id, 'update')
    return category


def delete_category(session, tenant_id: int, category_id: int) -> None:
    """Delete a category unless products still reference it. Children become roots."""
    category = get_category(session, tenant_id, category_id)

    product_count = session.query(func.count(Product.id)).filter(
        Product.tenant_id == tenant_id,
        Product.category_id == category_id
    ).scalar()
    if product_count > 0:
        raise BusinessLogicError(
            f'Category "{category.name}" still holds {product_count} product(s); reassign them first'
        )

    session.query(Category).filter(
        Category.tenant_id == tenant_id,
        Category.parent_id == category_id
    ).update({Category.parent_id: None}, synchronize_session='fetch')
    session.delete(category)
    _commit(session, tenant_id, 'delete')
