"""Product image ordering: primary flag and positions."""

import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError

from backoffice.exceptions import BusinessLogicError, NotFoundError
from backoffice.models import ProductMedia
from backoffice.services.product_service import get_product

logger = logging.getLogger(__name__)


def list_product_media(session, tenant_id: int, product_id: int) -> List[ProductMedia]:
    """Images of a product ordered by position."""
    get_product(session, tenant_id, product_id)
    return session.query(ProductMedia).filter(
        ProductMedia.product_id == product_id
    ).order_by(ProductMedia.position, ProductMedia.id).all()


def set_primary(session, tenant_id: int, product_id: int, media_id: int) -> ProductMedia:
    """Flag media_id as the primary image; every other image of the product loses the flag."""
    media = list_product_media(session, tenant_id, product_id)
    target = next((m for m in media if m.id == media_id), None)
    if target is None:
        raise NotFoundError(f'Image {media_id} not found for product {product_id}')

    for item in media:
        item.is_primary = item.id == media_id

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[MEDIA] Error setting primary image {media_id}: {e}")
        raise BusinessLogicError(f'Error setting primary image: {e}')
    return target


def update_positions(session, tenant_id: int, product_id: int, ordered_ids: Sequence[int]) -> List[ProductMedia]:
    """
    Reassign positions 0..n-1 following ordered_ids.

    ordered_ids must list every image of the product exactly once.
    """
    media = list_product_media(session, tenant_id, product_id)
    by_id = {m.id: m for m in media}

    if len(ordered_ids) != len(set(ordered_ids)):
        raise BusinessLogicError('Duplicate image ids in ordering')
    if set(ordered_ids) != set(by_id):
        raise BusinessLogicError('Ordering must list every image of the product exactly once')

    for position, media_id in enumerate(ordered_ids):
        by_id[media_id].position = position

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[MEDIA] Error reordering images of product {product_id}: {e}")
        raise BusinessLogicError(f'Error reordering images: {e}')
    return [by_id[media_id] for media_id in ordered_ids]
