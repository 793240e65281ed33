"""Product media blueprint - image order and primary image (tenant-scoped)."""

from flask import Blueprint, g, jsonify, request

from backoffice.database import get_session
from backoffice.decorators.permissions import require_role
from backoffice.exceptions import BusinessLogicError
from backoffice.middleware import require_login, require_tenant
from backoffice.services import media_service


media_bp = Blueprint('media', __name__, url_prefix='/api/products')


@media_bp.route('/<int:product_id>/media', methods=['GET'])
@require_login
@require_tenant
def list_media(product_id: int):
    media = media_service.list_product_media(get_session(), g.tenant_id, product_id)
    return jsonify({'media': [item.to_dict() for item in media]})


@media_bp.route('/<int:product_id>/media/<int:media_id>/primary', methods=['POST'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def set_primary(product_id: int, media_id: int):
    media = media_service.set_primary(get_session(), g.tenant_id, product_id, media_id)
    return jsonify(media.to_dict())


@media_bp.route('/<int:product_id>/media/positions', methods=['PUT'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def update_positions(product_id: int):
    data = request.get_json(silent=True) or {}
    order = data.get('order')
    if not isinstance(order, list):
        raise BusinessLogicError('order must be a list of image ids')
    try:
        order = [int(media_id) for media_id in order]
    except (TypeError, ValueError):
        raise BusinessLogicError('order must be a list of image ids')
    media = media_service.update_positions(get_session(), g.tenant_id, product_id, order)
    return jsonify({'media': [item.to_dict() for item in media]})
