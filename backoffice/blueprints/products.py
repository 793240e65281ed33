"""Products blueprint - catalog products and their variants (tenant-scoped)."""

from typing import Any, Dict, Optional

from flask import Blueprint, current_app, g, jsonify, request

from backoffice.database import get_session
from backoffice.decorators.permissions import require_role
from backoffice.exceptions import BusinessLogicError
from backoffice.middleware import require_login, require_tenant
from backoffice.services import product_service, variant_service
from backoffice.services.pagination import page_args, page_payload


products_bp = Blueprint('products', __name__, url_prefix='/api/products')


def _parse_optional_int(value: Any, field: str) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError(f'{field} must be an integer')


def _parse_flag(value: Optional[str]) -> Optional[bool]:
    if value in (None, '', 'all'):
        return None
    if value.lower() in ('true', '1'):
        return True
    if value.lower() in ('false', '0'):
        return False
    raise BusinessLogicError('is_available must be true or false')


def _json_payload(fields) -> Dict[str, Any]:
    data = request.get_json(silent=True) or {}
    return {key: data[key] for key in fields if key in data}


@products_bp.route('', methods=['GET'])
@require_login
@require_tenant
def list_products():
    """Paginated product list. Filters: category_id, q, is_available."""
    page, page_size = page_args(request.args)
    category_id = request.args.get('category_id', '').strip()
    products, total = product_service.list_products(
        get_session(),
        g.tenant_id,
        category_id=None if category_id == 'all' else _parse_optional_int(category_id, 'category_id'),
        search=request.args.get('q', '').strip(),
        is_available=_parse_flag(request.args.get('is_available')),
        page=page,
        page_size=page_size,
    )
    return jsonify(page_payload('products', products, total, page, page_size))


@products_bp.route('/<int:product_id>', methods=['GET'])
@require_login
@require_tenant
def get_product(product_id: int):
    product = product_service.get_product(get_session(), g.tenant_id, product_id)
    return jsonify(product.to_dict())


@products_bp.route('', methods=['POST'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def create_product():
    payload = _json_payload(product_service.PRODUCT_FIELDS)
    if 'category_id' in payload:
        payload['category_id'] = _parse_optional_int(payload['category_id'], 'category_id')
    product = product_service.create_product(get_session(), g.tenant_id, payload)
    current_app.logger.info(f"Product {product.id} created in tenant {g.tenant_id}")
    return jsonify(product.to_dict()), 201


@products_bp.route('/<int:product_id>', methods=['PATCH'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def update_product(product_id: int):
    payload = _json_payload(product_service.PRODUCT_FIELDS)
    if 'category_id' in payload:
        payload['category_id'] = _parse_optional_int(payload['category_id'], 'category_id')
    product = product_service.update_product(get_session(), g.tenant_id, product_id, payload)
    return jsonify(product.to_dict())


@products_bp.route('/<int:product_id>/availability', methods=['POST'])
@require_login
@require_tenant
def set_availability(product_id: int):
    """Staff can flag a product as sold out during service."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data.get('is_available'), bool):
        raise BusinessLogicError('is_available must be true or false')
    product = product_service.set_availability(get_session(), g.tenant_id, product_id, data['is_available'])
    return jsonify(product.to_dict())


@products_bp.route('/<int:product_id>', methods=['DELETE'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def delete_product(product_id: int):
    product_service.delete_product(get_session(), g.tenant_id, product_id)
    current_app.logger.info(f"Product {product_id} deleted in tenant {g.tenant_id}")
    return jsonify({'status': 'ok'})


@products_bp.route('/<int:product_id>/variants', methods=['GET'])
@require_login
@require_tenant
def list_variants(product_id: int):
    variants = variant_service.list_variants(get_session(), g.tenant_id, product_id)
    return jsonify({'variants': [variant.to_dict() for variant in variants]})


@products_bp.route('/<int:product_id>/variants', methods=['POST'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def create_variant(product_id: int):
    payload = _json_payload(variant_service.VARIANT_FIELDS)
    variant = variant_service.create_variant(get_session(), g.tenant_id, product_id, payload)
    return jsonify(variant.to_dict()), 201


@products_bp.route('/<int:product_id>/variants/<int:variant_id>', methods=['PATCH'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def update_variant(product_id: int, variant_id: int):
    payload = _json_payload(variant_service.VARIANT_FIELDS)
    variant = variant_service.update_variant(get_session(), g.tenant_id, product_id, variant_id, payload)
    return jsonify(variant.to_dict())


@products_bp.route('/<int:product_id>/variants/<int:variant_id>', methods=['DELETE'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def delete_variant(product_id: int, variant_id: int):
    variant_service.delete_variant(get_session(), g.tenant_id, product_id, variant_id)
    return jsonify({'status': 'ok'})
