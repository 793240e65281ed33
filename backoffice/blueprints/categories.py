"""Categories blueprint - flat list, tree and management (tenant-scoped)."""

from typing import Any, Dict, List, Optional

from flask import Blueprint, current_app, g, jsonify, request

from backoffice.database import get_session
from backoffice.decorators.permissions import require_role
from backoffice.exceptions import BusinessLogicError
from backoffice.middleware import require_login, require_tenant
from backoffice.services import category_service
from backoffice.services.category_tree import flatten_tree
from backoffice.services.language_service import resolve_default_language_code
from backoffice.services.translation_repository import TranslationRepository
from backoffice.services.translation_service import TranslationResolver, display_name


categories_bp = Blueprint('categories', __name__, url_prefix='/api/categories')


def _parse_optional_int(value: Any, field: str) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError(f'{field} must be an integer')


def _category_payload() -> Dict[str, Any]:
    data = request.get_json(silent=True) or {}
    payload = {key: data[key] for key in ('name', 'type', 'parent_id') if key in data}
    if 'parent_id' in payload:
        payload['parent_id'] = _parse_optional_int(payload['parent_id'], 'parent_id')
    return payload


def _attach_display_names(nodes: List[Dict[str, Any]], names: Dict[Any, str]) -> None:
    for node in nodes:
        node['display_name'] = names[node['id']]
        _attach_display_names(node['children'], names)


@categories_bp.route('', methods=['GET'])
@require_login
@require_tenant
def list_categories():
    """Flat category list sorted by name."""
    session = get_session()
    ttl = current_app.config.get('CACHE_CATEGORIES_TTL')
    return jsonify({'categories': category_service.list_categories(session, g.tenant_id, ttl)})


@categories_bp.route('/tree', methods=['GET'])
@require_login
@require_tenant
def category_tree():
    """
    Category forest. With ?lang=xx every node also carries a display_name
    resolved in that language (default-language fallback, base name last).
    """
    session = get_session()
    ttl = current_app.config.get('CACHE_CATEGORIES_TTL')
    roots = category_service.get_category_tree(session, g.tenant_id, ttl)
    tree = [root.to_dict() for root in roots]

    language_code = request.args.get('lang', '').strip()
    if language_code:
        resolver = TranslationResolver(
            TranslationRepository(session).category_translations,
            resolve_default_language_code(session, current_app.config.get('DEFAULT_LANGUAGE_CODE'))
        )
        flat = flatten_tree(roots)
        translations = resolver.resolve_many({node.id for node in flat}, language_code)
        _attach_display_names(tree, {node.id: display_name(node, translations) for node in flat})

    return jsonify({'tree': tree})


@categories_bp.route('/<int:category_id>', methods=['GET'])
@require_login
@require_tenant
def get_category(category_id: int):
    category = category_service.get_category(get_session(), g.tenant_id, category_id)
    return jsonify(category.to_dict())


@categories_bp.route('', methods=['POST'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def create_category():
    category = category_service.create_category(get_session(), g.tenant_id, _category_payload())
    current_app.logger.info(f"Category {category.id} created in tenant {g.tenant_id}")
    return jsonify(category.to_dict()), 201


@categories_bp.route('/<int:category_id>', methods=['PATCH'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def update_category(category_id: int):
    category = category_service.update_category(get_session(), g.tenant_id, category_id, _category_payload())
    return jsonify(category.to_dict())


@categories_bp.route('/<int:category_id>', methods=['DELETE'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def delete_category(category_id: int):
    category_service.delete_category(get_session(), g.tenant_id, category_id)
    current_app.logger.info(f"Category {category_id} deleted in tenant {g.tenant_id}")
    return jsonify({'status': 'ok'})


@categories_bp.route('/<int:category_id>/translations', methods=['GET'])
@require_login
@require_tenant
def category_translations(category_id: int):
    """Every stored translation of one category."""
    session = get_session()
    category_service.get_category(session, g.tenant_id, category_id)
    rows = TranslationRepository(session).list_translations('category', category_id)
    return jsonify({'translations': [row.to_dict() for row in rows]})
