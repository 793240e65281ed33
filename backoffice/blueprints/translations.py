"""
Translations blueprint - resolve and edit localized content of
products, categories and variants (tenant-scoped).
"""

from typing import List

from flask import Blueprint, current_app, g, jsonify, request

from backoffice.database import get_session
from backoffice.decorators.permissions import require_role
from backoffice.exceptions import BusinessLogicError
from backoffice.middleware import require_login, require_tenant
from backoffice.models import Category, Product, ProductVariant
from backoffice.services.language_service import resolve_default_language_code
from backoffice.services.translation_repository import TranslationRepository, get_translation_model
from backoffice.services.translation_service import TranslationResolver


translations_bp = Blueprint('translations', __name__, url_prefix='/api/translations')


def _tenant_entity_ids(session, kind: str, ids: List[int]) -> List[int]:
    """Subset of ids that belong to the current tenant."""
    if not ids:
        return []
    if kind == 'variant':
        query = session.query(ProductVariant.id).join(
            Product, Product.id == ProductVariant.product_id
        ).filter(ProductVariant.id.in_(ids), Product.tenant_id == g.tenant_id)
    else:
        model = Product if kind == 'product' else Category
        query = session.query(model.id).filter(model.id.in_(ids), model.tenant_id == g.tenant_id)
    return [row[0] for row in query.all()]


def _parse_ids(raw: str) -> List[int]:
    try:
        return [int(part) for part in raw.split(',') if part.strip()]
    except ValueError:
        raise BusinessLogicError('ids must be a comma separated list of integers')


def _build_resolver(session, kind: str):
    default_code = resolve_default_language_code(session, current_app.config.get('DEFAULT_LANGUAGE_CODE'))
    return TranslationResolver(TranslationRepository(session).source(kind), default_code), default_code


@translations_bp.route('/<kind>', methods=['GET'])
@require_login
@require_tenant
def resolve_many(kind: str):
    """
    Resolve translations for ?ids=1,2,3 in ?lang=xx.

    Ids without a translation in either language are absent from the
    result; the client shows the base name for those.
    """
    get_translation_model(kind)
    session = get_session()
    resolver, default_code = _build_resolver(session, kind)
    language_code = request.args.get('lang') or default_code
    if not language_code:
        raise BusinessLogicError('No language requested and no default language configured')

    ids = _tenant_entity_ids(session, kind, _parse_ids(request.args.get('ids', '')))
    resolved = resolver.resolve_many(ids, language_code)
    return jsonify({
        'language_code': language_code,
        'translations': {str(entity_id): row.to_dict() for entity_id, row in resolved.items()},
        'degraded': resolver.failed_queries > 0,
    })


@translations_bp.route('/<kind>/<int:entity_id>', methods=['GET'])
@require_login
@require_tenant
def resolve_one(kind: str, entity_id: int):
    get_translation_model(kind)
    session = get_session()
    resolver, default_code = _build_resolver(session, kind)
    language_code = request.args.get('lang') or default_code
    if not language_code:
        raise BusinessLogicError('No language requested and no default language configured')

    translation = None
    if _tenant_entity_ids(session, kind, [entity_id]):
        translation = resolver.resolve(entity_id, language_code)
    return jsonify({
        'language_code': language_code,
        'translation': translation.to_dict() if translation is not None else None,
        'degraded': resolver.failed_queries > 0,
    })


@translations_bp.route('/<kind>/<int:entity_id>/all', methods=['GET'])
@require_login
@require_tenant
def list_translations(kind: str, entity_id: int):
    get_translation_model(kind)
    session = get_session()
    rows = []
    if _tenant_entity_ids(session, kind, [entity_id]):
        rows = TranslationRepository(session).list_translations(kind, entity_id)
    return jsonify({'translations': [row.to_dict() for row in rows]})


@translations_bp.route('/<kind>/<int:entity_id>/<language_code>', methods=['PUT'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def upsert_translation(kind: str, entity_id: int, language_code: str):
    data = request.get_json(silent=True) or {}
    translation = TranslationRepository(get_session()).upsert_translation(
        kind, entity_id, language_code, data, tenant_id=g.tenant_id
    )
    return jsonify(translation.to_dict())


@translations_bp.route('/<kind>/<int:entity_id>/<language_code>', methods=['DELETE'])
@require_login
@require_tenant
@require_role('OWNER', 'ADMIN')
def delete_translation(kind: str, entity_id: int, language_code: str):
    TranslationRepository(get_session()).delete_translation(
        kind, entity_id, language_code, tenant_id=g.tenant_id
    )
    return jsonify({'status': 'ok'})
