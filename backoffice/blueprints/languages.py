"""Settings blueprint for content languages."""

from flask import Blueprint, current_app, jsonify, request

from backoffice.database import get_session
from backoffice.decorators.permissions import require_role
from backoffice.exceptions import NotFoundError
from backoffice.middleware import require_login, require_tenant
from backoffice.services import language_service


languages_bp = Blueprint('languages', __name__, url_prefix='/api/settings/languages')


@languages_bp.route('', methods=['GET'])
@require_login
def list_languages():
    """All languages, default first."""
    languages = language_service.list_languages(get_session())
    return jsonify({'languages': [language.to_dict() for language in languages]})


@languages_bp.route('/active', methods=['GET'])
@require_login
def list_active_languages():
    languages = language_service.list_active_languages(get_session())
    return jsonify({'languages': [language.to_dict() for language in languages]})


@languages_bp.route('/default', methods=['GET'])
@require_login
def get_default_language():
    language = language_service.get_default_language(get_session())
    if not language:
        raise NotFoundError('No default language configured')
    return jsonify(language.to_dict())


# Languages are shared by every tenant: an owner of any tenant edits the
# list and the default for all of them.


@languages_bp.route('/<code>', methods=['PATCH'])
@require_login
@require_tenant
@require_role('OWNER')
def update_language(code: str):
    data = request.get_json(silent=True) or {}
    language = language_service.update_language(get_session(), code, data)
    return jsonify(language.to_dict())


@languages_bp.route('/<code>/default', methods=['POST'])
@require_login
@require_tenant
@require_role('OWNER')
def set_default_language(code: str):
    """Global setting, not scoped to g.tenant_id."""
    language = language_service.set_default_language(get_session(), code)
    current_app.logger.info(f"Default language set to '{code}'")
    return jsonify(language.to_dict())
