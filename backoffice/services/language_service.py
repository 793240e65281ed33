"""Language settings: listing, default selection and activation."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from backoffice.exceptions import BusinessLogicError, NotFoundError
from backoffice.models import Language

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('name', 'native_name', 'is_rtl', 'is_active')


def list_languages(session) -> List[Language]:
    """All languages, default first, then by name."""
    return session.query(Language).order_by(Language.is_default.desc(), Language.name).all()


def list_active_languages(session) -> List[Language]:
    return [language for language in list_languages(session) if language.is_active]


def get_default_language(session) -> Optional[Language]:
    return session.query(Language).filter(Language.is_default == True).first()  # noqa: E712


def resolve_default_language_code(session, configured: Optional[str] = None) -> Optional[str]:
    """
    Code of the default language row. Falls back to the configured code
    when no row is flagged, which should not happen outside fresh installs.
    """
    default = get_default_language(session)
    if default:
        return default.code
    if configured:
        logger.warning(f"[I18N] No default language row, using configured '{configured}'")
    else:
        logger.error("[I18N] No default language row and none configured")
    return configured


def _get_language(session, code: str) -> Language:
    language = session.query(Language).filter(Language.code == code).first()
    if not language:
        raise NotFoundError(f'Language "{code}" not found')
    return language


def update_language(session, code: str, data: Dict[str, Any]) -> Language:
    """Update display fields and flags of a language. The default flag goes through set_default_language."""
    language = _get_language(session, code)

    if 'is_default' in data:
        raise BusinessLogicError('Use the default-language endpoint to change the default language')
    if data.get('is_active') is False and language.is_default:
        raise BusinessLogicError('The default language can not be deactivated')

    for field in UPDATABLE_FIELDS:
        if field in data:
            setattr(language, field, data[field])

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[I18N] Error updating language {code}: {e}")
        raise BusinessLogicError(f'Error updating language: {e}')
    return language


def set_default_language(session, code: str) -> Language:
    """
    Make `code` the default language.

    Unsetting the previous default and setting the new one happen in the
    same transaction, so readers never see zero or two defaults.
    """
    language = _get_language(session, code)
    if not language.is_active:
        raise BusinessLogicError(f'Language "{code}" is inactive and can not be the default')

    try:
        session.query(Language).filter(Language.code != code).update(
            {Language.is_default: False}, synchronize_session='fetch'
        )
        language.is_default = True
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[I18N] Error setting default language {code}: {e}")
        raise BusinessLogicError(f'Error setting default language: {e}')

    logger.info(f"[I18N] Default language is now '{code}'")
    return language
