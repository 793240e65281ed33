"""
Translation resolution with default-language fallback.

The resolver asks its source for the requested language first and, for
whatever is still missing, asks once more for the default language.
Fallback is a single level: there is no chain beyond the default.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from backoffice.exceptions import TranslationBackendError
from backoffice.services.translation_repository import TranslationSource

logger = logging.getLogger(__name__)


class TranslationResolver:
    """
    Resolve localized rows for one entity kind.

    Backend failures never reach the caller: they are logged and the
    failing query counts as zero rows, so the UI falls back to the
    untranslated base name. failed_queries keeps a tally for callers
    that want to flag a degraded response.
    """

    def __init__(self, source: TranslationSource, default_language_code: Optional[str]):
        self.source = source
        self.default_language_code = default_language_code
        self.failed_queries = 0
        if not default_language_code:
            logger.warning("[I18N] No default language configured, fallback disabled")

    def _fetch(self, entity_ids: List[Any], language_code: str) -> List[Any]:
        try:
            return self.source.fetch(entity_ids, language_code)
        except TranslationBackendError as e:
            self.failed_queries += 1
            logger.error(f"[I18N] {e.message}")
            return []

    def _should_fall_back(self, language_code: str) -> bool:
        return bool(self.default_language_code) and language_code != self.default_language_code

    def resolve(self, entity_id: Any, language_code: str) -> Optional[Any]:
        """Translation of entity_id in language_code, else in the default language, else None."""
        rows = self._fetch([entity_id], language_code)
        if rows:
            return rows[0]
        if not self._should_fall_back(language_code):
            return None
        rows = self._fetch([entity_id], self.default_language_code)
        return rows[0] if rows else None

    def resolve_many(self, entity_ids: Iterable[Any], language_code: str) -> Dict[Any, Any]:
        """
        Map entity id -> translation for every id that has one.

        At most two source calls whatever the number of ids: one for the
        requested language, one for all ids still missing. Rows for ids
        outside the input set are ignored.
        """
        wanted = set(entity_ids)
        if not wanted:
            return {}

        resolved: Dict[Any, Any] = {}
        for row in self._fetch(list(wanted), language_code):
            if row.entity_id in wanted and row.entity_id not in resolved:
                resolved[row.entity_id] = row

        missing = wanted - resolved.keys()
        if missing and self._should_fall_back(language_code):
            for row in self._fetch(list(missing), self.default_language_code):
                if row.entity_id in missing and row.entity_id not in resolved:
                    resolved[row.entity_id] = row

        return resolved


def display_name(entity: Any, translations: Dict[Any, Any]) -> str:
    """Translated name when one was resolved, the entity's base name otherwise."""
    translation = translations.get(entity.id)
    if translation is not None and translation.name:
        return translation.name
    return entity.name


# Change-feed tables -> entity kind, used to route invalidation messages
CHANGE_TABLES = {
    'product_translation': ('product', 'product_id'),
    'category_translation': ('category', 'category_id'),
    'variant_translation': ('variant', 'variant_id'),
}


class TranslationCache:
    """
    Caller-owned cache of one resolved translation map.

    The cache is bound to an entity kind. It remembers the language and
    the id set of the last resolution; asking for another language or
    another id set drops the stored map and resolves again. External
    change notifications come in through invalidate() or apply_change().
    """

    def __init__(self, kind: str):
        self.kind = kind
        self.language_code: Optional[str] = None
        self.entity_ids: frozenset = frozenset()
        self._resolved: Optional[Dict[Any, Any]] = None

    @property
    def is_valid(self) -> bool:
        return self._resolved is not None

    def get(self, resolver: TranslationResolver, entity_ids: Iterable[Any], language_code: str) -> Dict[Any, Any]:
        ids = frozenset(entity_ids)
        if self._resolved is not None and ids == self.entity_ids and language_code == self.language_code:
            return self._resolved

        self._resolved = resolver.resolve_many(ids, language_code)
        self.entity_ids = ids
        self.language_code = language_code
        return self._resolved

    def invalidate(self, entity_ids: Optional[Iterable[Any]] = None) -> bool:
        """
        Drop the stored map. With entity_ids, only when one of them is part
        of the cached set. Returns True when something was dropped.
        """
        if self._resolved is None:
            return False
        if entity_ids is not None and not (set(entity_ids) & self.entity_ids):
            return False
        self._resolved = None
        logger.debug(f"[I18N] Translation cache for {self.kind} invalidated")
        return True

    def apply_change(self, event: Dict[str, Any]) -> bool:
        """
        Handle a change event from the database change feed.

        Expected shape: {'table': ..., 'record': {...}, 'old_record': {...}}.
        Events on other tables, or on entities outside the cached set, are
        ignored. A change on the languages table drops everything.
        """
        table = event.get('table')
        if table == 'language':
            return self.invalidate()

        route = CHANGE_TABLES.get(table)
        if route is None or route[0] != self.kind:
            return False

        column = route[1]
        touched = set()
        for key in ('record', 'old_record'):
            record = event.get(key) or {}
            if record.get(column) is not None:
                touched.add(record[column])
        if not touched:
            return self.invalidate()
        return self.invalidate(touched)
