"""
Unit tests for translation resolution and the caller-owned translation cache.
"""

import pytest

from backoffice.exceptions import TranslationBackendError
from backoffice.services.translation_repository import TranslationSource
from backoffice.services.translation_service import TranslationCache, TranslationResolver, display_name


class Row:
    def __init__(self, entity_id, language_code, name):
        self.entity_id = entity_id
        self.language_code = language_code
        self.name = name

    def __repr__(self):
        return f'Row({self.entity_id}, {self.language_code}, {self.name})'


class FakeSource(TranslationSource):
    """In-memory source recording every fetch."""

    def __init__(self, rows, failing_languages=()):
        self.rows = rows
        self.failing_languages = set(failing_languages)
        self.calls = []

    def fetch(self, entity_ids, language_code):
        ids = set(entity_ids)
        self.calls.append((ids, language_code))
        if language_code in self.failing_languages:
            raise TranslationBackendError('product_translation', language_code, 'connection reset')
        return [r for r in self.rows if r.entity_id in ids and r.language_code == language_code]


@pytest.fixture
def pizza_rows():
    return [Row(1, 'en', 'Pizza'), Row(1, 'fr', 'Pizza (fr)')]


class TestResolve:

    def test_requested_language_found(self, pizza_rows):
        source = FakeSource(pizza_rows)
        resolver = TranslationResolver(source, 'fr')

        assert resolver.resolve(1, 'en') is pizza_rows[0]
        assert len(source.calls) == 1

    def test_falls_back_to_default(self, pizza_rows):
        source = FakeSource(pizza_rows)
        resolver = TranslationResolver(source, 'fr')

        row = resolver.resolve(1, 'ar')

        assert row is pizza_rows[1]
        assert [lang for _, lang in source.calls] == ['ar', 'fr']

    def test_default_language_missing_returns_none_without_second_query(self):
        source = FakeSource([Row(1, 'en', 'Pizza')])
        resolver = TranslationResolver(source, 'fr')

        assert resolver.resolve(1, 'fr') is None
        assert len(source.calls) == 1

    def test_nothing_anywhere(self):
        resolver = TranslationResolver(FakeSource([]), 'fr')
        assert resolver.resolve(5, 'ar') is None

    def test_no_default_language_skips_fallback(self, pizza_rows):
        source = FakeSource(pizza_rows)
        resolver = TranslationResolver(source, None)

        assert resolver.resolve(1, 'ar') is None
        assert len(source.calls) == 1

    def test_backend_failure_degrades_to_fallback(self, pizza_rows):
        source = FakeSource(pizza_rows, failing_languages={'ar'})
        resolver = TranslationResolver(source, 'fr')

        assert resolver.resolve(1, 'ar') is pizza_rows[1]
        assert resolver.failed_queries == 1

    def test_backend_failure_on_both_returns_none(self, pizza_rows):
        source = FakeSource(pizza_rows, failing_languages={'ar', 'fr'})
        resolver = TranslationResolver(source, 'fr')

        assert resolver.resolve(1, 'ar') is None
        assert resolver.failed_queries == 2


class TestResolveMany:

    def test_empty_ids_makes_no_call(self):
        source = FakeSource([])
        resolver = TranslationResolver(source, 'fr')

        assert resolver.resolve_many(set(), 'ar') == {}
        assert source.calls == []

    def test_default_language_single_call(self):
        source = FakeSource([Row(1, 'fr', 'Un')])
        resolver = TranslationResolver(source, 'fr')

        result = resolver.resolve_many({1, 2, 3}, 'fr')

        assert set(result) == {1}
        assert len(source.calls) == 1

    def test_mixed_sources_two_calls(self):
        ar_row = Row(1, 'ar', 'بيتزا')
        fr_row = Row(2, 'fr', 'Soda')
        source = FakeSource([ar_row, Row(1, 'fr', 'Pizza'), fr_row])
        resolver = TranslationResolver(source, 'fr')

        result = resolver.resolve_many({1, 2}, 'ar')

        assert result == {1: ar_row, 2: fr_row}
        assert len(source.calls) == 2
        # Second query only asks for what is still missing
        assert source.calls[1] == ({2}, 'fr')

    def test_never_more_than_two_calls(self):
        rows = [Row(i, 'fr', f'fr-{i}') for i in range(50)]
        source = FakeSource(rows)
        resolver = TranslationResolver(source, 'fr')

        result = resolver.resolve_many(range(100), 'en')

        assert len(result) == 50
        assert len(source.calls) == 2

    def test_all_found_skips_fallback(self):
        source = FakeSource([Row(1, 'en', 'One'), Row(2, 'en', 'Two')])
        resolver = TranslationResolver(source, 'fr')

        resolver.resolve_many([1, 2], 'en')
        assert len(source.calls) == 1

    def test_fallback_never_overwrites_requested_language(self):
        class LeakySource(FakeSource):
            """Returns every row of the language, ignoring the id filter."""
            def fetch(self, entity_ids, language_code):
                self.calls.append((set(entity_ids), language_code))
                return [r for r in self.rows if r.language_code == language_code]

        en_row = Row(1, 'en', 'One')
        source = LeakySource([en_row, Row(1, 'fr', 'Un'), Row(2, 'fr', 'Deux'), Row(9, 'fr', 'Neuf')])
        resolver = TranslationResolver(source, 'fr')

        result = resolver.resolve_many({1, 2}, 'en')

        assert result[1] is en_row
        assert result[2].name == 'Deux'
        assert 9 not in result

    def test_duplicate_rows_keep_first(self):
        first = Row(1, 'en', 'first')
        source = FakeSource([first, Row(1, 'en', 'second')])

        result = TranslationResolver(source, 'fr').resolve_many([1], 'en')
        assert result == {1: first}

    def test_backend_failure_keeps_partial_map(self):
        en_row = Row(1, 'en', 'One')
        source = FakeSource([en_row, Row(2, 'fr', 'Deux')], failing_languages={'fr'})
        resolver = TranslationResolver(source, 'fr')

        result = resolver.resolve_many({1, 2}, 'en')

        assert result == {1: en_row}
        assert resolver.failed_queries == 1

    def test_no_default_language_single_call(self):
        source = FakeSource([Row(2, 'fr', 'Deux')])
        resolver = TranslationResolver(source, None)

        assert resolver.resolve_many({1, 2}, 'en') == {}
        assert len(source.calls) == 1

    def test_resolve_matches_resolve_many(self, pizza_rows):
        resolver = TranslationResolver(FakeSource(pizza_rows), 'fr')

        for lang in ('en', 'ar', 'fr'):
            many = resolver.resolve_many({1}, lang)
            assert resolver.resolve(1, lang) is many[1]


class TestDisplayName:

    class Entity:
        def __init__(self, id, name):
            self.id = id
            self.name = name

    def test_translated(self):
        assert display_name(self.Entity(1, 'base'), {1: Row(1, 'en', 'Translated')}) == 'Translated'

    def test_untranslated_uses_base_name(self):
        assert display_name(self.Entity(2, 'base'), {1: Row(1, 'en', 'Translated')}) == 'base'


class TestTranslationCache:

    def test_same_ids_and_language_hit_cache(self):
        source = FakeSource([Row(1, 'fr', 'Un')])
        resolver = TranslationResolver(source, 'fr')
        cache = TranslationCache('product')

        first = cache.get(resolver, [1], 'fr')
        second = cache.get(resolver, {1}, 'fr')

        assert first is second
        assert len(source.calls) == 1

    def test_language_change_resolves_again(self):
        source = FakeSource([Row(1, 'fr', 'Un'), Row(1, 'en', 'One')])
        resolver = TranslationResolver(source, 'fr')
        cache = TranslationCache('product')

        cache.get(resolver, [1], 'fr')
        result = cache.get(resolver, [1], 'en')

        assert result[1].name == 'One'
        assert len(source.calls) == 2
        assert cache.language_code == 'en'

    def test_id_set_change_resolves_again(self):
        source = FakeSource([Row(1, 'fr', 'Un'), Row(2, 'fr', 'Deux')])
        resolver = TranslationResolver(source, 'fr')
        cache = TranslationCache('product')

        cache.get(resolver, [1], 'fr')
        result = cache.get(resolver, [1, 2], 'fr')

        assert set(result) == {1, 2}
        assert len(source.calls) == 2

    def test_invalidate_for_unrelated_ids_keeps_map(self):
        resolver = TranslationResolver(FakeSource([Row(1, 'fr', 'Un')]), 'fr')
        cache = TranslationCache('product')
        cache.get(resolver, [1], 'fr')

        assert cache.invalidate([42]) is False
        assert cache.is_valid
        assert cache.invalidate([1]) is True
        assert not cache.is_valid

    def test_invalidate_when_empty(self):
        assert TranslationCache('product').invalidate() is False

    def test_change_event_on_cached_entity(self):
        source = FakeSource([Row(1, 'fr', 'Un')])
        resolver = TranslationResolver(source, 'fr')
        cache = TranslationCache('product')
        cache.get(resolver, [1], 'fr')

        dropped = cache.apply_change({
            'table': 'product_translation',
            'record': {'product_id': 1, 'language_code': 'fr', 'name': 'Une'},
        })
        assert dropped is True

        source.rows = [Row(1, 'fr', 'Une')]
        assert cache.get(resolver, [1], 'fr')[1].name == 'Une'
        assert len(source.calls) == 2

    def test_change_event_for_other_kind_ignored(self):
        resolver = TranslationResolver(FakeSource([Row(1, 'fr', 'Un')]), 'fr')
        cache = TranslationCache('product')
        cache.get(resolver, [1], 'fr')

        assert cache.apply_change({'table': 'category_translation', 'record': {'category_id': 1}}) is False
        assert cache.apply_change({'table': 'orders', 'record': {'id': 1}}) is False
        assert cache.is_valid

    def test_delete_event_uses_old_record(self):
        resolver = TranslationResolver(FakeSource([Row(3, 'fr', 'Trois')]), 'fr')
        cache = TranslationCache('variant')
        cache.get(resolver, [3], 'fr')

        assert cache.apply_change({
            'table': 'variant_translation',
            'record': None,
            'old_record': {'variant_id': 3},
        }) is True

    def test_language_event_drops_everything(self):
        resolver = TranslationResolver(FakeSource([Row(1, 'fr', 'Un')]), 'fr')
        cache = TranslationCache('category')
        cache.get(resolver, [1], 'fr')

        assert cache.apply_change({'table': 'language', 'record': {'code': 'ar'}}) is True
