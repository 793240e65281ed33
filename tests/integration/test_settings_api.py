"""
Integration tests for language settings and product media ordering.
"""

import pytest

from backoffice.cli_commands import seed_languages
from backoffice.exceptions import BusinessLogicError
from backoffice.models import Language, ProductMedia, UserTenant
from backoffice.services.language_service import resolve_default_language_code


class TestLanguages:

    def test_list_default_first(self, owner_client, languages):
        data = owner_client.get('/api/settings/languages').get_json()['languages']
        assert [l['code'] for l in data] == ['fr', 'ar', 'en']

    def test_active_only(self, owner_client, session, languages):
        session.query(Language).filter_by(code='en').update({'is_active': False})
        session.commit()

        data = owner_client.get('/api/settings/languages/active').get_json()['languages']
        assert [l['code'] for l in data] == ['fr', 'ar']

    def test_get_default(self, owner_client, languages):
        assert owner_client.get('/api/settings/languages/default').get_json()['code'] == 'fr'

    def test_no_default_is_404(self, owner_client, session):
        assert owner_client.get('/api/settings/languages/default').status_code == 404

    def test_set_default_unsets_previous(self, owner_client, session, languages):
        response = owner_client.post('/api/settings/languages/ar/default')

        assert response.status_code == 200
        defaults = session.query(Language).filter_by(is_default=True).all()
        assert [l.code for l in defaults] == ['ar']

    def test_set_default_unknown_language(self, owner_client, languages):
        assert owner_client.post('/api/settings/languages/de/default').status_code == 404

    def test_inactive_language_can_not_be_default(self, owner_client, session, languages):
        session.query(Language).filter_by(code='en').update({'is_active': False})
        session.commit()

        assert owner_client.post('/api/settings/languages/en/default').status_code == 400
        assert session.query(Language).filter_by(is_default=True).one().code == 'fr'

    def test_update_language(self, owner_client, session, languages):
        response = owner_client.patch('/api/settings/languages/en', json={'native_name': 'English (UK)'})

        assert response.status_code == 200
        assert session.query(Language).filter_by(code='en').one().native_name == 'English (UK)'

    def test_default_can_not_be_deactivated(self, owner_client, languages):
        response = owner_client.patch('/api/settings/languages/fr', json={'is_active': False})
        assert response.status_code == 400

    def test_staff_can_not_change_default(self, staff_client, languages):
        assert staff_client.post('/api/settings/languages/ar/default').status_code == 403

    def test_default_language_shared_by_all_tenants(self, app, owner_client, session, languages, tenant2):
        session.add(UserTenant(user_id='owner-2', tenant_id=tenant2.id, role='OWNER', active=True))
        session.commit()
        other_owner = app.test_client()
        with other_owner.session_transaction() as sess:
            sess['user_id'] = 'owner-2'
            sess['tenant_id'] = tenant2.id

        assert other_owner.post('/api/settings/languages/en/default').status_code == 200
        assert owner_client.get('/api/settings/languages/default').get_json()['code'] == 'en'

    def test_default_code_falls_back_to_config(self, session):
        assert resolve_default_language_code(session, 'fr') == 'fr'
        assert resolve_default_language_code(session, None) is None

    def test_seed_languages_is_idempotent(self, session):
        assert seed_languages(session, 'ar') == 3
        assert seed_languages(session, 'fr') == 0
        assert resolve_default_language_code(session) == 'ar'

    def test_seed_rejects_unknown_default(self, session):
        with pytest.raises(BusinessLogicError):
            seed_languages(session, 'de')
        assert session.query(Language).count() == 0

    def test_seed_unknown_default_keeps_existing_default(self, session, languages):
        # A default already exists, so the requested code is not used
        assert seed_languages(session, 'de') == 0

    def test_seed_command_unknown_default(self, app, session):
        result = app.test_cli_runner().invoke(args=['seed-languages', '--default', 'de'])

        assert result.exit_code == 2
        assert 'Unknown default language' in result.output
        assert session.query(Language).count() == 0


class TestProductMedia:

    def _add_media(self, session, product_id, count=3):
        items = [
            ProductMedia(product_id=product_id, storage_path=f'1/{product_id}/{i}.jpg', position=i, is_primary=(i == 0))
            for i in range(count)
        ]
        session.add_all(items)
        session.commit()
        return [item.id for item in items]

    def test_list_ordered_by_position(self, owner_client, session, product_tenant1):
        product_id = product_tenant1['product']
        media_ids = self._add_media(session, product_id)

        data = owner_client.get(f'/api/products/{product_id}/media').get_json()['media']
        assert [m['id'] for m in data] == media_ids

    def test_set_primary_leaves_single_primary(self, owner_client, session, product_tenant1):
        product_id = product_tenant1['product']
        media_ids = self._add_media(session, product_id)

        response = owner_client.post(f'/api/products/{product_id}/media/{media_ids[2]}/primary')

        assert response.status_code == 200
        primaries = session.query(ProductMedia).filter_by(product_id=product_id, is_primary=True).all()
        assert [m.id for m in primaries] == [media_ids[2]]

    def test_set_primary_unknown_media(self, owner_client, session, product_tenant1):
        product_id = product_tenant1['product']
        self._add_media(session, product_id)
        assert owner_client.post(f'/api/products/{product_id}/media/9999/primary').status_code == 404

    def test_reorder(self, owner_client, session, product_tenant1):
        product_id = product_tenant1['product']
        first, second, third = self._add_media(session, product_id)

        response = owner_client.put(
            f'/api/products/{product_id}/media/positions', json={'order': [third, first, second]}
        )

        assert response.status_code == 200
        assert [(m['id'], m['position']) for m in response.get_json()['media']] == [
            (third, 0), (first, 1), (second, 2)
        ]

    def test_reorder_must_list_every_image(self, owner_client, session, product_tenant1):
        product_id = product_tenant1['product']
        first, second, _ = self._add_media(session, product_id)

        response = owner_client.put(f'/api/products/{product_id}/media/positions', json={'order': [first, second]})
        assert response.status_code == 400

    def test_other_tenant_product_hidden(self, owner_client, session, product_tenant2):
        assert owner_client.get(f'/api/products/{product_tenant2}/media').status_code == 404
