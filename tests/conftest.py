import pytest
import os
import uuid
from datetime import datetime

# Tests run on in-memory SQLite without Redis, unless the environment says otherwise
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('CACHE_ENABLED', 'false')
os.environ.setdefault('DEFAULT_LANGUAGE_CODE', 'fr')

from backoffice import create_app
from backoffice.database import Base, get_engine, get_session
from backoffice.models import (
    Tenant, UserTenant, Category, Product, ProductVariant, Language, Order, OrderLine
)


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.Config')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Fresh schema and database session for each test."""
    engine = get_engine()
    Base.metadata.create_all(engine)
    session = get_session()
    # Request teardown removes the scoped session (also inside
    # client.session_transaction()), so keep committed fixture rows readable.
    session.configure(expire_on_commit=False)
    yield session
    session.rollback()
    session.remove()
    Base.metadata.drop_all(engine)


@pytest.fixture(scope='function')
def languages(session):
    """fr (default), ar (rtl) and en."""
    rows = [
        Language(code='fr', name='French', native_name='Français', is_default=True, is_active=True),
        Language(code='ar', name='Arabic', native_name='العربية', is_rtl=True, is_active=True),
        Language(code='en', name='English', native_name='English', is_active=True),
    ]
    session.add_all(rows)
    session.commit()
    return rows


def _make_tenant(session, label):
    suffix = str(uuid.uuid4())[:8]
    tenant = Tenant(slug=f'{label}-{suffix}', name=f'{label} {suffix}', active=True)
    session.add(tenant)
    session.commit()
    return tenant


@pytest.fixture(scope='function')
def tenant1(session):
    """Create first test tenant."""
    return _make_tenant(session, 'test-tenant-1')


@pytest.fixture(scope='function')
def tenant2(session):
    """Create second test tenant for isolation tests."""
    return _make_tenant(session, 'test-tenant-2')


def _login(client, session, tenant, user_id, role):
    session.add(UserTenant(user_id=user_id, tenant_id=tenant.id, role=role, active=True))
    session.commit()
    tenant_id = tenant.id
    with client.session_transaction() as sess:
        sess['user_id'] = user_id
        sess['tenant_id'] = tenant_id
    # Re-attach the tenant to the live session after the request teardown
    session.add(tenant)
    return client


@pytest.fixture(scope='function')
def owner_client(client, session, tenant1):
    """Client logged in as OWNER of tenant1."""
    return _login(client, session, tenant1, 'owner-1', 'OWNER')


@pytest.fixture(scope='function')
def staff_client(client, session, tenant1):
    """Client logged in as STAFF of tenant1."""
    return _login(client, session, tenant1, 'staff-1', 'STAFF')


@pytest.fixture(scope='function')
def menu(session, tenant1):
    """
    Category tree of tenant1:

        Drinks
          Soda
        Food
          Pizza
    """
    drinks = Category(tenant_id=tenant1.id, name='Drinks', type='hospitality')
    food = Category(tenant_id=tenant1.id, name='Food', type='hospitality')
    session.add_all([drinks, food])
    session.flush()
    soda = Category(tenant_id=tenant1.id, name='Soda', type='hospitality', parent_id=drinks.id)
    pizza = Category(tenant_id=tenant1.id, name='Pizza', type='hospitality', parent_id=food.id)
    session.add_all([soda, pizza])
    session.commit()
    return {'drinks': drinks.id, 'food': food.id, 'soda': soda.id, 'pizza': pizza.id}


@pytest.fixture(scope='function')
def product_tenant1(session, tenant1, menu):
    """Margherita pizza with one variant, tenant1."""
    product = Product(tenant_id=tenant1.id, name='Margherita', category_id=menu['pizza'], price=900)
    session.add(product)
    session.flush()
    variant = ProductVariant(product_id=product.id, name='Large', price_mod=300)
    session.add(variant)
    session.commit()
    return {'product': product.id, 'variant': variant.id}


@pytest.fixture(scope='function')
def product_tenant2(session, tenant2):
    product = Product(tenant_id=tenant2.id, name='Other shop product', price=100)
    session.add(product)
    session.commit()
    return product.id


@pytest.fixture(scope='function')
def orders(session, tenant1, tenant2, product_tenant1):
    """
    Order history of tenant1, oldest first:

        A-001  completed  Sara   2026-03-01  2 x Margherita
        A-002  void       Karim  2026-03-02
        B-003  completed  Karim  2026-03-03

    plus one order of tenant2 on 2026-03-02.
    """
    rows = [
        Order(tenant_id=tenant1.id, order_number='A-001', status='completed', waiter_name='Sara',
              total_gross=18, created_at=datetime(2026, 3, 1, 12, 30)),
        Order(tenant_id=tenant1.id, order_number='A-002', status='void', waiter_name='Karim',
              total_gross=0, created_at=datetime(2026, 3, 2, 20, 0)),
        Order(tenant_id=tenant1.id, order_number='B-003', status='completed', waiter_name='Karim',
              total_gross=12, created_at=datetime(2026, 3, 3, 9, 15)),
        Order(tenant_id=tenant2.id, order_number='A-001', status='completed', waiter_name='Other',
              total_gross=5, created_at=datetime(2026, 3, 2, 10, 0)),
    ]
    session.add_all(rows)
    session.flush()
    session.add(OrderLine(tenant_id=tenant1.id, order_id=rows[0].id, product_id=product_tenant1['product'],
                          variant_id=product_tenant1['variant'], qty=2, unit_price=9))
    session.commit()
    return {'first': rows[0].id, 'void': rows[1].id, 'last': rows[2].id, 'foreign': rows[3].id}
