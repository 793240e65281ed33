"""Middleware for authentication and tenant context."""
from functools import wraps
from flask import session, g, current_app
from sqlalchemy.exc import SQLAlchemyError
from backoffice.database import get_session
from backoffice.exceptions import BusinessLogicError, UnauthorizedError
from backoffice.models import Tenant, UserTenant


def load_user_and_tenant():
    """
    Load current user and tenant into g.

    The external identity provider stores the user's subject in
    session['user_id']; the tenant picked in the tenant switcher sits in
    session['tenant_id']. Sets g.user_id, g.tenant_id and g.user_role.
    """
    g.user_id = None
    g.tenant_id = None
    g.user_role = None

    user_id = session.get('user_id')
    if not user_id:
        return
    g.user_id = str(user_id)

    tenant_id = session.get('tenant_id')
    if not tenant_id:
        return

    try:
        db_session = get_session()
        user_tenant = db_session.query(UserTenant).filter_by(
            user_id=g.user_id,
            tenant_id=tenant_id,
            active=True
        ).first()

        if not user_tenant:
            # User doesn't have access to this tenant, clear it
            session.pop('tenant_id', None)
            return

        tenant = db_session.query(Tenant).filter_by(id=tenant_id).first()
        if not tenant or not tenant.active or tenant.is_suspended:
            current_app.logger.warning(f"Access to suspended or inactive tenant {tenant_id} refused")
            session.pop('tenant_id', None)
            return

        g.tenant_id = tenant.id
        g.user_role = user_tenant.role
    except SQLAlchemyError as e:
        # Leave the request anonymous-with-no-tenant rather than crash it
        current_app.logger.error(f"Error in load_user_and_tenant: {e}")


def require_login(f):
    """Decorator: Require an authenticated user (401 otherwise)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user_id') is None:
            raise UnauthorizedError('Authentication required', status_code=401)
        return f(*args, **kwargs)
    return decorated_function


def require_tenant(f):
    """
    Decorator: Require tenant to be selected.

    Must be used AFTER require_login.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('tenant_id') is None:
            raise BusinessLogicError('Select a tenant first')
        return f(*args, **kwargs)
    return decorated_function
