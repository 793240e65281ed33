"""
Permission decorators for role-based access control.
Extends the basic require_login and require_tenant decorators with role checks.
"""

from functools import wraps
from flask import g
from backoffice.exceptions import UnauthorizedError


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.

    Usage:
        @require_role('OWNER')
        @require_role('OWNER', 'ADMIN')

    Must be used AFTER require_login and require_tenant.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user_role = g.get('user_role')
            if not user_role or user_role not in allowed_roles:
                raise UnauthorizedError('You do not have permission for this action')
            return f(*args, **kwargs)
        return decorated_function
    return decorator
