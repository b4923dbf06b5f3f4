from functools import wraps

from flask import abort, g
from flask_login import current_user

from partnerhub.errors import AuthorizationError
from partnerhub.models import Partner


def role_required(*roles):
    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role not in roles:
                raise AuthorizationError("Forbidden.")
            return func(*args, **kwargs)

        return inner

    return wrapper


def partner_required(func):
    """Resolve the partner profile of the logged-in user into ``g.partner``."""

    @wraps(func)
    def inner(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        partner = Partner.query.filter_by(user_id=current_user.id).first()
        if not partner:
            raise AuthorizationError("Not a partner.")
        g.partner = partner
        return func(*args, **kwargs)

    return inner
