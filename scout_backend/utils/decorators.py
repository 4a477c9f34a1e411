# scout_backend/utils/decorators.py
from functools import wraps

from flask_jwt_extended import current_user, jwt_required

from scout_backend.errors import ForbiddenError


def inject_current_user(view_func):
    """
    Require a valid JWT and pass the authenticated User to the view
    as the ``actor`` keyword argument.
    """
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        kwargs['actor'] = current_user
        return view_func(*args, **kwargs)
    return wrapper


def roles_required(*roles):
    """Require a valid JWT whose user holds one of ``roles``."""
    def decorator(view_func):
        @wraps(view_func)
        @jwt_required()
        def wrapper(*args, **kwargs):
            if current_user.role.value not in roles:
                raise ForbiddenError(f"Access denied. Required role(s): {', '.join(roles)}")
            return view_func(*args, **kwargs)
        return wrapper
    return decorator
