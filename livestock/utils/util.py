from functools import wraps
from flask import current_app
from flask_jwt_extended import jwt_required
from .session import current_session


def login_required(fn):
    @wraps(fn)
    @jwt_required()
    def decorator(*args, **kwargs):
        if not current_session().is_authenticated:
            return {'message': 'User not found'}, 401
        return fn(*args, **kwargs)
    return decorator


def role_required(*roles):
    allowed = frozenset(roles)

    def wrapper(fn):
        @wraps(fn)
        @jwt_required()
        def decorator(*args, **kwargs):
            session = current_session()
            if not session.is_authenticated:
                return {'message': 'User not found'}, 401
            if not session.has_any_role(allowed):
                return {'message': 'Access denied'}, 403
            return fn(*args, **kwargs)
        return decorator
    return wrapper


def allowed_file(filename):
    extensions = current_app.config['ALLOWED_IMAGE_EXTENSIONS']
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in extensions
