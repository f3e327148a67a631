import logging
from flask import g, request
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from livestock import db
from livestock.models.user_model import User
from .session import SessionContext, current_registry
from .role_utils import RoleResolver

logger = logging.getLogger(__name__)


def build_session_context():
    """Resolve the bearer token (if any) into a SessionContext.

    A missing, expired or revoked token yields an anonymous session. Resources
    that need a user enforce that themselves through ``login_required`` /
    ``role_required``.
    """
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as e:
        logger.debug(f"Ignoring unusable token on {request.path}: {e}")
        return SessionContext.anonymous()

    claims = get_jwt()
    if not claims:
        return SessionContext.anonymous()

    user = db.session.get(User, get_jwt_identity())
    if user is None:
        return SessionContext.anonymous()

    registry = current_registry()
    return SessionContext(session_id=claims['jti'], user=user, registry=registry,
                          resolver=RoleResolver(registry))


def setup_auth_middleware(app, jwt):
    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return current_registry().is_revoked(jwt_payload['jti'])

    @app.before_request
    def before_request():
        if request.path.startswith('/static/') or request.path.startswith('/get/'):
            return None
        g.session = build_session_context()
        return None
