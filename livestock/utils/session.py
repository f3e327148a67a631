"""Session state shared by the gating code.

``SessionRegistry`` is created once per application in ``create_app`` and lives
in ``app.extensions['session_registry']``. It tracks revoked token ids, the
per-session role cache and the impersonation display flag. Signing out tears
down everything kept for that session.

``SessionContext`` is the per-request view of the current session, stored in
``flask.g.session`` by the auth middleware.
"""
import threading

from flask import current_app, g


class SessionRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._revoked = set()
        # session_id -> (user_id, frozenset of AppRole)
        self._roles = {}
        # session_id -> impersonated user id
        self._impersonation = {}

    def revoke(self, session_id):
        with self._lock:
            self._revoked.add(session_id)
            self._roles.pop(session_id, None)
            self._impersonation.pop(session_id, None)

    def is_revoked(self, session_id):
        with self._lock:
            return session_id in self._revoked

    def cached_roles(self, session_id):
        with self._lock:
            entry = self._roles.get(session_id)
        return entry[1] if entry else None

    def cache_roles(self, session_id, user_id, roles):
        with self._lock:
            self._roles[session_id] = (user_id, frozenset(roles))

    def evict_user_roles(self, user_id):
        """Drop cached roles of every session belonging to ``user_id``."""
        with self._lock:
            stale = [sid for sid, (uid, _) in self._roles.items() if uid == user_id]
            for sid in stale:
                del self._roles[sid]

    def impersonated_user(self, session_id):
        with self._lock:
            return self._impersonation.get(session_id)

    def set_impersonation(self, session_id, user_id):
        with self._lock:
            if user_id is None:
                self._impersonation.pop(session_id, None)
            else:
                self._impersonation[session_id] = user_id


def current_registry():
    return current_app.extensions['session_registry']


class SessionContext:
    """The signed-in user of one request, with lazily resolved roles."""

    def __init__(self, session_id=None, user=None, registry=None, resolver=None):
        self.session_id = session_id
        self.user = user
        self._registry = registry
        self._resolver = resolver
        self._roles = None

    @classmethod
    def anonymous(cls):
        return cls()

    @property
    def is_authenticated(self):
        return self.user is not None

    @property
    def user_id(self):
        return self.user.id if self.user else None

    @property
    def roles(self):
        if self.user is None:
            return frozenset()
        if self._roles is None:
            self._roles = self._resolver.resolve(self.user.id, self.session_id)
        return self._roles

    def has_role(self, role):
        return role in self.roles

    def has_any_role(self, roles):
        return bool(self.roles & frozenset(roles))

    @property
    def impersonated_user_id(self):
        if self._registry is None or self.session_id is None:
            return None
        return self._registry.impersonated_user(self.session_id)

    @property
    def is_impersonating(self):
        return self.impersonated_user_id is not None

    def start_impersonation(self, user_id):
        self._registry.set_impersonation(self.session_id, user_id)

    def stop_impersonation(self):
        self._registry.set_impersonation(self.session_id, None)

    def sign_out(self):
        if self._registry is not None and self.session_id is not None:
            self._registry.revoke(self.session_id)
        self.user = None
        self._roles = None


def current_session():
    session = g.get('session')
    if session is None:
        from .auth_middleware import build_session_context
        session = build_session_context()
        g.session = session
    return session
