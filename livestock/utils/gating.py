"""Route gating and the onboarding gate.

Both are plain decision functions over a resolved role set so they can be
exercised without a request. The page blueprint turns their decisions into
redirects.
"""
import enum
import logging
from collections import namedtuple

from livestock.models.user_model import AppRole

logger = logging.getLogger(__name__)

SIGN_IN_PATH = '/auth'
DEFAULT_REDIRECT = '/dashboard'
ONBOARDING_PATH = '/onboarding'


class GateState(enum.Enum):
    ALLOW = 'allow'
    REDIRECT = 'redirect'
    LOADING = 'loading'


GateDecision = namedtuple('GateDecision', ['state', 'location'])

ALLOW = GateDecision(GateState.ALLOW, None)
LOADING = GateDecision(GateState.LOADING, None)


def redirect_to(location):
    return GateDecision(GateState.REDIRECT, location)


def check_route_access(allowed_roles, roles, roles_loading=False, redirect_path=DEFAULT_REDIRECT):
    """Allow when the role set meets ``allowed_roles``; ``None`` means any signed-in user."""
    if roles_loading:
        return LOADING
    if allowed_roles is None:
        return ALLOW
    if frozenset(roles) & frozenset(allowed_roles):
        return ALLOW
    return redirect_to(redirect_path)


class OnboardingState(enum.Enum):
    CHECKING = 'checking'
    BLOCKED = 'blocked'
    CLEAR = 'clear'


class OnboardingLookupError(Exception):
    pass


class OnboardingGate:
    """Sends farmers to the setup flow until their profile says it is done.

    ``fetch_flag(user_id)`` returns the stored ``onboarding_completed`` value
    (``None`` when there is no profile) or raises ``OnboardingLookupError``.
    """

    def __init__(self, fetch_flag, onboarding_path=ONBOARDING_PATH):
        self.fetch_flag = fetch_flag
        self.onboarding_path = onboarding_path

    def evaluate(self, path, user_id, roles, roles_loading=False):
        if user_id is None or roles_loading:
            return OnboardingState.CHECKING
        if AppRole.FARMER not in roles:
            return OnboardingState.CLEAR
        if path == self.onboarding_path:
            return OnboardingState.CLEAR
        try:
            completed = self.fetch_flag(user_id)
        except OnboardingLookupError as e:
            logger.error(f"Error checking onboarding status for user {user_id}: {e}")
            return OnboardingState.CLEAR
        return OnboardingState.CLEAR if completed else OnboardingState.BLOCKED


def resolve_page_access(route, path, session, onboarding_gate):
    """Full pipeline for one page: public, signed in, role gate, onboarding gate."""
    if route.public:
        return ALLOW
    if not session.is_authenticated:
        return redirect_to(SIGN_IN_PATH)

    decision = check_route_access(route.allowed_roles, session.roles, redirect_path=route.redirect_to)
    if decision.state is not GateState.ALLOW:
        return decision

    state = onboarding_gate.evaluate(path, session.user_id, session.roles)
    if state is OnboardingState.BLOCKED:
        return redirect_to(onboarding_gate.onboarding_path)
    return ALLOW
