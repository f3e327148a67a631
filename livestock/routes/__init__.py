# livestock/routes/__init__.py
import logging
from livestock.services.impersonation_service import ImpersonationError
from livestock.utils.validation import ValidationFailure
from .auth_routes import auth_ns
from .profile_routes import profile_ns, onboarding_ns, plans_ns, emergency_ns
from .animal_routes import animal_ns
from .health_routes import health_ns, vaccination_ns, breeding_ns
from .feeding_routes import feeding_ns
from .marketplace_routes import marketplace_ns
from .message_routes import message_ns, ai_chat_ns
from .helpdesk_routes import helpdesk_ns
from .content_routes import scheme_ns, content_ns, notification_ns
from .dashboard_routes import dashboard_ns, vet_ns, coordinator_ns
from .admin_routes import admin_ns
from .navigation_routes import navigation_ns
from .function_routes import functions_ns

logger = logging.getLogger(__name__)

NAMESPACES = [
    auth_ns,
    profile_ns,
    onboarding_ns,
    plans_ns,
    emergency_ns,
    animal_ns,
    health_ns,
    vaccination_ns,
    breeding_ns,
    feeding_ns,
    marketplace_ns,
    message_ns,
    ai_chat_ns,
    helpdesk_ns,
    scheme_ns,
    content_ns,
    notification_ns,
    dashboard_ns,
    vet_ns,
    coordinator_ns,
    admin_ns,
    navigation_ns,
    functions_ns,
]


def register_error_handlers(api):
    @api.errorhandler(ValidationFailure)
    def handle_validation_failure(error):
        return {'message': 'Validation Error', 'error': error.message}, 400

    @api.errorhandler(ImpersonationError)
    def handle_impersonation_error(error):
        return {'error': str(error)}, 400
