"""Audited admin impersonation.

``invoke_impersonation`` is the server-side function: it checks that the caller
is an admin and records the start or stop in the activity log. The display
state ("viewing as ...") lives on the session and is handled by the auth
namespace.
"""
import logging
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import User, UserRole, AppRole
from livestock.models.base_model import utcnow
from livestock.services.activity_service import log_activity

logger = logging.getLogger(__name__)

ACTIONS = {
    'start': 'impersonation_started',
    'stop': 'impersonation_stopped',
}


class ImpersonationError(Exception):
    pass


def invoke_impersonation(admin_id, target_user_id, action):
    if not admin_id:
        raise ImpersonationError('Unauthorized')
    if not UserRole.query.filter_by(user_id=admin_id, role=AppRole.ADMIN).first():
        raise ImpersonationError('User does not have admin privileges')
    if not target_user_id:
        raise ImpersonationError('Target user ID is required')
    if action not in ACTIONS:
        raise ImpersonationError('Invalid action. Use "start" or "stop"')
    target = db.session.get(User, target_user_id)
    if target is None and action == 'start':
        raise ImpersonationError('Target user not found')
    target_label = target.email if target else target_user_id

    timestamp = utcnow().isoformat()
    try:
        log_activity(
            admin_id,
            ACTIONS[action],
            f"Admin {'started' if action == 'start' else 'stopped'} impersonating user {target_label}",
            'admin_impersonation',
            {'admin_id': admin_id, 'target_user_id': target_user_id, 'timestamp': timestamp}
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error logging impersonation: {e}")

    logger.info(f"Admin {admin_id} {action} impersonation of user {target_user_id}")
    return {
        'success': True,
        'action': action,
        'message': f"Impersonation {'started' if action == 'start' else 'stopped'} successfully",
        'target_user_id': target_user_id,
        'admin_user_id': admin_id,
        'timestamp': timestamp
    }
