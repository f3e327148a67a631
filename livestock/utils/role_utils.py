import logging
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models.user_model import AppRole, User, UserRole

logger = logging.getLogger(__name__)

# Interface sections and actions available to each role
ROLE_PERMISSIONS = {
    AppRole.FARMER: {
        'interface_sections': [
            'dashboard', 'animals', 'health', 'vaccinations', 'breeding', 'feeding',
            'marketplace', 'messages', 'helpdesk', 'ai_doctor', 'schemes', 'content_library',
            'notifications', 'profile'
        ],
        'actions': [
            'manage_own_animals', 'log_health_records', 'log_vaccinations', 'log_breeding',
            'manage_feeding', 'create_listing', 'send_enquiry', 'write_review',
            'send_message', 'create_ticket', 'ask_ai_doctor'
        ]
    },
    AppRole.VETERINARY_OFFICER: {
        'interface_sections': [
            'dashboard', 'veterinary_dashboard', 'health', 'vaccinations', 'messages',
            'helpdesk', 'content_library', 'notifications', 'profile'
        ],
        'actions': [
            'view_all_animals', 'add_health_record', 'add_vaccination', 'view_vaccination_due_list',
            'send_message', 'create_ticket'
        ]
    },
    AppRole.PROGRAM_COORDINATOR: {
        'interface_sections': [
            'dashboard', 'coordinator_dashboard', 'schemes', 'content_library', 'messages',
            'helpdesk', 'notifications', 'profile'
        ],
        'actions': [
            'view_regional_statistics', 'view_scheme_engagement', 'send_message', 'create_ticket'
        ]
    },
    AppRole.ADMIN: {
        'interface_sections': [
            'dashboard', 'admin', 'veterinary_dashboard', 'coordinator_dashboard', 'users',
            'content_management', 'scheme_management', 'helpdesk_management', 'sla_configuration',
            'marketplace_moderation', 'user_activity', 'messages', 'notifications', 'profile'
        ],
        'actions': [
            'view_all_users', 'grant_role', 'revoke_role', 'impersonate_user', 'manage_content',
            'manage_schemes', 'manage_tickets', 'configure_sla', 'moderate_marketplace',
            'view_activity_logs', 'add_health_record', 'add_vaccination', 'send_message'
        ]
    }
}


class RoleResolver:
    """Looks up a user's roles, caching the result for the session that asked."""

    def __init__(self, registry):
        self.registry = registry

    def resolve(self, user_id, session_id=None):
        if session_id is not None:
            cached = self.registry.cached_roles(session_id)
            if cached is not None:
                return cached
        try:
            rows = UserRole.query.filter_by(user_id=user_id).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            # not cached; the next request retries
            logger.error(f"Error fetching roles for user {user_id}: {e}")
            return frozenset()
        roles = frozenset(row.role for row in rows)
        if session_id is not None:
            self.registry.cache_roles(session_id, user_id, roles)
        return roles


def parse_role(value):
    """Map 'admin' / 'ADMIN' / AppRole.ADMIN onto AppRole, or None."""
    if isinstance(value, AppRole):
        return value
    if not isinstance(value, str):
        return None
    try:
        return AppRole(value.strip().lower())
    except ValueError:
        return None


def get_user_permissions(roles):
    """Union of the sections and actions granted by each role."""
    sections, actions = [], []
    for role in sorted(roles, key=lambda r: r.value):
        permissions = ROLE_PERMISSIONS.get(role)
        if not permissions:
            continue
        sections.extend(s for s in permissions['interface_sections'] if s not in sections)
        actions.extend(a for a in permissions['actions'] if a not in actions)
    return {'interface_sections': sections, 'actions': actions}


def get_user_data_with_permissions(user, roles):
    if not user:
        return None
    profile = user.profile
    return {
        'id': user.id,
        'email': user.email,
        'full_name': profile.full_name if profile else None,
        'onboarding_completed': bool(profile and profile.onboarding_completed),
        'roles': sorted(role.value for role in roles),
        'permissions': get_user_permissions(roles)
    }


def grant_role(user_id, role_value):
    """Add a role row; returns (roles, error)."""
    user = db.session.get(User, user_id)
    if not user:
        return None, 'User not found'
    role = parse_role(role_value)
    if role is None:
        return None, f'Invalid role: {role_value}'
    if not UserRole.query.filter_by(user_id=user_id, role=role).first():
        db.session.add(UserRole(user_id=user_id, role=role))
        db.session.commit()
        logger.info(f"Granted role {role.value} to user {user_id}")
    return sorted(r.role.value for r in UserRole.query.filter_by(user_id=user_id).all()), None


def revoke_role(user_id, role_value):
    user = db.session.get(User, user_id)
    if not user:
        return None, 'User not found'
    role = parse_role(role_value)
    if role is None:
        return None, f'Invalid role: {role_value}'
    row = UserRole.query.filter_by(user_id=user_id, role=role).first()
    if row:
        db.session.delete(row)
        db.session.commit()
        logger.info(f"Revoked role {role.value} from user {user_id}")
    return sorted(r.role.value for r in UserRole.query.filter_by(user_id=user_id).all()), None
