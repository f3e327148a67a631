# Account service module: sign-up, sign-in and user administration
import logging
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from livestock import db, bcrypt
from livestock.models import User, Profile, UserRole, AppRole
from livestock.models.base_model import utcnow
from livestock.services.activity_service import log_activity

logger = logging.getLogger(__name__)


def sign_up(data):
    """Create the user, an empty-onboarding profile and the default farmer role.

    Returns (user, error, status).
    """
    if User.query.filter_by(email=data['email']).first():
        return None, {'message': 'Email is already registered'}, 400

    user = User(
        email=data['email'],
        password=bcrypt.generate_password_hash(data['password']).decode('utf-8')
    )
    db.session.add(user)
    db.session.flush()
    db.session.add(Profile(
        id=user.id,
        full_name=data['full_name'],
        phone_number=data.get('phone_number'),
        onboarding_completed=False
    ))
    db.session.add(UserRole(user_id=user.id, role=AppRole.FARMER))
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.error(f"Sign-up failed for {data['email']}: {e}")
        return None, {'message': 'Database error: unable to register user', 'error': str(e.orig)}, 500
    logger.info(f"Registered user {user.id} ({user.email})")
    return user, None, 201


def authenticate(email, password):
    """Returns (user, error, status)."""
    user = User.query.filter_by(email=email).first()
    if not user or not bcrypt.check_password_hash(user.password, password):
        return None, {'message': 'Invalid email or password'}, 401
    user.last_sign_in_at = utcnow()
    log_activity(user.id, 'sign_in', 'User signed in', 'auth', commit=False)
    db.session.commit()
    return user, None, 200


def format_user_summary(user):
    profile = user.profile
    return {
        'id': user.id,
        'email': user.email,
        'full_name': profile.full_name if profile else None,
        'phone_number': profile.phone_number if profile else None,
        'state': profile.state if profile else None,
        'district': profile.district if profile else None,
        'onboarding_completed': bool(profile and profile.onboarding_completed),
        'roles': sorted(r.role.value for r in user.roles),
        'created_at': user.created_at.isoformat(),
        'last_sign_in_at': user.last_sign_in_at.isoformat() if user.last_sign_in_at else None
    }


def list_users(search=None, role=None):
    query = User.query.outerjoin(Profile, Profile.id == User.id)
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(User.email.ilike(pattern), Profile.full_name.ilike(pattern)))
    if role:
        query = query.filter(User.roles.any(UserRole.role == role))
    return [format_user_summary(u) for u in query.order_by(User.created_at.desc()).all()]
