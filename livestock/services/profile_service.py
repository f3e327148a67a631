# Profile and onboarding flow
import logging
from datetime import timedelta
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import EmergencyContact, Profile, SubscriptionPlan, UserSubscription
from livestock.models.base_model import utcnow
from livestock.utils.gating import OnboardingLookupError

logger = logging.getLogger(__name__)

# approximate month length used for subscription end dates
DAYS_PER_MONTH = 30
MAX_EMERGENCY_CONTACTS = 5


def get_onboarding_flag(user_id):
    """Stored ``onboarding_completed`` for the user, ``None`` without a profile."""
    try:
        profile = db.session.get(Profile, user_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        raise OnboardingLookupError(str(e)) from e
    return profile.onboarding_completed if profile else None


def format_profile(profile):
    return {
        'id': profile.id,
        'full_name': profile.full_name,
        'phone_number': profile.phone_number,
        'state': profile.state,
        'district': profile.district,
        'village': profile.village,
        'pin_code': profile.pin_code,
        'preferred_language': profile.preferred_language,
        'onboarding_completed': profile.onboarding_completed,
        'updated_at': profile.updated_at.isoformat() if profile.updated_at else None
    }


def update_profile(user_id, data):
    """Apply the submitted fields; creates the profile row if it is missing."""
    profile = db.session.get(Profile, user_id)
    if profile is None:
        profile = Profile(id=user_id, full_name=data.get('full_name') or '', onboarding_completed=False)
        db.session.add(profile)
    for field, value in data.items():
        setattr(profile, field, value)
    db.session.commit()
    logger.info(f"Updated profile for user {user_id}")
    return profile


def format_plan(plan):
    return {
        'id': plan.id,
        'name': plan.name,
        'description': plan.description,
        'price': plan.price,
        'duration_months': plan.duration_months,
        'features': plan.features or [],
        'is_active': plan.is_active
    }


def list_plans():
    plans = SubscriptionPlan.query.filter_by(is_active=True).order_by(SubscriptionPlan.price.asc()).all()
    return [format_plan(p) for p in plans]


def format_subscription(subscription):
    return {
        'id': subscription.id,
        'user_id': subscription.user_id,
        'plan_id': subscription.plan_id,
        'plan_name': subscription.plan.name if subscription.plan else None,
        'start_date': subscription.start_date.isoformat(),
        'end_date': subscription.end_date.isoformat(),
        'status': subscription.status
    }


def choose_plan(user_id, plan_id):
    """Onboarding step 2. Returns (subscription, error, status)."""
    plan = db.session.get(SubscriptionPlan, plan_id)
    if not plan or not plan.is_active:
        return None, {'message': 'Subscription plan not found'}, 404
    start = utcnow()
    subscription = UserSubscription(
        user_id=user_id,
        plan_id=plan.id,
        start_date=start,
        end_date=start + timedelta(days=DAYS_PER_MONTH * plan.duration_months),
        status='active'
    )
    db.session.add(subscription)
    db.session.commit()
    logger.info(f"User {user_id} subscribed to plan {plan.name}")
    return subscription, None, 201


def current_subscription(user_id):
    return (UserSubscription.query
            .filter_by(user_id=user_id, status='active')
            .order_by(UserSubscription.start_date.desc())
            .first())


def complete_onboarding(user_id):
    """Onboarding step 3. Returns (profile, error, status)."""
    profile = db.session.get(Profile, user_id)
    if profile is None:
        return None, {'message': 'Profile not found. Complete the profile step first'}, 400
    profile.onboarding_completed = True
    db.session.commit()
    logger.info(f"User {user_id} completed onboarding")
    return profile, None, 200


def onboarding_status(user_id):
    profile = db.session.get(Profile, user_id)
    if profile is None:
        return {'onboarding_completed': False, 'step': 1}
    if profile.onboarding_completed:
        return {'onboarding_completed': True, 'step': None}
    if not profile.phone_number:
        step = 1
    elif current_subscription(user_id) is None:
        step = 2
    else:
        step = 3
    return {'onboarding_completed': False, 'step': step}


def format_emergency_contact(contact):
    return {
        'id': contact.id,
        'contact_name': contact.contact_name,
        'contact_number': contact.contact_number,
        'relationship': contact.relationship,
        'is_default': contact.is_default,
        'created_at': contact.created_at.isoformat()
    }


def list_emergency_contacts(user_id):
    return (EmergencyContact.query.filter_by(user_id=user_id)
            .order_by(EmergencyContact.created_at.desc()).all())


def get_emergency_contact(user_id, contact_id):
    """Returns (contact, error, status)."""
    contact = db.session.get(EmergencyContact, contact_id)
    if contact is None or contact.user_id != user_id:
        return None, {'message': 'Emergency contact not found'}, 404
    return contact, None, 200


def _clear_default(user_id, keep_id=None):
    query = EmergencyContact.query.filter_by(user_id=user_id, is_default=True)
    if keep_id:
        query = query.filter(EmergencyContact.id != keep_id)
    for contact in query.all():
        contact.is_default = False


def add_emergency_contact(user_id, data):
    """Returns (contact, error, status)."""
    if EmergencyContact.query.filter_by(user_id=user_id).count() >= MAX_EMERGENCY_CONTACTS:
        return None, {'message': f'You can only add up to {MAX_EMERGENCY_CONTACTS} emergency contacts'}, 400
    if data.get('is_default'):
        _clear_default(user_id)
    contact = EmergencyContact(user_id=user_id, **data)
    db.session.add(contact)
    db.session.commit()
    logger.info(f"User {user_id} added emergency contact {contact.id}")
    return contact, None, 201


def update_emergency_contact(contact, data):
    if data.get('is_default'):
        _clear_default(contact.user_id, keep_id=contact.id)
    for field, value in data.items():
        setattr(contact, field, value)
    db.session.commit()
    return contact


def delete_emergency_contact(contact):
    contact_id = contact.id
    db.session.delete(contact)
    db.session.commit()
    logger.info(f"Deleted emergency contact {contact_id}")


def list_all_plans():
    return SubscriptionPlan.query.order_by(SubscriptionPlan.price.asc()).all()


def get_plan(plan_id):
    """Returns (plan, error, status)."""
    plan = db.session.get(SubscriptionPlan, plan_id)
    if plan is None:
        return None, {'message': 'Subscription plan not found'}, 404
    return plan, None, 200


def save_plan(plan, data=None):
    for field, value in (data or {}).items():
        setattr(plan, field, value)
    db.session.add(plan)
    db.session.commit()
    logger.info(f"Saved subscription plan {plan.name}")
    return plan


def delete_plan(plan):
    """Plans with subscribers are only deactivated. Returns (error, status)."""
    if UserSubscription.query.filter_by(plan_id=plan.id).count():
        return {'message': 'Plan has subscribers; deactivate it instead'}, 400
    plan_id = plan.id
    db.session.delete(plan)
    db.session.commit()
    logger.info(f"Deleted subscription plan {plan_id}")
    return None, 200


def list_subscriptions(search=None):
    """All subscriptions with subscriber details, newest first; ``search``
    matches the subscriber's name or phone number."""
    query = (db.session.query(UserSubscription, Profile)
             .outerjoin(Profile, Profile.id == UserSubscription.user_id))
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(Profile.full_name.ilike(pattern), Profile.phone_number.ilike(pattern)))
    rows = query.order_by(UserSubscription.start_date.desc()).all()
    result = []
    for subscription, profile in rows:
        data = format_subscription(subscription)
        data['full_name'] = profile.full_name if profile else None
        data['phone_number'] = profile.phone_number if profile else None
        data['price'] = subscription.plan.price if subscription.plan else None
        result.append(data)
    return result


def subscription_stats():
    total = UserSubscription.query.count()
    active = UserSubscription.query.filter_by(status='active').count()
    revenue = (db.session.query(func.coalesce(func.sum(SubscriptionPlan.price), 0))
               .join(UserSubscription, UserSubscription.plan_id == SubscriptionPlan.id).scalar())
    return {
        'total_subscriptions': total,
        'active_subscriptions': active,
        'total_revenue': float(revenue or 0)
    }
