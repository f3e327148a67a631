# Per-role dashboard reports
import logging
from datetime import date, datetime, time, timedelta
from sqlalchemy import func
from livestock import db
from livestock.models import (
    Animal, HealthRecord, Vaccination, HealthStatus, UserRole, AppRole, Profile, User,
    GovernmentScheme, Notification, MarketplaceListing, ListingStatus, HelpdeskTicket,
    TicketStatus, CmsContent, UserActivityLog
)
from livestock.models.base_model import utcnow
from livestock.services.health_service import format_health_record, format_vaccination, vaccinations_due
from livestock.services.marketplace_service import format_listing
from livestock.services.content_service import format_scheme

logger = logging.getLogger(__name__)

CRITICAL_STATUSES = (HealthStatus.SICK, HealthStatus.UNDER_TREATMENT)


def farmer_dashboard(user_id, today=None):
    today = today or date.today()
    animal_ids = [row.id for row in Animal.query.with_entities(Animal.id).filter_by(owner_id=user_id).all()]
    by_status = dict(db.session.query(Animal.health_status, func.count(Animal.id))
                     .filter(Animal.owner_id == user_id)
                     .group_by(Animal.health_status).all())
    recent_records = (HealthRecord.query.filter(HealthRecord.animal_id.in_(animal_ids))
                      .order_by(HealthRecord.record_date.desc()).limit(5).all())
    return {
        'total_animals': len(animal_ids),
        'health_status_counts': {status.value: by_status.get(status, 0) for status in HealthStatus},
        'upcoming_vaccinations': [format_vaccination(v) for v in vaccinations_due(animal_ids, 30, today)],
        'recent_health_records': [format_health_record(r) for r in recent_records],
        'active_listings': MarketplaceListing.query.filter_by(seller_id=user_id, status=ListingStatus.ACTIVE).count(),
        'open_tickets': HelpdeskTicket.query.filter(
            HelpdeskTicket.user_id == user_id,
            HelpdeskTicket.status.in_([TicketStatus.OPEN, TicketStatus.IN_PROGRESS])).count()
    }


def vet_dashboard(due_days=7, today=None):
    today = today or date.today()
    start_of_day = datetime.combine(today, time.min)
    top_diagnoses = (db.session.query(HealthRecord.diagnosis, func.count(HealthRecord.id).label('count'))
                     .filter(HealthRecord.diagnosis.isnot(None))
                     .group_by(HealthRecord.diagnosis)
                     .order_by(func.count(HealthRecord.id).desc())
                     .limit(5).all())
    recent_cases = HealthRecord.query.order_by(HealthRecord.created_at.desc()).limit(10).all()
    upcoming = vaccinations_due(None, due_days, today)
    return {
        'stats': {
            'total_animals': Animal.query.count(),
            'critical_cases': Animal.query.filter(Animal.health_status.in_(CRITICAL_STATUSES)).count(),
            'vaccinations_due': len(upcoming),
            'health_records_today': HealthRecord.query.filter(
                HealthRecord.created_at >= start_of_day,
                HealthRecord.created_at < start_of_day + timedelta(days=1)).count()
        },
        'recent_cases': [format_health_record(r) for r in recent_cases],
        'upcoming_vaccinations': [format_vaccination(v) for v in upcoming[:10]],
        'top_diagnoses': [{'diagnosis': diagnosis, 'count': count} for diagnosis, count in top_diagnoses]
    }


def coordinator_dashboard():
    top_states = (db.session.query(Profile.state, func.count(Profile.id))
                  .filter(Profile.state.isnot(None))
                  .group_by(Profile.state)
                  .order_by(func.count(Profile.id).desc())
                  .limit(5).all())
    recent_listings = MarketplaceListing.query.order_by(MarketplaceListing.created_at.desc()).limit(10).all()
    schemes = (GovernmentScheme.query.filter_by(is_active=True)
               .order_by(GovernmentScheme.created_at.desc()).limit(10).all())
    return {
        'stats': {
            'total_farmers': UserRole.query.filter_by(role=AppRole.FARMER).count(),
            'total_animals': Animal.query.count(),
            'active_schemes': GovernmentScheme.query.filter_by(is_active=True).count(),
            'unread_notifications': Notification.query.filter_by(is_read=False).count()
        },
        'top_states': [{'state': state, 'count': count} for state, count in top_states],
        'recent_listings': [format_listing(listing) for listing in recent_listings],
        'active_schemes': [format_scheme(s) for s in schemes]
    }


def admin_overview():
    role_counts = dict(db.session.query(UserRole.role, func.count(UserRole.id)).group_by(UserRole.role).all())
    return {
        'total_users': User.query.count(),
        'role_counts': {role.value: role_counts.get(role, 0) for role in AppRole},
        'total_animals': Animal.query.count(),
        'total_vaccinations': Vaccination.query.count(),
        'active_listings': MarketplaceListing.query.filter_by(status=ListingStatus.ACTIVE).count(),
        'open_tickets': HelpdeskTicket.query.filter(
            HelpdeskTicket.status.in_([TicketStatus.OPEN, TicketStatus.IN_PROGRESS])).count(),
        'sla_breaches': HelpdeskTicket.query.filter_by(sla_breach=True).count(),
        'published_content': CmsContent.query.filter_by(is_active=True).count(),
        'activity_last_24h': UserActivityLog.query.filter(
            UserActivityLog.created_at >= utcnow() - timedelta(hours=24)).count()
    }
