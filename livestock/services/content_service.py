# Government schemes, content library and notifications
import logging
from sqlalchemy import or_
from livestock import db
from livestock.models import GovernmentScheme, CmsContent, Notification

logger = logging.getLogger(__name__)


def format_scheme(scheme):
    return {
        'id': scheme.id,
        'scheme_name': scheme.scheme_name,
        'description': scheme.description,
        'eligibility_criteria': scheme.eligibility_criteria,
        'benefits': scheme.benefits,
        'application_process': scheme.application_process,
        'contact_details': scheme.contact_details,
        'state': scheme.state,
        'district': scheme.district,
        'official_website': scheme.official_website,
        'is_active': scheme.is_active,
        'created_at': scheme.created_at.isoformat()
    }


def format_content(content):
    return {
        'id': content.id,
        'title': content.title,
        'description': content.description,
        'content_body': content.content_body,
        'category': content.category.value,
        'content_type': content.content_type.value,
        'media_url': content.media_url,
        'language': content.language,
        'is_active': content.is_active,
        'is_featured': content.is_featured,
        'view_count': content.view_count,
        'created_by': content.created_by,
        'created_at': content.created_at.isoformat()
    }


def format_notification(notification):
    return {
        'id': notification.id,
        'user_id': notification.user_id,
        'title': notification.title,
        'message': notification.message,
        'type': notification.type,
        'priority': notification.priority.value if notification.priority else None,
        'related_entity_type': notification.related_entity_type,
        'related_entity_id': notification.related_entity_id,
        'is_read': notification.is_read,
        'created_at': notification.created_at.isoformat()
    }


def list_schemes(active_only=True, state=None, search=None):
    query = GovernmentScheme.query
    if active_only:
        query = query.filter_by(is_active=True)
    if state:
        # schemes without a state apply everywhere
        query = query.filter(or_(GovernmentScheme.state == state, GovernmentScheme.state.is_(None)))
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(GovernmentScheme.scheme_name.ilike(pattern),
                                 GovernmentScheme.description.ilike(pattern)))
    return query.order_by(GovernmentScheme.created_at.desc()).all()


def list_content(active_only=True, category=None, language=None, featured=None):
    query = CmsContent.query
    if active_only:
        query = query.filter_by(is_active=True)
    if category:
        query = query.filter(CmsContent.category == category)
    if language:
        query = query.filter_by(language=language)
    if featured is not None:
        query = query.filter_by(is_featured=featured)
    return query.order_by(CmsContent.is_featured.desc(), CmsContent.created_at.desc()).all()


def get_row(model, row_id, active_only=False):
    """Returns (row, error, status)."""
    row = db.session.get(model, row_id)
    if row is None or (active_only and not row.is_active):
        return None, {'message': 'Not found'}, 404
    return row, None, 200


def record_content_view(content):
    content.view_count = (content.view_count or 0) + 1
    db.session.commit()
    return content


def save(row):
    db.session.add(row)
    db.session.commit()
    logger.info(f"Saved {row.__tablename__} row {row.id}")
    return row


def apply_changes(row, data):
    for field, value in data.items():
        setattr(row, field, value)
    db.session.commit()
    return row


def remove(row):
    table, row_id = row.__tablename__, row.id
    db.session.delete(row)
    db.session.commit()
    logger.info(f"Deleted {table} row {row_id}")


def list_notifications(user_id, unread_only=False):
    # user_id NULL marks a broadcast to every user
    query = Notification.query.filter(or_(Notification.user_id == user_id, Notification.user_id.is_(None)))
    if unread_only:
        query = query.filter_by(is_read=False)
    return query.order_by(Notification.created_at.desc()).all()


def mark_notification_read(notification_id, user_id):
    """Returns (notification, error, status)."""
    notification = db.session.get(Notification, notification_id)
    if notification is None or notification.user_id not in (user_id, None):
        return None, {'message': 'Notification not found'}, 404
    notification.is_read = True
    db.session.commit()
    return notification, None, 200


def mark_all_read(user_id):
    updated = (Notification.query.filter_by(user_id=user_id, is_read=False)
               .update({'is_read': True}, synchronize_session=False))
    db.session.commit()
    return updated
