import logging
from livestock import db
from livestock.models import UserActivityLog, User

logger = logging.getLogger(__name__)


def log_activity(user_id, activity_type, description=None, feature_name=None, details=None, commit=True):
    entry = UserActivityLog(
        user_id=user_id,
        activity_type=activity_type,
        activity_description=description,
        feature_name=feature_name,
        details=details
    )
    db.session.add(entry)
    if commit:
        db.session.commit()
    return entry


def format_activity(entry, email=None):
    return {
        'id': entry.id,
        'user_id': entry.user_id,
        'user_email': email,
        'activity_type': entry.activity_type,
        'activity_description': entry.activity_description,
        'feature_name': entry.feature_name,
        'metadata': entry.details,
        'created_at': entry.created_at.isoformat()
    }


def list_activity(activity_type=None, user_id=None, limit=100, since=None):
    query = db.session.query(UserActivityLog, User.email).outerjoin(User, User.id == UserActivityLog.user_id)
    if since is not None:
        query = query.filter(UserActivityLog.created_at >= since)
    if activity_type:
        query = query.filter(UserActivityLog.activity_type == activity_type)
    if user_id:
        query = query.filter(UserActivityLog.user_id == user_id)
    rows = query.order_by(UserActivityLog.created_at.desc()).limit(limit).all()
    return [format_activity(entry, email) for entry, email in rows]
