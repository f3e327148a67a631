from livestock import db
from livestock.models.base_model import new_id, utcnow


class UserActivityLog(db.Model):
    __tablename__ = 'user_activity_logs'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    activity_type = db.Column(db.String(50), nullable=False)
    activity_description = db.Column(db.Text)
    feature_name = db.Column(db.String(50))
    # 'metadata' is reserved on declarative classes
    details = db.Column('metadata', db.JSON)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<UserActivityLog {self.activity_type} by {self.user_id}>'
