import enum
from livestock import db
from livestock.models.base_model import new_id, utcnow, enum_values


class ContentCategory(enum.Enum):
    FEEDING_GUIDELINES = 'feeding_guidelines'
    SHELTER_MANAGEMENT = 'shelter_management'
    BREEDING_TIPS = 'breeding_tips'
    HEALTH_ADVISORY = 'health_advisory'
    TRAINING_RESOURCES = 'training_resources'
    EMERGENCY_ALERTS = 'emergency_alerts'
    DISEASE_PREVENTION = 'disease_prevention'
    WEATHER_ADVISORY = 'weather_advisory'
    BEST_PRACTICES = 'best_practices'


class ContentType(enum.Enum):
    ARTICLE = 'article'
    VIDEO = 'video'
    INFOGRAPHIC = 'infographic'
    DOCUMENT = 'document'
    AUDIO = 'audio'
    WEBINAR = 'webinar'
    TUTORIAL = 'tutorial'


class PriorityLevel(enum.Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'


class GovernmentScheme(db.Model):
    __tablename__ = 'government_schemes'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    scheme_name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    eligibility_criteria = db.Column(db.Text)
    benefits = db.Column(db.Text)
    application_process = db.Column(db.Text)
    contact_details = db.Column(db.String(300))
    state = db.Column(db.String(100))
    district = db.Column(db.String(100))
    official_website = db.Column(db.String(255))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class CmsContent(db.Model):
    __tablename__ = 'cms_content'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    content_body = db.Column(db.Text)
    category = db.Column(db.Enum(ContentCategory, name='content_category', values_callable=enum_values),
                         nullable=False)
    content_type = db.Column(db.Enum(ContentType, name='content_type', values_callable=enum_values),
                             nullable=False)
    media_url = db.Column(db.String(255))
    language = db.Column(db.String(10), default='en')
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    view_count = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(db.String(36), db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class SubscriptionPlan(db.Model):
    __tablename__ = 'subscription_plans'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Float, nullable=False, default=0)
    duration_months = db.Column(db.Integer, nullable=False, default=1)
    features = db.Column(db.JSON)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class UserSubscription(db.Model):
    __tablename__ = 'user_subscriptions'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    plan_id = db.Column(db.String(36), db.ForeignKey('subscription_plans.id'), nullable=False)
    start_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    end_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='active')
    plan = db.relationship('SubscriptionPlan', lazy=True)


class Notification(db.Model):
    __tablename__ = 'notifications'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True, index=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50))
    priority = db.Column(db.Enum(PriorityLevel, name='priority_level', values_callable=enum_values),
                         default=PriorityLevel.MEDIUM)
    related_entity_type = db.Column(db.String(50))
    related_entity_id = db.Column(db.String(36))
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
