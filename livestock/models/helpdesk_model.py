import enum
from livestock import db
from livestock.models.base_model import new_id, utcnow, enum_values


class TicketStatus(enum.Enum):
    OPEN = 'open'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'
    CLOSED = 'closed'


class TicketPriority(enum.Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'


TICKET_PRIORITY_TYPE = db.Enum(TicketPriority, name='ticket_priority', values_callable=enum_values)


class HelpdeskTicket(db.Model):
    __tablename__ = 'helpdesk_tickets'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    subject = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50))
    priority = db.Column(TICKET_PRIORITY_TYPE, nullable=False, default=TicketPriority.MEDIUM)
    status = db.Column(db.Enum(TicketStatus, name='ticket_status', values_callable=enum_values),
                       nullable=False, default=TicketStatus.OPEN)
    assigned_to = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    sla_breach = db.Column(db.Boolean, nullable=False, default=False)
    resolved_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    responses = db.relationship('HelpdeskResponse', backref='ticket', lazy=True, cascade='all, delete-orphan',
                                order_by='HelpdeskResponse.created_at')

    def __repr__(self):
        return f'<HelpdeskTicket {self.subject} ({self.status.value})>'


class HelpdeskResponse(db.Model):
    __tablename__ = 'helpdesk_responses'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    ticket_id = db.Column(db.String(36), db.ForeignKey('helpdesk_tickets.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_internal_note = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class HelpdeskSlaConfig(db.Model):
    __tablename__ = 'helpdesk_sla_config'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    priority = db.Column(TICKET_PRIORITY_TYPE, nullable=False, unique=True)
    response_time_hours = db.Column(db.Integer, nullable=False)
    resolution_time_hours = db.Column(db.Integer, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
