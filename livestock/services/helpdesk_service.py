# Helpdesk tickets, responses and SLA tracking
import logging
from datetime import timedelta
from sqlalchemy import func
from livestock import db
from livestock.models import (
    HelpdeskTicket, HelpdeskResponse, HelpdeskSlaConfig, TicketStatus, TicketPriority, AppRole
)
from livestock.models.base_model import utcnow

logger = logging.getLogger(__name__)

FINISHED_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.CLOSED})

DEFAULT_SLA_HOURS = {
    TicketPriority.CRITICAL: (1, 4),
    TicketPriority.HIGH: (4, 24),
    TicketPriority.MEDIUM: (8, 48),
    TicketPriority.LOW: (24, 72),
}


def format_response(response):
    return {
        'id': response.id,
        'ticket_id': response.ticket_id,
        'user_id': response.user_id,
        'message': response.message,
        'is_internal_note': response.is_internal_note,
        'created_at': response.created_at.isoformat()
    }


def format_ticket(ticket, include_responses=False, show_internal=False):
    result = {
        'id': ticket.id,
        'user_id': ticket.user_id,
        'subject': ticket.subject,
        'description': ticket.description,
        'category': ticket.category,
        'priority': ticket.priority.value,
        'status': ticket.status.value,
        'assigned_to': ticket.assigned_to,
        'sla_breach': ticket.sla_breach,
        'resolved_at': ticket.resolved_at.isoformat() if ticket.resolved_at else None,
        'created_at': ticket.created_at.isoformat(),
        'updated_at': ticket.updated_at.isoformat()
    }
    if include_responses:
        result['responses'] = [format_response(r) for r in ticket.responses
                               if show_internal or not r.is_internal_note]
    return result


def format_sla(config):
    return {
        'id': config.id,
        'priority': config.priority.value,
        'response_time_hours': config.response_time_hours,
        'resolution_time_hours': config.resolution_time_hours,
        'updated_at': config.updated_at.isoformat() if config.updated_at else None
    }


def create_ticket(user_id, data):
    ticket = HelpdeskTicket(user_id=user_id, **data)
    db.session.add(ticket)
    db.session.commit()
    logger.info(f"User {user_id} opened ticket {ticket.id} ({ticket.priority.value})")
    return ticket


def list_tickets(user_id=None, status=None, priority=None):
    query = HelpdeskTicket.query
    if user_id:
        query = query.filter_by(user_id=user_id)
    if status:
        query = query.filter(HelpdeskTicket.status == status)
    if priority:
        query = query.filter(HelpdeskTicket.priority == priority)
    return query.order_by(HelpdeskTicket.created_at.desc()).all()


def get_ticket(ticket_id, session):
    """Owner or admin. Returns (ticket, error, status)."""
    ticket = db.session.get(HelpdeskTicket, ticket_id)
    if ticket is None:
        return None, {'message': 'Ticket not found'}, 404
    if ticket.user_id != session.user_id and not session.has_role(AppRole.ADMIN):
        return None, {'message': 'You do not have access to this ticket'}, 403
    return ticket, None, 200


def add_response(ticket, user_id, message, is_internal_note=False):
    """Returns (response, error, status)."""
    if ticket.status == TicketStatus.CLOSED:
        return None, {'message': 'Ticket is closed'}, 400
    response = HelpdeskResponse(ticket_id=ticket.id, user_id=user_id, message=message,
                                is_internal_note=is_internal_note)
    db.session.add(response)
    ticket.updated_at = utcnow()
    db.session.commit()
    return response, None, 201


def set_status(ticket, status, now=None):
    """Any status may follow any other; finishing stamps ``resolved_at``, reopening clears it."""
    ticket.status = status
    if status in FINISHED_STATUSES:
        if ticket.resolved_at is None:
            ticket.resolved_at = now or utcnow()
    else:
        ticket.resolved_at = None


def update_ticket(ticket, data):
    if data.get('status') is not None:
        set_status(ticket, data['status'])
    if data.get('priority') is not None:
        ticket.priority = data['priority']
    if 'assigned_to' in data:
        ticket.assigned_to = data['assigned_to']
    db.session.commit()
    logger.info(f"Updated ticket {ticket.id}: status={ticket.status.value}, priority={ticket.priority.value}")
    return ticket


def count_by_status():
    rows = (db.session.query(HelpdeskTicket.status, func.count(HelpdeskTicket.id))
            .group_by(HelpdeskTicket.status).all())
    counts = {status.value: 0 for status in TicketStatus}
    counts.update({status.value: count for status, count in rows})
    return counts


def sla_by_priority():
    return {config.priority: config for config in HelpdeskSlaConfig.query.all()}


def evaluate_sla_breach(ticket, sla_configs, now=None):
    """True when an unfinished ticket has been open longer than its resolution window."""
    if ticket.status in FINISHED_STATUSES:
        return False
    config = sla_configs.get(ticket.priority)
    if config is None:
        return False
    now = now or utcnow()
    return now - ticket.created_at > timedelta(hours=config.resolution_time_hours)


def check_sla_breaches(now=None):
    """Flag every newly breached ticket; returns how many were flagged."""
    configs = sla_by_priority()
    flagged = 0
    open_tickets = HelpdeskTicket.query.filter(HelpdeskTicket.status.notin_(list(FINISHED_STATUSES)),
                                               HelpdeskTicket.sla_breach.is_(False)).all()
    for ticket in open_tickets:
        if evaluate_sla_breach(ticket, configs, now):
            ticket.sla_breach = True
            flagged += 1
    db.session.commit()
    if flagged:
        logger.warning(f"{flagged} helpdesk ticket(s) breached their SLA")
    return flagged


def list_sla_configs():
    return HelpdeskSlaConfig.query.order_by(HelpdeskSlaConfig.resolution_time_hours.asc()).all()


def update_sla_config(priority, data):
    config = HelpdeskSlaConfig.query.filter_by(priority=priority).first()
    if config is None:
        config = HelpdeskSlaConfig(priority=priority, **data)
        db.session.add(config)
    else:
        config.response_time_hours = data['response_time_hours']
        config.resolution_time_hours = data['resolution_time_hours']
    db.session.commit()
    logger.info(f"SLA for {priority.value} set to {data['response_time_hours']}h/{data['resolution_time_hours']}h")
    return config


def seed_sla_defaults():
    created = 0
    for priority, (response_hours, resolution_hours) in DEFAULT_SLA_HOURS.items():
        if not HelpdeskSlaConfig.query.filter_by(priority=priority).first():
            db.session.add(HelpdeskSlaConfig(priority=priority, response_time_hours=response_hours,
                                             resolution_time_hours=resolution_hours))
            created += 1
    db.session.commit()
    return created
