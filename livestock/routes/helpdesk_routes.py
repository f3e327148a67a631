import logging
from flask import request
from flask_restx import Namespace, Resource, fields
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import AppRole, TicketPriority
from livestock.schemas.helpdesk_schema import TicketSchema, TicketResponseSchema
from livestock.services import helpdesk_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required
from livestock.utils.validation import validate

logger = logging.getLogger(__name__)

helpdesk_ns = Namespace('helpdesk', description='Support tickets', path='/helpdesk')

ticket_model = helpdesk_ns.model('Ticket', {
    'subject': fields.String(required=True, description='5-200 characters'),
    'description': fields.String(required=True, description='10-2000 characters'),
    'category': fields.String(description='e.g. technical, account, marketplace'),
    'priority': fields.String(enum=[p.value for p in TicketPriority])
})

response_model = helpdesk_ns.model('TicketResponse', {
    'message': fields.String(required=True),
    'is_internal_note': fields.Boolean(description='Admins only; hidden from the ticket owner')
})


@helpdesk_ns.route('/tickets')
class TicketList(Resource):
    @login_required
    @helpdesk_ns.doc(security='BearerAuth')
    def get(self):
        """Own tickets"""
        try:
            tickets = helpdesk_service.list_tickets(user_id=current_session().user_id)
            return [helpdesk_service.format_ticket(t) for t in tickets], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching tickets: {e}")
            return {'message': 'Error fetching tickets', 'error': str(e)}, 500

    @login_required
    @helpdesk_ns.expect(ticket_model)
    @helpdesk_ns.doc(security='BearerAuth')
    def post(self):
        """Open a ticket"""
        data = validate(TicketSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            ticket = helpdesk_service.create_ticket(user_id, data)
            return helpdesk_service.format_ticket(ticket), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating ticket for user {user_id}: {e}")
            return {'message': 'Error creating ticket', 'error': str(e)}, 500


@helpdesk_ns.route('/tickets/<string:ticket_id>')
class TicketResource(Resource):
    @login_required
    @helpdesk_ns.doc(security='BearerAuth')
    def get(self, ticket_id):
        """Ticket with its conversation"""
        session = current_session()
        ticket, error, status = helpdesk_service.get_ticket(ticket_id, session)
        if error:
            return error, status
        return helpdesk_service.format_ticket(ticket, include_responses=True,
                                              show_internal=session.has_role(AppRole.ADMIN)), 200


@helpdesk_ns.route('/tickets/<string:ticket_id>/responses')
class TicketResponses(Resource):
    @login_required
    @helpdesk_ns.expect(response_model)
    @helpdesk_ns.doc(security='BearerAuth')
    def post(self, ticket_id):
        """Reply to a ticket"""
        session = current_session()
        ticket, error, status = helpdesk_service.get_ticket(ticket_id, session)
        if error:
            return error, status
        data = validate(TicketResponseSchema, request.get_json(silent=True))
        internal = data['is_internal_note'] and session.has_role(AppRole.ADMIN)
        try:
            response, error, status = helpdesk_service.add_response(ticket, session.user_id, data['message'],
                                                                    internal)
            if error:
                return error, status
            return helpdesk_service.format_response(response), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error replying to ticket {ticket_id}: {e}")
            return {'message': 'Error adding response', 'error': str(e)}, 500
