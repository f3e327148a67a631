import logging
from datetime import timezone
from dateutil.parser import isoparse
from flask import request
from flask_restx import Namespace, Resource, fields, reqparse
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import (
    AppRole, GovernmentScheme, CmsContent, Notification, SubscriptionPlan, TicketStatus, TicketPriority, ListingStatus
)
from livestock.schemas.account_schema import RoleChangeSchema, SubscriptionPlanSchema
from livestock.schemas.content_schema import SchemeSchema, ContentSchema, NotificationSchema
from livestock.schemas.helpdesk_schema import TicketUpdateSchema, SlaConfigSchema, TicketResponseSchema
from livestock.schemas.marketplace_schema import ListingStatusSchema
from livestock.services import (
    account_service, activity_service, content_service, dashboard_service, helpdesk_service, marketplace_service,
    profile_service
)
from livestock.utils.role_utils import grant_role, parse_role, revoke_role
from livestock.utils.session import current_registry, current_session
from livestock.utils.util import role_required
from livestock.utils.validation import validate, validate_changes

logger = logging.getLogger(__name__)

admin_ns = Namespace('admin', description='Administration', path='/admin')

role_model = admin_ns.model('RoleChange', {
    'role': fields.String(required=True, enum=[r.value for r in AppRole])
})

ticket_update_model = admin_ns.model('TicketUpdate', {
    'status': fields.String(enum=[s.value for s in TicketStatus]),
    'priority': fields.String(enum=[p.value for p in TicketPriority]),
    'assigned_to': fields.String(description='Admin user ID')
})

sla_model = admin_ns.model('SlaConfig', {
    'response_time_hours': fields.Integer(required=True, min=1),
    'resolution_time_hours': fields.Integer(required=True, min=1)
})

listing_status_model = admin_ns.model('ListingStatus', {
    'status': fields.String(required=True, enum=[s.value for s in ListingStatus])
})

plan_model = admin_ns.model('SubscriptionPlan', {
    'name': fields.String(required=True),
    'description': fields.String(),
    'price': fields.Float(required=True, min=0),
    'duration_months': fields.Integer(required=True, min=1, max=36),
    'features': fields.List(fields.String),
    'is_active': fields.Boolean(default=True)
})

user_parser = reqparse.RequestParser()
user_parser.add_argument('search', type=str, location='args', help='Email or name contains')
user_parser.add_argument('role', type=str, location='args', choices=[r.value for r in AppRole])

activity_parser = reqparse.RequestParser()
activity_parser.add_argument('activity_type', type=str, location='args')
activity_parser.add_argument('user_id', type=str, location='args')
activity_parser.add_argument('limit', type=int, location='args', default=100)
activity_parser.add_argument('since', type=str, location='args', help='ISO timestamp')

ticket_parser = reqparse.RequestParser()
ticket_parser.add_argument('status', type=str, location='args', choices=[s.value for s in TicketStatus])
ticket_parser.add_argument('priority', type=str, location='args', choices=[p.value for p in TicketPriority])

listing_parser = reqparse.RequestParser()
listing_parser.add_argument('status', type=str, location='args', choices=[s.value for s in ListingStatus])

subscription_parser = reqparse.RequestParser()
subscription_parser.add_argument('search', type=str, location='args', help='Subscriber name or phone contains')


def parse_since(value):
    if not value:
        return None
    try:
        since = isoparse(value)
    except (ValueError, TypeError):
        raise ValueError('Invalid date format. Use ISO format (YYYY-MM-DDTHH:MM:SS)')
    if since.tzinfo is not None:
        since = since.astimezone(timezone.utc).replace(tzinfo=None)
    return since


def store_error(action, e):
    db.session.rollback()
    logger.error(f"Error {action}: {e}")
    return {'message': f'Error {action}', 'error': str(e)}, 500


@admin_ns.route('/overview')
class AdminOverview(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """System-wide counts"""
        try:
            return dashboard_service.admin_overview(), 200
        except SQLAlchemyError as e:
            return store_error('fetching overview', e)


@admin_ns.route('/users')
class AdminUsers(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(user_parser)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """Users with their roles"""
        args = user_parser.parse_args()
        role = AppRole(args['role']) if args['role'] else None
        try:
            return account_service.list_users(args['search'], role), 200
        except SQLAlchemyError as e:
            return store_error('fetching users', e)


@admin_ns.route('/users/<string:user_id>/roles')
class AdminUserRoles(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(role_model)
    @admin_ns.doc(security='BearerAuth')
    def post(self, user_id):
        """Grant a role"""
        data = validate(RoleChangeSchema, request.get_json(silent=True))
        try:
            roles, error = grant_role(user_id, data['role'])
        except SQLAlchemyError as e:
            return store_error('granting role', e)
        if error:
            return {'message': error}, 404 if error == 'User not found' else 400
        current_registry().evict_user_roles(user_id)
        activity_service.log_activity(current_session().user_id, 'role_granted',
                                      f"Granted {data['role']} to user {user_id}", 'user_management',
                                      {'target_user_id': user_id, 'role': data['role']})
        return {'user_id': user_id, 'roles': roles}, 200


@admin_ns.route('/users/<string:user_id>/roles/<string:role>')
class AdminUserRole(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def delete(self, user_id, role):
        """Revoke a role"""
        if user_id == current_session().user_id and parse_role(role) is AppRole.ADMIN:
            return {'message': 'You cannot revoke your own admin role'}, 400
        try:
            roles, error = revoke_role(user_id, role)
        except SQLAlchemyError as e:
            return store_error('revoking role', e)
        if error:
            return {'message': error}, 404 if error == 'User not found' else 400
        current_registry().evict_user_roles(user_id)
        activity_service.log_activity(current_session().user_id, 'role_revoked',
                                      f"Revoked {role} from user {user_id}", 'user_management',
                                      {'target_user_id': user_id, 'role': role})
        return {'user_id': user_id, 'roles': roles}, 200


@admin_ns.route('/activity')
class AdminActivity(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(activity_parser)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """User activity log, newest first"""
        args = activity_parser.parse_args()
        limit = min(max(args['limit'] or 100, 1), 500)
        try:
            since = parse_since(args['since'])
        except ValueError as e:
            return {'message': str(e)}, 400
        try:
            return activity_service.list_activity(args['activity_type'], args['user_id'], limit, since), 200
        except SQLAlchemyError as e:
            return store_error('fetching activity', e)


@admin_ns.route('/schemes')
class AdminSchemes(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """All schemes, active or not"""
        return [content_service.format_scheme(s) for s in content_service.list_schemes(active_only=False)], 200

    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def post(self):
        """Create a scheme"""
        data = validate(SchemeSchema, request.get_json(silent=True))
        try:
            scheme = content_service.save(GovernmentScheme(**data))
            return content_service.format_scheme(scheme), 201
        except SQLAlchemyError as e:
            return store_error('creating scheme', e)


@admin_ns.route('/schemes/<string:scheme_id>')
class AdminScheme(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def put(self, scheme_id):
        """Update a scheme"""
        scheme, error, status = content_service.get_row(GovernmentScheme, scheme_id)
        if error:
            return error, status
        data = validate_changes(SchemeSchema, scheme, request.get_json(silent=True))
        try:
            scheme = content_service.apply_changes(scheme, data)
            return content_service.format_scheme(scheme), 200
        except SQLAlchemyError as e:
            return store_error('updating scheme', e)

    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def delete(self, scheme_id):
        """Delete a scheme"""
        scheme, error, status = content_service.get_row(GovernmentScheme, scheme_id)
        if error:
            return error, status
        try:
            content_service.remove(scheme)
            return {'message': 'Scheme deleted successfully'}, 200
        except SQLAlchemyError as e:
            return store_error('deleting scheme', e)


@admin_ns.route('/content')
class AdminContentList(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """All content, published or not"""
        return [content_service.format_content(c) for c in content_service.list_content(active_only=False)], 200

    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def post(self):
        """Publish content"""
        data = validate(ContentSchema, request.get_json(silent=True))
        try:
            content = content_service.save(CmsContent(created_by=current_session().user_id, **data))
            return content_service.format_content(content), 201
        except SQLAlchemyError as e:
            return store_error('creating content', e)


@admin_ns.route('/content/<string:content_id>')
class AdminContent(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def put(self, content_id):
        """Update content"""
        content, error, status = content_service.get_row(CmsContent, content_id)
        if error:
            return error, status
        data = validate_changes(ContentSchema, content, request.get_json(silent=True))
        try:
            content = content_service.apply_changes(content, data)
            return content_service.format_content(content), 200
        except SQLAlchemyError as e:
            return store_error('updating content', e)

    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def delete(self, content_id):
        """Delete content"""
        content, error, status = content_service.get_row(CmsContent, content_id)
        if error:
            return error, status
        try:
            content_service.remove(content)
            return {'message': 'Content deleted successfully'}, 200
        except SQLAlchemyError as e:
            return store_error('deleting content', e)


@admin_ns.route('/notifications')
class AdminNotifications(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def post(self):
        """Send a notification to one user, or to everyone without user_id"""
        data = validate(NotificationSchema, request.get_json(silent=True))
        try:
            notification = content_service.save(Notification(**data))
            return content_service.format_notification(notification), 201
        except SQLAlchemyError as e:
            return store_error('sending notification', e)


@admin_ns.route('/tickets')
class AdminTickets(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(ticket_parser)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """All tickets with counts by status"""
        args = ticket_parser.parse_args()
        status = TicketStatus(args['status']) if args['status'] else None
        priority = TicketPriority(args['priority']) if args['priority'] else None
        try:
            tickets = helpdesk_service.list_tickets(status=status, priority=priority)
            return {
                'tickets': [helpdesk_service.format_ticket(t) for t in tickets],
                'counts': helpdesk_service.count_by_status()
            }, 200
        except SQLAlchemyError as e:
            return store_error('fetching tickets', e)


@admin_ns.route('/tickets/<string:ticket_id>')
class AdminTicket(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(ticket_update_model)
    @admin_ns.doc(security='BearerAuth')
    def put(self, ticket_id):
        """Change status, priority or assignee"""
        ticket, error, status = helpdesk_service.get_ticket(ticket_id, current_session())
        if error:
            return error, status
        data = validate(TicketUpdateSchema, request.get_json(silent=True), partial=True)
        try:
            ticket = helpdesk_service.update_ticket(ticket, data)
            return helpdesk_service.format_ticket(ticket, include_responses=True, show_internal=True), 200
        except SQLAlchemyError as e:
            return store_error(f'updating ticket {ticket_id}', e)


@admin_ns.route('/tickets/<string:ticket_id>/responses')
class AdminTicketResponses(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def post(self, ticket_id):
        """Reply to a ticket or leave an internal note"""
        session = current_session()
        ticket, error, status = helpdesk_service.get_ticket(ticket_id, session)
        if error:
            return error, status
        data = validate(TicketResponseSchema, request.get_json(silent=True))
        try:
            response, error, status = helpdesk_service.add_response(ticket, session.user_id, data['message'],
                                                                    data['is_internal_note'])
            if error:
                return error, status
            return helpdesk_service.format_response(response), 201
        except SQLAlchemyError as e:
            return store_error(f'replying to ticket {ticket_id}', e)


@admin_ns.route('/sla')
class AdminSlaList(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """SLA hours per priority"""
        return [helpdesk_service.format_sla(c) for c in helpdesk_service.list_sla_configs()], 200


@admin_ns.route('/sla/<string:priority>')
class AdminSla(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(sla_model)
    @admin_ns.doc(security='BearerAuth')
    def put(self, priority):
        """Set response and resolution hours for a priority"""
        try:
            ticket_priority = TicketPriority(priority)
        except ValueError:
            return {'message': f'Invalid priority: {priority}'}, 400
        data = validate(SlaConfigSchema, request.get_json(silent=True))
        if data['resolution_time_hours'] < data['response_time_hours']:
            return {'message': 'Validation Error',
                    'error': 'Resolution time cannot be shorter than response time'}, 400
        try:
            config = helpdesk_service.update_sla_config(ticket_priority, data)
            return helpdesk_service.format_sla(config), 200
        except SQLAlchemyError as e:
            return store_error('updating SLA configuration', e)


@admin_ns.route('/listings')
class AdminListings(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(listing_parser)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """Listings in any status for moderation"""
        args = listing_parser.parse_args()
        status = ListingStatus(args['status']) if args['status'] else None
        listings = marketplace_service.search_listings(status=status)
        return [marketplace_service.format_listing(listing) for listing in listings], 200


@admin_ns.route('/listings/<string:listing_id>/status')
class AdminListingStatus(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(listing_status_model)
    @admin_ns.doc(security='BearerAuth')
    def put(self, listing_id):
        """Moderate a listing"""
        listing, error, status = marketplace_service.get_listing(listing_id)
        if error:
            return error, status
        data = validate(ListingStatusSchema, request.get_json(silent=True))
        try:
            listing = marketplace_service.update_listing(listing, data)
            logger.info(f"Admin {current_session().user_id} set listing {listing_id} to {listing.status.value}")
            return marketplace_service.format_listing(listing), 200
        except SQLAlchemyError as e:
            return store_error(f'moderating listing {listing_id}', e)


@admin_ns.route('/enquiries')
class AdminEnquiries(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """Every marketplace enquiry"""
        return [marketplace_service.format_enquiry(e) for e in marketplace_service.list_all_enquiries()], 200


@admin_ns.route('/plans')
class AdminPlans(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """Every subscription plan, active or not"""
        return [profile_service.format_plan(p) for p in profile_service.list_all_plans()], 200

    @role_required(AppRole.ADMIN)
    @admin_ns.expect(plan_model)
    @admin_ns.doc(security='BearerAuth')
    def post(self):
        """Create a subscription plan"""
        data = validate(SubscriptionPlanSchema, request.get_json(silent=True))
        try:
            plan = profile_service.save_plan(SubscriptionPlan(**data))
            return profile_service.format_plan(plan), 201
        except SQLAlchemyError as e:
            return store_error('creating plan', e)


@admin_ns.route('/plans/<string:plan_id>')
class AdminPlan(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(plan_model)
    @admin_ns.doc(security='BearerAuth')
    def put(self, plan_id):
        """Update a subscription plan"""
        plan, error, status = profile_service.get_plan(plan_id)
        if error:
            return error, status
        data = validate_changes(SubscriptionPlanSchema, plan, request.get_json(silent=True))
        try:
            plan = profile_service.save_plan(plan, data)
            return profile_service.format_plan(plan), 200
        except SQLAlchemyError as e:
            return store_error(f'updating plan {plan_id}', e)

    @role_required(AppRole.ADMIN)
    @admin_ns.doc(security='BearerAuth')
    def delete(self, plan_id):
        """Delete a plan nobody has subscribed to"""
        plan, error, status = profile_service.get_plan(plan_id)
        if error:
            return error, status
        try:
            error, status = profile_service.delete_plan(plan)
            if error:
                return error, status
            return {'message': 'Plan deleted successfully'}, 200
        except SQLAlchemyError as e:
            return store_error(f'deleting plan {plan_id}', e)


@admin_ns.route('/subscriptions')
class AdminSubscriptions(Resource):
    @role_required(AppRole.ADMIN)
    @admin_ns.expect(subscription_parser)
    @admin_ns.doc(security='BearerAuth')
    def get(self):
        """Subscriptions with subscriber details and revenue totals"""
        args = subscription_parser.parse_args()
        try:
            return {
                'subscriptions': profile_service.list_subscriptions(args['search']),
                'stats': profile_service.subscription_stats()
            }, 200
        except SQLAlchemyError as e:
            return store_error('fetching subscriptions', e)
