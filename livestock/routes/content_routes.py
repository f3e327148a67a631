import logging
from flask_restx import Namespace, Resource, inputs, reqparse
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import GovernmentScheme, CmsContent, ContentCategory
from livestock.services import content_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required

logger = logging.getLogger(__name__)

scheme_ns = Namespace('schemes', description='Government schemes', path='/schemes')
content_ns = Namespace('content', description='Content library', path='/content')
notification_ns = Namespace('notifications', description='Own notifications', path='/notifications')

scheme_parser = reqparse.RequestParser()
scheme_parser.add_argument('state', type=str, location='args', help='Schemes for this state')
scheme_parser.add_argument('search', type=str, location='args')

content_parser = reqparse.RequestParser()
content_parser.add_argument('category', type=str, location='args', choices=[c.value for c in ContentCategory])
content_parser.add_argument('language', type=str, location='args')
content_parser.add_argument('featured', type=inputs.boolean, location='args')

notification_parser = reqparse.RequestParser()
notification_parser.add_argument('unread', type=inputs.boolean, location='args', default=False)


@scheme_ns.route('')
class SchemeList(Resource):
    @login_required
    @scheme_ns.expect(scheme_parser)
    @scheme_ns.doc(security='BearerAuth')
    def get(self):
        """Active schemes"""
        args = scheme_parser.parse_args()
        try:
            schemes = content_service.list_schemes(state=args['state'], search=args['search'])
            return [content_service.format_scheme(s) for s in schemes], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching schemes: {e}")
            return {'message': 'Error fetching schemes', 'error': str(e)}, 500


@scheme_ns.route('/<string:scheme_id>')
class SchemeResource(Resource):
    @login_required
    @scheme_ns.doc(security='BearerAuth')
    def get(self, scheme_id):
        """Scheme details"""
        scheme, error, status = content_service.get_row(GovernmentScheme, scheme_id, active_only=True)
        if error:
            return error, status
        return content_service.format_scheme(scheme), 200


@content_ns.route('')
class ContentList(Resource):
    @login_required
    @content_ns.expect(content_parser)
    @content_ns.doc(security='BearerAuth')
    def get(self):
        """Published content, featured first"""
        args = content_parser.parse_args()
        category = ContentCategory(args['category']) if args['category'] else None
        try:
            items = content_service.list_content(category=category, language=args['language'],
                                                 featured=args['featured'])
            return [content_service.format_content(c) for c in items], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching content: {e}")
            return {'message': 'Error fetching content', 'error': str(e)}, 500


@content_ns.route('/<string:content_id>')
class ContentResource(Resource):
    @login_required
    @content_ns.doc(security='BearerAuth')
    def get(self, content_id):
        """Content item; counts a view"""
        content, error, status = content_service.get_row(CmsContent, content_id, active_only=True)
        if error:
            return error, status
        try:
            content_service.record_content_view(content)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning(f"Could not count view of content {content_id}: {e}")
        return content_service.format_content(content), 200


@notification_ns.route('')
class NotificationList(Resource):
    @login_required
    @notification_ns.expect(notification_parser)
    @notification_ns.doc(security='BearerAuth')
    def get(self):
        """Own and broadcast notifications, newest first"""
        args = notification_parser.parse_args()
        notifications = content_service.list_notifications(current_session().user_id, args['unread'])
        return [content_service.format_notification(n) for n in notifications], 200


@notification_ns.route('/read-all')
class NotificationsReadAll(Resource):
    @login_required
    @notification_ns.doc(security='BearerAuth')
    def post(self):
        """Mark all own notifications read"""
        try:
            updated = content_service.mark_all_read(current_session().user_id)
            return {'message': 'Notifications marked as read', 'updated': updated}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error marking notifications read: {e}")
            return {'message': 'Error updating notifications', 'error': str(e)}, 500


@notification_ns.route('/<string:notification_id>/read')
class NotificationRead(Resource):
    @login_required
    @notification_ns.doc(security='BearerAuth')
    def post(self, notification_id):
        """Mark a notification read"""
        try:
            notification, error, status = content_service.mark_notification_read(notification_id,
                                                                                 current_session().user_id)
            if error:
                return error, status
            return content_service.format_notification(notification), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error marking notification {notification_id} read: {e}")
            return {'message': 'Error updating notification', 'error': str(e)}, 500
