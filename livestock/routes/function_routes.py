import logging
from flask import request
from flask_restx import Namespace, Resource, fields
from livestock.services.impersonation_service import invoke_impersonation, ImpersonationError
from livestock.utils.session import current_session
from livestock.utils.util import login_required

logger = logging.getLogger(__name__)

functions_ns = Namespace('functions', description='Server-side functions', path='/functions')

impersonate_model = functions_ns.model('ImpersonateUser', {
    'targetUserId': fields.String(required=True, description='User being impersonated'),
    'action': fields.String(required=True, enum=['start', 'stop'])
})


@functions_ns.route('/impersonate-user')
class ImpersonateUser(Resource):
    @login_required
    @functions_ns.expect(impersonate_model)
    @functions_ns.doc(security='BearerAuth')
    def post(self):
        """Record the start or stop of an admin impersonation in the audit log"""
        data = request.get_json(silent=True) or {}
        target_user_id = data.get('targetUserId') or data.get('target_user_id')
        admin_id = current_session().user_id
        try:
            return invoke_impersonation(admin_id, target_user_id, data.get('action')), 200
        except ImpersonationError as e:
            logger.warning(f"Impersonation request by {admin_id} rejected: {e}")
            return {'error': str(e)}, 400
