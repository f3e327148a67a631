import logging
from flask import request, jsonify
from flask_restx import Namespace, Resource, fields
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import AppRole
from livestock.schemas.account_schema import SignUpSchema, SignInSchema, ImpersonationSchema
from livestock.services import account_service
from livestock.services.impersonation_service import invoke_impersonation, ImpersonationError
from livestock.utils.role_utils import RoleResolver, get_user_data_with_permissions
from livestock.utils.session import current_registry, current_session
from livestock.utils.util import login_required, role_required
from livestock.utils.validation import validate

logger = logging.getLogger(__name__)

auth_ns = Namespace('auth', description='Authentication and session operations', path='/auth')

signup_model = auth_ns.model('SignUp', {
    'email': fields.String(required=True, description='Email address'),
    'password': fields.String(required=True, description='Password (min 6 characters)'),
    'full_name': fields.String(required=True, description='Full name'),
    'phone_number': fields.String(description='10 digit phone number')
})

signin_model = auth_ns.model('SignIn', {
    'email': fields.String(required=True, description='Email address'),
    'password': fields.String(required=True, description='Password')
})

impersonation_model = auth_ns.model('ImpersonationStart', {
    'target_user_id': fields.String(required=True, description='User to view the app as')
})


def session_payload(user, session=None):
    """User with roles and permissions, plus the impersonation display state."""
    roles = session.roles if session else RoleResolver(current_registry()).resolve(user.id)
    payload = {'user': get_user_data_with_permissions(user, roles)}
    payload['impersonating'] = session.impersonated_user_id if session else None
    return payload


def issue_token(user, status, message):
    access_token = create_access_token(identity=user.id)
    body = {'message': message, 'access_token': access_token, **session_payload(user)}
    response = jsonify(body)
    response.status_code = status
    set_access_cookies(response, access_token)
    return response


@auth_ns.route('/signup')
class SignUp(Resource):
    @auth_ns.expect(signup_model)
    def post(self):
        """Register a farmer account"""
        data = validate(SignUpSchema, request.get_json(silent=True))
        user, error, status = account_service.sign_up(data)
        if error:
            return error, status
        return issue_token(user, 201, 'User registered successfully')


@auth_ns.route('/signin')
class SignIn(Resource):
    @auth_ns.expect(signin_model)
    def post(self):
        """Sign in with email and password"""
        data = validate(SignInSchema, request.get_json(silent=True))
        try:
            user, error, status = account_service.authenticate(data['email'], data['password'])
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Sign-in failed for {data['email']}: {e}")
            return {'message': 'Error signing in', 'error': str(e)}, 500
        if error:
            return error, status
        return issue_token(user, 200, 'Signed in successfully')


@auth_ns.route('/admin-signin')
class AdminSignIn(Resource):
    @auth_ns.expect(signin_model)
    def post(self):
        """Sign in to the admin console; non-admin accounts are rejected"""
        data = validate(SignInSchema, request.get_json(silent=True))
        user, error, status = account_service.authenticate(data['email'], data['password'])
        if error:
            return error, status
        roles = RoleResolver(current_registry()).resolve(user.id)
        if AppRole.ADMIN not in roles:
            logger.warning(f"Non-admin {user.email} attempted admin sign-in")
            return {'message': 'Access denied. Admin privileges required'}, 403
        return issue_token(user, 200, 'Signed in successfully')


@auth_ns.route('/signout')
class SignOut(Resource):
    @login_required
    def post(self):
        """Sign out; revokes the token and clears cached roles and impersonation"""
        current_session().sign_out()
        response = jsonify({'message': 'Signed out successfully'})
        unset_jwt_cookies(response)
        return response


@auth_ns.route('/session')
class CurrentSession(Resource):
    @login_required
    @auth_ns.doc(security='BearerAuth')
    def get(self):
        """Current user, roles, permissions and impersonation state"""
        session = current_session()
        return session_payload(session.user, session), 200


@auth_ns.route('/impersonation')
class Impersonation(Resource):
    @role_required(AppRole.ADMIN)
    @auth_ns.expect(impersonation_model)
    @auth_ns.doc(security='BearerAuth')
    def post(self):
        """Start viewing the app as another user"""
        session = current_session()
        data = validate(ImpersonationSchema, request.get_json(silent=True))
        try:
            result = invoke_impersonation(session.user_id, data['target_user_id'], 'start')
        except ImpersonationError as e:
            # the session keeps whatever it had before
            logger.error(f"Error starting impersonation: {e}")
            return {'error': str(e)}, 400
        session.start_impersonation(data['target_user_id'])
        return {**result, 'impersonating': session.impersonated_user_id}, 200

    @login_required
    @auth_ns.doc(security='BearerAuth')
    def delete(self):
        """Stop impersonating; local state is cleared even if the audit call fails"""
        session = current_session()
        target_user_id = session.impersonated_user_id
        if target_user_id:
            try:
                invoke_impersonation(session.user_id, target_user_id, 'stop')
            except (ImpersonationError, SQLAlchemyError) as e:
                db.session.rollback()
                logger.error(f"Error stopping impersonation: {e}")
        session.stop_impersonation()
        return {'message': 'Impersonation stopped', 'impersonating': None}, 200
