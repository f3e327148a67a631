import logging
from flask import request
from flask_restx import Namespace, Resource, fields
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.schemas.account_schema import (
    EmergencyContactSchema, ProfileSetupSchema, ProfileUpdateSchema, SubscriptionChoiceSchema
)
from livestock.services import profile_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required
from livestock.utils.validation import validate, validate_changes

logger = logging.getLogger(__name__)

profile_ns = Namespace('profile', description='Own profile and settings', path='/profile')
onboarding_ns = Namespace('onboarding', description='Three step farmer onboarding', path='/onboarding')
plans_ns = Namespace('plans', description='Subscription plans', path='/plans')
emergency_ns = Namespace('emergency', description='Emergency contacts', path='/emergency-contacts')

profile_model = profile_ns.model('Profile', {
    'full_name': fields.String(description='Full name (2-100 characters)'),
    'phone_number': fields.String(description='10 digit phone number'),
    'state': fields.String(),
    'district': fields.String(),
    'village': fields.String(),
    'pin_code': fields.String(description='6 digit PIN code'),
    'preferred_language': fields.String(enum=['en', 'hi', 'ta', 'te', 'kn', 'mr', 'bn', 'gu'])
})

emergency_contact_model = emergency_ns.model('EmergencyContact', {
    'contact_name': fields.String(required=True, description='Name (2-100 characters)'),
    'contact_number': fields.String(required=True, description='10 digit phone number'),
    'relationship': fields.String(),
    'is_default': fields.Boolean(default=False)
})

subscription_model = onboarding_ns.model('SubscriptionChoice', {
    'plan_id': fields.String(required=True, description='Subscription plan ID')
})


@profile_ns.route('')
class ProfileResource(Resource):
    @login_required
    @profile_ns.doc(security='BearerAuth')
    def get(self):
        """Get own profile"""
        profile = current_session().user.profile
        if profile is None:
            return {'message': 'Profile not found'}, 404
        return profile_service.format_profile(profile), 200

    @login_required
    @profile_ns.expect(profile_model)
    @profile_ns.doc(security='BearerAuth')
    def put(self):
        """Update own profile and settings"""
        data = validate(ProfileUpdateSchema, request.get_json(silent=True), partial=True)
        user_id = current_session().user_id
        try:
            profile = profile_service.update_profile(user_id, data)
            return profile_service.format_profile(profile), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating profile for user {user_id}: {e}")
            return {'message': 'Error updating profile', 'error': str(e)}, 500


@onboarding_ns.route('/status')
class OnboardingStatus(Resource):
    @login_required
    @onboarding_ns.doc(security='BearerAuth')
    def get(self):
        """Whether onboarding is done and which step comes next"""
        return profile_service.onboarding_status(current_session().user_id), 200


@onboarding_ns.route('/profile')
class OnboardingProfile(Resource):
    @login_required
    @onboarding_ns.expect(profile_model)
    @onboarding_ns.doc(security='BearerAuth')
    def put(self):
        """Step 1: personal details"""
        data = validate(ProfileSetupSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            profile = profile_service.update_profile(user_id, data)
            return profile_service.format_profile(profile), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error saving onboarding profile for user {user_id}: {e}")
            return {'message': 'Error saving profile', 'error': str(e)}, 500


@onboarding_ns.route('/subscription')
class OnboardingSubscription(Resource):
    @login_required
    @onboarding_ns.expect(subscription_model)
    @onboarding_ns.doc(security='BearerAuth')
    def post(self):
        """Step 2: choose a subscription plan"""
        data = validate(SubscriptionChoiceSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            subscription, error, status = profile_service.choose_plan(user_id, data['plan_id'])
            if error:
                return error, status
            return profile_service.format_subscription(subscription), status
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating subscription for user {user_id}: {e}")
            return {'message': 'Error creating subscription', 'error': str(e)}, 500


@onboarding_ns.route('/complete')
class OnboardingComplete(Resource):
    @login_required
    @onboarding_ns.doc(security='BearerAuth')
    def post(self):
        """Step 3: finish onboarding"""
        user_id = current_session().user_id
        try:
            profile, error, status = profile_service.complete_onboarding(user_id)
            if error:
                return error, status
            return {'message': 'Onboarding completed', 'profile': profile_service.format_profile(profile)}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error completing onboarding for user {user_id}: {e}")
            return {'message': 'Error completing onboarding', 'error': str(e)}, 500


@plans_ns.route('')
class PlanList(Resource):
    def get(self):
        """Active subscription plans, cheapest first"""
        try:
            return profile_service.list_plans(), 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching plans: {e}")
            return {'message': 'Error fetching plans', 'error': str(e)}, 500


@plans_ns.route('/current')
class CurrentPlan(Resource):
    @login_required
    @plans_ns.doc(security='BearerAuth')
    def get(self):
        """Own active subscription"""
        subscription = profile_service.current_subscription(current_session().user_id)
        if subscription is None:
            return {'message': 'No active subscription'}, 404
        return profile_service.format_subscription(subscription), 200


@emergency_ns.route('')
class EmergencyContactList(Resource):
    @login_required
    @emergency_ns.doc(security='BearerAuth')
    def get(self):
        """Own emergency contacts, newest first"""
        contacts = profile_service.list_emergency_contacts(current_session().user_id)
        return [profile_service.format_emergency_contact(c) for c in contacts], 200

    @login_required
    @emergency_ns.expect(emergency_contact_model)
    @emergency_ns.doc(security='BearerAuth')
    def post(self):
        """Add an emergency contact"""
        data = validate(EmergencyContactSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            contact, error, status = profile_service.add_emergency_contact(user_id, data)
            if error:
                return error, status
            return profile_service.format_emergency_contact(contact), status
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error adding emergency contact for user {user_id}: {e}")
            return {'message': 'Error adding emergency contact', 'error': str(e)}, 500


@emergency_ns.route('/<string:contact_id>')
class EmergencyContactItem(Resource):
    @login_required
    @emergency_ns.expect(emergency_contact_model)
    @emergency_ns.doc(security='BearerAuth')
    def put(self, contact_id):
        """Edit an emergency contact"""
        contact, error, status = profile_service.get_emergency_contact(current_session().user_id, contact_id)
        if error:
            return error, status
        data = validate_changes(EmergencyContactSchema, contact, request.get_json(silent=True))
        try:
            contact = profile_service.update_emergency_contact(contact, data)
            return profile_service.format_emergency_contact(contact), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating emergency contact {contact_id}: {e}")
            return {'message': 'Error updating emergency contact', 'error': str(e)}, 500

    @login_required
    @emergency_ns.doc(security='BearerAuth')
    def delete(self, contact_id):
        """Remove an emergency contact"""
        contact, error, status = profile_service.get_emergency_contact(current_session().user_id, contact_id)
        if error:
            return error, status
        try:
            profile_service.delete_emergency_contact(contact)
            return {'message': 'Emergency contact deleted successfully'}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error deleting emergency contact {contact_id}: {e}")
            return {'message': 'Error deleting emergency contact', 'error': str(e)}, 500
