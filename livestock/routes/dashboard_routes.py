import logging
from flask import request, current_app
from flask_restx import Namespace, Resource, fields
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import AppRole, HealthRecord, Vaccination
from livestock.schemas.animal_schema import HealthRecordSchema, VaccinationSchema
from livestock.services import dashboard_service, health_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required, role_required
from livestock.utils.validation import validate

logger = logging.getLogger(__name__)

dashboard_ns = Namespace('dashboard', description='Farmer dashboard', path='/dashboard')
vet_ns = Namespace('vet', description='Veterinary officer tools', path='/vet')
coordinator_ns = Namespace('coordinator', description='Program coordinator reports', path='/coordinator')

VET_ROLES = (AppRole.VETERINARY_OFFICER, AppRole.ADMIN)
COORDINATOR_ROLES = (AppRole.PROGRAM_COORDINATOR, AppRole.ADMIN)

vet_health_record_model = vet_ns.model('VetHealthRecord', {
    'animal_id': fields.String(required=True),
    'symptoms': fields.String(required=True),
    'diagnosis': fields.String(required=True),
    'treatment': fields.String(required=True),
    'prescription': fields.String(),
    'veterinarian_notes': fields.String(),
    'next_checkup_date': fields.Date()
})

vet_vaccination_model = vet_ns.model('VetVaccination', {
    'animal_id': fields.String(required=True),
    'vaccine_name': fields.String(required=True),
    'vaccine_type': fields.String(),
    'batch_number': fields.String(),
    'administered_by': fields.String(required=True),
    'administered_date': fields.Date(),
    'next_due_date': fields.Date(),
    'notes': fields.String()
})


@dashboard_ns.route('')
class FarmerDashboard(Resource):
    @login_required
    @dashboard_ns.doc(security='BearerAuth')
    def get(self):
        """Own herd summary"""
        user_id = current_session().user_id
        try:
            return dashboard_service.farmer_dashboard(user_id), 200
        except SQLAlchemyError as e:
            logger.error(f"Error building dashboard for user {user_id}: {e}")
            return {'message': 'Error fetching dashboard', 'error': str(e)}, 500


@vet_ns.route('/dashboard')
class VetDashboard(Resource):
    @role_required(*VET_ROLES)
    @vet_ns.doc(security='BearerAuth')
    def get(self):
        """Caseload stats, recent cases, upcoming vaccinations and top diagnoses"""
        try:
            return dashboard_service.vet_dashboard(current_app.config['VACCINATION_DUE_DAYS']), 200
        except SQLAlchemyError as e:
            logger.error(f"Error building veterinary dashboard: {e}")
            return {'message': 'Error fetching veterinary dashboard', 'error': str(e)}, 500


@vet_ns.route('/health-records')
class VetHealthRecords(Resource):
    @role_required(*VET_ROLES)
    @vet_ns.expect(vet_health_record_model)
    @vet_ns.doc(security='BearerAuth')
    def post(self):
        """Record an examination for any animal"""
        data = validate(HealthRecordSchema, request.get_json(silent=True))
        if not health_service.animal_exists(data['animal_id']):
            return {'message': 'Animal not found'}, 404
        try:
            record = health_service.create_record(HealthRecord, data, recorded_by=current_session().user_id)
            return health_service.format_health_record(record), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating health record: {e}")
            return {'message': 'Error creating health record', 'error': str(e)}, 500


@vet_ns.route('/vaccinations')
class VetVaccinations(Resource):
    @role_required(*VET_ROLES)
    @vet_ns.expect(vet_vaccination_model)
    @vet_ns.doc(security='BearerAuth')
    def post(self):
        """Record a vaccination for any animal"""
        data = validate(VaccinationSchema, request.get_json(silent=True))
        if not health_service.animal_exists(data['animal_id']):
            return {'message': 'Animal not found'}, 404
        try:
            vaccination = health_service.create_record(Vaccination, data)
            return health_service.format_vaccination(vaccination), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating vaccination: {e}")
            return {'message': 'Error creating vaccination', 'error': str(e)}, 500


@coordinator_ns.route('/dashboard')
class CoordinatorDashboard(Resource):
    @role_required(*COORDINATOR_ROLES)
    @coordinator_ns.doc(security='BearerAuth')
    def get(self):
        """Regional statistics and scheme engagement"""
        try:
            return dashboard_service.coordinator_dashboard(), 200
        except SQLAlchemyError as e:
            logger.error(f"Error building coordinator dashboard: {e}")
            return {'message': 'Error fetching coordinator dashboard', 'error': str(e)}, 500
