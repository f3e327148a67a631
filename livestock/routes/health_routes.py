import logging
from flask import request, current_app
from flask_restx import Namespace, Resource, fields, reqparse
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import HealthRecord, Vaccination, BreedingRecord
from livestock.schemas.animal_schema import HealthRecordSchema, VaccinationSchema, BreedingRecordSchema
from livestock.services import animal_service, health_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required
from livestock.utils.validation import validate, validate_changes

logger = logging.getLogger(__name__)

health_ns = Namespace('health', description='Animal health records', path='/health-records')
vaccination_ns = Namespace('vaccinations', description='Vaccination records', path='/vaccinations')
breeding_ns = Namespace('breeding', description='Breeding records', path='/breeding-records')

health_record_model = health_ns.model('HealthRecord', {
    'animal_id': fields.String(required=True),
    'record_date': fields.Date(),
    'symptoms': fields.String(required=True, description='At least 3 characters'),
    'diagnosis': fields.String(required=True, description='At least 3 characters'),
    'treatment': fields.String(required=True, description='At least 3 characters'),
    'prescription': fields.String(),
    'veterinarian_notes': fields.String(),
    'next_checkup_date': fields.Date()
})

vaccination_model = vaccination_ns.model('Vaccination', {
    'animal_id': fields.String(required=True),
    'vaccine_name': fields.String(required=True),
    'vaccine_type': fields.String(),
    'batch_number': fields.String(),
    'administered_by': fields.String(required=True),
    'administered_date': fields.Date(),
    'next_due_date': fields.Date(),
    'notes': fields.String()
})

breeding_model = breeding_ns.model('BreedingRecord', {
    'animal_id': fields.String(required=True),
    'breeding_date': fields.Date(required=True),
    'breeding_method': fields.String(description='natural or artificial insemination'),
    'partner_details': fields.String(),
    'expected_delivery_date': fields.Date(),
    'actual_delivery_date': fields.Date(),
    'offspring_count': fields.Integer(min=0),
    'notes': fields.String()
})

animal_filter = reqparse.RequestParser()
animal_filter.add_argument('animal_id', type=str, location='args', help='Only records of this animal')

due_parser = reqparse.RequestParser()
due_parser.add_argument('days', type=int, location='args', help='Window in days (default 7)')


def writable_animal(animal_id):
    """Owners, vets and admins may add records to an animal. Returns (animal, error, status)."""
    return animal_service.get_animal(animal_id, current_session())


def create_for_animal(schema, model, formatter, label, **extra):
    data = validate(schema, request.get_json(silent=True))
    _, error, status = writable_animal(data['animal_id'])
    if error:
        return error, status
    try:
        record = health_service.create_record(model, data, **extra)
        return formatter(record), 201
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating {label}: {e}")
        return {'message': f'Error creating {label}', 'error': str(e)}, 500


def delete_for_animal(model, record_id, label):
    session = current_session()
    record, error, status = health_service.get_record(model, record_id,
                                                      animal_service.accessible_animal_ids(session))
    if error:
        return error, status
    try:
        health_service.delete_record(record)
        return {'message': f'{label.capitalize()} deleted successfully'}, 200
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting {label} {record_id}: {e}")
        return {'message': f'Error deleting {label}', 'error': str(e)}, 500


@health_ns.route('')
class HealthRecordList(Resource):
    @login_required
    @health_ns.expect(animal_filter)
    @health_ns.doc(security='BearerAuth')
    def get(self):
        """Health records of own animals (all animals for vets and admins)"""
        args = animal_filter.parse_args()
        animal_ids = animal_service.accessible_animal_ids(current_session())
        try:
            records = health_service.list_health_records(animal_ids, args['animal_id'])
            return [health_service.format_health_record(r) for r in records], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching health records: {e}")
            return {'message': 'Error fetching health records', 'error': str(e)}, 500

    @login_required
    @health_ns.expect(health_record_model)
    @health_ns.doc(security='BearerAuth')
    def post(self):
        """Add a health record"""
        return create_for_animal(HealthRecordSchema, HealthRecord, health_service.format_health_record,
                                 'health record', recorded_by=current_session().user_id)


@health_ns.route('/<string:record_id>')
class HealthRecordResource(Resource):
    @login_required
    @health_ns.doc(security='BearerAuth')
    def delete(self, record_id):
        """Delete a health record"""
        return delete_for_animal(HealthRecord, record_id, 'health record')


@vaccination_ns.route('')
class VaccinationList(Resource):
    @login_required
    @vaccination_ns.expect(animal_filter)
    @vaccination_ns.doc(security='BearerAuth')
    def get(self):
        """Vaccinations of own animals (all animals for vets and admins)"""
        args = animal_filter.parse_args()
        animal_ids = animal_service.accessible_animal_ids(current_session())
        try:
            vaccinations = health_service.list_vaccinations(animal_ids, args['animal_id'])
            return [health_service.format_vaccination(v) for v in vaccinations], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching vaccinations: {e}")
            return {'message': 'Error fetching vaccinations', 'error': str(e)}, 500

    @login_required
    @vaccination_ns.expect(vaccination_model)
    @vaccination_ns.doc(security='BearerAuth')
    def post(self):
        """Record a vaccination"""
        return create_for_animal(VaccinationSchema, Vaccination, health_service.format_vaccination, 'vaccination')


@vaccination_ns.route('/due')
class VaccinationsDue(Resource):
    @login_required
    @vaccination_ns.expect(due_parser)
    @vaccination_ns.doc(security='BearerAuth')
    def get(self):
        """Vaccinations falling due within the next few days"""
        args = due_parser.parse_args()
        days = args['days'] if args['days'] is not None else current_app.config['VACCINATION_DUE_DAYS']
        animal_ids = animal_service.accessible_animal_ids(current_session())
        try:
            due = health_service.vaccinations_due(animal_ids, max(days, 0))
            return [health_service.format_vaccination(v) for v in due], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching due vaccinations: {e}")
            return {'message': 'Error fetching due vaccinations', 'error': str(e)}, 500


@vaccination_ns.route('/<string:vaccination_id>')
class VaccinationResource(Resource):
    @login_required
    @vaccination_ns.doc(security='BearerAuth')
    def delete(self, vaccination_id):
        """Delete a vaccination record"""
        return delete_for_animal(Vaccination, vaccination_id, 'vaccination')


@breeding_ns.route('')
class BreedingRecordList(Resource):
    @login_required
    @breeding_ns.expect(animal_filter)
    @breeding_ns.doc(security='BearerAuth')
    def get(self):
        """Breeding records of own animals"""
        args = animal_filter.parse_args()
        animal_ids = animal_service.accessible_animal_ids(current_session())
        try:
            records = health_service.list_breeding_records(animal_ids, args['animal_id'])
            return [health_service.format_breeding_record(r) for r in records], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching breeding records: {e}")
            return {'message': 'Error fetching breeding records', 'error': str(e)}, 500

    @login_required
    @breeding_ns.expect(breeding_model)
    @breeding_ns.doc(security='BearerAuth')
    def post(self):
        """Add a breeding record"""
        return create_for_animal(BreedingRecordSchema, BreedingRecord, health_service.format_breeding_record,
                                 'breeding record')


@breeding_ns.route('/<string:record_id>')
class BreedingRecordResource(Resource):
    @login_required
    @breeding_ns.expect(breeding_model)
    @breeding_ns.doc(security='BearerAuth')
    def put(self, record_id):
        """Update a breeding record (e.g. record the delivery)"""
        session = current_session()
        record, error, status = health_service.get_record(BreedingRecord, record_id,
                                                          animal_service.accessible_animal_ids(session))
        if error:
            return error, status
        data = validate_changes(BreedingRecordSchema, record, request.get_json(silent=True))
        if data.get('animal_id', record.animal_id) != record.animal_id:
            _, error, status = writable_animal(data['animal_id'])
            if error:
                return error, status
        try:
            record = health_service.update_record(record, data)
            return health_service.format_breeding_record(record), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating breeding record {record_id}: {e}")
            return {'message': 'Error updating breeding record', 'error': str(e)}, 500

    @login_required
    @breeding_ns.doc(security='BearerAuth')
    def delete(self, record_id):
        """Delete a breeding record"""
        return delete_for_animal(BreedingRecord, record_id, 'breeding record')
