import logging
from flask import request
from flask_restx import Namespace, Resource, fields, inputs, reqparse
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import Species, Gender, HealthStatus
from livestock.schemas.animal_schema import AnimalSchema
from livestock.services import animal_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required
from livestock.utils.validation import validate, validate_changes

logger = logging.getLogger(__name__)

animal_ns = Namespace('animals', description='Animal registry', path='/animals')

animal_model = animal_ns.model('Animal', {
    'name': fields.String(description='Animal name'),
    'species': fields.String(required=True, enum=[s.value for s in Species]),
    'breed': fields.String(),
    'gender': fields.String(required=True, enum=[g.value for g in Gender]),
    'date_of_birth': fields.Date(),
    'health_status': fields.String(enum=[h.value for h in HealthStatus]),
    'identification_number': fields.String(description='Ear tag or registration number'),
    'location': fields.String()
})

list_parser = reqparse.RequestParser()
list_parser.add_argument('species', type=str, location='args', help='Filter by species')
list_parser.add_argument('health_status', type=str, location='args', help='Filter by health status')
list_parser.add_argument('all', type=inputs.boolean, location='args', default=False,
                         help='Vets and admins: list every animal instead of their own')

photo_parser = reqparse.RequestParser()
photo_parser.add_argument('image', type=reqparse.FileStorage, location='files', required=True, help='Animal photo')


def parse_enum(enum_cls, value):
    try:
        return enum_cls(value) if value else None
    except ValueError:
        return None


@animal_ns.route('')
class AnimalList(Resource):
    @login_required
    @animal_ns.expect(list_parser)
    @animal_ns.doc(security='BearerAuth')
    def get(self):
        """List own animals (vets and admins may pass all=true)"""
        session = current_session()
        args = list_parser.parse_args()
        owner_id = session.user_id
        if args['all'] and animal_service.accessible_animal_ids(session) is None:
            owner_id = None
        try:
            animals = animal_service.list_animals(owner_id,
                                                  parse_enum(Species, args['species']),
                                                  parse_enum(HealthStatus, args['health_status']))
            return [animal_service.format_animal(a) for a in animals], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching animals: {e}")
            return {'message': 'Error fetching animals', 'error': str(e)}, 500

    @login_required
    @animal_ns.expect(animal_model)
    @animal_ns.doc(security='BearerAuth')
    def post(self):
        """Add Animal"""
        data = validate(AnimalSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            animal = animal_service.create_animal(user_id, data)
            return animal_service.format_animal(animal), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating animal for user {user_id}: {e}")
            return {'message': 'Error creating animal', 'error': str(e)}, 500


@animal_ns.route('/<string:animal_id>')
class AnimalResource(Resource):
    @login_required
    @animal_ns.doc(security='BearerAuth')
    def get(self, animal_id):
        """Get an animal"""
        animal, error, status = animal_service.get_animal(animal_id, current_session())
        if error:
            return error, status
        return animal_service.format_animal(animal), 200

    @login_required
    @animal_ns.expect(animal_model)
    @animal_ns.doc(security='BearerAuth')
    def put(self, animal_id):
        """Edit an animal"""
        animal, error, status = animal_service.get_animal(animal_id, current_session(), write=True)
        if error:
            return error, status
        data = validate_changes(AnimalSchema, animal, request.get_json(silent=True))
        try:
            animal = animal_service.update_animal(animal, data)
            return animal_service.format_animal(animal), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating animal {animal_id}: {e}")
            return {'message': 'Error updating animal', 'error': str(e)}, 500

    @login_required
    @animal_ns.doc(security='BearerAuth')
    def delete(self, animal_id):
        """Delete an animal and its records"""
        animal, error, status = animal_service.get_animal(animal_id, current_session(), write=True)
        if error:
            return error, status
        try:
            animal_service.delete_animal(animal)
            return {'message': 'Animal deleted successfully'}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error deleting animal {animal_id}: {e}")
            return {'message': 'Error deleting animal', 'error': str(e)}, 500


@animal_ns.route('/<string:animal_id>/photo')
class AnimalPhoto(Resource):
    @login_required
    @animal_ns.expect(photo_parser)
    @animal_ns.doc(security='BearerAuth')
    def post(self, animal_id):
        """Upload an animal photo (png, jpg, jpeg, gif)"""
        animal, error, status = animal_service.get_animal(animal_id, current_session(), write=True)
        if error:
            return error, status
        args = photo_parser.parse_args()
        try:
            animal, error, status = animal_service.save_photo(animal, args['image'])
            if error:
                return error, status
            return animal_service.format_animal(animal), 200
        except (OSError, SQLAlchemyError) as e:
            db.session.rollback()
            logger.error(f"Failed to save photo for animal {animal_id}: {e}")
            return {'message': 'Could not save image', 'error': str(e)}, 500
