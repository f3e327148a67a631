import logging
from flask import request, current_app
from flask_restx import Namespace, Resource, fields, reqparse
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import FeedingSchedule, FeedingLog, FeedInventory
from livestock.schemas.feeding_schema import FeedingScheduleSchema, FeedingLogSchema, FeedInventorySchema
from livestock.services import animal_service, feeding_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required
from livestock.utils.validation import validate, validate_changes

logger = logging.getLogger(__name__)

feeding_ns = Namespace('feeding', description='Feeding schedules, logs and feed inventory', path='/feeding')

schedule_model = feeding_ns.model('FeedingSchedule', {
    'animal_id': fields.String(required=True),
    'feed_type': fields.String(required=True),
    'quantity': fields.String(description='e.g. 5 kg'),
    'frequency': fields.String(description='e.g. twice daily'),
    'season': fields.String(),
    'special_instructions': fields.String()
})

log_model = feeding_ns.model('FeedingLog', {
    'animal_id': fields.String(required=True),
    'schedule_id': fields.String(),
    'feed_type': fields.String(required=True),
    'quantity_fed': fields.String(required=True),
    'feeding_time': fields.DateTime(),
    'animal_response': fields.String(description='e.g. ate well, refused'),
    'notes': fields.String()
})

inventory_model = feeding_ns.model('FeedInventory', {
    'feed_name': fields.String(required=True),
    'feed_type': fields.String(required=True),
    'quantity': fields.Float(required=True, min=0),
    'unit': fields.String(required=True, description='kg, bags, litres ...'),
    'cost_per_unit': fields.Float(min=0),
    'supplier_name': fields.String(),
    'purchase_date': fields.Date(),
    'expiry_date': fields.Date(),
    'storage_location': fields.String(),
    'notes': fields.String()
})

animal_filter = reqparse.RequestParser()
animal_filter.add_argument('animal_id', type=str, location='args', help='Only entries of this animal')


def own_animal_ids():
    session = current_session()
    return [a.id for a in animal_service.list_animals(owner_id=session.user_id)]


def owned_row(model, row_id):
    """A schedule or log of one of the caller's animals. Returns (row, error, status)."""
    row = db.session.get(model, row_id)
    if row is None or row.animal_id not in own_animal_ids():
        return None, {'message': 'Not found'}, 404
    return row, None, 200


def check_own_animal(animal_id):
    if animal_id not in own_animal_ids():
        return {'message': 'Animal not found'}, 404
    return None


def inventory_settings():
    return current_app.config['LOW_STOCK_THRESHOLD'], current_app.config['EXPIRY_WARNING_DAYS']


def own_inventory_item(item_id):
    item = db.session.get(FeedInventory, item_id)
    if item is None or item.user_id != current_session().user_id:
        return None, {'message': 'Inventory item not found'}, 404
    return item, None, 200


@feeding_ns.route('/schedules')
class ScheduleList(Resource):
    @login_required
    @feeding_ns.expect(animal_filter)
    @feeding_ns.doc(security='BearerAuth')
    def get(self):
        """Feeding schedules of own animals"""
        args = animal_filter.parse_args()
        try:
            schedules = feeding_service.list_schedules(own_animal_ids(), args['animal_id'])
            return [feeding_service.format_schedule(s) for s in schedules], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching feeding schedules: {e}")
            return {'message': 'Error fetching feeding schedules', 'error': str(e)}, 500

    @login_required
    @feeding_ns.expect(schedule_model)
    @feeding_ns.doc(security='BearerAuth')
    def post(self):
        """Create a feeding schedule"""
        data = validate(FeedingScheduleSchema, request.get_json(silent=True))
        error = check_own_animal(data['animal_id'])
        if error:
            return error
        try:
            schedule = feeding_service.save(FeedingSchedule(**data))
            return feeding_service.format_schedule(schedule), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating feeding schedule: {e}")
            return {'message': 'Error creating feeding schedule', 'error': str(e)}, 500


@feeding_ns.route('/schedules/<string:schedule_id>')
class ScheduleResource(Resource):
    @login_required
    @feeding_ns.expect(schedule_model)
    @feeding_ns.doc(security='BearerAuth')
    def put(self, schedule_id):
        """Update a feeding schedule"""
        schedule, error, status = owned_row(FeedingSchedule, schedule_id)
        if error:
            return error, status
        data = validate_changes(FeedingScheduleSchema, schedule, request.get_json(silent=True))
        if 'animal_id' in data:
            error = check_own_animal(data['animal_id'])
            if error:
                return error
        try:
            schedule = feeding_service.apply_changes(schedule, data)
            return feeding_service.format_schedule(schedule), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating feeding schedule {schedule_id}: {e}")
            return {'message': 'Error updating feeding schedule', 'error': str(e)}, 500

    @login_required
    @feeding_ns.doc(security='BearerAuth')
    def delete(self, schedule_id):
        """Delete a feeding schedule"""
        schedule, error, status = owned_row(FeedingSchedule, schedule_id)
        if error:
            return error, status
        try:
            feeding_service.remove(schedule)
            return {'message': 'Feeding schedule deleted successfully'}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error deleting feeding schedule {schedule_id}: {e}")
            return {'message': 'Error deleting feeding schedule', 'error': str(e)}, 500


@feeding_ns.route('/logs')
class FeedingLogList(Resource):
    @login_required
    @feeding_ns.expect(animal_filter)
    @feeding_ns.doc(security='BearerAuth')
    def get(self):
        """Feeding log of own animals, newest first"""
        args = animal_filter.parse_args()
        try:
            logs = feeding_service.list_feeding_logs(own_animal_ids(), args['animal_id'])
            return [feeding_service.format_feeding_log(entry) for entry in logs], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching feeding logs: {e}")
            return {'message': 'Error fetching feeding logs', 'error': str(e)}, 500

    @login_required
    @feeding_ns.expect(log_model)
    @feeding_ns.doc(security='BearerAuth')
    def post(self):
        """Log a feeding"""
        data = validate(FeedingLogSchema, request.get_json(silent=True))
        error = check_own_animal(data['animal_id'])
        if error:
            return error
        try:
            entry = feeding_service.save(FeedingLog(fed_by=current_session().user_id, **data))
            return feeding_service.format_feeding_log(entry), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error logging feeding: {e}")
            return {'message': 'Error logging feeding', 'error': str(e)}, 500


@feeding_ns.route('/logs/<string:log_id>')
class FeedingLogResource(Resource):
    @login_required
    @feeding_ns.doc(security='BearerAuth')
    def delete(self, log_id):
        """Delete a feeding log entry"""
        entry, error, status = owned_row(FeedingLog, log_id)
        if error:
            return error, status
        try:
            feeding_service.remove(entry)
            return {'message': 'Feeding log deleted successfully'}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error deleting feeding log {log_id}: {e}")
            return {'message': 'Error deleting feeding log', 'error': str(e)}, 500


@feeding_ns.route('/inventory')
class InventoryList(Resource):
    @login_required
    @feeding_ns.doc(security='BearerAuth')
    def get(self):
        """Own feed inventory with stock and expiry status, plus summary counts"""
        threshold, warning_days = inventory_settings()
        try:
            items = feeding_service.list_inventory(current_session().user_id)
            return {
                'items': [feeding_service.format_inventory_item(i, threshold, warning_days) for i in items],
                'summary': feeding_service.summarize_inventory(items, threshold, warning_days)
            }, 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching feed inventory: {e}")
            return {'message': 'Error fetching feed inventory', 'error': str(e)}, 500

    @login_required
    @feeding_ns.expect(inventory_model)
    @feeding_ns.doc(security='BearerAuth')
    def post(self):
        """Add a feed inventory item"""
        data = validate(FeedInventorySchema, request.get_json(silent=True))
        threshold, warning_days = inventory_settings()
        try:
            item = feeding_service.save(FeedInventory(user_id=current_session().user_id, **data))
            return feeding_service.format_inventory_item(item, threshold, warning_days), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error adding inventory item: {e}")
            return {'message': 'Error adding inventory item', 'error': str(e)}, 500


@feeding_ns.route('/inventory/<string:item_id>')
class InventoryResource(Resource):
    @login_required
    @feeding_ns.expect(inventory_model)
    @feeding_ns.doc(security='BearerAuth')
    def put(self, item_id):
        """Update a feed inventory item"""
        item, error, status = own_inventory_item(item_id)
        if error:
            return error, status
        data = validate_changes(FeedInventorySchema, item, request.get_json(silent=True))
        threshold, warning_days = inventory_settings()
        try:
            item = feeding_service.apply_changes(item, data)
            return feeding_service.format_inventory_item(item, threshold, warning_days), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating inventory item {item_id}: {e}")
            return {'message': 'Error updating inventory item', 'error': str(e)}, 500

    @login_required
    @feeding_ns.doc(security='BearerAuth')
    def delete(self, item_id):
        """Delete a feed inventory item"""
        item, error, status = own_inventory_item(item_id)
        if error:
            return error, status
        try:
            feeding_service.remove(item)
            return {'message': 'Inventory item deleted successfully'}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error deleting inventory item {item_id}: {e}")
            return {'message': 'Error deleting inventory item', 'error': str(e)}, 500
