# Feeding schedules, feeding logs and feed inventory
import logging
from datetime import date
from livestock import db
from livestock.models import FeedingSchedule, FeedingLog, FeedInventory

logger = logging.getLogger(__name__)

LOW_STOCK = 'Low Stock'
EXPIRED = 'expired'
EXPIRING_SOON = 'expiring_soon'


def _iso(value):
    return value.isoformat() if value else None


def format_schedule(schedule):
    return {
        'id': schedule.id,
        'animal_id': schedule.animal_id,
        'animal_name': schedule.animal.name if schedule.animal else None,
        'feed_type': schedule.feed_type,
        'quantity': schedule.quantity,
        'frequency': schedule.frequency,
        'season': schedule.season,
        'special_instructions': schedule.special_instructions,
        'created_at': _iso(schedule.created_at)
    }


def format_feeding_log(log):
    return {
        'id': log.id,
        'animal_id': log.animal_id,
        'animal_name': log.animal.name if log.animal else None,
        'schedule_id': log.schedule_id,
        'feed_type': log.feed_type,
        'quantity_fed': log.quantity_fed,
        'feeding_time': _iso(log.feeding_time),
        'animal_response': log.animal_response,
        'notes': log.notes,
        'fed_by': log.fed_by
    }


def stock_status(item, threshold):
    return LOW_STOCK if item.quantity < threshold else 'In Stock'


def expiry_status(item, warning_days, today=None):
    """``expired`` beats ``expiring_soon``; ``None`` when neither applies."""
    if item.expiry_date is None:
        return None
    today = today or date.today()
    days_left = (item.expiry_date - today).days
    if days_left < 0:
        return EXPIRED
    if days_left <= warning_days:
        return EXPIRING_SOON
    return None


def format_inventory_item(item, threshold, warning_days, today=None):
    return {
        'id': item.id,
        'feed_name': item.feed_name,
        'feed_type': item.feed_type,
        'quantity': item.quantity,
        'unit': item.unit,
        'cost_per_unit': item.cost_per_unit,
        'supplier_name': item.supplier_name,
        'purchase_date': _iso(item.purchase_date),
        'expiry_date': _iso(item.expiry_date),
        'storage_location': item.storage_location,
        'notes': item.notes,
        'stock_status': stock_status(item, threshold),
        'expiry_status': expiry_status(item, warning_days, today),
        'created_at': _iso(item.created_at)
    }


def summarize_inventory(items, threshold, warning_days, today=None):
    expiry = [expiry_status(item, warning_days, today) for item in items]
    return {
        'total_items': len(items),
        'low_stock': sum(1 for item in items if item.quantity < threshold),
        'expiring_soon': expiry.count(EXPIRING_SOON),
        'expired': expiry.count(EXPIRED),
        'total_value': round(sum(item.quantity * (item.cost_per_unit or 0) for item in items), 2)
    }


def list_schedules(animal_ids, animal_id=None):
    query = FeedingSchedule.query.filter(FeedingSchedule.animal_id.in_(animal_ids))
    if animal_id:
        query = query.filter_by(animal_id=animal_id)
    return query.order_by(FeedingSchedule.created_at.desc()).all()


def list_feeding_logs(animal_ids, animal_id=None):
    query = FeedingLog.query.filter(FeedingLog.animal_id.in_(animal_ids))
    if animal_id:
        query = query.filter_by(animal_id=animal_id)
    return query.order_by(FeedingLog.feeding_time.desc()).all()


def list_inventory(user_id):
    return FeedInventory.query.filter_by(user_id=user_id).order_by(FeedInventory.feed_name.asc()).all()


def save(row):
    db.session.add(row)
    db.session.commit()
    logger.info(f"Saved {row.__tablename__} row {row.id}")
    return row


def apply_changes(row, data):
    for field, value in data.items():
        setattr(row, field, value)
    db.session.commit()
    return row


def remove(row):
    table, row_id = row.__tablename__, row.id
    db.session.delete(row)
    db.session.commit()
    logger.info(f"Deleted {table} row {row_id}")
