# Health, vaccination and breeding records for animals
import logging
from datetime import date, timedelta
from livestock import db
from livestock.models import Animal, HealthRecord, Vaccination, BreedingRecord

logger = logging.getLogger(__name__)


def _iso(value):
    return value.isoformat() if value else None


def format_health_record(record):
    return {
        'id': record.id,
        'animal_id': record.animal_id,
        'animal_name': record.animal.name if record.animal else None,
        'record_date': _iso(record.record_date),
        'symptoms': record.symptoms,
        'diagnosis': record.diagnosis,
        'treatment': record.treatment,
        'prescription': record.prescription,
        'veterinarian_notes': record.veterinarian_notes,
        'next_checkup_date': _iso(record.next_checkup_date),
        'recorded_by': record.recorded_by,
        'created_at': _iso(record.created_at)
    }


def format_vaccination(vaccination):
    return {
        'id': vaccination.id,
        'animal_id': vaccination.animal_id,
        'animal_name': vaccination.animal.name if vaccination.animal else None,
        'vaccine_name': vaccination.vaccine_name,
        'vaccine_type': vaccination.vaccine_type,
        'batch_number': vaccination.batch_number,
        'administered_by': vaccination.administered_by,
        'administered_date': _iso(vaccination.administered_date),
        'next_due_date': _iso(vaccination.next_due_date),
        'notes': vaccination.notes,
        'created_at': _iso(vaccination.created_at)
    }


def format_breeding_record(record):
    return {
        'id': record.id,
        'animal_id': record.animal_id,
        'animal_name': record.animal.name if record.animal else None,
        'breeding_date': _iso(record.breeding_date),
        'breeding_method': record.breeding_method,
        'partner_details': record.partner_details,
        'expected_delivery_date': _iso(record.expected_delivery_date),
        'actual_delivery_date': _iso(record.actual_delivery_date),
        'offspring_count': record.offspring_count,
        'notes': record.notes,
        'created_at': _iso(record.created_at)
    }


def _scoped(model, animal_ids, animal_id=None):
    """Query ``model`` limited to ``animal_ids`` (``None`` means every animal)."""
    query = model.query
    if animal_ids is not None:
        query = query.filter(model.animal_id.in_(animal_ids))
    if animal_id:
        query = query.filter(model.animal_id == animal_id)
    return query


def list_health_records(animal_ids, animal_id=None):
    return (_scoped(HealthRecord, animal_ids, animal_id)
            .order_by(HealthRecord.record_date.desc(), HealthRecord.created_at.desc()).all())


def list_vaccinations(animal_ids, animal_id=None):
    return (_scoped(Vaccination, animal_ids, animal_id)
            .order_by(Vaccination.administered_date.desc()).all())


def list_breeding_records(animal_ids, animal_id=None):
    return (_scoped(BreedingRecord, animal_ids, animal_id)
            .order_by(BreedingRecord.breeding_date.desc()).all())


def vaccinations_due(animal_ids, days, today=None):
    """Vaccinations whose next dose falls within ``days`` from today."""
    today = today or date.today()
    return (_scoped(Vaccination, animal_ids)
            .filter(Vaccination.next_due_date.isnot(None))
            .filter(Vaccination.next_due_date >= today)
            .filter(Vaccination.next_due_date <= today + timedelta(days=days))
            .order_by(Vaccination.next_due_date.asc()).all())


def create_record(model, data, **extra):
    record = model(**data, **extra)
    db.session.add(record)
    db.session.commit()
    logger.info(f"Created {model.__tablename__} row {record.id} for animal {record.animal_id}")
    return record


def update_record(record, data):
    for field, value in data.items():
        setattr(record, field, value)
    db.session.commit()
    return record


def delete_record(record):
    table, record_id = record.__tablename__, record.id
    db.session.delete(record)
    db.session.commit()
    logger.info(f"Deleted {table} row {record_id}")


def get_record(model, record_id, animal_ids):
    """Returns (record, error, status); records of animals outside ``animal_ids`` are hidden."""
    record = db.session.get(model, record_id)
    if record is None or (animal_ids is not None and record.animal_id not in animal_ids):
        return None, {'message': 'Record not found'}, 404
    return record, None, 200


def animal_exists(animal_id):
    return db.session.get(Animal, animal_id) is not None
