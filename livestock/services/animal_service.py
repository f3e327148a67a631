# Animal registry: ownership checks, CRUD and photo upload
import logging
import os
import uuid
from flask import current_app
from werkzeug.utils import secure_filename
from livestock import db
from livestock.models import Animal, AppRole
from livestock.utils.util import allowed_file

logger = logging.getLogger(__name__)

# roles that may read every animal, not just their own
ANIMAL_VIEWER_ROLES = frozenset({AppRole.VETERINARY_OFFICER, AppRole.ADMIN})


def format_animal(animal):
    return {
        'id': animal.id,
        'owner_id': animal.owner_id,
        'name': animal.name,
        'species': animal.species.value,
        'breed': animal.breed,
        'gender': animal.gender.value if animal.gender else None,
        'date_of_birth': animal.date_of_birth.isoformat() if animal.date_of_birth else None,
        'health_status': animal.health_status.value if animal.health_status else None,
        'identification_number': animal.identification_number,
        'location': animal.location,
        'photo_url': animal.photo_url,
        'created_at': animal.created_at.isoformat(),
        'updated_at': animal.updated_at.isoformat()
    }


def check_animal_authorization(animal, session, write=False):
    """Owners may do anything with their animals; vets and admins may read all, admins may write."""
    if animal.owner_id == session.user_id:
        return True, None
    if session.has_role(AppRole.ADMIN):
        return True, None
    if not write and session.has_any_role(ANIMAL_VIEWER_ROLES):
        return True, None
    return False, 'You do not have access to this animal'


def get_animal(animal_id, session, write=False):
    """Returns (animal, error, status)."""
    animal = db.session.get(Animal, animal_id)
    if animal is None:
        return None, {'message': 'Animal not found'}, 404
    authorized, error_message = check_animal_authorization(animal, session, write)
    if not authorized:
        return None, {'message': error_message}, 403
    return animal, None, 200


def list_animals(owner_id=None, species=None, health_status=None):
    query = Animal.query
    if owner_id:
        query = query.filter_by(owner_id=owner_id)
    if species:
        query = query.filter(Animal.species == species)
    if health_status:
        query = query.filter(Animal.health_status == health_status)
    return query.order_by(Animal.created_at.desc()).all()


def accessible_animal_ids(session):
    """Ids the session may read, or ``None`` for all."""
    if session.has_any_role(ANIMAL_VIEWER_ROLES):
        return None
    return [a.id for a in Animal.query.with_entities(Animal.id).filter_by(owner_id=session.user_id).all()]


def create_animal(owner_id, data):
    animal = Animal(owner_id=owner_id, **data)
    db.session.add(animal)
    db.session.commit()
    logger.info(f"User {owner_id} registered animal {animal.id} ({animal.species.value})")
    return animal


def update_animal(animal, data):
    for field, value in data.items():
        setattr(animal, field, value)
    db.session.commit()
    return animal


def delete_animal(animal):
    animal_id = animal.id
    remove_photo(animal.photo_url)
    db.session.delete(animal)
    db.session.commit()
    logger.info(f"Deleted animal {animal_id}")


def remove_photo(photo_url):
    if not photo_url:
        return
    old_path = os.path.join(current_app.config['UPLOAD_FOLDER'], photo_url.strip('/'))
    if os.path.exists(old_path):
        try:
            os.remove(old_path)
        except OSError as e:
            logger.warning(f"Could not remove photo {old_path}: {e}")


def save_photo(animal, image):
    """Store an uploaded image and point the animal at it. Returns (animal, error, status)."""
    if not image or image.filename == '' or not allowed_file(image.filename):
        return None, {'message': 'Invalid image file. Allowed extensions: png, jpg, jpeg, gif'}, 400
    filename = f"{uuid.uuid4().hex}_{secure_filename(image.filename)}"
    upload_folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)
    image.save(os.path.join(upload_folder, filename))
    remove_photo(animal.photo_url)
    animal.photo_url = filename
    db.session.commit()
    return animal, None, 200
