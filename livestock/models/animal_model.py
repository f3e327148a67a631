import enum
from livestock import db
from livestock.models.base_model import new_id, utcnow, enum_values


class Species(enum.Enum):
    CATTLE = 'cattle'
    GOAT = 'goat'
    SHEEP = 'sheep'
    POULTRY = 'poultry'
    BUFFALO = 'buffalo'
    PIG = 'pig'
    OTHER = 'other'


class Gender(enum.Enum):
    MALE = 'male'
    FEMALE = 'female'


class HealthStatus(enum.Enum):
    HEALTHY = 'healthy'
    SICK = 'sick'
    UNDER_TREATMENT = 'under_treatment'
    QUARANTINE = 'quarantine'
    DECEASED = 'deceased'


class Animal(db.Model):
    __tablename__ = 'animals'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    owner_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100))
    species = db.Column(db.Enum(Species, name='animal_species', values_callable=enum_values), nullable=False)
    breed = db.Column(db.String(100))
    gender = db.Column(db.Enum(Gender, name='animal_gender', values_callable=enum_values))
    date_of_birth = db.Column(db.Date)
    health_status = db.Column(db.Enum(HealthStatus, name='health_status', values_callable=enum_values),
                              default=HealthStatus.HEALTHY)
    identification_number = db.Column(db.String(50))
    location = db.Column(db.String(200))
    photo_url = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    health_records = db.relationship('HealthRecord', backref='animal', lazy=True, cascade='all, delete-orphan')
    vaccinations = db.relationship('Vaccination', backref='animal', lazy=True, cascade='all, delete-orphan')
    breeding_records = db.relationship('BreedingRecord', backref='animal', lazy=True, cascade='all, delete-orphan')
    feeding_schedules = db.relationship('FeedingSchedule', backref='animal', lazy=True, cascade='all, delete-orphan')
    feeding_logs = db.relationship('FeedingLog', backref='animal', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Animal {self.name} ({self.species.value})>'


class HealthRecord(db.Model):
    __tablename__ = 'health_records'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    animal_id = db.Column(db.String(36), db.ForeignKey('animals.id'), nullable=False, index=True)
    record_date = db.Column(db.Date, nullable=False)
    symptoms = db.Column(db.Text)
    diagnosis = db.Column(db.Text)
    treatment = db.Column(db.Text)
    prescription = db.Column(db.Text)
    veterinarian_notes = db.Column(db.Text)
    next_checkup_date = db.Column(db.Date)
    recorded_by = db.Column(db.String(36), db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class Vaccination(db.Model):
    __tablename__ = 'vaccinations'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    animal_id = db.Column(db.String(36), db.ForeignKey('animals.id'), nullable=False, index=True)
    vaccine_name = db.Column(db.String(100), nullable=False)
    vaccine_type = db.Column(db.String(100))
    batch_number = db.Column(db.String(50))
    administered_by = db.Column(db.String(100))
    administered_date = db.Column(db.Date, nullable=False)
    next_due_date = db.Column(db.Date)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class BreedingRecord(db.Model):
    __tablename__ = 'breeding_records'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    animal_id = db.Column(db.String(36), db.ForeignKey('animals.id'), nullable=False, index=True)
    breeding_date = db.Column(db.Date, nullable=False)
    breeding_method = db.Column(db.String(50))
    partner_details = db.Column(db.String(200))
    expected_delivery_date = db.Column(db.Date)
    actual_delivery_date = db.Column(db.Date)
    offspring_count = db.Column(db.Integer)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
