import enum
from livestock import db
from livestock.models.base_model import new_id, utcnow, enum_values


class AppRole(enum.Enum):
    FARMER = 'farmer'
    VETERINARY_OFFICER = 'veterinary_officer'
    PROGRAM_COORDINATOR = 'program_coordinator'
    ADMIN = 'admin'


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_sign_in_at = db.Column(db.DateTime, nullable=True)
    profile = db.relationship('Profile', backref='user', uselist=False, lazy=True,
                              cascade='all, delete-orphan')
    roles = db.relationship('UserRole', backref='user', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<User {self.email}>'


class Profile(db.Model):
    __tablename__ = 'profiles'
    id = db.Column(db.String(36), db.ForeignKey('users.id'), primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    phone_number = db.Column(db.String(20))
    state = db.Column(db.String(100))
    district = db.Column(db.String(100))
    village = db.Column(db.String(100))
    pin_code = db.Column(db.String(10))
    preferred_language = db.Column(db.String(10), default='en')
    onboarding_completed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<Profile {self.full_name}>'


class UserRole(db.Model):
    __tablename__ = 'user_roles'
    __table_args__ = (db.UniqueConstraint('user_id', 'role', name='uq_user_role'),)
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    role = db.Column(db.Enum(AppRole, name='app_role', values_callable=enum_values), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<UserRole {self.user_id} {self.role.value}>'


class EmergencyContact(db.Model):
    __tablename__ = 'emergency_contacts'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    contact_name = db.Column(db.String(100), nullable=False)
    contact_number = db.Column(db.String(20), nullable=False)
    relationship = db.Column(db.String(50))
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<EmergencyContact {self.contact_name}>'
