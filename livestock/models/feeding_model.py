from livestock import db
from livestock.models.base_model import new_id, utcnow


class FeedingSchedule(db.Model):
    __tablename__ = 'feeding_schedules'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    animal_id = db.Column(db.String(36), db.ForeignKey('animals.id'), nullable=False, index=True)
    feed_type = db.Column(db.String(100), nullable=False)
    quantity = db.Column(db.String(50))
    frequency = db.Column(db.String(50))
    season = db.Column(db.String(50))
    special_instructions = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # deleting a schedule keeps its logs and unlinks them
    logs = db.relationship('FeedingLog', backref='schedule', lazy=True)


class FeedingLog(db.Model):
    __tablename__ = 'feeding_logs'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    animal_id = db.Column(db.String(36), db.ForeignKey('animals.id'), nullable=False, index=True)
    schedule_id = db.Column(db.String(36), db.ForeignKey('feeding_schedules.id', ondelete='SET NULL'), nullable=True)
    feed_type = db.Column(db.String(100), nullable=False)
    quantity_fed = db.Column(db.String(50), nullable=False)
    feeding_time = db.Column(db.DateTime, nullable=False, default=utcnow)
    animal_response = db.Column(db.String(50))
    notes = db.Column(db.Text)
    fed_by = db.Column(db.String(36), db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class FeedInventory(db.Model):
    __tablename__ = 'feed_inventory'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    feed_name = db.Column(db.String(100), nullable=False)
    feed_type = db.Column(db.String(50), nullable=False)
    quantity = db.Column(db.Float, nullable=False, default=0)
    unit = db.Column(db.String(20), nullable=False)
    cost_per_unit = db.Column(db.Float)
    supplier_name = db.Column(db.String(100))
    purchase_date = db.Column(db.Date)
    expiry_date = db.Column(db.Date)
    storage_location = db.Column(db.String(100))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<FeedInventory {self.feed_name} {self.quantity} {self.unit}>'
