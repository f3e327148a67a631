import enum
from livestock import db
from livestock.models.base_model import new_id, utcnow, enum_values


class ListingStatus(enum.Enum):
    ACTIVE = 'active'
    SOLD = 'sold'
    INACTIVE = 'inactive'


class EnquiryStatus(enum.Enum):
    PENDING = 'pending'
    RESPONDED = 'responded'
    CLOSED = 'closed'


class MarketplaceListing(db.Model):
    __tablename__ = 'marketplace_listings'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    seller_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    animal_id = db.Column(db.String(36), db.ForeignKey('animals.id', ondelete='SET NULL'), nullable=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Float)
    location = db.Column(db.String(200), nullable=False)
    contact_number = db.Column(db.String(20))
    status = db.Column(db.Enum(ListingStatus, name='listing_status', values_callable=enum_values),
                       nullable=False, default=ListingStatus.ACTIVE)
    views_count = db.Column(db.Integer, nullable=False, default=0)
    average_rating = db.Column(db.Float, nullable=False, default=0)
    review_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    enquiries = db.relationship('MarketplaceEnquiry', backref='listing', lazy=True, cascade='all, delete-orphan')
    reviews = db.relationship('MarketplaceReview', backref='listing', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<MarketplaceListing {self.title}>'


class MarketplaceEnquiry(db.Model):
    __tablename__ = 'marketplace_enquiries'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    listing_id = db.Column(db.String(36), db.ForeignKey('marketplace_listings.id'), nullable=False, index=True)
    buyer_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.Enum(EnquiryStatus, name='enquiry_status', values_callable=enum_values),
                       nullable=False, default=EnquiryStatus.PENDING)
    reminder_sent = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class MarketplaceReview(db.Model):
    __tablename__ = 'marketplace_reviews'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    listing_id = db.Column(db.String(36), db.ForeignKey('marketplace_listings.id'), nullable=False, index=True)
    reviewer_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    review_text = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
