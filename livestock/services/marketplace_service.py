# Marketplace listings, enquiries and reviews
import logging
from datetime import timedelta
from sqlalchemy import func, or_
from livestock import db
from livestock.models import (
    MarketplaceListing, MarketplaceEnquiry, MarketplaceReview, ListingStatus, EnquiryStatus, Notification,
    PriorityLevel, Profile, AppRole
)
from livestock.models.base_model import utcnow

logger = logging.getLogger(__name__)

# pending enquiries older than this get one reminder to the seller
ENQUIRY_REMINDER_HOURS = 24


def format_listing(listing, seller_name=None):
    return {
        'id': listing.id,
        'seller_id': listing.seller_id,
        'seller_name': seller_name,
        'animal_id': listing.animal_id,
        'title': listing.title,
        'description': listing.description,
        'price': listing.price,
        'location': listing.location,
        'contact_number': listing.contact_number,
        'status': listing.status.value,
        'views_count': listing.views_count,
        'average_rating': round(listing.average_rating or 0, 2),
        'review_count': listing.review_count,
        'created_at': listing.created_at.isoformat(),
        'updated_at': listing.updated_at.isoformat()
    }


def format_enquiry(enquiry):
    return {
        'id': enquiry.id,
        'listing_id': enquiry.listing_id,
        'listing_title': enquiry.listing.title if enquiry.listing else None,
        'buyer_id': enquiry.buyer_id,
        'message': enquiry.message,
        'status': enquiry.status.value,
        'reminder_sent': enquiry.reminder_sent,
        'created_at': enquiry.created_at.isoformat()
    }


def format_review(review):
    return {
        'id': review.id,
        'listing_id': review.listing_id,
        'reviewer_id': review.reviewer_id,
        'rating': review.rating,
        'review_text': review.review_text,
        'created_at': review.created_at.isoformat()
    }


def seller_name(listing):
    profile = db.session.get(Profile, listing.seller_id)
    return profile.full_name if profile else None


def search_listings(search=None, location=None, status=ListingStatus.ACTIVE, seller_id=None):
    query = MarketplaceListing.query
    if status is not None:
        query = query.filter(MarketplaceListing.status == status)
    if seller_id:
        query = query.filter_by(seller_id=seller_id)
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(MarketplaceListing.title.ilike(pattern),
                                 MarketplaceListing.description.ilike(pattern)))
    if location:
        query = query.filter(MarketplaceListing.location.ilike(f'%{location}%'))
    return query.order_by(MarketplaceListing.created_at.desc()).all()


def check_listing_authorization(listing, session):
    if listing.seller_id == session.user_id or session.has_role(AppRole.ADMIN):
        return True, None
    return False, 'Only the seller can change this listing'


def get_listing(listing_id):
    """Returns (listing, error, status)."""
    listing = db.session.get(MarketplaceListing, listing_id)
    if listing is None:
        return None, {'message': 'Listing not found'}, 404
    return listing, None, 200


def record_view(listing):
    listing.views_count = (listing.views_count or 0) + 1
    db.session.commit()
    return listing


def create_listing(seller_id, data):
    listing = MarketplaceListing(seller_id=seller_id, **data)
    db.session.add(listing)
    db.session.commit()
    logger.info(f"User {seller_id} created listing {listing.id}")
    return listing


def update_listing(listing, data):
    for field, value in data.items():
        setattr(listing, field, value)
    db.session.commit()
    return listing


def delete_listing(listing):
    listing_id = listing.id
    db.session.delete(listing)
    db.session.commit()
    logger.info(f"Deleted listing {listing_id}")


def create_enquiry(listing, buyer_id, message):
    """Returns (enquiry, error, status)."""
    if listing.seller_id == buyer_id:
        return None, {'message': 'You cannot enquire about your own listing'}, 400
    if listing.status != ListingStatus.ACTIVE:
        return None, {'message': 'Listing is no longer active'}, 400
    enquiry = MarketplaceEnquiry(listing_id=listing.id, buyer_id=buyer_id, message=message)
    db.session.add(enquiry)
    db.session.commit()
    logger.info(f"User {buyer_id} enquired about listing {listing.id}")
    return enquiry, None, 201


def list_buyer_enquiries(buyer_id):
    return (MarketplaceEnquiry.query.filter_by(buyer_id=buyer_id)
            .order_by(MarketplaceEnquiry.created_at.desc()).all())


def list_seller_enquiries(seller_id):
    return (MarketplaceEnquiry.query.join(MarketplaceListing)
            .filter(MarketplaceListing.seller_id == seller_id)
            .order_by(MarketplaceEnquiry.created_at.desc()).all())


def list_all_enquiries():
    return MarketplaceEnquiry.query.order_by(MarketplaceEnquiry.created_at.desc()).all()


def set_enquiry_status(enquiry_id, status, session):
    """Seller of the listing or an admin. Returns (enquiry, error, status)."""
    enquiry = db.session.get(MarketplaceEnquiry, enquiry_id)
    if enquiry is None:
        return None, {'message': 'Enquiry not found'}, 404
    authorized, error_message = check_listing_authorization(enquiry.listing, session)
    if not authorized:
        return None, {'message': error_message}, 403
    enquiry.status = status
    db.session.commit()
    return enquiry, None, 200


def refresh_rating(listing):
    average, count = (db.session.query(func.avg(MarketplaceReview.rating), func.count(MarketplaceReview.id))
                      .filter(MarketplaceReview.listing_id == listing.id).one())
    listing.average_rating = float(average or 0)
    listing.review_count = count


def add_review(listing, reviewer_id, data):
    """Returns (review, error, status)."""
    if listing.seller_id == reviewer_id:
        return None, {'message': 'You cannot review your own listing'}, 400
    review = MarketplaceReview(listing_id=listing.id, reviewer_id=reviewer_id, **data)
    db.session.add(review)
    db.session.flush()
    refresh_rating(listing)
    db.session.commit()
    logger.info(f"User {reviewer_id} reviewed listing {listing.id} ({review.rating}/5)")
    return review, None, 201


def list_reviews(listing_id):
    return (MarketplaceReview.query.filter_by(listing_id=listing_id)
            .order_by(MarketplaceReview.created_at.desc()).all())


def send_enquiry_reminders(now=None, max_age_hours=ENQUIRY_REMINDER_HOURS):
    """Notify sellers about enquiries still pending after ``max_age_hours``.

    Each enquiry is reminded once (``reminder_sent``). Returns the number of
    reminders created.
    """
    cutoff = (now or utcnow()) - timedelta(hours=max_age_hours)
    enquiries = (MarketplaceEnquiry.query
                 .filter(MarketplaceEnquiry.status == EnquiryStatus.PENDING,
                         MarketplaceEnquiry.reminder_sent.is_(False),
                         MarketplaceEnquiry.created_at < cutoff)
                 .all())
    sent = 0
    for enquiry in enquiries:
        listing = enquiry.listing
        if listing is None:
            logger.warning(f"No listing found for enquiry {enquiry.id}")
            continue
        buyer = db.session.get(Profile, enquiry.buyer_id)
        buyer_name = buyer.full_name if buyer else 'a buyer'
        db.session.add(Notification(
            user_id=listing.seller_id,
            title='Marketplace Enquiry Reminder',
            message=f'You have a pending enquiry from {buyer_name} for "{listing.title}". '
                    f'Please respond to help close the sale.',
            type='marketplace',
            priority=PriorityLevel.MEDIUM,
            related_entity_type='marketplace_enquiry',
            related_entity_id=enquiry.id
        ))
        enquiry.reminder_sent = True
        sent += 1
    db.session.commit()
    if sent:
        logger.info(f"Sent {sent} marketplace enquiry reminder(s)")
    return sent
