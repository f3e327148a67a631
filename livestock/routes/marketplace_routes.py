import logging
from flask import request
from flask_restx import Namespace, Resource, fields, reqparse
from sqlalchemy.exc import SQLAlchemyError
from livestock import db
from livestock.models import ListingStatus, EnquiryStatus
from livestock.schemas.marketplace_schema import ListingSchema, EnquirySchema, EnquiryStatusSchema, ReviewSchema
from livestock.services import marketplace_service
from livestock.utils.session import current_session
from livestock.utils.util import login_required
from livestock.utils.validation import validate, validate_changes

logger = logging.getLogger(__name__)

marketplace_ns = Namespace('marketplace', description='Livestock marketplace', path='/marketplace')

listing_model = marketplace_ns.model('Listing', {
    'title': fields.String(required=True, description='3-100 characters'),
    'description': fields.String(),
    'price': fields.Float(min=0),
    'location': fields.String(required=True),
    'contact_number': fields.String(required=True, description='Exactly 10 digits'),
    'animal_id': fields.String(description='Registered animal being sold'),
    'status': fields.String(enum=[s.value for s in ListingStatus])
})

enquiry_model = marketplace_ns.model('Enquiry', {
    'message': fields.String(required=True)
})

enquiry_status_model = marketplace_ns.model('EnquiryStatus', {
    'status': fields.String(required=True, enum=[s.value for s in EnquiryStatus])
})

review_model = marketplace_ns.model('Review', {
    'rating': fields.Integer(required=True, min=1, max=5),
    'review_text': fields.String()
})

search_parser = reqparse.RequestParser()
search_parser.add_argument('search', type=str, location='args', help='Text in title or description')
search_parser.add_argument('location', type=str, location='args', help='Location contains')


def format_with_seller(listing):
    return marketplace_service.format_listing(listing, marketplace_service.seller_name(listing))


def editable_listing(listing_id):
    """Returns (listing, error, status) for the seller or an admin."""
    listing, error, status = marketplace_service.get_listing(listing_id)
    if error:
        return listing, error, status
    authorized, message = marketplace_service.check_listing_authorization(listing, current_session())
    if not authorized:
        return None, {'message': message}, 403
    return listing, None, 200


@marketplace_ns.route('/listings')
class ListingList(Resource):
    @login_required
    @marketplace_ns.expect(search_parser)
    @marketplace_ns.doc(security='BearerAuth')
    def get(self):
        """Browse active listings"""
        args = search_parser.parse_args()
        try:
            listings = marketplace_service.search_listings(args['search'], args['location'])
            return [format_with_seller(listing) for listing in listings], 200
        except SQLAlchemyError as e:
            logger.error(f"Error fetching listings: {e}")
            return {'message': 'Error fetching listings', 'error': str(e)}, 500

    @login_required
    @marketplace_ns.expect(listing_model)
    @marketplace_ns.doc(security='BearerAuth')
    def post(self):
        """Create a listing"""
        data = validate(ListingSchema, request.get_json(silent=True))
        user_id = current_session().user_id
        try:
            listing = marketplace_service.create_listing(user_id, data)
            return format_with_seller(listing), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating listing for user {user_id}: {e}")
            return {'message': 'Error creating listing', 'error': str(e)}, 500


@marketplace_ns.route('/my-listings')
class MyListings(Resource):
    @login_required
    @marketplace_ns.doc(security='BearerAuth')
    def get(self):
        """Own listings in any status"""
        listings = marketplace_service.search_listings(status=None, seller_id=current_session().user_id)
        return [format_with_seller(listing) for listing in listings], 200


@marketplace_ns.route('/listings/<string:listing_id>')
class ListingResource(Resource):
    @login_required
    @marketplace_ns.doc(security='BearerAuth')
    def get(self, listing_id):
        """Listing details; counts a view"""
        listing, error, status = marketplace_service.get_listing(listing_id)
        if error:
            return error, status
        try:
            marketplace_service.record_view(listing)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning(f"Could not count view of listing {listing_id}: {e}")
        result = format_with_seller(listing)
        result['reviews'] = [marketplace_service.format_review(r)
                             for r in marketplace_service.list_reviews(listing_id)]
        return result, 200

    @login_required
    @marketplace_ns.expect(listing_model)
    @marketplace_ns.doc(security='BearerAuth')
    def put(self, listing_id):
        """Edit own listing"""
        listing, error, status = editable_listing(listing_id)
        if error:
            return error, status
        data = validate_changes(ListingSchema, listing, request.get_json(silent=True))
        try:
            listing = marketplace_service.update_listing(listing, data)
            return format_with_seller(listing), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating listing {listing_id}: {e}")
            return {'message': 'Error updating listing', 'error': str(e)}, 500

    @login_required
    @marketplace_ns.doc(security='BearerAuth')
    def delete(self, listing_id):
        """Delete own listing"""
        listing, error, status = editable_listing(listing_id)
        if error:
            return error, status
        try:
            marketplace_service.delete_listing(listing)
            return {'message': 'Listing deleted successfully'}, 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error deleting listing {listing_id}: {e}")
            return {'message': 'Error deleting listing', 'error': str(e)}, 500


@marketplace_ns.route('/listings/<string:listing_id>/enquiries')
class ListingEnquiries(Resource):
    @login_required
    @marketplace_ns.expect(enquiry_model)
    @marketplace_ns.doc(security='BearerAuth')
    def post(self, listing_id):
        """Send an enquiry to the seller"""
        listing, error, status = marketplace_service.get_listing(listing_id)
        if error:
            return error, status
        data = validate(EnquirySchema, request.get_json(silent=True))
        try:
            enquiry, error, status = marketplace_service.create_enquiry(listing, current_session().user_id,
                                                                        data['message'])
            if error:
                return error, status
            return marketplace_service.format_enquiry(enquiry), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error sending enquiry for listing {listing_id}: {e}")
            return {'message': 'Error sending enquiry', 'error': str(e)}, 500


@marketplace_ns.route('/listings/<string:listing_id>/reviews')
class ListingReviews(Resource):
    @login_required
    @marketplace_ns.doc(security='BearerAuth')
    def get(self, listing_id):
        """Reviews of a listing"""
        return [marketplace_service.format_review(r) for r in marketplace_service.list_reviews(listing_id)], 200

    @login_required
    @marketplace_ns.expect(review_model)
    @marketplace_ns.doc(security='BearerAuth')
    def post(self, listing_id):
        """Rate a listing (1-5)"""
        listing, error, status = marketplace_service.get_listing(listing_id)
        if error:
            return error, status
        data = validate(ReviewSchema, request.get_json(silent=True))
        try:
            review, error, status = marketplace_service.add_review(listing, current_session().user_id, data)
            if error:
                return error, status
            return marketplace_service.format_review(review), 201
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error reviewing listing {listing_id}: {e}")
            return {'message': 'Error saving review', 'error': str(e)}, 500


@marketplace_ns.route('/my-enquiries')
class MyEnquiries(Resource):
    @login_required
    @marketplace_ns.doc(security='BearerAuth')
    def get(self):
        """Enquiries I sent and enquiries on my listings"""
        user_id = current_session().user_id
        return {
            'sent': [marketplace_service.format_enquiry(e) for e in marketplace_service.list_buyer_enquiries(user_id)],
            'received': [marketplace_service.format_enquiry(e)
                         for e in marketplace_service.list_seller_enquiries(user_id)]
        }, 200


@marketplace_ns.route('/enquiries/<string:enquiry_id>')
class EnquiryResource(Resource):
    @login_required
    @marketplace_ns.expect(enquiry_status_model)
    @marketplace_ns.doc(security='BearerAuth')
    def put(self, enquiry_id):
        """Seller marks an enquiry responded or closed"""
        data = validate(EnquiryStatusSchema, request.get_json(silent=True))
        try:
            enquiry, error, status = marketplace_service.set_enquiry_status(enquiry_id, data['status'],
                                                                            current_session())
            if error:
                return error, status
            return marketplace_service.format_enquiry(enquiry), 200
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error updating enquiry {enquiry_id}: {e}")
            return {'message': 'Error updating enquiry', 'error': str(e)}, 500
