"""Data payloads for each page of the route table.

Every loader takes the request's SessionContext plus the URL arguments and
returns a JSON-serialisable dict. Missing or foreign records abort with 404/403.
"""
from flask import abort, current_app
from livestock.models import (
    AppRole, Species, Gender, HealthStatus, ListingStatus, TicketPriority, ContentCategory,
    GovernmentScheme
)
from livestock.services import (
    account_service, activity_service, ai_chat_service, animal_service, content_service, dashboard_service,
    feeding_service, health_service, helpdesk_service, marketplace_service, message_service, profile_service
)
from livestock.utils.role_utils import get_user_data_with_permissions

LANGUAGES = ['en', 'hi', 'ta', 'te', 'kn', 'mr', 'bn', 'gu']

STATIC_PAGES = {
    'home': {
        'title': 'Livestock Information System',
        'tagline': 'Manage your herd, health records and market from one place'
    },
    'about': {
        'title': 'About',
        'body': 'A record keeping and advisory platform for livestock farmers, veterinary officers '
                'and program coordinators.'
    },
    'contact': {
        'title': 'Contact',
        'helpdesk': '/helpdesk'
    },
    'features': {
        'title': 'Features',
        'features': ['Animal registry', 'Health and vaccination records', 'Breeding records',
                     'Feeding and feed inventory', 'Marketplace', 'AI veterinary assistant',
                     'Government schemes', 'Helpdesk']
    },
    'faq': {
        'title': 'Frequently asked questions',
        'questions': [
            {'q': 'How do I register an animal?', 'a': 'Open My Animals and choose Add Animal.'},
            {'q': 'Who can see my animals?', 'a': 'You, veterinary officers and administrators.'},
            {'q': 'How do I get help?', 'a': 'Open a helpdesk ticket from the Helpdesk page.'}
        ]
    },
}


def unwrap(result):
    """(record, error, status) from a service, aborting on error."""
    record, error, status = result
    if error:
        abort(status, description=error['message'])
    return record


def static_page(name):
    def loader(session):
        return dict(STATIC_PAGES[name])
    return loader


def auth_page(session):
    return {'title': 'Sign in', 'signin': '/api/auth/signin', 'signup': '/api/auth/signup'}


def admin_login_page(session):
    return {'title': 'Admin sign in', 'signin': '/api/auth/admin-signin'}


def demo_login_page(session):
    return {'title': 'Demo accounts', 'roles': [role.value for role in AppRole]}


def dashboard_page(session):
    data = {'user': get_user_data_with_permissions(session.user, session.roles)}
    if session.has_role(AppRole.FARMER):
        data['summary'] = dashboard_service.farmer_dashboard(session.user_id)
    return data


def onboarding_page(session):
    return {
        'status': profile_service.onboarding_status(session.user_id),
        'plans': profile_service.list_plans(),
        'languages': LANGUAGES
    }


def animals_page(session):
    return {'animals': [animal_service.format_animal(a) for a in animal_service.list_animals(session.user_id)]}


def add_animal_page(session):
    return {
        'species': [s.value for s in Species],
        'genders': [g.value for g in Gender],
        'health_statuses': [h.value for h in HealthStatus]
    }


def animal_detail_page(session, animal_id):
    animal = unwrap(animal_service.get_animal(animal_id, session))
    return {
        'animal': animal_service.format_animal(animal),
        'health_records': [health_service.format_health_record(r)
                           for r in health_service.list_health_records(None, animal.id)],
        'vaccinations': [health_service.format_vaccination(v) for v in health_service.list_vaccinations(None, animal.id)],
        'breeding_records': [health_service.format_breeding_record(r)
                             for r in health_service.list_breeding_records(None, animal.id)]
    }


def health_page(session):
    animal_ids = animal_service.accessible_animal_ids(session)
    return {'health_records': [health_service.format_health_record(r)
                               for r in health_service.list_health_records(animal_ids)]}


def vaccinations_page(session):
    animal_ids = animal_service.accessible_animal_ids(session)
    days = current_app.config['VACCINATION_DUE_DAYS']
    return {
        'vaccinations': [health_service.format_vaccination(v) for v in health_service.list_vaccinations(animal_ids)],
        'due': [health_service.format_vaccination(v) for v in health_service.vaccinations_due(animal_ids, days)]
    }


def breeding_page(session):
    animal_ids = animal_service.accessible_animal_ids(session)
    return {'breeding_records': [health_service.format_breeding_record(r)
                                 for r in health_service.list_breeding_records(animal_ids)]}


def feeding_page(session):
    threshold = current_app.config['LOW_STOCK_THRESHOLD']
    warning_days = current_app.config['EXPIRY_WARNING_DAYS']
    own_ids = [a.id for a in animal_service.list_animals(session.user_id)]
    items = feeding_service.list_inventory(session.user_id)
    return {
        'schedules': [feeding_service.format_schedule(s) for s in feeding_service.list_schedules(own_ids)],
        'logs': [feeding_service.format_feeding_log(entry) for entry in feeding_service.list_feeding_logs(own_ids)],
        'inventory': [feeding_service.format_inventory_item(i, threshold, warning_days) for i in items],
        'summary': feeding_service.summarize_inventory(items, threshold, warning_days)
    }


def marketplace_page(session):
    listings = marketplace_service.search_listings()
    return {'listings': [marketplace_service.format_listing(listing) for listing in listings]}


def create_listing_page(session):
    own_animals = animal_service.list_animals(session.user_id)
    return {
        'animals': [{'id': a.id, 'name': a.name, 'species': a.species.value} for a in own_animals],
        'statuses': [s.value for s in ListingStatus]
    }


def listing_detail_page(session, listing_id):
    listing = unwrap(marketplace_service.get_listing(listing_id))
    return {
        'listing': marketplace_service.format_listing(listing, marketplace_service.seller_name(listing)),
        'reviews': [marketplace_service.format_review(r) for r in marketplace_service.list_reviews(listing.id)],
        'is_seller': listing.seller_id == session.user_id
    }


def my_enquiries_page(session):
    return {
        'sent': [marketplace_service.format_enquiry(e)
                 for e in marketplace_service.list_buyer_enquiries(session.user_id)],
        'received': [marketplace_service.format_enquiry(e)
                     for e in marketplace_service.list_seller_enquiries(session.user_id)]
    }


def ai_doctor_page(session):
    return {'history': [ai_chat_service.format_chat_message(e) for e in ai_chat_service.history(session.user_id)]}


def schemes_page(session):
    profile = session.user.profile
    state = profile.state if profile else None
    return {'schemes': [content_service.format_scheme(s) for s in content_service.list_schemes(state=state)]}


def scheme_detail_page(session, scheme_id):
    scheme = unwrap(content_service.get_row(GovernmentScheme, scheme_id, active_only=True))
    return {'scheme': content_service.format_scheme(scheme)}


def profile_page(session):
    profile = session.user.profile
    return {
        'email': session.user.email,
        'profile': profile_service.format_profile(profile) if profile else None,
        'roles': sorted(role.value for role in session.roles)
    }


def settings_page(session):
    data = profile_page(session)
    data['languages'] = LANGUAGES
    return data


def notifications_page(session):
    return {'notifications': [content_service.format_notification(n)
                              for n in content_service.list_notifications(session.user_id)]}


def messages_page(session):
    conversations = message_service.list_conversations(session.user_id)
    return {'conversations': [message_service.format_conversation(c, session.user_id) for c in conversations]}


def helpdesk_page(session):
    return {
        'tickets': [helpdesk_service.format_ticket(t) for t in helpdesk_service.list_tickets(user_id=session.user_id)],
        'priorities': [p.value for p in TicketPriority]
    }


def ticket_detail_page(session, ticket_id):
    ticket = unwrap(helpdesk_service.get_ticket(ticket_id, session))
    return {'ticket': helpdesk_service.format_ticket(ticket, include_responses=True,
                                                     show_internal=session.has_role(AppRole.ADMIN))}


def content_library_page(session):
    return {
        'content': [content_service.format_content(c) for c in content_service.list_content()],
        'categories': [c.value for c in ContentCategory]
    }


def plans_page(session):
    subscription = profile_service.current_subscription(session.user_id)
    return {
        'plans': profile_service.list_plans(),
        'current': profile_service.format_subscription(subscription) if subscription else None
    }


def emergency_page(session):
    contacts = profile_service.list_emergency_contacts(session.user_id)
    return {
        'contacts': [profile_service.format_emergency_contact(c) for c in contacts],
        'max_contacts': profile_service.MAX_EMERGENCY_CONTACTS
    }


def vet_dashboard_page(session):
    return dashboard_service.vet_dashboard(current_app.config['VACCINATION_DUE_DAYS'])


def vet_form_page(session):
    return {'animals': [{'id': a.id, 'name': a.name, 'species': a.species.value, 'owner_id': a.owner_id}
                        for a in animal_service.list_animals()]}


def coordinator_dashboard_page(session):
    return dashboard_service.coordinator_dashboard()


def admin_page(session):
    return dashboard_service.admin_overview()


def admin_users_page(session):
    return {'users': account_service.list_users(), 'roles': [r.value for r in AppRole]}


def admin_content_page(session):
    return {'content': [content_service.format_content(c) for c in content_service.list_content(active_only=False)]}


def admin_schemes_page(session):
    return {'schemes': [content_service.format_scheme(s) for s in content_service.list_schemes(active_only=False)]}


def admin_helpdesk_page(session):
    return {
        'tickets': [helpdesk_service.format_ticket(t) for t in helpdesk_service.list_tickets()],
        'counts': helpdesk_service.count_by_status()
    }


def admin_sla_page(session):
    return {'sla': [helpdesk_service.format_sla(c) for c in helpdesk_service.list_sla_configs()]}


def admin_marketplace_page(session):
    return {
        'listings': [marketplace_service.format_listing(listing)
                     for listing in marketplace_service.search_listings(status=None)],
        'enquiries': [marketplace_service.format_enquiry(e) for e in marketplace_service.list_all_enquiries()]
    }


def admin_activity_page(session):
    return {'activity': activity_service.list_activity()}


def admin_subscriptions_page(session):
    return {
        'plans': [profile_service.format_plan(p) for p in profile_service.list_all_plans()],
        'subscriptions': profile_service.list_subscriptions(),
        'stats': profile_service.subscription_stats()
    }
