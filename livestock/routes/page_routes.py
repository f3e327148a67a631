"""Page route table.

Each page is registered on ``pages_bp`` and served through one view that runs the
gating pipeline before building the page payload:

* allow    -> 200 with ``{'page', 'path', 'data'}``
* redirect -> 302 to the decided location
* loading  -> 202 while roles are still being resolved
"""
import logging
from collections import namedtuple
from flask import Blueprint, current_app, jsonify, redirect, request
from werkzeug.exceptions import HTTPException
from livestock.models import AppRole
from livestock.services import profile_service
from livestock.utils.gating import (
    GateState, OnboardingGate, OnboardingLookupError, resolve_page_access, DEFAULT_REDIRECT, ONBOARDING_PATH
)
from livestock.utils.session import current_session
from . import page_loaders as pages

logger = logging.getLogger(__name__)

pages_bp = Blueprint('pages', __name__)

RouteSpec = namedtuple('RouteSpec', ['path', 'name', 'loader', 'allowed_roles', 'public', 'redirect_to'])


def public(path, name, loader):
    return RouteSpec(path, name, loader, None, True, DEFAULT_REDIRECT)


def protected(path, name, loader, allowed_roles=None, redirect_to=DEFAULT_REDIRECT):
    return RouteSpec(path, name, loader, allowed_roles, False, redirect_to)


VET_ROLES = (AppRole.VETERINARY_OFFICER, AppRole.ADMIN)
COORDINATOR_ROLES = (AppRole.PROGRAM_COORDINATOR, AppRole.ADMIN)
ADMIN_ROLES = (AppRole.ADMIN,)

ROUTES = [
    public('/', 'home', pages.static_page('home')),
    public('/about', 'about', pages.static_page('about')),
    public('/contact', 'contact', pages.static_page('contact')),
    public('/features', 'features', pages.static_page('features')),
    public('/faq', 'faq', pages.static_page('faq')),
    public('/auth', 'auth', pages.auth_page),
    public('/admin-login', 'admin_login', pages.admin_login_page),
    public('/demo-login', 'demo_login', pages.demo_login_page),

    protected('/dashboard', 'dashboard', pages.dashboard_page),
    protected('/onboarding', 'onboarding', pages.onboarding_page),
    protected('/animals', 'animals', pages.animals_page),
    protected('/animals/add', 'add_animal', pages.add_animal_page),
    protected('/animals/<animal_id>', 'animal_detail', pages.animal_detail_page),
    protected('/health', 'health', pages.health_page),
    protected('/vaccinations', 'vaccinations', pages.vaccinations_page),
    protected('/breeding', 'breeding', pages.breeding_page),
    protected('/feeding', 'feeding', pages.feeding_page),
    protected('/marketplace', 'marketplace', pages.marketplace_page),
    protected('/marketplace/create', 'create_listing', pages.create_listing_page),
    protected('/marketplace/<listing_id>', 'listing_detail', pages.listing_detail_page),
    protected('/my-enquiries', 'my_enquiries', pages.my_enquiries_page),
    protected('/ai-doctor', 'ai_doctor', pages.ai_doctor_page),
    protected('/schemes', 'schemes', pages.schemes_page),
    protected('/schemes/<scheme_id>', 'scheme_detail', pages.scheme_detail_page),
    protected('/profile', 'profile', pages.profile_page),
    protected('/settings', 'settings', pages.settings_page),
    protected('/notifications', 'notifications', pages.notifications_page),
    protected('/messages', 'messages', pages.messages_page),
    protected('/helpdesk', 'helpdesk', pages.helpdesk_page),
    protected('/helpdesk/<ticket_id>', 'ticket_detail', pages.ticket_detail_page),
    protected('/content-library', 'content_library', pages.content_library_page),
    protected('/plans', 'plans', pages.plans_page),
    protected('/emergency', 'emergency', pages.emergency_page),

    protected('/veterinary-dashboard', 'veterinary_dashboard', pages.vet_dashboard_page, VET_ROLES),
    protected('/vet/add-health-record', 'vet_add_health_record', pages.vet_form_page, VET_ROLES),
    protected('/vet/add-vaccination', 'vet_add_vaccination', pages.vet_form_page, VET_ROLES),
    protected('/coordinator-dashboard', 'coordinator_dashboard', pages.coordinator_dashboard_page,
              COORDINATOR_ROLES),

    protected('/admin', 'admin', pages.admin_page, ADMIN_ROLES),
    protected('/admin/users', 'admin_users', pages.admin_users_page, ADMIN_ROLES),
    protected('/admin/content', 'admin_content', pages.admin_content_page, ADMIN_ROLES),
    protected('/admin/schemes', 'admin_schemes', pages.admin_schemes_page, ADMIN_ROLES),
    protected('/admin/helpdesk', 'admin_helpdesk', pages.admin_helpdesk_page, ADMIN_ROLES),
    protected('/admin/helpdesk/<ticket_id>', 'admin_ticket_detail', pages.ticket_detail_page, ADMIN_ROLES),
    protected('/admin/sla-configuration', 'admin_sla_configuration', pages.admin_sla_page, ADMIN_ROLES),
    protected('/admin/marketplace', 'admin_marketplace', pages.admin_marketplace_page, ADMIN_ROLES),
    protected('/admin/activity', 'admin_activity', pages.admin_activity_page, ADMIN_ROLES),
    protected('/admin/subscriptions', 'admin_subscriptions', pages.admin_subscriptions_page, ADMIN_ROLES),
]

ROUTES_BY_NAME = {route.name: route for route in ROUTES}


def onboarding_gate():
    return OnboardingGate(profile_service.get_onboarding_flag)


def special_redirect(route, session):
    """Page-specific redirects that run after the gate has allowed the page."""
    if route.name == 'demo_login' and current_app.config.get('APP_ENV') == 'production':
        return '/'
    if route.path == ONBOARDING_PATH:
        try:
            if profile_service.get_onboarding_flag(session.user_id):
                return DEFAULT_REDIRECT
        except OnboardingLookupError as e:
            logger.error(f"Error checking onboarding status for user {session.user_id}: {e}")
    return None


def render_page(route, **view_args):
    session = current_session()
    decision = resolve_page_access(route, request.path, session, onboarding_gate())

    if decision.state is GateState.LOADING:
        return jsonify({'page': route.name, 'state': 'loading'}), 202
    if decision.state is GateState.REDIRECT:
        logger.info(f"Redirecting {request.path} to {decision.location}")
        return redirect(decision.location)

    location = special_redirect(route, session)
    if location:
        return redirect(location)

    return jsonify({
        'page': route.name,
        'path': request.path,
        'data': route.loader(session, **view_args)
    }), 200


def make_view(route):
    def view(**view_args):
        return render_page(route, **view_args)
    view.__name__ = route.name
    return view


for _route in ROUTES:
    pages_bp.add_url_rule(_route.path, endpoint=_route.name, view_func=make_view(_route), methods=['GET'])


@pages_bp.errorhandler(HTTPException)
def page_error(error):
    return jsonify({'message': error.description, 'status': error.code}), error.code
