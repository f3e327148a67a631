import logging
from flask import current_app
from flask_restx import Namespace, Resource, reqparse
from werkzeug.exceptions import MethodNotAllowed, NotFound
from werkzeug.routing import RequestRedirect
from livestock.utils.gating import resolve_page_access
from livestock.utils.session import current_session
from .page_routes import ROUTES_BY_NAME, onboarding_gate

logger = logging.getLogger(__name__)

navigation_ns = Namespace('navigation', description='Page gating decisions', path='/navigation')

resolve_parser = reqparse.RequestParser()
resolve_parser.add_argument('path', type=str, required=True, location='args', help='Page path, e.g. /admin')


def match_page(path):
    """Route table entry and URL arguments for a page path, or (None, None)."""
    adapter = current_app.url_map.bind('localhost')
    try:
        endpoint, view_args = adapter.match(path, method='GET')
    except (NotFound, MethodNotAllowed, RequestRedirect):
        return None, None
    if not endpoint.startswith('pages.'):
        return None, None
    return ROUTES_BY_NAME.get(endpoint.split('.', 1)[1]), view_args


@navigation_ns.route('/resolve')
class ResolveNavigation(Resource):
    @navigation_ns.expect(resolve_parser)
    def get(self):
        """Where the current session would land on a page: allow, redirect or loading"""
        path = resolve_parser.parse_args()['path']
        route, _ = match_page(path)
        if route is None:
            return {'message': 'Unknown page', 'path': path}, 404

        decision = resolve_page_access(route, path, current_session(), onboarding_gate())
        logger.debug(f"Navigation to {path}: {decision.state.value}")
        return {
            'path': path,
            'page': route.name,
            'decision': decision.state.value,
            'location': decision.location
        }, 200
