import os
from flask import Flask, Blueprint, jsonify, send_from_directory
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_bcrypt import Bcrypt
from flask_migrate import Migrate
from flask_restx import Api
from livestock.config import Config

migrate = Migrate()
db = SQLAlchemy()
jwt = JWTManager()
bcrypt = Bcrypt()


def create_api():
    """Build the REST API on a fresh blueprint so every app gets its own resources."""
    blueprint = Blueprint('api', __name__, url_prefix='/api')
    api = Api(
        blueprint,
        title='Livestock Information System API',
        version='1.0',
        description='Farmer, veterinary, coordinator and admin operations',
        doc='/docs',
        ui_config={
            'displayOperationId': True,
            'docExpansion': 'none',
            'filter': True,
            'defaultModelsExpandDepth': 1,
            'defaultModelExpandDepth': 1
        },
        security=[{'BearerAuth': []}],
        authorizations={
            'BearerAuth': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'Authorization',
                'description': 'Enter your JWT token as "Bearer <token>"'
            }
        }
    )

    from .routes import NAMESPACES, register_error_handlers
    for namespace in NAMESPACES:
        api.add_namespace(namespace)
    register_error_handlers(api)
    return blueprint, api


def create_app(config_class=Config):
    app = Flask(__name__, static_url_path='/static')
    app.config.from_object(config_class)
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)

    # Process-wide session state: revoked tokens, role cache, impersonation flags
    from .utils.session import SessionRegistry
    app.extensions['session_registry'] = SessionRegistry()

    upload_folder = app.config['UPLOAD_FOLDER']
    if not os.path.exists(upload_folder):
        os.makedirs(upload_folder, exist_ok=True)

    # Public URL for uploaded files
    @app.route('/get/<path:filename>')
    def static_file(filename):
        return send_from_directory(os.path.abspath(app.config['UPLOAD_FOLDER']), filename)

    CORS(app, resources={r"/*": {"origins": app.config.get('CORS_ORIGINS', '*')}},
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         allow_headers=app.config.get('CORS_ALLOW_HEADERS', ["Content-Type", "Authorization"]),
         methods=app.config.get('CORS_METHODS', ["GET", "POST", "PUT", "DELETE", "OPTIONS"]))

    # Session context for every request, revocation checks for every token
    from .utils.auth_middleware import setup_auth_middleware
    setup_auth_middleware(app, jwt)

    api_blueprint, _ = create_api()
    app.register_blueprint(api_blueprint)

    # Page route table with role and onboarding gating
    from .routes.page_routes import pages_bp
    app.register_blueprint(pages_bp)

    from .commands import register_commands
    register_commands(app)

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({
            'message': 'You do not have permission to perform this operation',
            'error': str(error)
        }), 403

    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    return app
