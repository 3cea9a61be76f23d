from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import AuthSettings, get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from services.auth import AuthService
from utils.security import TokenService

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Video Platform API",
        "version": "1.0.0",
        "description": "REST API for users, videos, comments, likes, playlists, subscriptions and tweets.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Builds AuthSettings once and hands it to the token and auth services,
    which are reachable from views through app.extensions["auth"].
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    # Bind the store to this app's database
    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))

    settings = AuthSettings.from_config(app.config)
    app.extensions["auth"] = AuthService(storage, TokenService(settings))

    # Credentials travel in cookies too, so CORS must allow them
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .videos import bp as videos_bp
    from .comments import bp as comments_bp
    from .tweets import bp as tweets_bp
    from .likes import bp as likes_bp
    from .playlists import bp as playlists_bp
    from .subscriptions import bp as subscriptions_bp
    from .dashboard import bp as dashboard_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(videos_bp, url_prefix="/api/v1")
    app.register_blueprint(comments_bp, url_prefix="/api/v1")
    app.register_blueprint(tweets_bp, url_prefix="/api/v1")
    app.register_blueprint(likes_bp, url_prefix="/api/v1/likes")
    app.register_blueprint(playlists_bp, url_prefix="/api/v1")
    app.register_blueprint(subscriptions_bp, url_prefix="/api/v1/subscriptions")
    app.register_blueprint(dashboard_bp, url_prefix="/api/v1/dashboard")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Video Platform API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
