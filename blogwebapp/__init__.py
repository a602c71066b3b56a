# blogwebapp/__init__.py

# =====================================================================================
# 1. Environment (loaded first)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. Module imports
# =====================================================================================
import os
import logging
from typing import Optional
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
from google.api_core.exceptions import ServiceUnavailable, DeadlineExceeded
import firebase_admin
from firebase_admin import credentials

# - Config
from blogwebapp.core.config import config_by_name

# - API blueprints
from blogwebapp.api.auth.routes import auth_bp
from blogwebapp.api.users.routes import users_bp
from blogwebapp.api.posts.routes import posts_bp
from blogwebapp.api.claps.routes import claps_bp
from blogwebapp.api.comments.routes import comments_bp
from blogwebapp.api.admin.routes import admin_bp
from blogwebapp.api.notifications.routes import notifications_bp

# - Services
from blogwebapp.services.notification_service import NotificationService
from blogwebapp.services.mail_service import MailService
from blogwebapp.api.auth.services import AuthService
from blogwebapp.api.users.services import UserService
from blogwebapp.api.posts.services import PostService
from blogwebapp.api.comments.services import CommentService
from blogwebapp.api.claps.services import ClapService


def create_app(config_name: Optional[str] = None):
    """
    Flask application factory.
    """
    # =====================================================================================
    # 3. App and base config
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. Extensions and external services
    # =====================================================================================
    jwt = JWTManager(app)

    if not firebase_admin._apps:
        cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")
        firebase_admin.initialize_app(credentials.Certificate(cred_path))

    # =====================================================================================
    # 5. Service instances in 'app.services' (dependency injection)
    # =====================================================================================
    app.services = {}

    # 5-1. Shared services other services depend on
    app.services['notifications'] = NotificationService()

    mail_instance = MailService()
    mail_instance.init_app(app)
    app.services['mail'] = mail_instance

    # 5-2. Domain services
    app.services['comments'] = CommentService(notification_service=app.services['notifications'])
    app.services['posts'] = PostService(comment_service=app.services['comments'])
    app.services['claps'] = ClapService(
        notification_service=app.services['notifications'],
        max_claps_per_user=app.config['MAX_CLAPS_PER_USER']
    )
    app.services['users'] = UserService(post_service=app.services['posts'])

    # - Auth (needs the app config and the mail service)
    auth_instance = AuthService()
    auth_instance.init_app(app, mail_service=app.services['mail'])
    app.services['auth'] = auth_instance

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return app.services['auth'].is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. Blueprints
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(claps_bp, url_prefix='/api/posts')
    app.register_blueprint(comments_bp, url_prefix='/api/comments')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')

    # =====================================================================================
    # 7. Global error handlers
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(ServiceUnavailable)
    @app.errorhandler(DeadlineExceeded)
    def handle_store_unavailable(err):
        logging.error(f"Firestore unavailable: {err}", exc_info=True)
        response = {"error_code": "STORE_UNAVAILABLE", "message": "The data store is temporarily unavailable."}
        return jsonify(response), 503

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # routing errors (404/405) keep their own status
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "An unexpected server error occurred."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. Logging
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
