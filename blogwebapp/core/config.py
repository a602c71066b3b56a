# blogwebapp/core/config.py

import os
from datetime import timedelta

class Config:
    """Settings shared by every environment."""
    # Signs and verifies access/refresh tokens.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_HOURS', 1)))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_REFRESH_TOKEN_DAYS', 14)))

    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # Transactional email (Brevo) used for magic links.
    BREVO_API_KEY = os.getenv('BREVO_API_KEY')
    EMAIL_FROM = os.getenv('EMAIL_FROM')
    EMAIL_FROM_NAME = os.getenv('EMAIL_FROM_NAME', 'Blogwebapp')

    # Browser client base URL; magic links point at FRONTEND_URL/magic-login.
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:3000')
    MAGIC_LINK_EXPIRES_MINUTES = int(os.getenv('MAGIC_LINK_EXPIRES_MINUTES', 15))

    MAX_CLAPS_PER_USER = 50

class DevelopmentConfig(Config):
    """Local development."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)

class TestingConfig(Config):
    """Test runs."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('TEST_JWT_SECRET_KEY', 'test-secret-key-with-enough-length-for-hs256')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    BREVO_API_KEY = 'test-brevo-key'
    EMAIL_FROM = 'no-reply@blogwebapp.test'

class ProductionConfig(Config):
    """Deployed instance."""
    DEBUG = False

# Maps FLASK_ENV values to config classes; used by create_app.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
