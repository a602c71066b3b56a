# blogwebapp/core/security.py
"""
Password hashing, magic link tokens and role checks.
"""

import hashlib
import secrets
from functools import wraps
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError
from flask import jsonify, current_app
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

MAGIC_LINK_TOKEN_BYTES = 32

# Argon2id, OWASP recommended parameters
_password_hasher = PasswordHasher(
    time_cost=2,
    memory_cost=19456,
    parallelism=1,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """False for a wrong password and for accounts without one (magic link only)."""
    if not password_hash:
        return False
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def generate_magic_token() -> str:
    """URL-safe random token sent by email."""
    return secrets.token_urlsafe(MAGIC_LINK_TOKEN_BYTES)


def hash_magic_token(token: str) -> str:
    """Stored form of a magic link token."""
    return hashlib.sha256(token.encode()).hexdigest()


def admin_required(f):
    """Requires a valid access token whose user currently holds the admin role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        user_service = current_app.services['users']
        user = user_service.get_user(get_jwt_identity())
        if not user or not user.is_admin:
            return jsonify({"error_code": "FORBIDDEN", "message": "Access denied. Admins only."}), 403
        return f(*args, **kwargs)

    return decorated_function
