# blogwebapp/api/auth/services.py
import uuid
import logging
from datetime import datetime, timezone
from typing import Optional
from dataclasses import asdict
from firebase_admin import firestore
from flask import Flask

from blogwebapp.core.security import hash_password, verify_password, generate_magic_token, hash_magic_token
from blogwebapp.models.magic_link import MagicLink
from blogwebapp.models.user import User
from blogwebapp.utils.datetime_utils import DateTimeUtils


class AuthError(Exception):
    """Base exception for authentication."""


class EmailAlreadyRegisteredError(AuthError):
    """Registration with an email that already has an account."""


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password."""


class MagicLinkInvalidError(AuthError):
    """Magic link token is unknown, already used or expired."""


class AuthService:
    def __init__(self):
        self.db = None
        self.users_ref = None
        self.magic_links_ref = None
        self.revoked_tokens_ref = None
        self.mail_service = None
        self.app: Optional[Flask] = None

    def init_app(self, app: Flask, mail_service=None):
        """Called from the app factory; binds the DB, the mail service and the app config."""
        self.db = firestore.client()
        self.users_ref = self.db.collection('users')
        self.magic_links_ref = self.db.collection('magic_links')
        self.revoked_tokens_ref = self.db.collection('revoked_tokens')
        self.mail_service = mail_service
        self.app = app

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()

    def find_user_by_email(self, email: str) -> Optional[User]:
        query = self.users_ref.where('email', '==', self._normalize_email(email)).limit(1).stream()
        user_doc = next(query, None)
        return User.from_dict(user_doc.to_dict()) if user_doc else None

    def _create_user(self, email: str, password: Optional[str] = None,
                     first_name: Optional[str] = None, last_name: Optional[str] = None) -> User:
        user_id = str(uuid.uuid4())
        new_user = User(
            user_id=user_id,
            email=self._normalize_email(email),
            first_name=first_name,
            last_name=last_name,
            password_hash=hash_password(password) if password else None
        )
        self.users_ref.document(user_id).set(DateTimeUtils.for_firestore(asdict(new_user)))
        return new_user

    # --- Email/password ---
    def register(self, email: str, password: str, first_name: Optional[str] = None, last_name: Optional[str] = None) -> User:
        if self.find_user_by_email(email):
            raise EmailAlreadyRegisteredError("Email already registered.")
        user = self._create_user(email, password, first_name, last_name)
        logging.info(f"User registered (user_id: {user.user_id})")
        return user

    def login(self, email: str, password: str) -> User:
        user = self.find_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials.")
        return user

    def check_password(self, user_id: str, password: str) -> bool:
        """True when `password` matches the stored one. Always False for password-less accounts."""
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            raise InvalidCredentialsError("User not found.")
        return verify_password(password, user_doc.to_dict().get('password_hash'))

    # --- Magic link ---
    def request_magic_link(self, email: str) -> None:
        """
        Emails a single-use login link, creating a password-less account for
        an unknown address. Only the SHA-256 hash of the token is stored.
        Raises MailDeliveryError when the email cannot be sent.
        """
        user = self.find_user_by_email(email)
        if not user:
            user = self._create_user(email)
            logging.info(f"Password-less account created for magic link (user_id: {user.user_id})")

        expires_minutes = self.app.config['MAGIC_LINK_EXPIRES_MINUTES']
        token = generate_magic_token()
        magic_link = MagicLink(
            token_hash=hash_magic_token(token),
            user_id=user.user_id,
            email=user.email,
            expires_at=DateTimeUtils.in_minutes(expires_minutes)
        )
        self.magic_links_ref.document(magic_link.token_hash).set(DateTimeUtils.for_firestore(asdict(magic_link)))

        link = f"{self.app.config['FRONTEND_URL'].rstrip('/')}/magic-login?token={token}"
        self.mail_service.send_magic_link(user.email, link, expires_minutes)

    def verify_magic_link(self, token: str) -> User:
        """Consumes a magic link token and returns its user."""
        if not token:
            raise MagicLinkInvalidError("Invalid or expired link.")

        link_ref = self.magic_links_ref.document(hash_magic_token(token))
        transaction = self.db.transaction()

        @firestore.transactional
        def _consume_in_transaction(transaction, link_ref):
            link_doc = link_ref.get(transaction=transaction)
            if not link_doc.exists:
                raise MagicLinkInvalidError("Invalid or expired link.")
            link_data = link_doc.to_dict()
            if link_data.get('used') or DateTimeUtils.is_expired(link_data.get('expires_at')):
                raise MagicLinkInvalidError("Invalid or expired link.")
            transaction.update(link_ref, {'used': True})
            return link_data['user_id']

        user_id = _consume_in_transaction(transaction, link_ref)
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            raise MagicLinkInvalidError("Account no longer exists.")
        return User.from_dict(user_doc.to_dict())

    # --- Blocklist ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """Stores a revoked token's jti with its expiry."""
        try:
            token_data = {
                'revoked_at': DateTimeUtils.now(),
                'expires_at': expires
            }
            self.revoked_tokens_ref.document(jti).set(DateTimeUtils.for_firestore(token_data))
        except Exception as e:
            logging.error(f"Blocklist insert failed (jti: {jti}): {e}", exc_info=True)
            raise

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        jti = jwt_payload['jti']
        doc = self.revoked_tokens_ref.document(jti).get()
        return doc.exists

    def logout_user(self, access_jti: str, access_exp: int, refresh_jti: str, refresh_exp: int):
        """Revokes both the access and the refresh token."""
        self.add_token_to_blocklist(access_jti, datetime.fromtimestamp(access_exp, tz=timezone.utc))
        self.add_token_to_blocklist(refresh_jti, datetime.fromtimestamp(refresh_exp, tz=timezone.utc))
        logging.info(f"Logout complete. JTI: {access_jti[:8]}..., {refresh_jti[:8]}...")
