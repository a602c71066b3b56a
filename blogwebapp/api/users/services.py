# blogwebapp/api/users/services.py
import logging
from typing import Optional, Dict, Any, List

from firebase_admin import firestore

from blogwebapp.models.user import User, UserRole
from blogwebapp.utils.datetime_utils import DateTimeUtils

PROFILE_FIELDS = ('first_name', 'last_name', 'bio')


class UserNotFoundError(Exception):
    """The user does not exist."""


class UserService:
    """
    User profile and account management.
    PostService is injected for post counts on public profiles.
    """
    def __init__(self, post_service=None):
        self.db = firestore.client()
        self.users_ref = self.db.collection('users')
        self.post_service = post_service

    def get_user(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        return User.from_dict(doc.to_dict())

    def get_user_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Public profile plus the user's total post count.
        :return: profile dict with post_count, or None
        """
        try:
            user_doc = self.users_ref.document(user_id).get()
            if not user_doc.exists:
                return None

            user_data = user_doc.to_dict()
            user_data['post_count'] = self.post_service.count_posts_by_user_id(user_id) if self.post_service else 0
            return user_data
        except Exception as e:
            logging.error(f"Profile lookup failed (user_id: {user_id}): {e}", exc_info=True)
            raise

    def update_profile(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Updates first_name, last_name and bio."""
        user_ref = self.users_ref.document(user_id)
        if not user_ref.get().exists:
            raise UserNotFoundError("User not found.")

        update_data = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        update_data['updated_at'] = DateTimeUtils.now()
        user_ref.update(update_data)
        return user_ref.get().to_dict()

    def list_users(self) -> List[Dict[str, Any]]:
        """Every account, oldest first (admin view)."""
        docs = self.users_ref.order_by('created_at').stream()
        return [doc.to_dict() for doc in docs]

    def update_role(self, user_id: str, role: str) -> Dict[str, Any]:
        if role not in {r.value for r in UserRole}:
            raise ValueError(f"Unknown role: {role}")
        user_ref = self.users_ref.document(user_id)
        if not user_ref.get().exists:
            raise UserNotFoundError("User not found.")

        user_ref.update({'role': role, 'updated_at': DateTimeUtils.now()})
        logging.info(f"Role of {user_id} set to {role}")
        return user_ref.get().to_dict()

    def delete_user(self, user_id: str) -> None:
        """Removes the account document. Posts and comments keep their embedded author projection."""
        user_ref = self.users_ref.document(user_id)
        if not user_ref.get().exists:
            raise UserNotFoundError("User not found.")
        user_ref.delete()
        logging.info(f"User deleted (user_id: {user_id})")
