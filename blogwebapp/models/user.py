# blogwebapp/models/user.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from blogwebapp.utils.datetime_utils import DateTimeUtils

DEFAULT_PROFILE_PICTURE = "https://res.cloudinary.com/dqdix32m5/image/upload/v1744499838/user_v0drnu.png"


class UserRole(Enum):
    """Roles a user account can hold"""
    USER = "user"
    ADMIN = "admin"


@dataclass
class User:
    """
    Document layout of the Firestore 'users' collection.
    Magic link accounts have no password_hash.
    """
    user_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    password_hash: Optional[str] = None
    profile_picture: str = DEFAULT_PROFILE_PICTURE
    bio: str = ""
    role: str = UserRole.USER.value
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def author_projection(self) -> dict:
        """Display fields embedded into posts and comments."""
        return {
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "profile_picture": self.profile_picture,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        """Builds a User from a stored document, ignoring unknown fields."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
