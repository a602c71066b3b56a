# blogwebapp/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional

from blogwebapp.utils.datetime_utils import DateTimeUtils

@dataclass
class Comment:
    """
    Document layout of the Firestore 'comments' collection.
    A comment with parent_comment_id=None is a root comment.
    """
    comment_id: str
    post_id: str
    author: Dict[str, Any]  # {'user_id', 'first_name', 'last_name', 'profile_picture'}
    content: str
    parent_comment_id: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
