# blogwebapp/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from blogwebapp.utils.datetime_utils import DateTimeUtils

MAX_CLAPS_PER_USER = 50


@dataclass
class Author:
    """Author projection stored inside a Post document."""
    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None


@dataclass
class ClapEntry:
    """One user's contribution to a post's claps (1..MAX_CLAPS_PER_USER)."""
    user_id: str
    count: int


@dataclass
class Post:
    """
    Document layout of the Firestore 'posts' collection.
    `claps` always equals the sum of `clapped_by[].count`.
    """
    post_id: str
    author: Author
    title: str
    category: str
    content: str
    image_path: Optional[str] = None
    claps: int = 0
    clapped_by: List[ClapEntry] = field(default_factory=list)
    comment_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
