# blogwebapp/models/magic_link.py
from dataclasses import dataclass, field
from datetime import datetime

from blogwebapp.utils.datetime_utils import DateTimeUtils

@dataclass
class MagicLink:
    """
    Document layout of the Firestore 'magic_links' collection.
    The document id is the SHA-256 hash of the emailed token; the raw token is never stored.
    """
    token_hash: str
    user_id: str
    email: str
    expires_at: datetime
    used: bool = False
    created_at: datetime = field(default_factory=DateTimeUtils.now)
