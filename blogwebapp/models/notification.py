# blogwebapp/models/notification.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from blogwebapp.utils.datetime_utils import DateTimeUtils

class NotificationType(Enum):
    """Kinds of in-app notifications"""
    COMMENT = "COMMENT"
    REPLY = "REPLY"
    CLAP = "CLAP"

@dataclass
class Notification:
    """
    Document layout of the Firestore 'notifications' collection.
    """
    notification_id: str
    recipient_id: str      # user receiving the notification
    sender: Dict[str, Any] # user who triggered it
    type: NotificationType
    target_id: str         # post_id or comment_id the notification points at
    target_summary: Optional[str] = None
    is_read: bool = False
    created_at: datetime = field(default_factory=DateTimeUtils.now)
