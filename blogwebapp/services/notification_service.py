# blogwebapp/services/notification_service.py
import logging
import uuid
from dataclasses import asdict
from firebase_admin import firestore
from typing import Optional, List, Dict, Any

from blogwebapp.models.notification import Notification, NotificationType
from blogwebapp.utils.datetime_utils import DateTimeUtils

class NotificationNotFoundError(Exception):
    """The notification does not exist or belongs to someone else."""


class NotificationService:
    """
    Shared notification logic.
    - In-app notifications are stored in 'notifications'.
    - Clap count changes are broadcast through 'clap_counts/{post_id}', which
      clients follow with Firestore listeners.
    Both are best effort: failures are logged, never raised.
    """
    def __init__(self):
        self.db = firestore.client()
        self.notifications_ref = self.db.collection('notifications')
        self.clap_counts_ref = self.db.collection('clap_counts')
        self.users_ref = self.db.collection('users')

    def create_notification(self, recipient_id: str, sender_id: str, n_type: NotificationType, target_id: str, target_summary: Optional[str] = None):
        """
        Stores a notification for `recipient_id`.
        Notifications to oneself are skipped.

        :param recipient_id: user receiving the notification
        :param sender_id: user who triggered it
        :param n_type: NotificationType
        :param target_id: post_id or comment_id the notification refers to
        :param target_summary: short text shown with the notification (e.g. the comment)
        """
        if not recipient_id or recipient_id == sender_id:
            return

        try:
            sender_doc = self.users_ref.document(sender_id).get()
            if not sender_doc.exists:
                logging.warning(f"Notification skipped: sender not found (ID: {sender_id})")
                return

            sender_info = sender_doc.to_dict()
            sender_data = {
                "user_id": sender_info.get('user_id'),
                "first_name": sender_info.get('first_name'),
                "profile_picture": sender_info.get('profile_picture')
            }

            notification = Notification(
                notification_id=str(uuid.uuid4()),
                recipient_id=recipient_id,
                sender=sender_data,
                type=n_type,
                target_id=target_id,
                target_summary=target_summary
            )

            notification_dict = asdict(notification)
            notification_dict['type'] = notification.type.value

            self.notifications_ref.document(notification.notification_id).set(notification_dict)
            logging.info(f"{n_type.value} notification created: {sender_id} -> {recipient_id}")

        except Exception as e:
            logging.error(f"Failed to create notification: {e}", exc_info=True)

    def publish_clap_count(self, post_id: str, claps: int):
        """Fire-and-forget broadcast of a post's new clap total."""
        try:
            self.clap_counts_ref.document(post_id).set({
                'post_id': post_id,
                'claps': claps,
                'updated_at': DateTimeUtils.now()
            })
        except Exception as e:
            logging.error(f"Clap count broadcast failed (post_id: {post_id}): {e}", exc_info=True)

    def get_notifications(self, user_id: str, limit: int = 50, unread_only: bool = False) -> List[Dict[str, Any]]:
        """The user's notifications, newest first."""
        query = self.notifications_ref.where('recipient_id', '==', user_id)
        if unread_only:
            query = query.where('is_read', '==', False)
        query = query.order_by('created_at', direction=firestore.Query.DESCENDING).limit(limit)
        return [doc.to_dict() for doc in query.stream()]

    def mark_as_read(self, notification_id: str, user_id: str) -> Dict[str, Any]:
        notification_ref = self.notifications_ref.document(notification_id)
        doc = notification_ref.get()
        if not doc.exists or doc.to_dict().get('recipient_id') != user_id:
            raise NotificationNotFoundError("Notification not found.")
        notification_ref.update({'is_read': True})
        return notification_ref.get().to_dict()

    def mark_all_as_read(self, user_id: str) -> int:
        """Marks every unread notification of the user as read; returns how many changed."""
        unread = self.notifications_ref.where('recipient_id', '==', user_id).where('is_read', '==', False).stream()
        batch = self.db.batch()
        updated = 0
        for doc in unread:
            batch.update(doc.reference, {'is_read': True})
            updated += 1
            # Firestore caps a batch at 500 writes
            if updated % 500 == 0:
                batch.commit()
                batch = self.db.batch()
        if updated % 500:
            batch.commit()
        return updated
