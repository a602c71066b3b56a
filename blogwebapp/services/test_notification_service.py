# blogwebapp/services/test_notification_service.py
from datetime import datetime, timedelta, timezone

import pytest

from blogwebapp.models.notification import NotificationType
from blogwebapp.services.notification_service import NotificationService, NotificationNotFoundError


@pytest.fixture
def service(fake_db):
    return NotificationService()


def test_create_notification(service, fake_db, make_user):
    recipient = make_user()
    sender = make_user(first_name="Grace")

    service.create_notification(recipient, sender, NotificationType.COMMENT, "post-1", "nice post")

    stored = list(fake_db.docs('notifications').values())
    assert len(stored) == 1
    assert stored[0]['recipient_id'] == recipient
    assert stored[0]['sender']['first_name'] == "Grace"
    assert stored[0]['type'] == "COMMENT"
    assert stored[0]['is_read'] is False


def test_self_notification_skipped(service, fake_db, make_user):
    user = make_user()
    service.create_notification(user, user, NotificationType.CLAP, "post-1")
    assert fake_db.docs('notifications') == {}


def test_unknown_sender_skipped(service, fake_db, make_user):
    service.create_notification(make_user(), "ghost", NotificationType.REPLY, "c-1")
    assert fake_db.docs('notifications') == {}


def test_store_errors_are_swallowed(service, fake_db, make_user):
    recipient, sender = make_user(), make_user()
    fake_db.unavailable = True
    service.create_notification(recipient, sender, NotificationType.COMMENT, "post-1")
    service.publish_clap_count("post-1", 3)


def test_publish_clap_count(service, fake_db):
    service.publish_clap_count("post-1", 7)
    stored = fake_db.docs('clap_counts')["post-1"]
    assert stored['claps'] == 7
    assert stored['post_id'] == "post-1"


def _notify(service, recipient, sender, target_id):
    service.create_notification(recipient, sender, NotificationType.COMMENT, target_id)
    # distinct, increasing timestamps
    stored = service.db.docs('notifications')
    created = next(n for n in stored.values() if n['target_id'] == target_id)
    created['created_at'] = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=len(stored))


def test_get_notifications_newest_first(service, make_user):
    recipient, sender, other = make_user(), make_user(), make_user()
    _notify(service, recipient, sender, "post-1")
    _notify(service, recipient, sender, "post-2")
    _notify(service, other, sender, "post-3")

    notifications = service.get_notifications(recipient)

    assert [n['target_id'] for n in notifications] == ["post-2", "post-1"]
    assert service.get_notifications(recipient, limit=1)[0]['target_id'] == "post-2"


def test_mark_as_read(service, make_user):
    recipient, sender = make_user(), make_user()
    _notify(service, recipient, sender, "post-1")
    _notify(service, recipient, sender, "post-2")
    first = service.get_notifications(recipient)[-1]

    assert service.mark_as_read(first['notification_id'], recipient)['is_read'] is True
    assert [n['target_id'] for n in service.get_notifications(recipient, unread_only=True)] == ["post-2"]


def test_mark_as_read_of_someone_else(service, make_user):
    recipient, sender = make_user(), make_user()
    _notify(service, recipient, sender, "post-1")
    notification_id = service.get_notifications(recipient)[0]['notification_id']

    with pytest.raises(NotificationNotFoundError):
        service.mark_as_read(notification_id, sender)
    with pytest.raises(NotificationNotFoundError):
        service.mark_as_read("missing", recipient)


def test_mark_all_as_read(service, fake_db, make_user):
    recipient, sender = make_user(), make_user()
    for i in range(3):
        _notify(service, recipient, sender, f"post-{i}")

    assert service.mark_all_as_read(recipient) == 3
    assert service.mark_all_as_read(recipient) == 0
    assert fake_db.batch_commits == [3]
    assert service.get_notifications(recipient, unread_only=True) == []
