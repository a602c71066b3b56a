# blogwebapp/api/comments/services.py

import logging
import uuid
from datetime import datetime, timezone
from dataclasses import asdict
from typing import Optional, Dict, Any, List, Iterable

from firebase_admin import firestore
from google.api_core.exceptions import NotFound

from blogwebapp.models.comment import Comment
from blogwebapp.models.notification import NotificationType
from blogwebapp.models.user import User
from blogwebapp.utils.datetime_utils import DateTimeUtils

BATCH_LIMIT = 500

# records without a usable created_at sort ahead of everything else
_MISSING_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


class CommentError(Exception):
    """Base exception for comment operations."""


class CommentNotFoundError(CommentError):
    """The comment does not exist."""


class CommentTargetNotFoundError(CommentError):
    """The post, parent comment or author a new comment points at does not exist."""


def _created_at_key(comment: Dict[str, Any]) -> datetime:
    created_at = comment.get('created_at')
    if not isinstance(created_at, datetime):
        return _MISSING_TIMESTAMP
    return DateTimeUtils.to_utc(created_at)


def build_comment_tree(comments: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Links a flat list of one post's comments into a forest.

    Comments are processed in ascending `created_at` order, so a parent is
    always registered before any reply to it. Every node gets a `replies`
    list. A comment whose parent is not in the set (orphan) is dropped,
    along with anything replying to it. Records without a timestamp come
    first, in input order.
    """
    nodes: Dict[str, Dict[str, Any]] = {}
    roots: List[Dict[str, Any]] = []

    for comment in sorted(comments, key=_created_at_key):
        node = {**comment, 'replies': []}
        parent_id = node.get('parent_comment_id')

        if not parent_id:
            roots.append(node)
        elif parent_id in nodes:
            nodes[parent_id]['replies'].append(node)

        # registered after linking so a self-referencing comment cannot become its own reply
        if node.get('comment_id'):
            nodes[node['comment_id']] = node

    return roots


def count_nodes(tree: List[Dict[str, Any]]) -> int:
    """Number of comments in a forest, replies included."""
    return sum(1 + count_nodes(node['replies']) for node in tree)


class CommentService:
    """
    Comment business logic: threaded reads, creation, cascade delete
    and orphan repair.
    """
    def __init__(self, notification_service=None):
        self.db = firestore.client()
        self.comments_ref = self.db.collection('comments')
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.notification_service = notification_service

    def get_comment(self, comment_id: str) -> Optional[Dict[str, Any]]:
        doc = self.comments_ref.document(comment_id).get()
        return doc.to_dict() if doc.exists else None

    def get_comment_tree(self, post_id: str) -> List[Dict[str, Any]]:
        """All comments of a post as root comments with nested `replies`."""
        docs = self.comments_ref.where('post_id', '==', post_id).stream()
        return build_comment_tree(doc.to_dict() for doc in docs)

    def create_comment(self, post_id: str, author_id: str, content: str, parent_comment_id: Optional[str] = None) -> Dict[str, Any]:
        """Creates a comment (or a reply when parent_comment_id is set) and notifies the post/parent author."""
        author_doc = self.users_ref.document(author_id).get()
        if not author_doc.exists:
            raise CommentTargetNotFoundError("Comment author not found.")

        author_data = User.from_dict(author_doc.to_dict()).author_projection()

        parent_data = None
        if parent_comment_id:
            parent_doc = self.comments_ref.document(parent_comment_id).get()
            if not parent_doc.exists or parent_doc.to_dict().get('post_id') != post_id:
                raise CommentTargetNotFoundError("Parent comment not found on this post.")
            parent_data = parent_doc.to_dict()

        transaction = self.db.transaction()

        @firestore.transactional
        def _create_in_transaction(transaction, post_id, author_data, content):
            post_ref = self.posts_ref.document(post_id)
            post_snapshot = post_ref.get(transaction=transaction)
            if not post_snapshot.exists:
                raise CommentTargetNotFoundError("Post to comment on does not exist.")

            comment_id = str(uuid.uuid4())
            new_comment = Comment(
                comment_id=comment_id,
                post_id=post_id,
                author=author_data,
                content=content,
                parent_comment_id=parent_comment_id
            )
            comment_data = DateTimeUtils.for_firestore(asdict(new_comment))
            transaction.set(self.comments_ref.document(comment_id), comment_data)
            transaction.update(post_ref, {'comment_count': firestore.Increment(1)})
            return comment_data, post_snapshot.to_dict()

        comment_data, post_data = _create_in_transaction(transaction, post_id, author_data, content)

        if self.notification_service:
            summary = content[:50]
            if parent_data:
                self.notification_service.create_notification(
                    recipient_id=parent_data.get('author', {}).get('user_id'), sender_id=author_id,
                    n_type=NotificationType.REPLY, target_id=comment_data['comment_id'], target_summary=summary
                )
            else:
                self.notification_service.create_notification(
                    recipient_id=post_data.get('author', {}).get('user_id'), sender_id=author_id,
                    n_type=NotificationType.COMMENT, target_id=post_id, target_summary=summary
                )

        return {**comment_data, 'replies': []}

    def delete_comment(self, comment_id: str) -> int:
        """
        Deletes a comment and every transitive reply, depth first.
        Authorization is the caller's job. Returns the number of deleted comments.
        Not transactional: if the store fails midway, replies already removed stay
        removed, and comment_count is still lowered by what was removed.
        """
        comment_ref = self.comments_ref.document(comment_id)
        comment_doc = comment_ref.get()
        if not comment_doc.exists:
            raise CommentNotFoundError("Comment not found.")

        post_id = comment_doc.to_dict().get('post_id')
        tally = {'deleted': 0}
        try:
            self._delete_replies(comment_id, tally)
            comment_ref.delete()
            tally['deleted'] += 1
        except Exception as e:
            logging.error(f"Cascade delete interrupted after {tally['deleted']} deletions (comment_id: {comment_id}): {e}", exc_info=True)
            raise
        finally:
            self._decrement_comment_count(post_id, tally['deleted'])

        logging.info(f"Comment {comment_id} deleted with {tally['deleted'] - 1} replies.")
        return tally['deleted']

    def _delete_replies(self, parent_id: str, tally: Dict[str, int]):
        """One query per tree level; each reply's subtree goes before the reply itself. Counts into tally as it goes."""
        for reply in self.comments_ref.where('parent_comment_id', '==', parent_id).stream():
            self._delete_replies(reply.id, tally)
            reply.reference.delete()
            tally['deleted'] += 1

    def _decrement_comment_count(self, post_id: Optional[str], amount: int):
        if not post_id or amount <= 0:
            return
        try:
            self.posts_ref.document(post_id).update({'comment_count': firestore.Increment(-amount)})
        except NotFound:
            logging.warning(f"comment_count not updated, post already deleted (post_id: {post_id})")

    def repair_orphans(self, post_id: str) -> int:
        """
        Deletes comments of a post whose parent no longer exists, with their replies.
        Cleans up after an interrupted cascade; running it twice deletes nothing more.
        """
        comments = [doc.to_dict() for doc in self.comments_ref.where('post_id', '==', post_id).stream()]
        known_ids = {c.get('comment_id') for c in comments}
        orphans = [c for c in comments
                   if c.get('parent_comment_id') and c['parent_comment_id'] not in known_ids]

        tally = {'deleted': 0}
        try:
            for orphan in orphans:
                orphan_ref = self.comments_ref.document(orphan['comment_id'])
                if not orphan_ref.get().exists:
                    continue  # removed as part of an earlier orphan's subtree
                self._delete_replies(orphan['comment_id'], tally)
                orphan_ref.delete()
                tally['deleted'] += 1
        finally:
            self._decrement_comment_count(post_id, tally['deleted'])

        if tally['deleted']:
            logging.info(f"Removed {tally['deleted']} orphaned comments (post_id: {post_id})")
        return tally['deleted']

    def delete_comments_for_post(self, post_id: str) -> int:
        """Removes every comment of a post in one batch; used when the post is deleted."""
        batch = self.db.batch()
        deleted = 0
        for doc in self.comments_ref.where('post_id', '==', post_id).stream():
            batch.delete(doc.reference)
            deleted += 1
            # Firestore caps a batch at 500 writes
            if deleted % BATCH_LIMIT == 0:
                batch.commit()
                batch = self.db.batch()
        if deleted % BATCH_LIMIT:
            batch.commit()
        return deleted
