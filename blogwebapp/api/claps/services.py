# blogwebapp/api/claps/services.py
"""
Clap bookkeeping for posts.

A post document carries the aggregate `claps` and an embedded `clapped_by`
list of {user_id, count}. Both are changed together inside one Firestore
transaction, so `claps == sum(clapped_by[].count)` survives concurrent claps
(Firestore retries the transaction when the document changed underneath it).
"""
import logging
from dataclasses import asdict
from typing import Optional, Dict, Any, List, Tuple

from firebase_admin import firestore

from blogwebapp.api.posts.services import PostNotFoundError, user_claps_for
from blogwebapp.models.notification import NotificationType
from blogwebapp.models.post import ClapEntry, MAX_CLAPS_PER_USER


class ClapError(Exception):
    """Base exception for clap operations."""


class SelfClapError(ClapError):
    """Authors cannot clap for their own post."""


class ClapLimitReachedError(ClapError):
    """The user already gave the maximum number of claps."""


class NothingToUndoError(ClapError):
    """The user has no claps on the post."""


def apply_clap(clapped_by: List[Dict[str, Any]], user_id: str, increment: int,
               max_claps: int = MAX_CLAPS_PER_USER) -> Tuple[List[Dict[str, Any]], int, int]:
    """
    Adds up to `increment` claps for `user_id`, clamped at `max_claps`.

    :return: (new clapped_by list, accepted increment, user's new count)
    :raises ClapLimitReachedError: the user is already at the cap
    """
    if increment < 1:
        raise ValueError("increment must be a positive integer")

    entries = [dict(entry) for entry in clapped_by]
    entry = next((e for e in entries if e.get('user_id') == user_id), None)
    current = entry['count'] if entry else 0
    if current >= max_claps:
        raise ClapLimitReachedError(f"You can clap at most {max_claps} times per post.")

    accepted = min(increment, max_claps - current)
    if entry:
        entry['count'] = current + accepted
    else:
        entries.append(asdict(ClapEntry(user_id=user_id, count=accepted)))
    return entries, accepted, current + accepted


def remove_claps(clapped_by: List[Dict[str, Any]], user_id: str) -> Tuple[List[Dict[str, Any]], int]:
    """
    Drops the user's entry entirely.

    :return: (remaining clapped_by list, the removed count)
    :raises NothingToUndoError: the user has no entry
    """
    removed = next((e for e in clapped_by if e.get('user_id') == user_id), None)
    if removed is None:
        raise NothingToUndoError("Nothing to undo.")
    remaining = [dict(e) for e in clapped_by if e.get('user_id') != user_id]
    return remaining, removed.get('count', 0)


class ClapService:
    """
    Adds and undoes claps, lists who clapped, and broadcasts new totals.
    """
    def __init__(self, notification_service=None, max_claps_per_user: int = MAX_CLAPS_PER_USER):
        self.db = firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.notification_service = notification_service
        self.max_claps_per_user = max_claps_per_user

    def add_clap(self, post_id: str, user_id: str, increment: int = 1) -> Dict[str, int]:
        """
        Records claps from user_id on a post.
        Returns {'claps': new aggregate, 'user_claps': user's new count}.
        """
        transaction = self.db.transaction()
        post_ref = self.posts_ref.document(post_id)

        @firestore.transactional
        def _clap_in_transaction(transaction, post_ref):
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise PostNotFoundError("Post not found.")

            post_data = snapshot.to_dict()
            author_id = post_data.get('author', {}).get('user_id')
            if author_id == user_id:
                raise SelfClapError("You cannot clap for your own post.")

            entries, accepted, user_claps = apply_clap(
                post_data.get('clapped_by') or [], user_id, increment, self.max_claps_per_user
            )
            claps = post_data.get('claps', 0) + accepted
            transaction.update(post_ref, {'claps': claps, 'clapped_by': entries})
            return claps, user_claps, accepted, author_id

        claps, user_claps, accepted, author_id = _clap_in_transaction(transaction, post_ref)
        logging.info(f"Clap recorded (post_id: {post_id}, user_id: {user_id}, +{accepted}, total: {claps})")

        if self.notification_service:
            self.notification_service.publish_clap_count(post_id, claps)
            if user_claps == accepted:
                # first claps from this user on the post
                self.notification_service.create_notification(
                    recipient_id=author_id, sender_id=user_id,
                    n_type=NotificationType.CLAP, target_id=post_id
                )

        return {'claps': claps, 'user_claps': user_claps}

    def undo_claps(self, post_id: str, user_id: str) -> Dict[str, Any]:
        """
        Removes all of the caller's claps from a post.
        Returns the new aggregate, user_claps=0 and the remaining clap users.
        """
        transaction = self.db.transaction()
        post_ref = self.posts_ref.document(post_id)

        @firestore.transactional
        def _undo_in_transaction(transaction, post_ref):
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise PostNotFoundError("Post not found.")

            post_data = snapshot.to_dict()
            remaining, removed = remove_claps(post_data.get('clapped_by') or [], user_id)
            # floored at zero in case the aggregate drifted
            claps = max(0, post_data.get('claps', 0) - removed)
            transaction.update(post_ref, {'claps': claps, 'clapped_by': remaining})
            return claps, remaining

        claps, remaining = _undo_in_transaction(transaction, post_ref)
        logging.info(f"Claps undone (post_id: {post_id}, user_id: {user_id}, total: {claps})")

        if self.notification_service:
            self.notification_service.publish_clap_count(post_id, claps)

        return {
            'claps': claps,
            'user_claps': 0,
            'clap_users': self._resolve_clap_users(remaining),
        }

    def get_clap_users(self, post_id: str) -> List[Dict[str, Any]]:
        """
        Users with a nonzero clap count on the post, with display info.
        A post whose aggregate is 0 but still lists entries is cleaned up first.
        """
        post_ref = self.posts_ref.document(post_id)
        snapshot = post_ref.get()
        if not snapshot.exists:
            raise PostNotFoundError("Post not found.")

        post_data = snapshot.to_dict()
        entries = post_data.get('clapped_by') or []
        if post_data.get('claps', 0) == 0 and entries:
            logging.warning(f"Stale clap entries cleared (post_id: {post_id}, entries: {len(entries)})")
            post_ref.update({'clapped_by': []})
            entries = []

        return self._resolve_clap_users(entries)

    def _resolve_clap_users(self, entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        users = []
        for entry in entries:
            if entry.get('count', 0) <= 0:
                continue
            user_doc = self.users_ref.document(entry['user_id']).get()
            if not user_doc.exists:
                continue
            user_data = user_doc.to_dict()
            users.append({
                'user_id': entry['user_id'],
                'first_name': user_data.get('first_name'),
                'last_name': user_data.get('last_name'),
                'profile_picture': user_data.get('profile_picture'),
                'claps': entry['count'],
            })
        return users

    def get_claps(self, post_id: str, user_id: Optional[str]) -> Dict[str, int]:
        """Aggregate claps of a post and the caller's own count."""
        post_doc = self.posts_ref.document(post_id).get()
        if not post_doc.exists:
            raise PostNotFoundError("Post not found.")
        post_data = post_doc.to_dict()
        return {'claps': post_data.get('claps', 0), 'user_claps': user_claps_for(post_data, user_id)}
