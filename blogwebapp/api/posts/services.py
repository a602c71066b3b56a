# blogwebapp/api/posts/services.py
import logging
import uuid
from dataclasses import asdict
from typing import Optional, Dict, Any, Tuple, List

from firebase_admin import firestore

from blogwebapp.models.post import Post, Author
from blogwebapp.utils.datetime_utils import DateTimeUtils

UPDATABLE_FIELDS = ('title', 'category', 'content', 'image_path')


class PostError(Exception):
    """Base exception for post operations."""


class PostNotFoundError(PostError):
    """The post does not exist."""


class PostPermissionError(PostError):
    """The caller is not the post's author."""


class PostAuthorNotFoundError(PostError):
    """The user creating the post does not exist."""


def user_claps_for(post_data: Dict[str, Any], user_id: Optional[str]) -> int:
    """The given user's clap count on a post document (0 when none)."""
    if not user_id:
        return 0
    for entry in post_data.get('clapped_by') or []:
        if entry.get('user_id') == user_id:
            return entry.get('count', 0)
    return 0


class PostService:
    """
    Post business logic. Every Firestore interaction for the 'posts'
    collection goes through here, except clap bookkeeping (ClapService).
    """
    def __init__(self, comment_service=None):
        self.db = firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.comment_service = comment_service

    def create_post(self, user_id: str, title: str, category: str, content: str, image_path: Optional[str] = None) -> Dict[str, Any]:
        """Creates a post authored by user_id."""
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            raise PostAuthorNotFoundError("Post author not found.")

        try:
            user_data = user_doc.to_dict()
            author = Author(
                user_id=user_id,
                first_name=user_data.get("first_name"),
                last_name=user_data.get("last_name"),
                profile_picture=user_data.get("profile_picture")
            )

            post_id = str(uuid.uuid4())
            new_post = Post(
                post_id=post_id, author=author,
                title=title, category=category, content=content,
                image_path=image_path
            )

            post_data = DateTimeUtils.for_firestore(asdict(new_post))
            self.posts_ref.document(post_id).set(post_data)
            return post_data
        except Exception as e:
            logging.error(f"Post creation failed (user_id: {user_id}): {e}", exc_info=True)
            raise

    def get_posts(self, limit: int, cursor: Optional[str]) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """Newest first, paginated with the last returned post_id as cursor."""
        query = self.posts_ref.order_by("created_at", direction=firestore.Query.DESCENDING)
        return self._paginate(query, limit, cursor)

    def get_posts_by_user_id(self, author_id: str, limit: int, cursor: Optional[str]) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """Posts written by one user, newest first."""
        query = self.posts_ref.where('author.user_id', '==', author_id).order_by("created_at", direction=firestore.Query.DESCENDING)
        return self._paginate(query, limit, cursor)

    def _paginate(self, query, limit: int, cursor: Optional[str]) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        if cursor:
            cursor_doc = self.posts_ref.document(cursor).get()
            if cursor_doc.exists:
                query = query.start_after(cursor_doc)

        posts = [doc.to_dict() for doc in query.limit(limit).stream()]
        next_cursor = posts[-1]['post_id'] if posts and len(posts) == limit else None
        return posts, next_cursor

    def get_post_by_id(self, post_id: str) -> Optional[Dict[str, Any]]:
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def update_post(self, post_id: str, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Updates title/category/content/image_path. Only the author may update."""
        post_ref = self.posts_ref.document(post_id)
        doc = post_ref.get()
        if not doc.exists:
            raise PostNotFoundError("Post not found.")
        if doc.to_dict().get('author', {}).get('user_id') != user_id:
            raise PostPermissionError("You are not authorized to update this post.")

        update_data = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        update_data['updated_at'] = DateTimeUtils.now()
        post_ref.update(update_data)
        return post_ref.get().to_dict()

    def delete_post(self, post_id: str, user_id: str, is_admin: bool = False) -> None:
        """Deletes a post and its comments. Authors and admins only."""
        post_ref = self.posts_ref.document(post_id)
        doc = post_ref.get()
        if not doc.exists:
            raise PostNotFoundError("Post not found.")
        if doc.to_dict().get('author', {}).get('user_id') != user_id and not is_admin:
            raise PostPermissionError("You are not authorized to delete this post.")

        post_ref.delete()
        if self.comment_service:
            try:
                removed = self.comment_service.delete_comments_for_post(post_id)
                logging.info(f"Post {post_id} deleted with {removed} comments.")
            except Exception as e:
                logging.error(f"Comments of deleted post not removed (post_id: {post_id}): {e}", exc_info=True)
                raise

    def count_posts_by_user_id(self, author_id: str) -> int:
        """Number of posts a user has written."""
        try:
            # Aggregation query; counts server side without fetching documents.
            query = self.posts_ref.where('author.user_id', '==', author_id)
            count_result = query.count().get()
            return count_result[0][0].value
        except Exception as e:
            logging.error(f"Post count failed (author_id: {author_id}): {e}", exc_info=True)
            return 0
