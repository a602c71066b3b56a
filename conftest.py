# conftest.py
"""
Shared pytest fixtures.

Services talk to Firestore through `firebase_admin.firestore.client()`.
Tests swap that for `FakeFirestore`, an in-memory store covering the
subset of the client API the services use.
"""
import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import firebase_admin
import pytest
from firebase_admin import firestore
from flask_jwt_extended import create_access_token, create_refresh_token
from google.api_core.exceptions import NotFound, ServiceUnavailable

from blogwebapp.core.security import hash_password
from blogwebapp.models.user import DEFAULT_PROFILE_PICTURE


def _get_path(data: Dict[str, Any], path: str):
    value = data
    for part in path.split('.'):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _apply_update(current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Applies an update() payload, honouring Increment transforms and dotted paths."""
    updated = copy.deepcopy(current)
    for path, value in changes.items():
        parts = path.split('.')
        target = updated
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        if isinstance(value, firestore.Increment):
            target[parts[-1]] = (target.get(parts[-1]) or 0) + value.value
        else:
            target[parts[-1]] = copy.deepcopy(value)
    return updated


class FakeSnapshot:
    def __init__(self, reference: "FakeDocumentRef", data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)


class FakeDocumentRef:
    def __init__(self, db: "FakeFirestore", collection: str, doc_id: str):
        self._db = db
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self) -> Dict[str, Dict[str, Any]]:
        return self._db.data.setdefault(self._collection, {})

    def get(self, transaction=None) -> FakeSnapshot:
        self._db.check_available()
        return FakeSnapshot(self, copy.deepcopy(self._docs.get(self.id)))

    def set(self, data: Dict[str, Any], merge: bool = False):
        self._db.check_available()
        if merge and self.id in self._docs:
            self._docs[self.id] = _apply_update(self._docs[self.id], data)
        else:
            self._docs[self.id] = copy.deepcopy(data)

    def update(self, changes: Dict[str, Any]):
        self._db.check_available()
        if self.id not in self._docs:
            raise NotFound(f"No document to update: {self._collection}/{self.id}")
        self._docs[self.id] = _apply_update(self._docs[self.id], changes)

    def delete(self):
        self._db.check_available()
        self._db.record_delete()
        self._docs.pop(self.id, None)


class FakeAggregateResult:
    def __init__(self, value: int):
        self.value = value


class FakeAggregation:
    def __init__(self, query: "FakeQuery"):
        self._query = query

    def get(self, transaction=None):
        return [[FakeAggregateResult(len(list(self._query.stream())))]]


class FakeQuery:
    def __init__(self, db: "FakeFirestore", collection: str):
        self._db = db
        self._collection = collection
        self._filters: List[tuple] = []
        self._order: List[tuple] = []
        self._limit: Optional[int] = None
        self._start_after: Optional[str] = None

    def _copy(self) -> "FakeQuery":
        query = FakeQuery(self._db, self._collection)
        query._filters = list(self._filters)
        query._order = list(self._order)
        query._limit = self._limit
        query._start_after = self._start_after
        return query

    def where(self, field_path: str, op_string: str, value):
        query = self._copy()
        query._filters.append((field_path, op_string, value))
        return query

    def order_by(self, field_path: str, direction: str = "ASCENDING"):
        query = self._copy()
        query._order.append((field_path, direction))
        return query

    def limit(self, count: int):
        query = self._copy()
        query._limit = count
        return query

    def start_after(self, snapshot: FakeSnapshot):
        query = self._copy()
        query._start_after = snapshot.id
        return query

    def count(self) -> FakeAggregation:
        return FakeAggregation(self)

    def _matches(self, data: Dict[str, Any]) -> bool:
        for field_path, op, value in self._filters:
            actual = _get_path(data, field_path)
            if op == '==' and actual != value:
                return False
            if op == 'in' and actual not in value:
                return False
            if op == 'array_contains' and value not in (actual or []):
                return False
        return True

    def stream(self, transaction=None):
        self._db.check_available()
        docs = self._db.data.setdefault(self._collection, {})
        matched = [(doc_id, data) for doc_id, data in docs.items() if self._matches(data)]
        # stable sorts applied last key first
        for field_path, direction in reversed(self._order):
            matched.sort(key=lambda item: _get_path(item[1], field_path),
                         reverse=direction == firestore.Query.DESCENDING)
        if self._start_after is not None:
            ids = [doc_id for doc_id, _ in matched]
            if self._start_after in ids:
                matched = matched[ids.index(self._start_after) + 1:]
        if self._limit is not None:
            matched = matched[:self._limit]

        snapshots = [
            FakeSnapshot(FakeDocumentRef(self._db, self._collection, doc_id), copy.deepcopy(data))
            for doc_id, data in matched
        ]
        return iter(snapshots)

    def get(self, transaction=None):
        return list(self.stream())


class FakeCollection(FakeQuery):
    def document(self, document_id: Optional[str] = None) -> FakeDocumentRef:
        return FakeDocumentRef(self._db, self._collection, document_id or uuid.uuid4().hex)


class FakeTransaction:
    """Writes apply immediately; the patched `transactional` calls the function once."""
    def set(self, reference: FakeDocumentRef, data: Dict[str, Any], merge: bool = False):
        reference.set(data, merge=merge)

    def update(self, reference: FakeDocumentRef, changes: Dict[str, Any]):
        reference.update(changes)

    def delete(self, reference: FakeDocumentRef):
        reference.delete()


class FakeBatch:
    def __init__(self, db: "FakeFirestore"):
        self._db = db
        self._ops: List[tuple] = []

    def set(self, reference, data, merge=False):
        self._ops.append(('set', reference, data, merge))

    def update(self, reference, changes):
        self._ops.append(('update', reference, changes, None))

    def delete(self, reference):
        self._ops.append(('delete', reference, None, None))

    def commit(self):
        self._db.batch_commits.append(len(self._ops))
        for op, reference, data, merge in self._ops:
            if op == 'set':
                reference.set(data, merge=merge)
            elif op == 'update':
                reference.update(data)
            else:
                reference.delete()
        self._ops = []


class FakeFirestore:
    """
    In-memory stand-in for a Firestore client.
    `fail_after_deletes` makes the n+1-th delete raise ServiceUnavailable;
    `unavailable` makes every read and write raise it.
    """
    def __init__(self):
        self.data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.batch_commits: List[int] = []
        self.fail_after_deletes: Optional[int] = None
        self.unavailable = False
        self._deletes = 0

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def transaction(self) -> FakeTransaction:
        return FakeTransaction()

    def batch(self) -> FakeBatch:
        return FakeBatch(self)

    def check_available(self):
        if self.unavailable:
            raise ServiceUnavailable("Firestore is unavailable")

    def record_delete(self):
        if self.fail_after_deletes is not None and self._deletes >= self.fail_after_deletes:
            raise ServiceUnavailable("Firestore went away mid-delete")
        self._deletes += 1

    def docs(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self.data.get(collection, {})


# =====================================================================================
# Fixtures
# =====================================================================================

@pytest.fixture
def fake_db(monkeypatch) -> FakeFirestore:
    db = FakeFirestore()
    monkeypatch.setattr(firestore, 'client', lambda *args, **kwargs: db)
    monkeypatch.setattr(firestore, 'transactional', lambda fn: fn)
    return db


@pytest.fixture
def make_user(fake_db):
    """Factory storing a user document; returns the user_id."""
    def _make_user(first_name: str = "Ada", last_name: str = "Lovelace", email: Optional[str] = None,
                   password: Optional[str] = None, role: str = "user") -> str:
        user_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        fake_db.collection('users').document(user_id).set({
            'user_id': user_id,
            'email': email or f"{user_id[:8]}@example.com",
            'first_name': first_name,
            'last_name': last_name,
            'password_hash': hash_password(password) if password else None,
            'profile_picture': DEFAULT_PROFILE_PICTURE,
            'bio': "",
            'role': role,
            'created_at': now,
            'updated_at': now,
        })
        return user_id
    return _make_user


@pytest.fixture
def make_post(fake_db):
    """Factory storing a post document; returns the post_id."""
    def _make_post(author_id: str, title: str = "Hello", claps: int = 0,
                   clapped_by: Optional[List[Dict[str, Any]]] = None,
                   created_at: Optional[datetime] = None) -> str:
        post_id = str(uuid.uuid4())
        now = created_at or datetime.now(timezone.utc)
        fake_db.collection('posts').document(post_id).set({
            'post_id': post_id,
            'author': {'user_id': author_id, 'first_name': "Ada", 'last_name': "Lovelace",
                       'profile_picture': DEFAULT_PROFILE_PICTURE},
            'title': title,
            'category': "general",
            'content': "Body",
            'image_path': None,
            'claps': claps,
            'clapped_by': clapped_by or [],
            'comment_count': 0,
            'created_at': now,
            'updated_at': now,
        })
        return post_id
    return _make_post


@pytest.fixture
def app(fake_db, monkeypatch):
    # a non-empty registry skips credential loading in create_app
    monkeypatch.setattr(firebase_admin, '_apps', {'[DEFAULT]': object()})
    from blogwebapp import create_app
    app = create_app('testing')
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Authorization header for a user_id, optionally with the admin role claim."""
    def _auth_headers(user_id: str, role: str = "user", refresh: bool = False) -> Dict[str, str]:
        with app.app_context():
            make_token = create_refresh_token if refresh else create_access_token
            token = make_token(identity=user_id, additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
