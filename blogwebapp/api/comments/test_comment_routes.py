# blogwebapp/api/comments/test_comment_routes.py
import pytest


@pytest.fixture
def users(make_user):
    return make_user(), make_user(first_name="Grace")


@pytest.fixture
def post_id(make_post, users):
    return make_post(users[0])


def _create(client, headers, post_id, content, parent=None):
    body = {'post_id': post_id, 'content': content}
    if parent:
        body['parent_comment_id'] = parent
    return client.post('/api/comments', json=body, headers=headers)


def test_thread_and_cascade(client, auth_headers, users, post_id):
    author, commenter = users
    headers = auth_headers(commenter)

    res = _create(client, headers, post_id, "C1")
    assert res.status_code == 201
    c1 = res.get_json()
    assert c1['replies'] == []
    assert c1['author']['first_name'] == "Grace"

    c2 = _create(client, headers, post_id, "C2", c1['comment_id']).get_json()
    _create(client, headers, post_id, "C3", c2['comment_id'])

    tree = client.get(f'/api/comments/{post_id}').get_json()
    assert [n['content'] for n in tree] == ["C1"]
    assert tree[0]['replies'][0]['content'] == "C2"
    assert tree[0]['replies'][0]['replies'][0]['content'] == "C3"

    res = client.delete(f"/api/comments/{c1['comment_id']}", headers=headers)
    assert res.status_code == 200
    assert res.get_json()['deleted_count'] == 3
    assert client.get(f'/api/comments/{post_id}').get_json() == []


def test_empty_tree(client, post_id):
    res = client.get(f'/api/comments/{post_id}')
    assert res.status_code == 200
    assert res.get_json() == []


def test_create_validation(client, auth_headers, users, post_id):
    headers = auth_headers(users[1])
    assert _create(client, headers, post_id, "").status_code == 400
    res = client.post('/api/comments', json={'content': "no post"}, headers=headers)
    assert res.status_code == 400
    assert res.get_json()['error_code'] == "VALIDATION_ERROR"


def test_create_on_missing_targets(client, auth_headers, users, post_id):
    headers = auth_headers(users[1])
    assert _create(client, headers, "no-such-post", "hi").status_code == 404
    assert _create(client, headers, post_id, "hi", parent="no-such-comment").status_code == 404


def test_create_requires_login(client, post_id):
    assert _create(client, {}, post_id, "hi").status_code == 401


def test_delete_permissions(client, auth_headers, make_user, users, post_id):
    author, commenter = users
    comment = _create(client, auth_headers(commenter), post_id, "mine").get_json()
    stranger = make_user()

    res = client.delete(f"/api/comments/{comment['comment_id']}", headers=auth_headers(stranger))
    assert res.status_code == 403

    res = client.delete(f"/api/comments/{comment['comment_id']}", headers=auth_headers(stranger, role="admin"))
    assert res.status_code == 200


def test_delete_missing(client, auth_headers, users):
    res = client.delete('/api/comments/no-such-comment', headers=auth_headers(users[0]))
    assert res.status_code == 404


def test_store_unavailable(client, fake_db, post_id):
    fake_db.unavailable = True
    res = client.get(f'/api/comments/{post_id}')
    assert res.status_code == 503
    assert res.get_json()['error_code'] == "STORE_UNAVAILABLE"
