# blogwebapp/api/users/test_user_routes.py


def test_my_profile(client, auth_headers, make_user):
    user_id = make_user(email="me@example.com")
    res = client.get('/api/users/me', headers=auth_headers(user_id))
    assert res.status_code == 200
    body = res.get_json()
    assert body['email'] == "me@example.com"
    assert body['role'] == "user"
    assert 'password_hash' not in body


def test_update_profile(client, fake_db, auth_headers, make_user):
    user_id = make_user()
    res = client.put('/api/users/me', json={'first_name': "Grace", 'bio': "Compilers."},
                     headers=auth_headers(user_id))
    assert res.status_code == 200
    assert res.get_json()['first_name'] == "Grace"
    assert fake_db.docs('users')[user_id]['bio'] == "Compilers."


def test_update_profile_rejects_role(client, fake_db, auth_headers, make_user):
    user_id = make_user()
    res = client.put('/api/users/me', json={'role': "admin"}, headers=auth_headers(user_id))
    assert res.status_code == 400
    assert fake_db.docs('users')[user_id]['role'] == "user"


def test_public_profile_with_post_count(client, make_user, make_post):
    user_id = make_user(email="public@example.com")
    make_post(user_id)
    make_post(user_id)

    res = client.get(f'/api/users/{user_id}')
    assert res.status_code == 200
    body = res.get_json()
    assert body['post_count'] == 2
    assert 'email' not in body


def test_unknown_user(client, auth_headers):
    assert client.get('/api/users/nobody').status_code == 404
    assert client.get('/api/users/me', headers=auth_headers("nobody")).status_code == 404
