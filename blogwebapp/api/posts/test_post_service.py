# blogwebapp/api/posts/test_post_service.py
import pytest

from blogwebapp.api.posts.services import PostService


@pytest.fixture
def service(fake_db):
    return PostService()


def test_empty_page_has_no_cursor(service, make_user, make_post):
    make_post(make_user())
    assert service.get_posts(0, None) == ([], None)


def test_count_posts_by_user(service, make_user, make_post):
    author = make_user()
    make_post(author)
    make_post(author)
    make_post(make_user())
    assert service.count_posts_by_user_id(author) == 2
