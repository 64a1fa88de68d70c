# placemap/api/posts/test_post_services.py
from unittest.mock import MagicMock

import pytest

from placemap.api.posts.services import PostService, aggregate_rating


def _doc(data, exists=True):
    doc = MagicMock()
    doc.exists = exists
    doc.to_dict.return_value = data
    return doc


@pytest.fixture
def refs():
    return {name: MagicMock() for name in ('posts', 'users', 'ratings', 'comments')}


@pytest.fixture
def service(refs):
    db = MagicMock()
    db.collection.side_effect = lambda name: refs[name]
    return PostService(notification_service=MagicMock(), db=db)


def test_aggregate_rating_first_rating():
    assert aggregate_rating(0.0, 0, 5) == (5.0, 1)


def test_aggregate_rating_adds_rating():
    assert aggregate_rating(5.0, 1, 3) == (4.0, 2)


def test_aggregate_rating_replaces_previous_value():
    # 기존 평점 3 -> 5 로 수정: 개수는 유지
    assert aggregate_rating(4.0, 2, 5, previous=3) == (5.0, 2)


def test_get_posts_filters_query_in_memory(service, refs):
    refs['posts'].order_by.return_value.limit.return_value.stream.return_value = [
        _doc({'post_id': 'p1', 'title': 'Mountain View', 'description': '', 'tags': []}),
        _doc({'post_id': 'p2', 'title': 'City Mall', 'description': '', 'tags': ['shopping']}),
    ]

    posts = service.get_posts(10, query='  MOUNTAIN ')

    assert [p['post_id'] for p in posts] == ['p1']


def test_get_posts_queries_category(service, refs):
    refs['posts'].where.return_value.order_by.return_value.limit.return_value.stream.return_value = []

    service.get_posts(10, category='food')

    refs['posts'].where.assert_called_once_with('category', '==', 'food')


def test_create_post_uses_author_and_geojson(service, refs):
    refs['users'].document.return_value.get.return_value = _doc({'name': 'Kim', 'avatar_url': None})

    post = service.create_post('user-1', {
        'title': 'Mountain View', 'description': '전망대', 'category': 'nature',
        'location': {'latitude': 55.7, 'longitude': 12.5}, 'images': [], 'price': 0.0, 'tags': [],
    })

    assert post['posted_by'] == {'user_id': 'user-1', 'name': 'Kim', 'avatar_url': None}
    assert post['location']['coordinates'] == [12.5, 55.7]
    assert post['likes_count'] == 0
    refs['posts'].document.return_value.set.assert_called_once()


def test_create_post_without_user_document(service, refs):
    refs['users'].document.return_value.get.return_value = _doc(None, exists=False)

    with pytest.raises(ValueError):
        service.create_post('ghost', {'title': 'x', 'description': 'y', 'location': {'latitude': 0, 'longitude': 0}})


def test_update_post_by_other_user(service, refs):
    refs['posts'].document.return_value.get.return_value = _doc({'posted_by': {'user_id': 'owner'}})

    with pytest.raises(PermissionError):
        service.update_post('p1', 'intruder', {'title': 'hacked'})
    refs['posts'].document.return_value.update.assert_not_called()


def test_delete_missing_post(service, refs):
    refs['posts'].document.return_value.get.return_value = _doc(None, exists=False)

    with pytest.raises(ValueError):
        service.delete_post('missing', 'user-1')
