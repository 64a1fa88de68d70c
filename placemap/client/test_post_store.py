# placemap/client/test_post_store.py
from unittest.mock import MagicMock

import pytest

from placemap.client.config import ClientConfig
from placemap.client.context import ClientContext
from placemap.client.errors import AuthRequired, NetworkTimeout, RateLimited, ServerRejected, ValidationFailure
from placemap.client.mutation import MutationPhase
from placemap.client.post_store import PostStore


def raw_post(post_id='p1', **overrides):
    post = {
        'post_id': post_id, 'title': 'Mountain View', 'description': 'view', 'category': 'nature',
        'location': {'type': 'Point', 'coordinates': [12.5, 55.7]},
        'average_rating': 4.5, 'total_ratings': 2, 'likes': [], 'likes_count': 0,
        'date_posted': '2024-01-15T10:30:00Z',
    }
    post.update(overrides)
    return post


VALID_FORM = {
    'title': 'Lake Cafe', 'description': '호숫가 카페', 'category': 'food',
    'location': {'latitude': 37.5, 'longitude': 127.0},
}


@pytest.fixture
def context():
    return ClientContext(ClientConfig())


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def store(context, api):
    return PostStore(context, api)


def test_fetch_replaces_list_with_renderable_posts(store, api):
    api.get.return_value = {'posts': [raw_post('p1'), raw_post('bad', location={'coordinates': [None, 1]})]}

    assert store.fetch() is True

    assert [post.id for post in store.posts] == ['p1']
    assert [post.id for post in store.visible] == ['p1']
    assert store.posts[0].position == (55.7, 12.5)
    api.get.assert_called_once_with('/posts', params=None, timeout=10.0)


def test_fetch_passes_limit(store, api):
    api.get.return_value = {'posts': []}
    store.fetch(limit=20)
    assert api.get.call_args.kwargs['params'] == {'limit': 20}


def test_rate_limited_fetch_leaves_list_and_error_untouched(store, api, context):
    api.get.return_value = {'posts': [raw_post('p1')]}
    store.fetch()
    before = store.posts

    api.get.side_effect = RateLimited()
    assert store.fetch() is False

    assert store.posts is before
    assert store.error is None
    assert context.presenter.banner is None


def test_failed_fetch_keeps_stale_list_and_shows_retry(store, api, context):
    api.get.return_value = {'posts': [raw_post('p1')]}
    store.fetch()

    error = NetworkTimeout()
    api.get.side_effect = error
    assert store.fetch() is False

    assert [post.id for post in store.posts] == ['p1']
    assert store.error is error
    assert context.presenter.banner is error
    assert callable(context.presenter.retry)

    api.get.side_effect = None
    api.get.return_value = {'posts': [raw_post('p1')]}
    assert context.presenter.retry() is True
    assert store.error is None
    assert context.presenter.banner is None


def test_concurrent_fetch_is_a_no_op(store, api):
    inner_results = []

    def reenter(*args, **kwargs):
        inner_results.append(store.fetch())
        return {'posts': []}

    api.get.side_effect = reenter

    assert store.fetch() is True
    assert inner_results == [False]
    assert api.get.call_count == 1


def test_refresh_preserves_selected_object_and_merges_volatile_fields(store, api):
    api.get.return_value = {'posts': [raw_post('p1'), raw_post('p2')]}
    store.fetch()
    selected = store.select('p1')
    selected.comments = [{'content': 'loaded in detail view'}]

    api.get.return_value = {'posts': [
        raw_post('p1', title='Renamed', average_rating=4.9, total_ratings=3, likes=['u1'], likes_count=1),
        raw_post('p2'),
    ]}
    store.fetch(preserve_selection=True)

    assert store.selected is selected
    assert any(post is selected for post in store.posts)
    assert selected.average_rating == 4.9
    assert selected.total_ratings == 3
    assert selected.likes == {'u1'}
    assert selected.likes_count == 1
    assert selected.title == 'Mountain View'
    assert selected.comments == [{'content': 'loaded in detail view'}]


def test_fetch_result_discarded_after_logout(store, api, context):
    context.start('tok', 'user-1')

    def logout_midway(*args, **kwargs):
        context.logout()
        return {'posts': [raw_post('p1')]}

    api.get.side_effect = logout_midway

    assert store.fetch() is False
    assert store.posts == []


def test_set_filters_reruns_pipeline(store, api):
    api.get.return_value = {'posts': [raw_post('p1', category='food'), raw_post('p2', category='nature')]}
    store.fetch()

    visible = store.set_filters(category='food')

    assert [post.id for post in visible] == ['p1']
    assert store.visible is visible


def test_create_post_validation_never_reaches_network(store, api, context):
    context.start('tok', 'user-1')

    mutation = store.create_post({**VALID_FORM, 'title': 'ab'})

    assert mutation.phase is MutationPhase.ROLLED_BACK
    assert isinstance(mutation.error, ValidationFailure)
    assert 'title' in mutation.error.errors
    api.post.assert_not_called()


def test_create_post_requires_auth(store, api, context):
    mutation = store.create_post(VALID_FORM)

    assert isinstance(mutation.error, AuthRequired)
    assert isinstance(context.presenter.modals[-1], AuthRequired)
    api.post.assert_not_called()


def test_created_post_is_visible_only_if_it_passes_filters(store, api, context):
    context.start('tok', 'user-1')
    store.set_filters(category='nature')
    api.post.return_value = raw_post('new', category='food', location={'latitude': 37.5, 'longitude': 127.0})

    mutation = store.create_post(VALID_FORM)

    assert mutation.phase is MutationPhase.CONFIRMED
    assert mutation.target == 'new'
    assert [post.id for post in store.posts] == ['new']
    assert store.visible == []
    assert store.posts[0].position == (37.5, 127.0)


def test_created_post_already_fetched_is_updated_in_place(store, api, context):
    api.get.return_value = {'posts': [raw_post('p1', title='Old title')]}
    store.fetch()
    existing = store.posts[0]
    context.start('tok', 'user-1')
    api.post.return_value = raw_post('p1', title='New title')

    store.create_post(VALID_FORM)

    assert len(store.posts) == 1
    assert store.posts[0] is existing
    assert existing.title == 'New title'


def test_create_post_server_rejection(store, api, context):
    context.start('tok', 'user-1')
    api.post.side_effect = ServerRejected(404, '작성자 정보를 찾을 수 없습니다.')

    mutation = store.create_post(VALID_FORM)

    assert mutation.phase is MutationPhase.ROLLED_BACK
    assert context.presenter.modals[-1].message == '작성자 정보를 찾을 수 없습니다.'
    assert store.posts == []


def test_toggle_like_merges_server_counts(store, api, context):
    api.get.return_value = {'posts': [raw_post('p1')]}
    store.fetch()
    context.start('tok', 'user-1')
    api.post.return_value = {'post_id': 'p1', 'liked': True, 'likes': ['user-1'], 'likes_count': 1}

    mutation = store.toggle_like(store.posts[0])

    assert mutation.phase is MutationPhase.CONFIRMED
    assert store.posts[0].likes == {'user-1'}
    assert store.posts[0].likes_count == 1


def test_rate_updates_aggregate(store, api, context):
    api.get.return_value = {'posts': [raw_post('p1')]}
    store.fetch()
    context.start('tok', 'user-1')
    api.post.return_value = {'post_id': 'p1', 'average_rating': 4.0, 'total_ratings': 3}

    store.rate(store.posts[0], 3)

    api.post.assert_called_once_with('/posts/p1/ratings', json={'rating': 3}, auth=True)
    assert store.posts[0].average_rating == 4.0
    assert store.posts[0].total_ratings == 3


def test_rate_rejects_out_of_range_value(store, api, context):
    api.get.return_value = {'posts': [raw_post('p1')]}
    store.fetch()
    context.start('tok', 'user-1')

    mutation = store.rate(store.posts[0], 6)

    assert isinstance(mutation.error, ValidationFailure)
    api.post.assert_not_called()


def test_apply_remote_update_unknown_post(store):
    assert store.apply_remote_update('missing', {'likes_count': 3}) is False


def test_out_of_range_date_does_not_abort_refresh(store, api):
    api.get.return_value = {'posts': [raw_post('ok'), raw_post('huge', date_posted=1e20)]}

    assert store.fetch() is True

    assert [post.id for post in store.posts] == ['ok', 'huge']
    assert store.find('huge').date_posted is None
    assert store.error is None
