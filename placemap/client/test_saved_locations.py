# placemap/client/test_saved_locations.py
from unittest.mock import MagicMock

import pytest

from placemap.client.config import ClientConfig
from placemap.client.context import ClientContext
from placemap.client.errors import AuthRequired, ServerRejected
from placemap.client.models import Post
from placemap.client.mutation import MutationPhase
from placemap.client.saved_locations import SavedLocationTracker


def listing(*ids):
    return {'saved_locations': [
        {'location_id': location_id, 'name': location_id.upper(), 'latitude': 55.7, 'longitude': 12.5,
         'saved_at': '2024-03-01T09:00:00Z'}
        for location_id in ids
    ]}


@pytest.fixture
def context():
    return ClientContext(ClientConfig())


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def tracker(context, api):
    return SavedLocationTracker(context, api)


def test_fetch_skipped_when_logged_out(tracker, api):
    assert tracker.fetch() is False
    api.get.assert_not_called()


def test_fetch_replaces_list(tracker, api, context):
    context.start('tok', 'user-1')
    api.get.return_value = listing('b', 'a')

    assert tracker.fetch() is True

    assert [location.id for location in tracker.locations] == ['b', 'a']
    assert tracker.locations[0].position == (55.7, 12.5)
    assert tracker.locations[0].saved_at.year == 2024
    api.get.assert_called_once_with('/users/saved-locations', auth=True)


def test_location_without_coordinates_is_kept(tracker, api, context):
    context.start('tok', 'user-1')
    api.get.return_value = {'saved_locations': [{'location_id': 'x', 'name': 'Somewhere'}, {'name': 'no id'}]}

    tracker.fetch()

    assert [location.id for location in tracker.locations] == ['x']
    assert tracker.locations[0].position is None


def test_add_requires_auth(tracker, api, context):
    mutation = tracker.add({'location_id': 'a', 'name': 'A'})

    assert mutation.phase is MutationPhase.ROLLED_BACK
    assert isinstance(context.presenter.modals[-1], AuthRequired)
    api.request.assert_not_called()


def test_add_post_uses_server_listing(tracker, api, context):
    context.start('tok', 'user-1')
    api.request.return_value = listing('p1')
    post = Post(id='p1', title='Mountain View', position=(55.7, 12.5), category='nature')

    mutation = tracker.add_post(post)

    assert mutation.phase is MutationPhase.CONFIRMED
    assert tracker.is_saved('p1')
    method, path = api.request.call_args[0]
    assert (method, path) == ('POST', '/users/saved-locations')
    body = api.request.call_args.kwargs['json']
    assert body['location_id'] == 'p1'
    assert body['name'] == 'Mountain View'
    assert (body['latitude'], body['longitude']) == (55.7, 12.5)


def test_add_duplicate_shows_server_message(tracker, api, context):
    context.start('tok', 'user-1')
    api.get.return_value = listing('a')
    tracker.fetch()
    api.request.side_effect = ServerRejected(409, '이미 저장한 장소입니다.', 'ALREADY_SAVED')

    mutation = tracker.add({'location_id': 'a', 'name': 'A'})

    assert mutation.phase is MutationPhase.ROLLED_BACK
    assert context.presenter.modals[-1].message == '이미 저장한 장소입니다.'
    assert [location.id for location in tracker.locations] == ['a']


def test_remove(tracker, api, context):
    context.start('tok', 'user-1')
    api.get.return_value = listing('a', 'b')
    tracker.fetch()
    api.request.return_value = listing('b')

    assert tracker.remove('a').phase is MutationPhase.CONFIRMED

    api.request.assert_called_once_with('DELETE', '/users/saved-locations/a', json=None, auth=True)
    assert [location.id for location in tracker.locations] == ['b']


def test_logout_during_request_discards_response(tracker, api, context):
    context.start('tok', 'user-1')

    def respond(*args, **kwargs):
        context.logout()
        return listing('a')
    api.request.side_effect = respond

    mutation = tracker.add({'location_id': 'a', 'name': 'A'})

    assert mutation.phase is MutationPhase.ROLLED_BACK
    assert tracker.locations == []


def test_logout_clears_local_list(tracker, api, context):
    context.start('tok', 'user-1')
    api.get.return_value = listing('a')
    tracker.fetch()

    context.logout()

    assert tracker.locations == []
