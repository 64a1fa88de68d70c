# placemap/services/test_notification_service.py
from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import ServiceUnavailable

from placemap.models.notification import NotificationType
from placemap.services.notification_service import NotificationService


def _doc(data=None, exists=True):
    doc = MagicMock()
    doc.exists = exists
    doc.to_dict.return_value = data
    return doc


@pytest.fixture
def refs():
    return {'notifications': MagicMock(), 'users': MagicMock()}


def _service(refs, push_enabled=True):
    db = MagicMock()
    db.collection.side_effect = lambda name: refs[name]
    return NotificationService(db=db, push_enabled=push_enabled)


def test_self_notification_is_skipped(refs):
    service = _service(refs)

    assert service.create_notification('user-1', 'user-1', NotificationType.LIKE, 'msg') is None
    refs['notifications'].document.assert_not_called()


def test_create_notification_pushes_flat_string_data(refs):
    refs['users'].document.return_value.get.return_value = _doc({'name': 'Lee', 'push_token': 'device-token'})
    service = _service(refs)

    with patch('placemap.services.notification_service.messaging.send') as send:
        created = service.create_notification('user-1', 'user-2', NotificationType.COMMENT, '댓글', 'p1')

    assert created['type'] == 'comment'
    assert created['read'] is False
    message = send.call_args[0][0]
    assert message.token == 'device-token'
    assert message.data['event'] == 'newNotification'
    assert message.data['read'] == 'false'
    assert message.data['related_post'] == 'p1'
    assert 'sender' not in message.data
    assert all(isinstance(value, str) for value in message.data.values())


def test_push_disabled_stores_only(refs):
    refs['users'].document.return_value.get.return_value = _doc({'name': 'Lee', 'push_token': 'device-token'})
    service = _service(refs, push_enabled=False)

    with patch('placemap.services.notification_service.messaging.send') as send:
        service.create_notification('user-1', 'user-2', NotificationType.LIKE, 'msg')

    send.assert_not_called()
    refs['notifications'].document.return_value.set.assert_called_once()


def test_mark_as_read_other_recipient(refs):
    refs['notifications'].document.return_value.get.return_value = _doc({'recipient_id': 'someone-else', 'read': False})
    service = _service(refs)

    assert service.mark_as_read('user-1', 'n1') is None
    refs['notifications'].document.return_value.update.assert_not_called()


def test_mark_as_read(refs):
    refs['notifications'].document.return_value.get.return_value = _doc(
        {'notification_id': 'n1', 'recipient_id': 'user-1', 'read': False}
    )
    service = _service(refs, push_enabled=False)

    result = service.mark_as_read('user-1', 'n1')

    assert result['read'] is True
    refs['notifications'].document.return_value.update.assert_called_once_with({'read': True})


def test_get_notifications_rejects_unknown_filter(refs):
    with pytest.raises(ValueError):
        _service(refs).get_notifications('user-1', read='maybe')


def test_token_lookup_failure_does_not_fail_notification(refs):
    refs['users'].document.return_value.get.side_effect = [
        _doc({'name': 'Lee', 'avatar_url': None}),
        ServiceUnavailable("firestore unavailable"),
    ]
    service = _service(refs)

    with patch('placemap.services.notification_service.messaging.send') as send:
        created = service.create_notification('user-1', 'user-2', NotificationType.RATING, '평가', 'p1')

    assert created is not None
    assert created['recipient_id'] == 'user-1'
    refs['notifications'].document.return_value.set.assert_called_once()
    send.assert_not_called()
