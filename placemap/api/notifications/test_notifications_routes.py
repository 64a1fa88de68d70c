# placemap/api/notifications/test_notifications_routes.py
from datetime import datetime, timezone


def _notification(**overrides):
    notification = {
        'notification_id': 'n1', 'recipient_id': 'user-1', 'type': 'like',
        'message': "'Mountain View' 게시글에 좋아요가 눌렸습니다.", 'related_post': 'p1',
        'sender': {'user_id': 'user-2', 'name': 'Lee', 'avatar_url': None},
        'read': False, 'date': datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
    }
    notification.update(overrides)
    return notification


def test_list_notifications_defaults(client, app, auth_headers):
    app.services['notifications'].get_notifications.return_value = [_notification()]

    res = client.get('/api/v1/notifications', headers=auth_headers)

    assert res.status_code == 200
    body = res.get_json()
    assert body['notifications'][0]['notification_id'] == 'n1'
    assert 'recipient_id' not in body['notifications'][0]
    app.services['notifications'].get_notifications.assert_called_once_with('user-1', 10, 'all')


def test_list_notifications_rejects_unknown_read_filter(client, app, auth_headers):
    res = client.get('/api/v1/notifications?read=maybe', headers=auth_headers)

    assert res.status_code == 400
    app.services['notifications'].get_notifications.assert_not_called()


def test_unread_count(client, app, auth_headers):
    app.services['notifications'].count_unread.return_value = 3

    res = client.get('/api/v1/notifications/unread-count', headers=auth_headers)

    assert res.get_json() == {'count': 3}


def test_mark_as_read_not_found(client, app, auth_headers):
    app.services['notifications'].mark_as_read.return_value = None

    res = client.patch('/api/v1/notifications/n1/read', headers=auth_headers)

    assert res.status_code == 404


def test_mark_as_read(client, app, auth_headers):
    app.services['notifications'].mark_as_read.return_value = _notification(read=True)

    res = client.patch('/api/v1/notifications/n1/read', headers=auth_headers)

    assert res.status_code == 200
    assert res.get_json()['read'] is True
    app.services['notifications'].mark_as_read.assert_called_once_with('user-1', 'n1')


def test_mark_all_as_read(client, app, auth_headers):
    app.services['notifications'].mark_all_as_read.return_value = 4

    res = client.patch('/api/v1/notifications/read-all', headers=auth_headers)

    assert res.get_json() == {'updated': 4}


def test_delete_notification(client, app, auth_headers):
    app.services['notifications'].delete_notification.return_value = True
    assert client.delete('/api/v1/notifications/n1', headers=auth_headers).status_code == 204

    app.services['notifications'].delete_notification.return_value = False
    assert client.delete('/api/v1/notifications/n1', headers=auth_headers).status_code == 404


def test_notifications_require_token(client):
    assert client.get('/api/v1/notifications').status_code == 401
