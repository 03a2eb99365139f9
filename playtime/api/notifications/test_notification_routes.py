# playtime/api/notifications/test_notification_routes.py
from datetime import datetime, timezone

import pytest


@pytest.fixture
def notifications(fake_db):
    base = {'type': 'comment', 'message': 'm', 'postId': 'p1', 'postTitle': 't',
            'fromUserId': 'u2', 'fromUserName': '영희'}
    fake_db.seed('notifications', 'n1', {**base, 'userId': 'u1', 'read': False,
                                         'createdAt': datetime(2024, 1, 1, tzinfo=timezone.utc)})
    fake_db.seed('notifications', 'n2', {**base, 'userId': 'u1', 'read': True,
                                         'createdAt': datetime(2024, 1, 2, tzinfo=timezone.utc)})
    fake_db.seed('notifications', 'n3', {**base, 'userId': 'u3', 'read': False,
                                         'createdAt': datetime(2024, 1, 3, tzinfo=timezone.utc)})


def test_list_own_notifications(client, auth_headers, notifications):
    body = client.get('/api/notifications', headers=auth_headers('u1')).get_json()
    assert [n['id'] for n in body['notifications']] == ['n2', 'n1']
    assert body['unread_count'] == 1


def test_unread_count(client, auth_headers, notifications):
    response = client.get('/api/notifications/unread-count', headers=auth_headers('u1'))
    assert response.get_json() == {'unread_count': 1}


def test_mark_read(client, auth_headers, notifications, fake_db):
    response = client.post('/api/notifications/n1/read', headers=auth_headers('u1'))
    assert response.status_code == 200
    assert response.get_json()['read'] is True
    assert fake_db.docs('notifications')['n1']['read'] is True


def test_cannot_mark_others_notification(client, auth_headers, notifications, fake_db):
    response = client.post('/api/notifications/n3/read', headers=auth_headers('u1'))
    assert response.status_code == 403
    assert fake_db.docs('notifications')['n3']['read'] is False


def test_mark_missing_notification(client, auth_headers, notifications):
    assert client.post('/api/notifications/nope/read', headers=auth_headers('u1')).status_code == 404


def test_stream_accepts_token_in_query_string(client, make_token, notifications):
    response = client.get(f"/api/notifications/stream?token={make_token('u1')}", buffered=False)
    assert response.status_code == 200
    chunk = next(iter(response.response))
    chunk = chunk.decode('utf-8') if isinstance(chunk, bytes) else chunk
    assert '"n2"' in chunk and '"n3"' not in chunk
    response.close()


def test_stream_requires_login(client):
    assert client.get('/api/notifications/stream').status_code == 401
