# playtime/api/chat/test_chat_routes.py
from datetime import datetime, timezone


def test_send_message_and_reply(client, auth_headers, seed_user, fake_db):
    seed_user('u1', display_name='철수')
    seed_user('u2', display_name='영희')

    first = client.post('/api/chat/messages', headers=auth_headers('u1'), json={'message': '오늘 뭐 볼까요?'})
    assert first.status_code == 201
    assert first.get_json()['user_name'] == '철수'

    reply = client.post('/api/chat/messages', headers=auth_headers('u2'),
                        json={'message': '인터스텔라요', 'reply_to_message_id': first.get_json()['id']})
    body = reply.get_json()
    assert reply.status_code == 201
    assert body['reply_to'] == {'message_id': first.get_json()['id'], 'user_name': '철수',
                                'excerpt': '오늘 뭐 볼까요?'}
    assert len(fake_db.docs('chatMessages')) == 2


def test_reply_to_missing_message(client, auth_headers, seed_user):
    seed_user('u1')
    response = client.post('/api/chat/messages', headers=auth_headers('u1'),
                           json={'message': 'hi', 'reply_to_message_id': 'nope'})
    assert response.status_code == 404


def test_blank_message_rejected(client, auth_headers, seed_user):
    seed_user('u1')
    response = client.post('/api/chat/messages', headers=auth_headers('u1'), json={'message': '   '})
    assert response.status_code == 400


def test_list_messages_oldest_first_with_limit(client, fake_db):
    for day in (3, 1, 2):
        fake_db.seed('chatMessages', f"m{day}", {'userId': 'u1', 'userName': 'a', 'message': f"day{day}",
                                                  'timestamp': datetime(2024, 1, day, tzinfo=timezone.utc)})
    messages = client.get('/api/chat/messages?limit=2').get_json()['messages']
    assert [m['message'] for m in messages] == ['day2', 'day3']


def test_list_messages_before_cursor(client, fake_db):
    for day in range(1, 6):
        fake_db.seed('chatMessages', f"m{day}", {'userId': 'u1', 'userName': 'a', 'message': f"day{day}",
                                                  'timestamp': datetime(2024, 1, day, tzinfo=timezone.utc)})
    response = client.get('/api/chat/messages',
                          query_string={'limit': 2, 'before': '2024-01-04T00:00:00Z'})
    assert [m['message'] for m in response.get_json()['messages']] == ['day2', 'day3']


def test_list_messages_invalid_before(client):
    response = client.get('/api/chat/messages?before=yesterday')
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'INVALID_PAYLOAD'
