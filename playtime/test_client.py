# playtime/test_client.py
from datetime import datetime, timezone

import pytest
import requests

from playtime.client import PlaytimeClient, NETWORK_ERROR_MESSAGE
from playtime.core.errors import AuthError, PlaytimeError
from playtime.state.search import DebouncedSearch


class FlaskHttpAdapter:
    """requests.Session.request 형태로 Flask 테스트 클라이언트를 호출합니다."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.requests = []

    def request(self, method, url, headers=None, timeout=None, json=None, params=None):
        path = url.replace('http://playtime.test', '')
        self.requests.append((method, path))
        response = self.test_client.open(path, method=method, headers=headers, json=json, query_string=params)
        return _Response(response)


class _Response:
    def __init__(self, response):
        self.status_code = response.status_code
        self._response = response

    def json(self):
        body = self._response.get_json(silent=True)
        if body is None:
            raise ValueError('no json')
        return body


class FakeIdentity:
    def sign_in(self, email, password):
        if password != 'secret1':
            raise AuthError('이메일 또는 비밀번호가 올바르지 않습니다.', provider_code='INVALID_LOGIN_CREDENTIALS')
        return {'uid': 'u1', 'email': email, 'display_name': '철수', 'photo_url': None, 'id_token': 't'}


@pytest.fixture
def api(app, client):
    app.services['auth'].identity_service = FakeIdentity()
    return PlaytimeClient('http://playtime.test/', http=FlaskHttpAdapter(client))


def test_sign_in_updates_session(api):
    seen = []
    api.session.subscribe(seen.append)

    user = api.sign_in('chul@example.com', 'secret1')
    assert user.uid == 'u1'
    assert api.session.is_authenticated
    assert seen[-1].display_name == '철수'


def test_wrong_password_raises_auth_error(api):
    with pytest.raises(AuthError) as exc_info:
        api.sign_in('chul@example.com', 'nope')
    assert exc_info.value.message == '이메일 또는 비밀번호가 올바르지 않습니다.'
    assert not api.session.is_authenticated


def test_sign_out_clears_session_and_revokes(api, client):
    api.sign_in('chul@example.com', 'secret1')
    token = api.session.access_token
    api.sign_out()

    assert api.session.user is None
    assert api.session.access_token is None
    response = client.get('/api/notifications', headers={'Authorization': f"Bearer {token}"})
    assert response.status_code == 401


def test_authenticated_calls_send_bearer_token(api, seed_user):
    seed_user('u1', display_name='철수')
    api.sign_in('chul@example.com', 'secret1')
    post = api.create_post('첫 글', '내용', genre_id='action')
    assert post['author_name'] == '철수'
    assert [p['id'] for p in api.list_posts(genre_id='action')] == [post['id']]


def test_error_response_becomes_playtime_error(api):
    with pytest.raises(PlaytimeError) as exc_info:
        api.create_post('t', 'c', genre_id='action')
    assert exc_info.value.status_code == 401


def test_network_error():
    class Offline:
        def request(self, *args, **kwargs):
            raise requests.ConnectionError('offline')

    with pytest.raises(PlaytimeError) as exc_info:
        PlaytimeClient('http://playtime.test', http=Offline()).popular_movies()
    assert exc_info.value.message == NETWORK_ERROR_MESSAGE


def test_blank_search_sends_no_request(api):
    search = DebouncedSearch(api.search_movies)
    search.set_query('   ')
    assert api.http.requests == []
    assert not search.is_open


def test_chat_messages_pages_backwards(api, fake_db):
    for day in range(1, 5):
        fake_db.seed('chatMessages', f"m{day}", {'userId': 'u1', 'userName': 'a', 'message': f"day{day}",
                                                  'timestamp': datetime(2024, 1, day, tzinfo=timezone.utc)})
    latest = api.chat_messages(limit=2)
    assert [m['message'] for m in latest] == ['day3', 'day4']

    older = api.chat_messages(limit=2, before=latest[0]['timestamp'])
    assert [m['message'] for m in older] == ['day1', 'day2']
