# playtime/services/test_identity_service.py
import pytest
import requests
from flask import Flask

from playtime.core.errors import AuthError
from playtime.services.identity_service import IdentityService


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append((url, json))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _service(responses, api_key='web-key'):
    app = Flask(__name__)
    app.config['FIREBASE_WEB_API_KEY'] = api_key
    service = IdentityService(session=FakeSession(responses))
    service.init_app(app)
    return service


def test_sign_up_sets_display_name():
    service = _service([
        FakeResponse({'localId': 'u1', 'email': 'a@b.com', 'idToken': 'tok'}),
        FakeResponse({}),
    ])
    account = service.sign_up('a@b.com', 'secret1', '철수')

    assert account['uid'] == 'u1'
    assert account['display_name'] == '철수'
    endpoint, payload = service.session.calls[1]
    assert endpoint.endswith('accounts:update')
    assert payload['displayName'] == '철수'


def test_duplicate_email_maps_to_conflict():
    service = _service([FakeResponse({'error': {'message': 'EMAIL_EXISTS'}}, status_code=400)])
    with pytest.raises(AuthError) as exc_info:
        service.sign_up('a@b.com', 'secret1')
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == '이미 사용 중인 이메일입니다.'


def test_wrong_password():
    service = _service([FakeResponse({'error': {'message': 'INVALID_PASSWORD'}}, status_code=400)])
    with pytest.raises(AuthError) as exc_info:
        service.sign_in('a@b.com', 'nope')
    assert exc_info.value.status_code == 401
    assert exc_info.value.provider_code == 'INVALID_PASSWORD'


def test_network_failure():
    service = _service([requests.ConnectionError('offline')])
    with pytest.raises(AuthError) as exc_info:
        service.sign_in('a@b.com', 'pw')
    assert exc_info.value.message == '네트워크 연결을 확인해주세요.'


def test_missing_api_key():
    service = _service([], api_key=None)
    with pytest.raises(AuthError) as exc_info:
        service.sign_in('a@b.com', 'pw')
    assert exc_info.value.status_code == 503
