# conftest.py
"""
공용 pytest 픽스처.
Firestore와 Firebase Auth는 인메모리 대체 객체로 주입하여 외부 서비스 없이 테스트합니다.
"""
from types import SimpleNamespace

import pytest
from firebase_admin import auth as firebase_auth
from flask_jwt_extended import create_access_token, create_refresh_token

from playtime import create_app
from firestore_mock import MockFirestore


class FakeAuthClient:
    """firebase_admin.auth 모듈 중 사용하는 함수만 흉내 내는 객체"""

    def __init__(self):
        self.users = {}
        self.updates = []

    def add_user(self, uid, email=None, display_name=None, photo_url=None):
        record = SimpleNamespace(uid=uid, email=email, display_name=display_name, photo_url=photo_url)
        self.users[uid] = record
        return record

    def get_user(self, uid):
        if uid not in self.users:
            raise firebase_auth.UserNotFoundError(f"No user record found for the provided user ID: {uid}")
        return self.users[uid]

    def get_user_by_email(self, email):
        for record in self.users.values():
            if record.email == email:
                return record
        raise firebase_auth.UserNotFoundError(f"No user record found for the provided email: {email}")

    def create_user(self, email=None, display_name=None, photo_url=None, **kwargs):
        return self.add_user(f"uid-{len(self.users) + 1}", email, display_name, photo_url)

    def update_user(self, uid, **kwargs):
        record = self.get_user(uid)
        for key, value in kwargs.items():
            setattr(record, key, value)
        self.updates.append((uid, kwargs))
        return record


@pytest.fixture
def fake_db():
    return MockFirestore()


@pytest.fixture
def fake_auth():
    return FakeAuthClient()


@pytest.fixture
def app(fake_db, fake_auth):
    app = create_app('testing', db=fake_db, auth_client=fake_auth)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_token(app):
    """uid로 Access 토큰을 발급하는 함수를 반환합니다."""
    def _make(uid, refresh=False):
        with app.app_context():
            if refresh:
                return create_refresh_token(identity=uid)
            return create_access_token(identity=uid)
    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(uid):
        return {'Authorization': f"Bearer {make_token(uid)}"}
    return _headers


@pytest.fixture
def seed_user(fake_db, fake_auth):
    """Firestore 프로필과 인증 레코드를 함께 만들어 둡니다."""
    def _seed(uid, display_name=None, email=None, photo_url=None):
        email = email or f"{uid}@example.com"
        fake_auth.add_user(uid, email, display_name, photo_url)
        data = {'uid': uid, 'displayName': display_name or '', 'email': email, 'bio': ''}
        if photo_url:
            data['photoURL'] = photo_url
        fake_db.seed('users', uid, data)
        return uid
    return _seed
