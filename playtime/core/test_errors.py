# playtime/core/test_errors.py
import pytest
from google.api_core import exceptions as gcp_exceptions

from playtime.core.errors import (
    DEFAULT_AUTH_ERROR_MESSAGE,
    NotFoundError,
    PermissionDeniedError,
    PlaytimeError,
    StoreConfigurationError,
    map_auth_error,
    translate_store_error,
)


@pytest.mark.parametrize('code, message', [
    ('EMAIL_EXISTS', '이미 사용 중인 이메일입니다.'),
    ('auth/email-already-in-use', '이미 사용 중인 이메일입니다.'),
    ('WEAK_PASSWORD : Password should be at least 6 characters', '비밀번호는 6자 이상이어야 합니다.'),
    ('auth/popup-closed-by-user', '로그인 창이 닫혔습니다. 다시 시도해주세요.'),
    ('INVALID_LOGIN_CREDENTIALS', '이메일 또는 비밀번호가 올바르지 않습니다.'),
])
def test_map_auth_error(code, message):
    assert map_auth_error(code) == message


def test_unknown_auth_code_uses_default():
    assert map_auth_error('SOMETHING_NEW') == DEFAULT_AUTH_ERROR_MESSAGE
    assert map_auth_error(None) == DEFAULT_AUTH_ERROR_MESSAGE


def test_translate_permission_denied():
    error = translate_store_error(gcp_exceptions.PermissionDenied('denied'), '댓글 작성')
    assert isinstance(error, PermissionDeniedError)
    assert error.message == '댓글 작성 권한이 없습니다. 다시 로그인해주세요.'
    assert error.status_code == 403


def test_translate_failed_precondition():
    error = translate_store_error(gcp_exceptions.FailedPrecondition('index'), '게시글 조회')
    assert isinstance(error, StoreConfigurationError)


def test_translate_keeps_playtime_errors():
    original = NotFoundError('게시글을 찾을 수 없습니다.')
    assert translate_store_error(original, '게시글 조회') is original


def test_translate_unknown_error():
    error = translate_store_error(RuntimeError('boom'), '찜하기')
    assert type(error) is PlaytimeError
    assert error.error_code == 'STORE_ERROR'
    assert error.message == '찜하기에 실패했습니다. 다시 시도해주세요.'


def test_error_response_body(app):
    with app.app_context():
        response, status = NotFoundError('게시글을 찾을 수 없습니다.').to_response()
    assert status == 404
    assert response.get_json() == {'error_code': 'NOT_FOUND', 'message': '게시글을 찾을 수 없습니다.'}
