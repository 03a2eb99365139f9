# playtime/core/errors.py
"""
오류 분류 및 사용자 메시지 매핑.

1. 네트워크/외부 API 실패  -> MovieApiError (재시도 없음, 화면에 문자열로 표시)
2. 인증 실패              -> AuthError (제공자 오류 코드 -> 한국어 메시지)
3. 저장소 권한 실패        -> PermissionDeniedError ("다시 로그인해주세요")
4. 리소스 없음            -> NotFoundError (빈 상태/오류 상태로 응답)
"""
import logging
from typing import Optional

from flask import Flask, jsonify
from google.api_core import exceptions as gcp_exceptions
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException


class PlaytimeError(Exception):
    """애플리케이션 공통 예외. 라우트에서 {'error_code', 'message'} 응답으로 변환됩니다."""
    error_code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code

    def to_response(self):
        return jsonify({"error_code": self.error_code, "message": self.message}), self.status_code


class MovieApiError(PlaytimeError):
    error_code = "MOVIE_API_ERROR"
    status_code = 502


class AuthError(PlaytimeError):
    error_code = "AUTH_FAILED"
    status_code = 401

    def __init__(self, message: str, provider_code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code)
        self.provider_code = provider_code


class PermissionDeniedError(PlaytimeError):
    error_code = "PERMISSION_DENIED"
    status_code = 403


class NotFoundError(PlaytimeError):
    error_code = "NOT_FOUND"
    status_code = 404


class StoreConfigurationError(PlaytimeError):
    error_code = "FAILED_PRECONDITION"
    status_code = 500


# Identity Toolkit REST 오류 코드와 웹 SDK(auth/...) 오류 코드를 모두 매핑합니다.
AUTH_ERROR_MESSAGES = {
    'EMAIL_EXISTS': '이미 사용 중인 이메일입니다.',
    'auth/email-already-in-use': '이미 사용 중인 이메일입니다.',
    'INVALID_EMAIL': '유효하지 않은 이메일 형식입니다.',
    'auth/invalid-email': '유효하지 않은 이메일 형식입니다.',
    'INVALID_PASSWORD': '비밀번호가 올바르지 않습니다.',
    'auth/wrong-password': '비밀번호가 올바르지 않습니다.',
    'INVALID_LOGIN_CREDENTIALS': '이메일 또는 비밀번호가 올바르지 않습니다.',
    'auth/invalid-credential': '이메일 또는 비밀번호가 올바르지 않습니다.',
    'EMAIL_NOT_FOUND': '등록되지 않은 이메일입니다.',
    'auth/user-not-found': '등록되지 않은 이메일입니다.',
    'WEAK_PASSWORD': '비밀번호는 6자 이상이어야 합니다.',
    'auth/weak-password': '비밀번호는 6자 이상이어야 합니다.',
    'TOO_MANY_ATTEMPTS_TRY_LATER': '너무 많은 시도가 있었습니다. 잠시 후 다시 시도해주세요.',
    'auth/too-many-requests': '너무 많은 시도가 있었습니다. 잠시 후 다시 시도해주세요.',
    'auth/popup-closed-by-user': '로그인 창이 닫혔습니다. 다시 시도해주세요.',
    'auth/popup-blocked': '팝업이 차단되었습니다. 팝업 차단을 해제해주세요.',
    'auth/network-request-failed': '네트워크 연결을 확인해주세요.',
}
DEFAULT_AUTH_ERROR_MESSAGE = '로그인 중 오류가 발생했습니다. 다시 시도해주세요.'


def map_auth_error(code: Optional[str]) -> str:
    """
    인증 제공자 오류 코드를 사용자용 메시지로 변환합니다.
    REST 오류는 'WEAK_PASSWORD : Password should be ...' 처럼 설명이 붙어오므로 앞부분만 사용합니다.
    """
    if not code:
        return DEFAULT_AUTH_ERROR_MESSAGE
    normalized = code.split(':')[0].strip() if not code.startswith('auth/') else code.strip()
    return AUTH_ERROR_MESSAGES.get(normalized, DEFAULT_AUTH_ERROR_MESSAGE)


def translate_store_error(exc: Exception, action: str) -> PlaytimeError:
    """
    Firestore 예외를 화면에 표시할 수 있는 PlaytimeError로 변환합니다.

    :param exc: 원본 예외
    :param action: 사용자에게 보여줄 작업명 (예: '댓글 작성')
    """
    if isinstance(exc, PlaytimeError):
        return exc
    if isinstance(exc, gcp_exceptions.PermissionDenied):
        return PermissionDeniedError(f"{action} 권한이 없습니다. 다시 로그인해주세요.")
    if isinstance(exc, gcp_exceptions.FailedPrecondition):
        return StoreConfigurationError("데이터베이스 설정이 필요합니다. 관리자에게 문의해주세요.")
    if isinstance(exc, gcp_exceptions.NotFound):
        return NotFoundError(f"{action} 대상을 찾을 수 없습니다.")
    return PlaytimeError(f"{action}에 실패했습니다. 다시 시도해주세요.", error_code="STORE_ERROR")


def register_error_handlers(app: Flask) -> None:
    """라우트에서 처리되지 않은 예외를 위한 전역 핸들러를 등록합니다."""

    @app.errorhandler(PlaytimeError)
    def handle_playtime_error(err: PlaytimeError):
        return err.to_response()

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # HTTPException(404, 405 등)은 Flask 기본 응답을 그대로 사용
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500
