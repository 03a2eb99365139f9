# playtime/services/identity_service.py

import logging
from typing import Any, Dict, Optional

import requests
from flask import Flask

from playtime.core.errors import AuthError, map_auth_error

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


class IdentityService:
    """
    Firebase Auth 이메일/비밀번호 로그인을 담당하는 서비스 클래스.
    Admin SDK는 비밀번호 검증을 제공하지 않으므로 Identity Toolkit REST API를 사용합니다.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.api_key = None
        self.timeout = 10.0

    def init_app(self, app: Flask):
        self.api_key = app.config.get('FIREBASE_WEB_API_KEY')
        if not self.api_key:
            logging.warning("IdentityService: FIREBASE_WEB_API_KEY가 설정되지 않았습니다. 이메일 로그인은 실패합니다.")

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise AuthError("인증 설정이 필요합니다. 관리자에게 문의해주세요.", status_code=503)
        try:
            response = self.session.post(
                f"{IDENTITY_TOOLKIT_URL}/{endpoint}",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logging.error(f"Identity Toolkit 요청 실패 ({endpoint}): {e}", exc_info=True)
            raise AuthError(map_auth_error('auth/network-request-failed'), provider_code='auth/network-request-failed')

        if response.status_code != 200:
            try:
                code = response.json().get('error', {}).get('message')
            except ValueError:
                code = None
            logging.warning(f"Identity Toolkit 오류 ({endpoint}): {code}")
            status_code = 409 if code == 'EMAIL_EXISTS' else 401
            raise AuthError(map_auth_error(code), provider_code=code, status_code=status_code)
        return response.json()

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Dict[str, Any]:
        """
        이메일/비밀번호 회원가입 후 표시 이름을 설정합니다.

        :return: {'uid', 'email', 'display_name', 'id_token'}
        """
        result = self._post("accounts:signUp", {"email": email, "password": password, "returnSecureToken": True})
        if display_name:
            self._post("accounts:update", {
                "idToken": result['idToken'],
                "displayName": display_name,
                "returnSecureToken": False,
            })
        logging.info(f"이메일 회원가입 완료 (uid: {result.get('localId')})")
        return {
            'uid': result['localId'],
            'email': result.get('email', email),
            'display_name': display_name,
            'id_token': result.get('idToken'),
        }

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """이메일/비밀번호 로그인."""
        result = self._post("accounts:signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        return {
            'uid': result['localId'],
            'email': result.get('email', email),
            'display_name': result.get('displayName') or None,
            'photo_url': result.get('profilePicture'),
            'id_token': result.get('idToken'),
        }
