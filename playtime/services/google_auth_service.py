# playtime/services/google_auth_service.py

import logging
from typing import Any, Dict

import requests
from firebase_admin import auth as firebase_auth
from google_auth_oauthlib.flow import Flow

from playtime.core.errors import AuthError, map_auth_error


class GoogleAuthService:
    """Google 소셜 로그인(팝업/OAuth 코드 교환)을 담당하는 서비스 클래스입니다."""
    _user_info_url = "https://www.googleapis.com/oauth2/v3/userinfo"
    _scopes = [
        "https://www.googleapis.com/auth/userinfo.profile",
        "https://www.googleapis.com/auth/userinfo.email",
        "openid",
    ]

    @staticmethod
    def verify_firebase_id_token(id_token: str) -> Dict[str, Any]:
        """
        브라우저 SDK의 팝업 로그인으로 받은 Firebase ID 토큰을 검증합니다.

        :return: {'uid', 'email', 'display_name', 'photo_url'}
        """
        try:
            decoded = firebase_auth.verify_id_token(id_token)
        except (firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
                firebase_auth.RevokedIdTokenError) as e:
            logging.warning(f"Firebase ID 토큰 검증 실패: {e}")
            raise AuthError(map_auth_error('auth/invalid-credential'), provider_code='auth/invalid-credential')
        except ValueError as e:
            logging.warning(f"Firebase ID 토큰 형식 오류: {e}")
            raise AuthError(map_auth_error('auth/invalid-credential'), provider_code='auth/invalid-credential')

        return {
            'uid': decoded['uid'],
            'email': decoded.get('email'),
            'display_name': decoded.get('name'),
            'photo_url': decoded.get('picture'),
        }

    @staticmethod
    def exchange_code_for_user_info(auth_code: str, client_secrets_path: str,
                                    redirect_uri: str = 'postmessage') -> Dict[str, Any]:
        """
        인증 코드를 Access Token으로 교환하고, 이를 사용해 사용자 정보를 가져옵니다.
        """
        try:
            # 1. OAuth 2.0 Flow 객체를 생성합니다.
            flow = Flow.from_client_secrets_file(client_secrets_path, scopes=GoogleAuthService._scopes)
            flow.redirect_uri = redirect_uri

            # 2. 인증 코드를 사용해 토큰으로 교환합니다.
            flow.fetch_token(code=auth_code)
            credentials = flow.credentials

            # 3. Access Token을 사용하여 사용자 정보를 요청합니다.
            response = requests.get(
                GoogleAuthService._user_info_url,
                headers={"Authorization": f"Bearer {credentials.token}"},
                timeout=10,
            )
            response.raise_for_status()
            return response.json()

        except Exception as e:
            logging.error(f"Google OAuth failed: {e}", exc_info=True)
            raise AuthError(map_auth_error('auth/invalid-credential'), provider_code='auth/invalid-credential')
