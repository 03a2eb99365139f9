# playtime/api/auth/services.py
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from firebase_admin import firestore, auth as firebase_auth
from flask import Flask
from flask_jwt_extended import create_access_token, create_refresh_token

from playtime.core.errors import AuthError, map_auth_error
from playtime.services.google_auth_service import GoogleAuthService
from playtime.utils.datetime_utils import DateTimeUtils


class AuthService:
    """
    로그인(이메일/비밀번호, Google 팝업, Google 코드 교환)과 토큰 관리를 담당합니다.
    모든 로그인 성공 시 프로필을 보장(ensure_profile)하고 앱 JWT를 발급합니다.
    JWT의 identity는 Firebase uid 입니다.
    """
    def __init__(self, db=None, user_service=None, identity_service=None, auth_client=None):
        self.db = db
        self.user_service = user_service
        self.identity_service = identity_service
        self.auth = auth_client or firebase_auth
        self.revoked_tokens_ref = None
        self.app: Optional[Flask] = None

    def init_app(self, app: Flask):
        """앱 초기화 과정에서 호출되어 DB 연결 및 앱 컨텍스트를 설정합니다."""
        self.db = self.db or firestore.client()
        self.revoked_tokens_ref = self.db.collection('revoked_tokens')
        self.app = app

    def _complete_sign_in(self, uid: str, display_name: Optional[str], email: Optional[str],
                          photo_url: Optional[str] = None) -> Dict[str, Any]:
        profile, is_new_user = self.user_service.ensure_profile(uid, display_name, email, photo_url)
        return {
            "access_token": create_access_token(identity=uid),
            "refresh_token": create_refresh_token(identity=uid),
            "is_new_user": is_new_user,
            "user": {
                "uid": uid,
                "email": profile.email or email or '',
                "display_name": profile.display_name,
                "photo_url": profile.photo_url,
            },
        }

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Dict[str, Any]:
        account = self.identity_service.sign_up(email, password, display_name)
        return self._complete_sign_in(account['uid'], display_name, account['email'])

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        account = self.identity_service.sign_in(email, password)
        return self._complete_sign_in(account['uid'], account['display_name'], account['email'], account.get('photo_url'))

    def sign_in_with_id_token(self, id_token: str) -> Dict[str, Any]:
        """브라우저 팝업 로그인 결과(Firebase ID 토큰)로 로그인합니다."""
        account = GoogleAuthService.verify_firebase_id_token(id_token)
        return self._complete_sign_in(account['uid'], account['display_name'], account['email'], account['photo_url'])

    def sign_in_with_google_code(self, auth_code: str) -> Dict[str, Any]:
        """Google OAuth 인증 코드를 교환하고, 같은 이메일의 Firebase 사용자와 연결합니다."""
        client_secrets_path = self.app.config.get('GOOGLE_CLIENT_SECRETS_PATH')
        if not client_secrets_path:
            raise AuthError("GOOGLE_CLIENT_SECRETS_PATH is not configured.", status_code=503)

        google_user_info = GoogleAuthService.exchange_code_for_user_info(
            auth_code=auth_code,
            client_secrets_path=client_secrets_path,
            redirect_uri=self.app.config.get('GOOGLE_REDIRECT_URI', 'postmessage'),
        )
        email = google_user_info.get('email')
        if not email:
            raise AuthError(map_auth_error('auth/invalid-credential'), provider_code='auth/invalid-credential')

        try:
            record = self.auth.get_user_by_email(email)
        except firebase_auth.UserNotFoundError:
            record = self.auth.create_user(
                email=email,
                display_name=google_user_info.get('name'),
                photo_url=google_user_info.get('picture'),
            )
            logging.info(f"Google 계정으로 Firebase 사용자 생성 (uid: {record.uid})")
        return self._complete_sign_in(record.uid, record.display_name or google_user_info.get('name'),
                                      email, record.photo_url or google_user_info.get('picture'))

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """전달받은 토큰의 jti를 만료 시간과 함께 Firestore에 저장합니다."""
        try:
            token_data = {
                'revokedAt': DateTimeUtils.now(),
                'expiresAt': expires,
            }
            self.revoked_tokens_ref.document(jti).set(DateTimeUtils.for_firestore(token_data))
        except Exception as e:
            logging.error(f"Blocklist 토큰 추가 실패 (jti: {jti}): {e}", exc_info=True)
            raise

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        jti = jwt_payload['jti']
        doc = self.revoked_tokens_ref.document(jti).get()
        return doc.exists

    def logout_user(self, access_jti: str, access_exp: int, refresh_jti: str, refresh_exp: int):
        """Access 토큰과 Refresh 토큰을 모두 Blocklist에 추가합니다."""
        self.add_token_to_blocklist(access_jti, datetime.fromtimestamp(access_exp, tz=timezone.utc))
        self.add_token_to_blocklist(refresh_jti, datetime.fromtimestamp(refresh_exp, tz=timezone.utc))
        logging.info(f"사용자 로그아웃 처리 완료. JTI: {access_jti[:8]}..., {refresh_jti[:8]}...")
