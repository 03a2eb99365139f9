# playtime/client.py
import logging
from typing import Any, Dict, List, Optional

import requests

from playtime.core.errors import AuthError, MovieApiError, PlaytimeError
from playtime.state.session import AuthSession, SessionUser

NETWORK_ERROR_MESSAGE = '네트워크 연결을 확인해주세요.'


class PlaytimeClient:
    """
    PlayTime REST API용 HTTP 클라이언트.
    로그인/로그아웃 결과를 AuthSession에 기록하고, 오류 응답은 PlaytimeError로 변환합니다.
    """

    def __init__(self, base_url: str, session: Optional[AuthSession] = None,
                 http: Optional[requests.Session] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.session = session or AuthSession()
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop('headers', {})
        if self.session.access_token:
            headers['Authorization'] = f"Bearer {self.session.access_token}"
        try:
            response = self.http.request(method, f"{self.base_url}{path}", headers=headers,
                                         timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logging.error(f"API 요청 실패 ({method} {path}): {e}", exc_info=True)
            raise PlaytimeError(NETWORK_ERROR_MESSAGE, error_code="NETWORK_ERROR")

        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400:
            message = body.get('message') or '요청을 처리하지 못했습니다.'
            error_code = body.get('error_code')
            if error_code == 'MOVIE_API_ERROR':
                raise MovieApiError(message, status_code=response.status_code)
            if response.status_code == 401:
                raise AuthError(message, status_code=401)
            raise PlaytimeError(message, error_code=error_code, status_code=response.status_code)
        return body

    # --- 인증 ---
    def _store_login(self, body: Dict[str, Any]) -> SessionUser:
        user_data = body['user']
        user = SessionUser(
            uid=user_data['uid'],
            display_name=user_data.get('display_name'),
            email=user_data.get('email'),
            photo_url=user_data.get('photo_url'),
        )
        self.session.set_user(user, body['access_token'], body['refresh_token'])
        return user

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> SessionUser:
        body = self._request('POST', '/api/auth/signup',
                             json={'email': email, 'password': password, 'display_name': display_name})
        return self._store_login(body)

    def sign_in(self, email: str, password: str) -> SessionUser:
        body = self._request('POST', '/api/auth/login', json={'email': email, 'password': password})
        return self._store_login(body)

    def sign_in_with_id_token(self, id_token: str) -> SessionUser:
        body = self._request('POST', '/api/auth/social', json={'provider': 'google', 'id_token': id_token})
        return self._store_login(body)

    def refresh(self) -> str:
        body = self._request('POST', '/api/auth/token/refresh',
                             headers={'Authorization': f"Bearer {self.session.refresh_token}"})
        self.session.update_access_token(body['access_token'])
        return body['access_token']

    def sign_out(self) -> None:
        """서버 토큰을 무효화하고 세션을 비웁니다. 서버 오류가 나도 로컬 세션은 비웁니다."""
        try:
            if self.session.access_token and self.session.refresh_token:
                self._request('POST', '/api/auth/logout', json={
                    'access_token': self.session.access_token,
                    'refresh_token': self.session.refresh_token,
                })
        except PlaytimeError as e:
            logging.warning(f"로그아웃 요청 실패 (로컬 세션만 정리): {e.message}")
        finally:
            self.session.set_user(None)

    # --- 영화 ---
    def popular_movies(self, page: int = 1) -> Dict[str, Any]:
        return self._request('GET', '/api/movies/popular', params={'page': page})

    def movie_detail(self, movie_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/api/movies/{movie_id}')

    def search_movies(self, query: str) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/movies/search', params={'q': query})['movies']

    def recommend_movies(self, genre_id: int, mood: str) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/movies/recommend', params={'genre_id': genre_id, 'mood': mood})['movies']

    def like_ranking(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/movies/ranking')['movies']

    # --- 찜 ---
    def toggle_favorite(self, movie: Dict[str, Any]) -> bool:
        return self._request('POST', '/api/favorites/toggle', json=movie)['liked']

    def list_favorites(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/favorites')['favorites']

    def migrate_favorites(self, items: List[Dict[str, Any]]) -> int:
        return self._request('POST', '/api/favorites/migrate', json={'items': items})['migrated']

    # --- 게시판 ---
    def list_posts(self, movie_id: Optional[str] = None, genre_id: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'movie_id': movie_id} if movie_id else {'genre_id': genre_id}
        return self._request('GET', '/api/posts', params=params)['posts']

    def create_post(self, title: str, content: str, movie_id: Optional[str] = None,
                    genre_id: Optional[str] = None) -> Dict[str, Any]:
        payload = {'title': title, 'content': content, 'movie_id': movie_id, 'genre_id': genre_id}
        return self._request('POST', '/api/posts', json={k: v for k, v in payload.items() if v is not None})

    def list_comments(self, post_id: str) -> List[Dict[str, Any]]:
        return self._request('GET', f'/api/posts/{post_id}/comments')['comments']

    def create_comment(self, post_id: str, content: str, reply_to_comment_id: Optional[str] = None) -> Dict[str, Any]:
        payload = {'content': content}
        if reply_to_comment_id:
            payload['reply_to_comment_id'] = reply_to_comment_id
        return self._request('POST', f'/api/posts/{post_id}/comments', json=payload)

    # --- 채팅 / 알림 ---
    def chat_messages(self, limit: int = 100, before: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'limit': limit}
        if before:
            params['before'] = before
        return self._request('GET', '/api/chat/messages', params=params)['messages']

    def send_chat_message(self, message: str, reply_to_message_id: Optional[str] = None) -> Dict[str, Any]:
        payload = {'message': message}
        if reply_to_message_id:
            payload['reply_to_message_id'] = reply_to_message_id
        return self._request('POST', '/api/chat/messages', json=payload)

    def notifications(self) -> Dict[str, Any]:
        return self._request('GET', '/api/notifications')

    def mark_notification_read(self, notification_id: str) -> Dict[str, Any]:
        return self._request('POST', f'/api/notifications/{notification_id}/read')

    # --- 사용자 ---
    def get_profile(self, uid: str) -> Dict[str, Any]:
        return self._request('GET', f'/api/users/{uid}')

    def update_profile(self, **fields) -> Dict[str, Any]:
        return self._request('PATCH', '/api/users/me', json=fields)

    def search_users(self, term: str) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/users/search', params={'q': term})['users']
