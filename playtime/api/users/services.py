# playtime/api/users/services.py

import logging
from typing import Optional, Dict, Any, List, Tuple

from firebase_admin import firestore, auth as firebase_auth

from playtime.core.errors import NotFoundError, translate_store_error
from playtime.models.user import UserProfile, fallback_display_name
from playtime.utils.datetime_utils import DateTimeUtils
from playtime.utils.documents import to_camel

USER_SEARCH_LIMIT = 20


class UserService:
    """
    사용자 프로필 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 프로필 생성(최초 로그인), 조회, 수정, 검색
    - 참여한 게시글(작성 + 댓글) 조회
    """
    def __init__(self, db=None, auth_client=None):
        self.db = db or firestore.client()
        self.auth = auth_client or firebase_auth
        self.users_ref = self.db.collection('users')
        self.posts_ref = self.db.collection('posts')
        self.comments_ref = self.db.collection('comments')

    def ensure_profile(self, uid: str, display_name: Optional[str], email: Optional[str],
                       photo_url: Optional[str] = None) -> Tuple[UserProfile, bool]:
        """
        로그인 성공 시 호출됩니다. 'users/{uid}' 문서가 없을 때만 새로 만들고,
        이미 있는 프로필은 덮어쓰지 않습니다.

        :return: (프로필, 새로 생성되었는지 여부)
        """
        user_ref = self.users_ref.document(uid)
        snapshot = user_ref.get()
        if snapshot.exists:
            return UserProfile.from_document({'uid': uid, 'displayName': '', **snapshot.to_dict()}), False

        profile = UserProfile(
            uid=uid,
            display_name=fallback_display_name(display_name, email),
            email=email or '',
            photo_url=photo_url,
        )
        user_ref.set(profile.to_document())
        logging.info(f"신규 사용자 프로필 생성 (uid: {uid})")
        return profile, True

    def get_profile(self, uid: str, requester_id: Optional[str] = None) -> Dict[str, Any]:
        """
        프로필을 조회합니다.
        Firestore 문서가 없으면 본인 조회일 때만 인증 정보로 대신 채웁니다.
        """
        snapshot = self.users_ref.document(uid).get()
        if snapshot.exists:
            data = snapshot.to_dict()
            profile = UserProfile.from_document({'uid': uid, 'displayName': '', **data})
            if not profile.display_name:
                profile.display_name = '알 수 없음'
            return profile.to_dict()

        if requester_id != uid:
            raise NotFoundError("사용자 프로필을 찾을 수 없습니다.")

        try:
            record = self.auth.get_user(uid)
        except firebase_auth.UserNotFoundError:
            raise NotFoundError("사용자 프로필을 찾을 수 없습니다.")
        return UserProfile(
            uid=uid,
            display_name=record.display_name or '알 수 없음',
            email=record.email or '',
            photo_url=record.photo_url,
            created_at=None,
        ).to_dict()

    def update_profile(self, uid: str, display_name: Optional[str] = None,
                       photo_url: Optional[str] = None, bio: Optional[str] = None) -> Dict[str, Any]:
        """
        프로필 편집. 인증 제공자의 표시 이름/사진을 먼저 바꾸고 Firestore 문서에 병합 저장합니다.
        """
        auth_updates = {}
        if display_name is not None:
            auth_updates['display_name'] = display_name
        if photo_url is not None:
            auth_updates['photo_url'] = photo_url or None
        if auth_updates:
            try:
                self.auth.update_user(uid, **auth_updates)
            except firebase_auth.UserNotFoundError:
                logging.warning(f"인증 정보가 없는 사용자의 프로필 수정 (uid: {uid}), Firestore만 갱신합니다.")

        updates = {'display_name': display_name, 'photo_url': photo_url, 'bio': bio}
        doc = {to_camel(k): v for k, v in updates.items() if v is not None}
        doc['uid'] = uid
        doc['updatedAt'] = DateTimeUtils.now()
        try:
            self.users_ref.document(uid).set(doc, merge=True)
        except Exception as e:
            logging.error(f"프로필 수정 실패 (uid: {uid}): {e}", exc_info=True)
            raise translate_store_error(e, '프로필 수정')

        return self.get_profile(uid, requester_id=uid)

    def get_author_info(self, uid: str) -> Dict[str, Optional[str]]:
        """게시글/댓글/채팅에 표시할 작성자 이름과 사진."""
        snapshot = self.users_ref.document(uid).get()
        data = snapshot.to_dict() if snapshot.exists else {}
        display_name = data.get('displayName')
        email = data.get('email')
        photo_url = data.get('photoURL')
        if not snapshot.exists:
            try:
                record = self.auth.get_user(uid)
                display_name, email, photo_url = record.display_name, record.email, record.photo_url
            except firebase_auth.UserNotFoundError:
                logging.warning(f"작성자 정보를 찾을 수 없습니다 (uid: {uid})")
        return {
            'name': fallback_display_name(display_name, email),
            'display_name': display_name,
            'photo_url': photo_url,
        }

    def search_users(self, term: str, limit: int = USER_SEARCH_LIMIT) -> List[Dict[str, Any]]:
        """
        표시 이름 또는 이메일에 검색어가 포함된 사용자를 찾습니다. (대소문자 무시)
        Firestore는 부분 문자열 검색을 지원하지 않으므로 전체 문서를 읽어 필터링합니다.
        """
        search_term = (term or '').strip().lower()
        if not search_term:
            return []
        results = []
        try:
            for doc in self.users_ref.stream():
                data = doc.to_dict()
                display_name = (data.get('displayName') or '').lower()
                email = (data.get('email') or '').lower()
                if search_term in display_name or search_term in email:
                    results.append({
                        'uid': doc.id,
                        'display_name': data.get('displayName') or '',
                        'email': data.get('email') or '',
                        'photo_url': data.get('photoURL'),
                    })
        except Exception as e:
            logging.error(f"사용자 검색 실패 (term: {term}): {e}", exc_info=True)
            raise translate_store_error(e, '사용자 검색')
        return results[:limit]

    def get_participated_posts(self, uid: str) -> List[Dict[str, Any]]:
        """사용자가 작성했거나 댓글을 단 게시글 목록 (중복 없이 최신순)."""
        participated = []
        added_post_ids = set()

        for doc in self.posts_ref.where('authorId', '==', uid).stream():
            data = DateTimeUtils.from_firestore(doc.to_dict())
            participated.append({
                'post_id': doc.id,
                'post_title': data.get('title'),
                'type': 'author',
                'created_at': data.get('createdAt'),
            })
            added_post_ids.add(doc.id)

        commented_post_ids = []
        for doc in self.comments_ref.where('authorId', '==', uid).stream():
            post_id = doc.to_dict().get('postId')
            if post_id and post_id not in added_post_ids and post_id not in commented_post_ids:
                commented_post_ids.append(post_id)

        for post_id in commented_post_ids:
            post_doc = self.posts_ref.document(post_id).get()
            if post_doc.exists:
                data = DateTimeUtils.from_firestore(post_doc.to_dict())
                participated.append({
                    'post_id': post_doc.id,
                    'post_title': data.get('title'),
                    'type': 'commenter',
                    'created_at': data.get('createdAt'),
                })

        participated.sort(key=lambda p: DateTimeUtils.to_timestamp_ms(p['created_at']), reverse=True)
        return participated
