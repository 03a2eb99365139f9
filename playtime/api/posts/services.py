# playtime/api/posts/services.py

import logging
from typing import Optional, Dict, Any, List, Callable

from firebase_admin import firestore

from playtime.core.errors import NotFoundError, translate_store_error
from playtime.models.post import Post
from playtime.services.live_query import LiveQuery, sort_by_timestamp


def _board_filter(movie_id: Optional[str], genre_id: Optional[str]):
    """게시판 범위(영화 xor 장르)를 (필드명, 값)으로 반환합니다."""
    if bool(movie_id) == bool(genre_id):
        raise ValueError("영화 또는 장르 중 정확히 하나의 게시판을 지정해야 합니다.")
    return ('movieId', str(movie_id)) if movie_id else ('genreId', str(genre_id))


class PostService:
    """
    게시판(영화별/장르별) 게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    """
    def __init__(self, db=None, user_service=None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.user_service = user_service

    def create_post(self, author_id: str, title: str, content: str,
                    movie_id: Optional[str] = None, genre_id: Optional[str] = None) -> Dict[str, Any]:
        """새 게시글을 작성합니다. 제목/내용은 공백을 제거한 뒤 비어 있으면 안 됩니다."""
        field, value = _board_filter(movie_id, genre_id)
        title, content = (title or '').strip(), (content or '').strip()
        if not title or not content:
            raise ValueError("제목과 내용을 모두 입력해주세요.")

        author = self.user_service.get_author_info(author_id)
        post = Post(
            author_id=author_id,
            author_name=author['name'],
            title=title,
            content=content,
            movie_id=value if field == 'movieId' else None,
            genre_id=value if field == 'genreId' else None,
        )
        try:
            _, doc_ref = self.posts_ref.add(post.to_document())
        except Exception as e:
            logging.error(f"게시글 작성 실패 (author_id: {author_id}): {e}", exc_info=True)
            raise translate_store_error(e, '게시글 작성')
        post.id = doc_ref.id
        logging.info(f"게시글 작성 완료 (post_id: {post.id}, {field}: {value})")
        return post.to_dict()

    def list_posts(self, movie_id: Optional[str] = None, genre_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """게시판의 게시글 목록 (최신순, 클라이언트 정렬)."""
        field, value = _board_filter(movie_id, genre_id)
        try:
            docs = self.posts_ref.where(field, '==', value).stream()
            items = [Post.from_document(doc.to_dict(), doc.id).to_dict() for doc in docs]
        except Exception as e:
            logging.error(f"게시글 목록 조회 실패 ({field}: {value}): {e}", exc_info=True)
            raise translate_store_error(e, '게시글 조회')
        return sort_by_timestamp(items, 'created_at', descending=True)

    def get_post(self, post_id: str) -> Dict[str, Any]:
        try:
            doc = self.posts_ref.document(post_id).get()
        except Exception as e:
            logging.error(f"게시글 조회 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise translate_store_error(e, '게시글 조회')
        if not doc.exists:
            raise NotFoundError("게시글을 찾을 수 없습니다.")
        return Post.from_document(doc.to_dict(), doc.id).to_dict()

    def live_posts(self, on_update: Callable, on_error: Optional[Callable] = None,
                   movie_id: Optional[str] = None, genre_id: Optional[str] = None) -> LiveQuery:
        field, value = _board_filter(movie_id, genre_id)
        return LiveQuery(
            self.posts_ref.where(field, '==', value),
            order_field='created_at',
            descending=True,
            transform=lambda doc_id, data: Post.from_document(data, doc_id).to_dict(),
            on_update=on_update,
            on_error=on_error,
            action='게시글 조회',
        )
