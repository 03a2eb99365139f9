# playtime/api/comments/services.py

import logging
from typing import Optional, Dict, Any, List, Callable

from firebase_admin import firestore

from playtime.core.errors import NotFoundError, translate_store_error
from playtime.models.chat import make_excerpt
from playtime.models.comment import Comment
from playtime.models.notification import NotificationType
from playtime.services.live_query import LiveQuery, sort_by_timestamp


class CommentService:
    """
    댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 댓글/답글 작성, 목록 조회, 실시간 구독
    - 게시글 작성자 및 원 댓글 작성자에게 알림 생성
    """
    def __init__(self, db=None, user_service=None, notification_service=None):
        """서비스 초기화 시 Firestore 클라이언트 및 컬렉션 참조를 설정합니다."""
        self.db = db or firestore.client()
        self.comments_ref = self.db.collection('comments')
        self.posts_ref = self.db.collection('posts')
        self.user_service = user_service
        self.notification_service = notification_service

    def create_comment(self, post_id: str, author_id: str, content: str,
                       reply_to_comment_id: Optional[str] = None) -> Dict[str, Any]:
        """
        새로운 댓글을 생성하고 관련 알림을 트리거합니다.
        게시글의 댓글 수(commentCount)는 트랜잭션 없이 별도 update로 증가시킵니다.
        """
        content = (content or '').strip()
        if not content:
            raise ValueError("댓글 내용을 입력해주세요.")

        post_snapshot = self.posts_ref.document(post_id).get()
        if not post_snapshot.exists:
            raise NotFoundError("게시글을 찾을 수 없습니다.")
        post_data = post_snapshot.to_dict()

        replied = None
        if reply_to_comment_id:
            replied_snapshot = self.comments_ref.document(reply_to_comment_id).get()
            if not replied_snapshot.exists:
                raise NotFoundError("답글을 달 댓글을 찾을 수 없습니다.")
            replied = replied_snapshot.to_dict()

        author = self.user_service.get_author_info(author_id)
        comment = Comment(
            post_id=post_id,
            author_id=author_id,
            author_name=author['name'],
            author_photo_url=author['photo_url'],
            content=content,
        )
        if replied is not None:
            comment.reply_to = {
                'comment_id': reply_to_comment_id,
                'author_name': replied.get('authorName'),
                'content': make_excerpt(replied.get('content')),
            }

        try:
            _, doc_ref = self.comments_ref.add(comment.to_document())
            comment.id = doc_ref.id

            # 게시글 작성자에게 알림 (본인 제외)
            self.notification_service.create_notification(
                recipient_id=post_data.get('authorId'), sender_id=author_id, sender_name=author['name'],
                n_type=NotificationType.COMMENT, post_id=post_id, post_title=post_data.get('title'),
            )
            # 답글이면 원 댓글 작성자에게도 알림 (본인 제외)
            if replied is not None:
                self.notification_service.create_notification(
                    recipient_id=replied.get('authorId'), sender_id=author_id, sender_name=author['name'],
                    n_type=NotificationType.REPLY, post_id=post_id, post_title=post_data.get('title'),
                )

            self.posts_ref.document(post_id).update({'commentCount': firestore.Increment(1)})
        except Exception as e:
            logging.error(f"댓글 작성 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise translate_store_error(e, '댓글 작성')

        logging.info(f"댓글 작성 완료 (post_id: {post_id}, comment_id: {comment.id})")
        return comment.to_dict()

    def list_comments(self, post_id: str) -> List[Dict[str, Any]]:
        """특정 게시글의 댓글 목록 (작성 시간 오름차순)."""
        try:
            docs = self.comments_ref.where('postId', '==', post_id).stream()
            items = [Comment.from_document(doc.to_dict(), doc.id).to_dict() for doc in docs]
        except Exception as e:
            logging.error(f"댓글 목록 조회 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise translate_store_error(e, '댓글 조회')
        return sort_by_timestamp(items, 'created_at')

    def live_comments(self, post_id: str, on_update: Callable, on_error: Optional[Callable] = None) -> LiveQuery:
        """게시글 댓글 실시간 구독. 게시글을 떠나면 unsubscribe() 해야 합니다."""
        return LiveQuery(
            self.comments_ref.where('postId', '==', post_id),
            order_field='created_at',
            transform=lambda doc_id, data: Comment.from_document(data, doc_id).to_dict(),
            on_update=on_update,
            on_error=on_error,
            action='댓글 조회',
        )
