# playtime/api/comments/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from playtime.api.comments.schemas import CommentCreateSchema, CommentResponseSchema
from playtime.core.errors import PlaytimeError
from playtime.services.sse import stream_live_query

comments_bp = Blueprint('comments_bp', __name__)


@comments_bp.route('/posts/<string:post_id>/comments', methods=['POST'])
@jwt_required()
def create_comment(post_id: str):
    """
    특정 게시글에 새로운 댓글(또는 답글)을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    - 게시글 작성자와 원 댓글 작성자에게 알림이 생성됩니다. (본인 제외)
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json() or {})
        new_comment = comment_service.create_comment(post_id, user_id, data['content'],
                                                     reply_to_comment_id=data.get('reply_to_comment_id'))
        return jsonify(CommentResponseSchema().dump(new_comment)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "message": str(e)}), 400
    except PlaytimeError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"댓글 생성 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": "댓글 작성에 실패했습니다. 다시 시도해주세요."}), 500


@comments_bp.route('/posts/<string:post_id>/comments', methods=['GET'])
@jwt_required(optional=True)
def get_comments(post_id: str):
    """특정 게시글의 댓글 목록을 작성 순으로 조회합니다."""
    comment_service = current_app.services['comments']
    try:
        comments = comment_service.list_comments(post_id)
        return jsonify({"comments": CommentResponseSchema(many=True).dump(comments)}), 200
    except PlaytimeError as e:
        return e.to_response()


@comments_bp.route('/posts/<string:post_id>/comments/stream', methods=['GET'])
@jwt_required(optional=True)
def stream_comments(post_id: str):
    """댓글 실시간 구독 (Server-Sent Events). 연결이 끊기면 구독을 해제합니다."""
    comment_service = current_app.services['comments']
    return stream_live_query(
        lambda on_update, on_error: comment_service.live_comments(post_id, on_update, on_error),
        lambda items: CommentResponseSchema(many=True).dump(items),
    )
