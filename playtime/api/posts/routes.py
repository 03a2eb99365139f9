# playtime/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from playtime.api.posts.schemas import PostCreateSchema, PostResponseSchema
from playtime.core.errors import PlaytimeError
from playtime.services.sse import stream_live_query

posts_bp = Blueprint('posts_bp', __name__)


def _board_args():
    movie_id = request.args.get('movie_id', None, type=str)
    genre_id = request.args.get('genre_id', None, type=str)
    return movie_id, genre_id


@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """
    영화 게시판 또는 장르 게시판에 새 게시글을 작성합니다.
    - 성공 시, 생성된 게시글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json() or {})
        new_post = post_service.create_post(user_id, data['title'], data['content'],
                                            movie_id=data.get('movie_id'), genre_id=data.get('genre_id'))
        return jsonify(PostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "message": str(e)}), 400
    except PlaytimeError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"게시글 작성 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "게시글 작성에 실패했습니다. 다시 시도해주세요."}), 500


@posts_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def list_posts():
    """게시판(movie_id 또는 genre_id)의 게시글 목록을 최신순으로 조회합니다."""
    post_service = current_app.services['posts']
    movie_id, genre_id = _board_args()
    try:
        posts = post_service.list_posts(movie_id=movie_id, genre_id=genre_id)
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts)}), 200
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "message": str(e)}), 400
    except PlaytimeError as e:
        return e.to_response()


@posts_bp.route('/stream', methods=['GET'])
@jwt_required(optional=True)
def stream_posts():
    """게시판 게시글 실시간 구독 (Server-Sent Events)"""
    post_service = current_app.services['posts']
    movie_id, genre_id = _board_args()
    if bool(movie_id) == bool(genre_id):
        return jsonify({"error_code": "INVALID_PAYLOAD",
                        "message": "영화 또는 장르 중 정확히 하나의 게시판을 지정해야 합니다."}), 400
    return stream_live_query(
        lambda on_update, on_error: post_service.live_posts(on_update, on_error, movie_id=movie_id, genre_id=genre_id),
        lambda items: PostResponseSchema(many=True).dump(items),
    )


@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_post(post_id: str):
    """게시글 상세. 없으면 404와 함께 '게시글을 찾을 수 없습니다.'를 반환합니다."""
    post_service = current_app.services['posts']
    try:
        post = post_service.get_post(post_id)
        return jsonify(PostResponseSchema().dump(post)), 200
    except PlaytimeError as e:
        return e.to_response()
