# playtime/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from playtime.api.favorites.schemas import FavoriteResponseSchema
from playtime.api.users.schemas import (
    UserProfileResponseSchema,
    ProfileUpdateSchema,
    UserSearchResultSchema,
    ParticipatedPostSchema,
)
from playtime.core.errors import PlaytimeError

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/search', methods=['GET'])
@jwt_required(optional=True)
def search_users():
    """표시 이름 또는 이메일로 사용자를 검색합니다. (최대 20명)"""
    user_service = current_app.services['users']
    term = request.args.get('q', '', type=str)
    try:
        results = user_service.search_users(term)
        return jsonify({"users": UserSearchResultSchema(many=True).dump(results)}), 200
    except PlaytimeError as e:
        return e.to_response()


@users_bp.route('/me', methods=['PATCH'])
@jwt_required()
def update_my_profile():
    """현재 로그인된 사용자의 프로필(이름, 사진, 소개)을 수정합니다."""
    user_service = current_app.services['users']
    user_id = get_jwt_identity()
    try:
        data = ProfileUpdateSchema().load(request.get_json() or {})
        updated = user_service.update_profile(user_id, **data)
        return jsonify(UserProfileResponseSchema().dump(updated)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PlaytimeError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"프로필 수정 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_UPDATE_FAILED", "message": "프로필 수정에 실패했습니다."}), 500


@users_bp.route('/<string:user_id>', methods=['GET'])
@jwt_required(optional=True)
def get_user_profile(user_id: str):
    """특정 사용자의 프로필을 조회합니다."""
    user_service = current_app.services['users']
    try:
        profile = user_service.get_profile(user_id, requester_id=get_jwt_identity())
        return jsonify(UserProfileResponseSchema().dump(profile)), 200
    except PlaytimeError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"사용자 프로필 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_FETCH_FAILED", "message": "프로필을 불러오는 중 오류가 발생했습니다."}), 500


@users_bp.route('/<string:user_id>/posts', methods=['GET'])
@jwt_required(optional=True)
def get_participated_posts(user_id: str):
    """사용자가 작성했거나 댓글을 단 게시글 목록"""
    user_service = current_app.services['users']
    try:
        posts = user_service.get_participated_posts(user_id)
        return jsonify({"posts": ParticipatedPostSchema(many=True).dump(posts)}), 200
    except Exception as e:
        logging.error(f"참여 게시글 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "프로필을 불러오는 중 오류가 발생했습니다."}), 500


@users_bp.route('/<string:user_id>/favorites', methods=['GET'])
@jwt_required(optional=True)
def get_user_favorites(user_id: str):
    """프로필 화면에 표시할 사용자의 찜 목록"""
    favorite_service = current_app.services['favorites']
    try:
        favorites = favorite_service.list_favorites(user_id)
        return jsonify({"favorites": FavoriteResponseSchema(many=True).dump(favorites)}), 200
    except PlaytimeError as e:
        return e.to_response()
