# playtime/api/favorites/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app, session
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from playtime.api.favorites.local_cache import LocalFavoritesCache
from playtime.api.favorites.schemas import MovieCardSchema, FavoriteMigrateSchema, FavoriteResponseSchema
from playtime.core.errors import PlaytimeError

favorites_bp = Blueprint('favorites_bp', __name__)


@favorites_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def list_favorites():
    """
    찜 목록을 조회합니다.
    - 로그인 전: 세션에 저장된 likedMovies를 반환
    - 로그인 후 첫 조회: 세션의 likedMovies를 사용자 찜 컬렉션으로 옮긴 뒤 반환
    """
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    cache = LocalFavoritesCache(session)
    try:
        if not user_id:
            favorites = favorite_service.list_for_cache(cache)
            return jsonify({"favorites": FavoriteResponseSchema(many=True).dump(favorites), "migrated": 0}), 200

        migrated = favorite_service.migrate_local_favorites(user_id, cache)
        favorites = favorite_service.list_favorites(user_id)
        return jsonify({"favorites": FavoriteResponseSchema(many=True).dump(favorites), "migrated": migrated}), 200
    except PlaytimeError as e:
        return e.to_response()


@favorites_bp.route('/toggle', methods=['POST'])
@jwt_required(optional=True)
def toggle_favorite():
    """찜 상태를 토글합니다. 로그인 전이면 세션(likedMovies)에만 저장합니다."""
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        movie = MovieCardSchema().load(request.get_json() or {})
        if not user_id:
            liked = LocalFavoritesCache(session).toggle(movie)
            return jsonify({"movie_id": movie['id'], "liked": liked}), 200

        liked = favorite_service.toggle(user_id, movie)
        return jsonify({
            "movie_id": movie['id'],
            "liked": liked,
            "like_count": favorite_service.get_like_count(movie['id']),
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PlaytimeError as e:
        return e.to_response()


@favorites_bp.route('/<int:movie_id>', methods=['GET'])
@jwt_required(optional=True)
def get_favorite_status(movie_id: int):
    """특정 영화의 찜 여부와 전체 찜 수"""
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        if user_id:
            liked = favorite_service.is_favorite(user_id, movie_id)
        else:
            liked = LocalFavoritesCache(session).contains(movie_id)
        return jsonify({"movie_id": movie_id, "liked": liked,
                        "like_count": favorite_service.get_like_count(movie_id)}), 200
    except Exception as e:
        logging.error(f"찜 상태 조회 중 오류 발생 (movie_id: {movie_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "찜 정보를 불러오지 못했습니다."}), 500


@favorites_bp.route('/<int:movie_id>', methods=['PUT'])
@jwt_required()
def add_favorite(movie_id: int):
    """찜 추가 (이미 찜한 영화면 변화 없음)"""
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        movie = MovieCardSchema().load({**(request.get_json() or {}), 'id': movie_id})
        created = favorite_service.add_favorite(user_id, movie)
        return jsonify({"movie_id": movie_id, "liked": True, "created": created}), 201 if created else 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PlaytimeError as e:
        return e.to_response()


@favorites_bp.route('/<int:movie_id>', methods=['DELETE'])
@jwt_required()
def remove_favorite(movie_id: int):
    """찜 해제 (찜하지 않은 영화면 변화 없음)"""
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        removed = favorite_service.remove_favorite(user_id, movie_id)
        return jsonify({"movie_id": movie_id, "liked": False, "removed": removed}), 200
    except PlaytimeError as e:
        return e.to_response()


@favorites_bp.route('/migrate', methods=['POST'])
@jwt_required()
def migrate_favorites():
    """
    브라우저 localStorage에 남아 있던 likedMovies를 사용자 찜 컬렉션으로 옮깁니다.
    여러 번 호출해도 중복 항목이 생기지 않습니다.
    """
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        data = FavoriteMigrateSchema().load(request.get_json() or {})
        cache = LocalFavoritesCache({})
        cache.save(data['items'])
        migrated = favorite_service.migrate_local_favorites(user_id, cache)
        return jsonify({"migrated": migrated, "total": len(data['items'])}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PlaytimeError as e:
        return e.to_response()
