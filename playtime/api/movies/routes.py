# playtime/api/movies/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from playtime.api.favorites.schemas import MovieRankingSchema
from playtime.api.movies.schemas import MovieSchema, PopularMoviesResponseSchema, RecommendQuerySchema
from playtime.core.errors import PlaytimeError
from playtime.services.tmdb_service import BOARD_GENRES, RECOMMEND_GENRES, MOODS

movies_bp = Blueprint('movies_bp', __name__)


@movies_bp.route('/popular', methods=['GET'])
def get_popular_movies():
    """TMDB 인기 영화 목록 (페이지네이션, 최대 500페이지)"""
    tmdb = current_app.services['tmdb']
    page = request.args.get('page', 1, type=int)
    try:
        return jsonify(PopularMoviesResponseSchema().dump(tmdb.get_popular(page))), 200
    except PlaytimeError as e:
        return e.to_response()


@movies_bp.route('/search', methods=['GET'])
def search_movies():
    """영화 제목 검색. 빈 검색어는 외부 API를 호출하지 않고 빈 목록을 반환합니다."""
    tmdb = current_app.services['tmdb']
    query = request.args.get('q', '', type=str)
    try:
        movies = tmdb.search_movies(query, limit=current_app.config['SEARCH_RESULT_LIMIT'])
        return jsonify({"movies": MovieSchema(many=True).dump(movies)}), 200
    except PlaytimeError as e:
        return e.to_response()


@movies_bp.route('/genres', methods=['GET'])
def get_genres():
    """장르 게시판 목록, 추천용 장르, 분위기 옵션"""
    moods = [{"id": key, "name": value["name"]} for key, value in MOODS.items()]
    return jsonify({
        "board_genres": BOARD_GENRES,
        "recommend_genres": RECOMMEND_GENRES,
        "moods": moods,
    }), 200


@movies_bp.route('/recommend', methods=['GET'])
def recommend_movies():
    """장르 + 분위기 조건으로 무작위 추천 영화 (기본 3편)"""
    tmdb = current_app.services['tmdb']
    try:
        params = RecommendQuerySchema().load(request.args.to_dict())
        movies = tmdb.recommend(params['genre_id'], params['mood'], count=params['count'])
        if not movies:
            return jsonify({"movies": [], "message": "조건에 맞는 영화를 찾지 못했습니다."}), 200
        return jsonify({"movies": MovieSchema(many=True).dump(movies)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PlaytimeError as e:
        return e.to_response()


@movies_bp.route('/ranking', methods=['GET'])
def get_like_ranking():
    """가장 많이 찜한 영화 TOP 30"""
    favorite_service = current_app.services['favorites']
    try:
        ranking = favorite_service.get_ranking(current_app.config['POPULAR_RANKING_LIMIT'])
        return jsonify({"movies": MovieRankingSchema(many=True).dump(ranking)}), 200
    except PlaytimeError as e:
        return e.to_response()


@movies_bp.route('/<int:movie_id>', methods=['GET'])
def get_movie_detail(movie_id: int):
    """영화 상세 (주요 출연진, 감독, 국내 스트리밍 정보 포함)"""
    tmdb = current_app.services['tmdb']
    try:
        detail = tmdb.get_movie_detail(movie_id)
        return jsonify(detail), 200
    except PlaytimeError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"영화 상세 조회 중 오류 발생 (movie_id: {movie_id}): {e}", exc_info=True)
        return jsonify({"error_code": "MOVIE_API_ERROR", "message": "영화 정보를 불러오는 중 오류가 발생했습니다."}), 502
