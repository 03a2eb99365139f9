# playtime/api/favorites/services.py

import logging
from typing import Any, Dict, List

from firebase_admin import firestore

from playtime.api.favorites.local_cache import LocalFavoritesCache
from playtime.core.errors import translate_store_error
from playtime.models.favorite import Favorite, MovieLikeCount
from playtime.services.live_query import sort_by_timestamp
from playtime.utils.datetime_utils import DateTimeUtils


def favorite_from_movie(movie: Dict[str, Any]) -> Favorite:
    """
    영화 카드 데이터(TMDB 정규화 결과 또는 로컬 likedMovies 항목)를 Favorite으로 변환합니다.
    """
    rating = movie.get('rating', movie.get('vote_average'))
    return Favorite(
        movie_id=int(movie['id']),
        title=movie.get('title') or '',
        image=movie.get('image'),
        date=movie.get('date') or movie.get('release_date'),
        rating=str(rating) if rating is not None else None,
    )


class FavoriteService:
    """
    찜(좋아요) 관련 비즈니스 로직을 담당하는 서비스 클래스.

    영화별 전체 찜 수(movieLikeCounts)는 트랜잭션 없이 '읽은 뒤 쓰기'로 갱신합니다.
    서로 다른 사용자가 같은 영화를 동시에 찜/해제하면 갱신이 유실될 수 있습니다(표시용 통계).
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.favorites_root = self.db.collection('favorites')
        self.like_counts_ref = self.db.collection('movieLikeCounts')

    def _user_favorites(self, user_id: str):
        return self.favorites_root.document(user_id).collection('movies')

    def is_favorite(self, user_id: str, movie_id: int) -> bool:
        return self._user_favorites(user_id).document(str(movie_id)).get().exists

    def add_favorite(self, user_id: str, movie: Dict[str, Any]) -> bool:
        """
        찜 추가. 이미 찜한 영화라면 아무 것도 하지 않고 False를 반환합니다.
        (중복 문서 생성 및 카운터 이중 증가 방지)
        """
        favorite = favorite_from_movie(movie)
        fav_ref = self._user_favorites(user_id).document(str(favorite.movie_id))
        try:
            if fav_ref.get().exists:
                return False
            fav_ref.set(favorite.to_document())
            self._increase_like_count(movie, favorite)
        except Exception as e:
            logging.error(f"찜 추가 실패 (user_id: {user_id}, movie_id: {favorite.movie_id}): {e}", exc_info=True)
            raise translate_store_error(e, '찜하기')
        logging.info(f"찜 추가 완료 (user_id: {user_id}, movie_id: {favorite.movie_id})")
        return True

    def remove_favorite(self, user_id: str, movie_id: int) -> bool:
        """찜 해제. 찜하지 않은 영화라면 카운터를 건드리지 않고 False를 반환합니다."""
        fav_ref = self._user_favorites(user_id).document(str(movie_id))
        try:
            if not fav_ref.get().exists:
                return False
            fav_ref.delete()
            self._decrease_like_count(movie_id)
        except Exception as e:
            logging.error(f"찜 해제 실패 (user_id: {user_id}, movie_id: {movie_id}): {e}", exc_info=True)
            raise translate_store_error(e, '찜 해제')
        logging.info(f"찜 해제 완료 (user_id: {user_id}, movie_id: {movie_id})")
        return True

    def toggle(self, user_id: str, movie: Dict[str, Any]) -> bool:
        """찜 상태를 뒤집고, 변경 후의 찜 여부를 반환합니다."""
        movie_id = int(movie['id'])
        if self.is_favorite(user_id, movie_id):
            self.remove_favorite(user_id, movie_id)
            return False
        self.add_favorite(user_id, movie)
        return True

    def _increase_like_count(self, movie: Dict[str, Any], favorite: Favorite) -> None:
        count_ref = self.like_counts_ref.document(str(favorite.movie_id))
        snapshot = count_ref.get()
        if not snapshot.exists:
            rating = movie.get('vote_average', movie.get('rating'))
            counter = MovieLikeCount(
                movie_id=favorite.movie_id,
                title=favorite.title,
                poster=movie.get('poster_path') or favorite.image,
                rating=float(rating) if rating not in (None, '') else None,
                release_date=favorite.date,
                like_count=1,
            )
            count_ref.set(counter.to_document())
        else:
            count_ref.update({
                'likeCount': firestore.Increment(1),
                'updatedAt': DateTimeUtils.now(),
            })

    def _decrease_like_count(self, movie_id: int) -> None:
        count_ref = self.like_counts_ref.document(str(movie_id))
        snapshot = count_ref.get()
        if not snapshot.exists:
            return
        if (snapshot.to_dict().get('likeCount') or 0) <= 1:
            count_ref.delete()
        else:
            count_ref.update({
                'likeCount': firestore.Increment(-1),
                'updatedAt': DateTimeUtils.now(),
            })

    def get_like_count(self, movie_id: int) -> int:
        snapshot = self.like_counts_ref.document(str(movie_id)).get()
        return (snapshot.to_dict().get('likeCount') or 0) if snapshot.exists else 0

    def list_favorites(self, user_id: str) -> List[Dict[str, Any]]:
        """사용자의 찜 목록을 최근에 찜한 순으로 반환합니다."""
        try:
            docs = self._user_favorites(user_id).stream()
            items = [Favorite.from_document(doc.to_dict()).to_dict() for doc in docs]
        except Exception as e:
            logging.error(f"찜 목록 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise translate_store_error(e, '찜 목록 조회')
        return sort_by_timestamp(items, 'added_at', descending=True)

    def get_ranking(self, limit: int = 30) -> List[Dict[str, Any]]:
        """전체 찜 수 기준 인기 영화 랭킹."""
        try:
            docs = (self.like_counts_ref
                    .order_by('likeCount', direction=firestore.Query.DESCENDING)
                    .limit(limit)
                    .stream())
            return [MovieLikeCount.from_document(doc.to_dict()).to_dict() for doc in docs]
        except Exception as e:
            logging.error(f"인기 영화 랭킹 조회 실패: {e}", exc_info=True)
            raise translate_store_error(e, '인기 영화 데이터 조회')

    def migrate_local_favorites(self, user_id: str, cache: LocalFavoritesCache) -> int:
        """
        로그인 전 로컬에 저장된 찜 목록을 사용자 찜 컬렉션으로 옮깁니다.
        - 이미 원격에 있는 항목은 원격 값을 우선하고, 비어 있는 필드만 채웁니다.
        - 원격에만 있는 항목은 건드리지 않습니다.
        - 모든 항목이 저장된 뒤에만 로컬 목록을 비우므로 중간에 실패해도 다시 실행할 수 있습니다.

        :return: 새로 추가된 찜 개수
        """
        local_items = cache.load()
        if not local_items:
            return 0

        created = 0
        for item in local_items:
            local_doc = favorite_from_movie(item).to_document()
            fav_ref = self._user_favorites(user_id).document(str(local_doc['movieId']))
            try:
                snapshot = fav_ref.get()
                if snapshot.exists:
                    remote = snapshot.to_dict()
                    missing = {k: v for k, v in local_doc.items() if remote.get(k) in (None, '')}
                    if missing:
                        fav_ref.set(missing, merge=True)
                else:
                    fav_ref.set(local_doc)
                    created += 1
            except Exception as e:
                logging.error(f"로컬 찜 목록 이전 실패 (user_id: {user_id}, movie_id: {local_doc['movieId']}): {e}", exc_info=True)
                raise translate_store_error(e, '찜 목록 이전')

        cache.clear()
        logging.info(f"로컬 찜 목록 이전 완료 (user_id: {user_id}, 신규 {created}건 / 전체 {len(local_items)}건)")
        return created

    def list_for_cache(self, cache: LocalFavoritesCache) -> List[Dict[str, Any]]:
        """로그인 전 세션 찜 목록을 Favorite 응답 형식으로 반환합니다."""
        return [favorite_from_movie(item).to_dict() for item in cache.load()]

