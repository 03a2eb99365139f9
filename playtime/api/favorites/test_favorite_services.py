# playtime/api/favorites/test_favorite_services.py
from datetime import datetime, timezone

import pytest
from google.api_core.exceptions import PermissionDenied

from playtime.api.favorites.local_cache import LocalFavoritesCache, LOCAL_FAVORITES_KEY
from playtime.api.favorites.services import FavoriteService
from playtime.core.errors import PermissionDeniedError

MOVIE = {'id': 550, 'title': '파이트 클럽', 'image': 'https://image.tmdb.org/t/p/w300/fc.jpg',
         'release_date': '1999-10-15', 'vote_average': 8.4, 'poster_path': '/fc.jpg'}


@pytest.fixture
def service(fake_db):
    return FavoriteService(db=fake_db)


def _count_doc(fake_db, movie_id):
    return fake_db.docs('movieLikeCounts').get(str(movie_id))


def test_like_twice_creates_single_favorite(service, fake_db):
    assert service.add_favorite('u1', MOVIE) is True
    assert service.add_favorite('u1', MOVIE) is False

    assert list(fake_db.docs('favorites/u1/movies').keys()) == ['550']
    assert _count_doc(fake_db, 550)['likeCount'] == 1


def test_new_counter_copies_movie_metadata(service, fake_db):
    service.add_favorite('u1', MOVIE)
    counter = _count_doc(fake_db, 550)
    assert counter['title'] == '파이트 클럽'
    assert counter['poster'] == '/fc.jpg'
    assert counter['rating'] == 8.4
    assert counter['releaseDate'] == '1999-10-15'


def test_like_by_two_users_increments_counter(service, fake_db):
    service.add_favorite('u1', MOVIE)
    service.add_favorite('u2', MOVIE)
    assert service.get_like_count(550) == 2


def test_unlike_last_like_deletes_counter(service, fake_db):
    service.add_favorite('u1', MOVIE)
    assert service.remove_favorite('u1', 550) is True

    assert fake_db.docs('favorites/u1/movies') == {}
    assert _count_doc(fake_db, 550) is None
    assert service.get_like_count(550) == 0


def test_unlike_decrements_when_others_remain(service):
    service.add_favorite('u1', MOVIE)
    service.add_favorite('u2', MOVIE)
    service.remove_favorite('u1', 550)
    assert service.get_like_count(550) == 1


def test_unlike_without_favorite_is_noop(service, fake_db):
    service.add_favorite('u2', MOVIE)
    assert service.remove_favorite('u1', 550) is False
    assert service.get_like_count(550) == 1


def test_toggle_round_trip(service):
    assert service.toggle('u1', MOVIE) is True
    assert service.is_favorite('u1', 550)
    assert service.toggle('u1', MOVIE) is False
    assert not service.is_favorite('u1', 550)


def test_ranking_orders_by_like_count(service):
    other = {**MOVIE, 'id': 13, 'title': '포레스트 검프'}
    service.add_favorite('u1', MOVIE)
    service.add_favorite('u1', other)
    service.add_favorite('u2', other)

    ranking = service.get_ranking(limit=10)
    assert [item['movie_id'] for item in ranking] == [13, 550]
    assert ranking[0]['like_count'] == 2
    assert len(service.get_ranking(limit=1)) == 1


def test_migrate_twice_has_no_duplicates_and_clears_cache(service, fake_db):
    storage = {}
    cache = LocalFavoritesCache(storage)
    cache.save([{'id': 550, 'title': '파이트 클럽', 'date': '1999-10-15', 'rating': '8.4'},
                {'id': 13, 'title': '포레스트 검프'}])

    assert service.migrate_local_favorites('u1', cache) == 2
    assert LOCAL_FAVORITES_KEY not in storage

    cache.save([{'id': 550, 'title': '파이트 클럽'}])
    assert service.migrate_local_favorites('u1', cache) == 0
    assert sorted(fake_db.docs('favorites/u1/movies').keys()) == ['13', '550']
    assert cache.is_empty()


def test_migrate_prefers_remote_fields(service, fake_db):
    fake_db.seed('favorites/u1/movies', '550', {'movieId': 550, 'title': '원격 제목', 'rating': ''})
    cache = LocalFavoritesCache({})
    cache.save([{'id': 550, 'title': '로컬 제목', 'rating': '8.4'}])

    service.migrate_local_favorites('u1', cache)

    remote = fake_db.docs('favorites/u1/movies')['550']
    assert remote['title'] == '원격 제목'
    assert remote['rating'] == '8.4'


def test_migrate_failure_keeps_local_cache(service, fake_db):
    cache = LocalFavoritesCache({})
    cache.save([{'id': 550, 'title': '파이트 클럽'}])
    fake_db.fail_on('get', PermissionDenied('denied'))

    with pytest.raises(PermissionDeniedError):
        service.migrate_local_favorites('u1', cache)
    assert not cache.is_empty()


def test_list_favorites_newest_first(service, fake_db):
    fake_db.seed('favorites/u1/movies', '550',
                 {'movieId': 550, 'title': '파이트 클럽', 'addedAt': datetime(2024, 1, 1, tzinfo=timezone.utc)})
    fake_db.seed('favorites/u1/movies', '13',
                 {'movieId': 13, 'title': '포레스트 검프', 'addedAt': datetime(2024, 2, 1, tzinfo=timezone.utc)})
    titles = [item['title'] for item in service.list_favorites('u1')]
    assert titles == ['포레스트 검프', '파이트 클럽']
