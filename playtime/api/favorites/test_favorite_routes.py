# playtime/api/favorites/test_favorite_routes.py
MOVIE = {'id': 550, 'title': '파이트 클럽', 'image': 'https://image.tmdb.org/t/p/w300/fc.jpg',
         'date': '1999-10-15', 'rating': 8.4}


def test_anonymous_toggle_uses_session(client, fake_db):
    response = client.post('/api/favorites/toggle', json=MOVIE)
    assert response.get_json() == {'movie_id': 550, 'liked': True}
    assert client.get('/api/favorites/550').get_json()['liked'] is True

    favorites = client.get('/api/favorites').get_json()['favorites']
    assert [f['movie_id'] for f in favorites] == [550]
    assert fake_db.docs('movieLikeCounts') == {}


def test_login_migrates_session_favorites_once(client, auth_headers, fake_db):
    client.post('/api/favorites/toggle', json=MOVIE)

    first = client.get('/api/favorites', headers=auth_headers('u1')).get_json()
    assert first['migrated'] == 1
    assert [f['movie_id'] for f in first['favorites']] == [550]

    second = client.get('/api/favorites', headers=auth_headers('u1')).get_json()
    assert second['migrated'] == 0
    assert len(second['favorites']) == 1
    # 로그아웃 상태의 목록은 비워져 있어야 함
    assert client.get('/api/favorites').get_json()['favorites'] == []


def test_authenticated_toggle_updates_counter(client, auth_headers):
    liked = client.post('/api/favorites/toggle', headers=auth_headers('u1'), json=MOVIE).get_json()
    assert liked['liked'] is True
    assert liked['like_count'] == 1

    unliked = client.post('/api/favorites/toggle', headers=auth_headers('u1'), json=MOVIE).get_json()
    assert unliked['liked'] is False
    assert unliked['like_count'] == 0


def test_put_is_idempotent(client, auth_headers, fake_db):
    assert client.put('/api/favorites/550', headers=auth_headers('u1'), json=MOVIE).status_code == 201
    assert client.put('/api/favorites/550', headers=auth_headers('u1'), json=MOVIE).status_code == 200
    assert fake_db.docs('movieLikeCounts')['550']['likeCount'] == 1


def test_delete_not_liked_is_noop(client, auth_headers):
    response = client.delete('/api/favorites/550', headers=auth_headers('u1'))
    assert response.get_json()['removed'] is False


def test_migrate_endpoint(client, auth_headers):
    items = [MOVIE, {'id': 13, 'title': '포레스트 검프'}]
    body = client.post('/api/favorites/migrate', headers=auth_headers('u1'), json={'items': items}).get_json()
    assert body == {'migrated': 2, 'total': 2}
    again = client.post('/api/favorites/migrate', headers=auth_headers('u1'), json={'items': items}).get_json()
    assert again['migrated'] == 0


def test_toggle_validation(client):
    response = client.post('/api/favorites/toggle', json={'title': 'no id'})
    assert response.status_code == 400
