# playtime/api/comments/test_comment_routes.py
import pytest


@pytest.fixture
def post_id(fake_db, seed_user):
    seed_user('author', display_name='글쓴이')
    seed_user('reader', display_name='독자')
    fake_db.seed('posts', 'p1', {'authorId': 'author', 'authorName': '글쓴이', 'title': '기생충 토론',
                                 'content': '...', 'genreId': 'drama', 'commentCount': 0})
    return 'p1'


def test_create_and_list_comments(client, auth_headers, post_id, fake_db):
    response = client.post(f'/api/posts/{post_id}/comments', headers=auth_headers('reader'),
                           json={'content': '명작입니다'})
    assert response.status_code == 201
    first = response.get_json()

    reply = client.post(f'/api/posts/{post_id}/comments', headers=auth_headers('author'),
                        json={'content': '감사합니다', 'reply_to_comment_id': first['id']})
    assert reply.status_code == 201
    assert reply.get_json()['reply_to']['author_name'] == '독자'

    comments = client.get(f'/api/posts/{post_id}/comments').get_json()['comments']
    assert sorted(c['content'] for c in comments) == ['감사합니다', '명작입니다']
    assert fake_db.docs('posts')[post_id]['commentCount'] == 2


def test_comment_on_missing_post(client, auth_headers, post_id):
    response = client.post('/api/posts/missing/comments', headers=auth_headers('reader'), json={'content': 'hi'})
    assert response.status_code == 404


def test_blank_comment(client, auth_headers, post_id):
    response = client.post(f'/api/posts/{post_id}/comments', headers=auth_headers('reader'), json={'content': '  '})
    assert response.status_code == 400
