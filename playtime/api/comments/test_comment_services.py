# playtime/api/comments/test_comment_services.py
import pytest

from playtime.api.comments.services import CommentService
from playtime.api.users.services import UserService
from playtime.core.errors import NotFoundError
from playtime.services.notification_service import NotificationService


@pytest.fixture
def service(fake_db, fake_auth, seed_user):
    seed_user('author', display_name='글쓴이')
    seed_user('commenter', display_name='댓글러')
    seed_user('replier', display_name='답글러')
    fake_db.seed('posts', 'p1', {'authorId': 'author', 'authorName': '글쓴이', 'title': '인셉션 후기',
                                 'content': '꿈속의 꿈', 'movieId': '27205', 'commentCount': 0})
    users = UserService(db=fake_db, auth_client=fake_auth)
    return CommentService(db=fake_db, user_service=users, notification_service=NotificationService(db=fake_db))


def _notifications(fake_db):
    return list(fake_db.docs('notifications').values())


def test_comment_on_others_post_notifies_author(service, fake_db):
    comment = service.create_comment('p1', 'commenter', '  재밌어요  ')

    assert comment['content'] == '재밌어요'
    assert comment['author_name'] == '댓글러'
    notifications = _notifications(fake_db)
    assert len(notifications) == 1
    assert notifications[0]['userId'] == 'author'
    assert notifications[0]['type'] == 'comment'
    assert notifications[0]['read'] is False
    assert notifications[0]['message'] == '댓글러님이 회원님의 게시글에 댓글을 남겼습니다.'
    assert fake_db.docs('posts')['p1']['commentCount'] == 1


def test_comment_on_own_post_creates_no_notification(service, fake_db):
    service.create_comment('p1', 'author', '제 글입니다')
    assert _notifications(fake_db) == []
    assert fake_db.docs('posts')['p1']['commentCount'] == 1


def test_reply_notifies_post_author_and_replied_author(service, fake_db):
    original = service.create_comment('p1', 'commenter', 'x' * 60)
    fake_db.docs('notifications').clear()

    reply = service.create_comment('p1', 'replier', '동의합니다', reply_to_comment_id=original['id'])

    assert reply['reply_to']['comment_id'] == original['id']
    assert reply['reply_to']['author_name'] == '댓글러'
    assert reply['reply_to']['content'] == 'x' * 50 + '...'
    recipients = sorted((n['userId'], n['type']) for n in _notifications(fake_db))
    assert recipients == [('author', 'comment'), ('commenter', 'reply')]
    assert fake_db.docs('posts')['p1']['commentCount'] == 2


def test_comment_on_missing_post_raises(service):
    with pytest.raises(NotFoundError):
        service.create_comment('missing', 'commenter', '안녕')


def test_blank_comment_rejected(service, fake_db):
    with pytest.raises(ValueError):
        service.create_comment('p1', 'commenter', '   ')
    assert fake_db.docs('comments') == {}


def test_live_comments_stop_after_unsubscribe(service):
    received = []
    live = service.live_comments('p1', on_update=received.append).start()
    service.create_comment('p1', 'commenter', '첫 댓글')
    assert [c['content'] for c in received[-1]] == ['첫 댓글']

    live.unsubscribe()
    count = len(received)
    service.create_comment('p1', 'commenter', '두 번째 댓글')
    assert len(received) == count
