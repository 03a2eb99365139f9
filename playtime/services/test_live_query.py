# playtime/services/test_live_query.py
import threading
from datetime import datetime, timezone

from playtime.services.live_query import LiveQuery, sort_by_timestamp


def _ts(day):
    return datetime(2024, 1, day, tzinfo=timezone.utc)


def test_sort_by_timestamp_treats_missing_as_zero():
    items = [{'id': 'b', 'created_at': _ts(2)}, {'id': 'a', 'created_at': None}, {'id': 'c', 'created_at': _ts(1)}]
    assert [i['id'] for i in sort_by_timestamp(items, 'created_at')] == ['a', 'c', 'b']
    assert [i['id'] for i in sort_by_timestamp(items, 'created_at', descending=True)] == ['b', 'c', 'a']


def test_snapshot_rebuilds_list_without_duplicates(fake_db):
    fake_db.seed('chatMessages', 'm1', {'message': 'hi', 'timestamp': _ts(1)})
    updates = []
    live = LiveQuery(fake_db.collection('chatMessages'), order_field='timestamp', on_update=updates.append).start()

    assert live.active
    fake_db.collection('chatMessages').document('m2').set({'message': 'yo', 'timestamp': _ts(2)})
    fake_db.collection('chatMessages').document('m2').set({'message': 'yo!', 'timestamp': _ts(2)}, merge=True)

    latest = updates[-1]
    assert [i['id'] for i in latest] == ['m1', 'm2']
    assert latest[1]['message'] == 'yo!'


def test_equality_filter_limits_results(fake_db):
    fake_db.seed('posts', 'p1', {'movieId': '1', 'createdAt': _ts(1)})
    fake_db.seed('posts', 'p2', {'movieId': '2', 'createdAt': _ts(2)})
    updates = []
    LiveQuery(fake_db.collection('posts').where('movieId', '==', '1'), order_field='createdAt',
              on_update=updates.append).start()
    assert [i['id'] for i in updates[-1]] == ['p1']


def test_no_updates_after_unsubscribe(fake_db):
    updates = []
    live = LiveQuery(fake_db.collection('chatMessages'), order_field='timestamp', on_update=updates.append).start()
    live.unsubscribe()
    live.unsubscribe()

    fake_db.collection('chatMessages').document('m1').set({'message': 'late'})
    assert len(updates) == 1
    assert not live.active


def test_late_snapshot_after_unsubscribe_is_ignored(fake_db):
    updates = []
    live = LiveQuery(fake_db.collection('chatMessages'), order_field='timestamp', on_update=updates.append).start()
    live.unsubscribe()
    live._handle_snapshot([], [], _ts(1))
    assert len(updates) == 1


def test_transform_error_reported_through_on_error(fake_db):
    fake_db.seed('chatMessages', 'm1', {'message': 'hi'})
    errors, updates = [], []

    def broken(doc_id, data):
        raise RuntimeError('boom')

    LiveQuery(fake_db.collection('chatMessages'), order_field='timestamp', on_update=updates.append,
              transform=broken, on_error=errors.append, action='메시지 조회').start()
    assert updates == []
    assert errors == ['메시지 조회에 실패했습니다. 다시 시도해주세요.']


def test_unsubscribe_waits_for_update_in_progress(fake_db):
    entered, release = threading.Event(), threading.Event()
    updates = []

    def slow_update(items):
        entered.set()
        release.wait(timeout=2.0)
        updates.append(items)

    live = LiveQuery(fake_db.collection('chatMessages'), order_field='timestamp', on_update=slow_update)
    watcher = threading.Thread(target=live._handle_snapshot, args=([], [], _ts(1)))
    watcher.start()
    assert entered.wait(timeout=2.0)

    closer = threading.Thread(target=live.unsubscribe)
    closer.start()
    closer.join(timeout=0.1)
    assert closer.is_alive()

    release.set()
    watcher.join(timeout=2.0)
    closer.join(timeout=2.0)
    assert not closer.is_alive()
    assert len(updates) == 1

    live._handle_snapshot([], [], _ts(2))
    assert len(updates) == 1
