"""
MockFirestore: 단위 테스트용 동기식 인메모리 Firestore 대체 객체.

지원 범위: collection(), document(), add(), 하위 컬렉션, get()/set(merge)/update()/delete(),
where('==', 'in', '<', '>=', '<=') / order_by() / limit() / stream(), on_snapshot() (동기 호출),
Increment, SERVER_TIMESTAMP, DELETE_FIELD.
stream()/get()로 반환한 문서 수는 read_count에 누적됩니다.
"""
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from firebase_admin import firestore

from playtime.utils.datetime_utils import DateTimeUtils


def _resolve(value: Any, current: Any) -> Any:
    """Firestore 센티널 값을 실제 값으로 바꿉니다."""
    if value is firestore.SERVER_TIMESTAMP:
        return DateTimeUtils.now()
    if isinstance(value, firestore.Increment):
        return (current or 0) + value.value
    return value


def _apply(target: Dict[str, Any], data: Dict[str, Any], merge: bool) -> Dict[str, Any]:
    result = dict(target) if merge else {}
    for key, value in data.items():
        if value is firestore.DELETE_FIELD:
            result.pop(key, None)
        elif merge and isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _apply(result[key], value, merge=True)
        else:
            result[key] = _resolve(value, result.get(key))
    return result


class MockDocumentSnapshot:
    def __init__(self, reference: "MockDocumentReference", data: Optional[dict]):
        self.reference = reference
        self.id = reference.id
        self.exists = data is not None
        self._data = dict(data) if data is not None else None

    def to_dict(self) -> Optional[dict]:
        return dict(self._data) if self._data is not None else None

    def get(self, key):
        return (self._data or {}).get(key)


class MockDocumentReference:
    def __init__(self, db: "MockFirestore", path: str, doc_id: str):
        self._db = db
        self._path = path
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self._path}/{self.id}"

    def _docs(self) -> Dict[str, dict]:
        return self._db._store.setdefault(self._path, {})

    def get(self, transaction=None) -> MockDocumentSnapshot:
        self._db._maybe_fail('get')
        return MockDocumentSnapshot(self, self._docs().get(self.id))

    def set(self, data: dict, merge: bool = False) -> None:
        self._db._maybe_fail('set')
        current = self._docs().get(self.id, {})
        self._docs()[self.id] = _apply(current, data, merge)
        self._db._notify(self._path)

    def update(self, data: dict) -> None:
        self._db._maybe_fail('update')
        if self.id not in self._docs():
            from google.api_core.exceptions import NotFound
            raise NotFound(f"No document to update: {self.path}")
        self._docs()[self.id] = _apply(self._docs()[self.id], data, merge=True)
        self._db._notify(self._path)

    def delete(self) -> None:
        self._db._maybe_fail('delete')
        self._docs().pop(self.id, None)
        self._db._notify(self._path)

    def collection(self, name: str) -> "MockCollection":
        return MockCollection(self._db, f"{self.path}/{name}")


class MockWatch:
    def __init__(self, db: "MockFirestore", entry):
        self._db = db
        self._entry = entry

    def unsubscribe(self) -> None:
        if self._entry in self._db._watchers:
            self._db._watchers.remove(self._entry)


class MockQuery:
    def __init__(self, db: "MockFirestore", path: str, filters=None, orders=None, limit_val=None):
        self._db = db
        self._path = path
        self._filters: List[Tuple[str, str, Any]] = list(filters or [])
        self._orders: List[Tuple[str, str]] = list(orders or [])
        self._limit_val = limit_val

    def _copy(self, **kwargs) -> "MockQuery":
        params = dict(filters=self._filters, orders=self._orders, limit_val=self._limit_val)
        params.update(kwargs)
        return MockQuery(self._db, self._path, **params)

    def where(self, field_path: str, op_string: str, value: Any) -> "MockQuery":
        return self._copy(filters=self._filters + [(field_path, op_string, value)])

    def order_by(self, field_path: str, direction: str = firestore.Query.ASCENDING) -> "MockQuery":
        return self._copy(orders=self._orders + [(field_path, direction)])

    def limit(self, count: int) -> "MockQuery":
        return self._copy(limit_val=count)

    @staticmethod
    def _match(data: dict, field_path: str, op: str, value: Any) -> bool:
        field_value = data.get(field_path)
        if op == '==':
            return field_value == value
        if op == 'in':
            return field_value in value
        if op == '<':
            return field_value is not None and field_value < value
        if op == '>=':
            return field_value is not None and field_value >= value
        if op == '<=':
            return field_value is not None and field_value <= value
        raise ValueError(f"Unsupported operator: {op}")

    def _results(self) -> List[MockDocumentSnapshot]:
        docs = self._db._store.get(self._path, {})
        snapshots = []
        for doc_id, data in docs.items():
            if all(self._match(data, f, op, v) for f, op, v in self._filters):
                ref = MockDocumentReference(self._db, self._path, doc_id)
                snapshots.append(MockDocumentSnapshot(ref, data))
        for field_path, direction in reversed(self._orders):
            snapshots.sort(
                key=lambda s: (s.get(field_path) is not None, s.get(field_path)),
                reverse=direction == firestore.Query.DESCENDING,
            )
        if self._limit_val is not None:
            snapshots = snapshots[:self._limit_val]
        return snapshots

    def stream(self, transaction=None):
        return iter(self.get(transaction))

    def get(self, transaction=None) -> List[MockDocumentSnapshot]:
        self._db._maybe_fail('stream')
        results = self._results()
        self._db.read_count += len(results)
        return results

    def on_snapshot(self, callback: Callable) -> MockWatch:
        entry = (self, callback)
        self._db._watchers.append(entry)
        callback(self._results(), [], DateTimeUtils.now())
        return MockWatch(self._db, entry)


class MockCollection(MockQuery):
    def __init__(self, db: "MockFirestore", path: str):
        super().__init__(db, path)

    @property
    def id(self) -> str:
        return self._path.split('/')[-1]

    def document(self, doc_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._db, self._path, doc_id or uuid.uuid4().hex[:20])

    def add(self, data: dict, document_id: Optional[str] = None):
        ref = self.document(document_id)
        ref.set(data)
        return DateTimeUtils.now(), ref


class MockFirestore:
    def __init__(self):
        self._store: Dict[str, Dict[str, dict]] = {}
        self._watchers: List[Tuple[MockQuery, Callable]] = []
        self._failures: Dict[str, Exception] = {}
        self.read_count = 0

    def collection(self, name: str) -> MockCollection:
        return MockCollection(self, name)

    def seed(self, path: str, doc_id: str, data: dict) -> None:
        """테스트 준비용으로 문서를 미리 채워 넣습니다. (알림 없음)"""
        self._store.setdefault(path, {})[doc_id] = dict(data)

    def docs(self, path: str) -> Dict[str, dict]:
        """특정 컬렉션 경로의 원본 데이터를 반환합니다."""
        return self._store.get(path, {})

    def fail_on(self, operation: str, exc: Exception) -> None:
        """다음 operation('get', 'set', 'update', 'delete', 'stream') 호출이 exc를 던지도록 설정합니다."""
        self._failures[operation] = exc

    def _maybe_fail(self, operation: str) -> None:
        exc = self._failures.pop(operation, None)
        if exc is not None:
            raise exc

    def _notify(self, path: str) -> None:
        for query, callback in list(self._watchers):
            if query._path == path:
                callback(query._results(), [], DateTimeUtils.now())
