# playtime/utils/documents.py
"""
Firestore 문서 <-> 파이썬 데이터클래스 변환 도우미.

웹 클라이언트와 같은 컬렉션을 공유하므로 Firestore 문서의 필드명은 camelCase
(authorId, createdAt ...)를 유지하고, 파이썬 쪽 속성은 snake_case를 사용합니다.
"""
import re
from dataclasses import asdict, fields
from typing import Any, Dict, Type, TypeVar

from playtime.utils.datetime_utils import DateTimeUtils

T = TypeVar('T')

# 파이썬 속성명과 규칙적으로 대응되지 않는 필드명
_SPECIAL_TO_CAMEL = {
    'photo_url': 'photoURL',
    'author_photo_url': 'authorPhotoURL',
}
_SPECIAL_TO_SNAKE = {v: k for k, v in _SPECIAL_TO_CAMEL.items()}


def to_camel(name: str) -> str:
    if name in _SPECIAL_TO_CAMEL:
        return _SPECIAL_TO_CAMEL[name]
    head, *rest = name.split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name: str) -> str:
    if name in _SPECIAL_TO_SNAKE:
        return _SPECIAL_TO_SNAKE[name]
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def camelize(obj: Any) -> Any:
    """dict의 키를 재귀적으로 camelCase로 변환합니다."""
    if isinstance(obj, dict):
        return {to_camel(k): camelize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [camelize(item) for item in obj]
    return obj


def decamelize(obj: Any) -> Any:
    """dict의 키를 재귀적으로 snake_case로 변환합니다."""
    if isinstance(obj, dict):
        return {to_snake(k): decamelize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [decamelize(item) for item in obj]
    return obj


class DocumentMixin:
    """
    Firestore 문서로 저장되는 데이터클래스용 믹스인.
    - to_document(): None 값을 제외하고 camelCase 필드로 직렬화
    - from_document(): 모르는 필드는 무시하고 snake_case 속성으로 역직렬화
    """

    def to_document(self) -> Dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if v is not None and k != 'id'}
        return DateTimeUtils.for_firestore(camelize(data))

    @classmethod
    def from_document(cls: Type[T], data: Dict[str, Any], doc_id: str = None) -> T:
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in decamelize(DateTimeUtils.from_firestore(data or {})).items() if k in known}
        if 'id' in known and doc_id is not None:
            values['id'] = doc_id
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """API 응답용 snake_case dict (marshmallow 스키마로 dump 하기 전 단계)"""
        return asdict(self)
