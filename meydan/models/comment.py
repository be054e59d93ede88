# meydan/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any

from meydan.utils.datetime_utils import now, from_firestore


@dataclass
class Comment:
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    id: str
    user_id: str
    post_id: str
    text: str
    created_at: datetime = field(default_factory=now)

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=doc_id,
            user_id=data['user_id'],
            post_id=data['post_id'],
            text=data.get('text', ''),
            created_at=from_firestore(data['created_at']),
        )
