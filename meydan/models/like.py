# meydan/models/like.py
from dataclasses import dataclass, field
from datetime import datetime

from meydan.utils.datetime_utils import now


def like_id(user_id: str, post_id: str) -> str:
    """(user_id, post_id) 쌍마다 하나뿐인 좋아요 문서 ID."""
    return f"{user_id}_{post_id}"


@dataclass
class Like:
    """
    Firestore 'likes' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서의 존재 자체가 유일한 상태입니다.
    """
    user_id: str
    post_id: str
    created_at: datetime = field(default_factory=now)

    @property
    def id(self) -> str:
        return like_id(self.user_id, self.post_id)
