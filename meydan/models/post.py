# meydan/models/post.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from meydan.utils.datetime_utils import from_firestore


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def from_mime_type(cls, mime_type: Optional[str]) -> "MediaType":
        """MIME 타입이 image로 시작하면 이미지, 그 외는 동영상으로 취급합니다."""
        if mime_type and mime_type.startswith('image'):
            return cls.IMAGE
        return cls.VIDEO


@dataclass
class Media:
    """게시물에 첨부된 단일 미디어 참조."""
    url: str
    type: MediaType


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    content 와 media 중 최소 하나는 반드시 존재해야 합니다.
    """
    id: str
    user_id: str
    created_at: datetime
    content: str = ""
    media: Optional[Media] = None
    updated_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'content': self.content,
            'media_url': self.media.url if self.media else None,
            'media_type': self.media.type.value if self.media else None,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Post":
        media = None
        if data.get('media_url'):
            media = Media(url=data['media_url'], type=MediaType(data.get('media_type') or MediaType.IMAGE.value))
        return cls(
            id=doc_id,
            user_id=data['user_id'],
            content=data.get('content') or "",
            media=media,
            created_at=from_firestore(data['created_at']),
            updated_at=from_firestore(data.get('updated_at')),
        )
