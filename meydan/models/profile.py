# meydan/models/profile.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any

from meydan.utils.datetime_utils import from_firestore

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/8.x/thumbs/svg?seed={seed}"
DEFAULT_PROFILE_NAME = "New User"
ANONYMOUS_NAME = "Anonymous"


def default_avatar_url(user_id: str) -> str:
    """user_id를 시드로 하는 결정적(deterministic) 아바타 URL을 만듭니다."""
    return AVATAR_URL_TEMPLATE.format(seed=user_id)


def default_profile_name(email: Optional[str]) -> str:
    """이메일의 '@' 앞부분을 기본 이름으로 사용합니다."""
    if email:
        local_part = email.split('@')[0]
        if local_part:
            return local_part
    return DEFAULT_PROFILE_NAME


@dataclass
class Profile:
    """
    Firestore 'profiles' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID는 인증 서비스의 user id와 같습니다.
    """
    id: str
    name: str
    avatar_url: str
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Profile":
        return cls(
            id=doc_id,
            name=data.get('name') or ANONYMOUS_NAME,
            avatar_url=data.get('avatar_url') or default_avatar_url(doc_id),
            updated_at=from_firestore(data.get('updated_at')),
        )
