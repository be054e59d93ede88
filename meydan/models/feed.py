# meydan/models/feed.py
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from meydan.models.post import Media
from meydan.models.profile import Profile, ANONYMOUS_NAME, default_avatar_url
from meydan.utils.datetime_utils import DateTimeUtils

# 생성 시 created_at/updated_at 이 거의 동시에 찍히는 오차를 흡수하는 구간
EDIT_GRACE_PERIOD = timedelta(seconds=10)


@dataclass
class FeedAuthor:
    """피드 화면에 표시되는 작성자 정보."""
    id: str
    name: str
    avatar: str

    @classmethod
    def from_profile(cls, profile: Optional[Profile], user_id: str) -> "FeedAuthor":
        if profile is None:
            return cls(id=user_id, name=ANONYMOUS_NAME, avatar=default_avatar_url(user_id))
        return cls(id=profile.id, name=profile.name, avatar=profile.avatar_url)


@dataclass
class FeedComment:
    id: str
    text: str
    created_at: datetime
    user: FeedAuthor


@dataclass
class FeedPost:
    """
    게시물, 작성자, 댓글, 좋아요 수를 하나로 합친 비정규화 뷰 모델.
    저장되지 않으며 변경이 있을 때마다 전체가 다시 계산됩니다.
    """
    id: str
    user: FeedAuthor
    content: str
    created_at: datetime
    media: Optional[Media] = None
    updated_at: Optional[datetime] = None
    likes: int = 0
    is_liked: bool = False
    comments: List[FeedComment] = field(default_factory=list)

    @property
    def is_edited(self) -> bool:
        return DateTimeUtils.exceeds(self.created_at, self.updated_at, EDIT_GRACE_PERIOD)
