# meydan/core/context.py
import copy
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

from meydan.models.feed import FeedPost
from meydan.models.profile import Profile


@dataclass(frozen=True)
class Viewer:
    """인증된 현재 사용자."""
    user_id: str
    email: Optional[str] = None


class FeedStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    SETUP_REQUIRED = "setup_required"


class FeedContext:
    """
    한 사용자의 세션 동안 유지되는 애플리케이션 컨텍스트.
    집계된 피드 뷰, 오류 배너, 변경 피드 리스너를 보관하며
    집계기(FeedService), 변경 처리기(PostService), 리스너에 명시적으로 전달됩니다.

    뷰는 요청 스레드와 Firestore 리스너 스레드 양쪽에서 바뀌므로
    모든 읽기/쓰기는 lock 안에서 수행합니다.
    """

    def __init__(self, viewer: Viewer):
        self.viewer = viewer
        self.profile: Optional[Profile] = None
        self.posts: List[FeedPost] = []
        self.status = FeedStatus.LOADING
        self.error: Optional[str] = None
        self.listener = None
        self.lock = threading.RLock()
        self._load_generation = 0

    # --- 뷰 스냅샷 ---
    def snapshot(self) -> List[FeedPost]:
        with self.lock:
            return copy.deepcopy(self.posts)

    def restore(self, snapshot: List[FeedPost]):
        with self.lock:
            self.posts = snapshot

    def begin_load(self) -> int:
        """집계를 시작할 때 번호를 받습니다. 더 늦게 시작한 집계가 있으면 이 결과는 버려집니다."""
        with self.lock:
            self._load_generation += 1
            return self._load_generation

    def is_latest_load(self, generation: int) -> bool:
        with self.lock:
            return generation == self._load_generation

    def replace_view(self, profile: Profile, posts: List[FeedPost], generation: Optional[int] = None) -> bool:
        with self.lock:
            if generation is not None and generation != self._load_generation:
                return False
            self.profile = profile
            self.posts = posts
            self.status = FeedStatus.READY
            return True

    # --- 조회 ---
    def find_post(self, post_id: str) -> Optional[FeedPost]:
        with self.lock:
            return next((p for p in self.posts if p.id == post_id), None)

    def posts_by(self, user_id: str) -> List[FeedPost]:
        with self.lock:
            return [p for p in self.posts if p.user.id == user_id]

    def liked_posts(self) -> List[FeedPost]:
        with self.lock:
            return [p for p in self.posts if p.is_liked]

    # --- 낙관적 변경 ---
    def remove_post(self, post_id: str):
        with self.lock:
            self.posts = [p for p in self.posts if p.id != post_id]

    def flip_like(self, post_id: str):
        with self.lock:
            self.posts = [
                replace(p, is_liked=not p.is_liked, likes=p.likes - 1 if p.is_liked else p.likes + 1)
                if p.id == post_id else p
                for p in self.posts
            ]

    # --- 상태/배너 ---
    def report_error(self, message: str):
        with self.lock:
            self.error = message

    def dismiss_error(self):
        with self.lock:
            self.error = None

    def require_setup(self):
        with self.lock:
            self.status = FeedStatus.SETUP_REQUIRED

    def leave_setup(self):
        with self.lock:
            self.status = FeedStatus.LOADING

    def mark_loaded(self):
        """첫 조회가 실패해도 로딩 상태에 머물지 않도록 합니다."""
        with self.lock:
            if self.status is FeedStatus.LOADING:
                self.status = FeedStatus.READY

    @property
    def setup_required(self) -> bool:
        return self.status is FeedStatus.SETUP_REQUIRED
