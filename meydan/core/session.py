# meydan/core/session.py
import logging
import threading
from typing import Callable, Dict, Optional

from meydan.core.context import FeedContext, Viewer
from meydan.services.realtime_service import ChangeFeedListener


class SessionRegistry:
    """
    로그인한 사용자별 FeedContext 를 보관합니다.
    세션이 열릴 때 피드를 집계하고 변경 피드를 구독하며, 닫힐 때 구독을 해제합니다.
    """

    def __init__(self, feed_service, db, listener_factory: Callable = ChangeFeedListener):
        self.feed_service = feed_service
        self.db = db
        self.listener_factory = listener_factory
        self._contexts: Dict[str, FeedContext] = {}
        self._lock = threading.Lock()

    def open(self, viewer: Viewer) -> FeedContext:
        with self._lock:
            context = self._contexts.get(viewer.user_id)
            if context is not None:
                return context
            context = FeedContext(viewer)
            self._contexts[viewer.user_id] = context

        # 첫 집계 도중의 쓰기를 놓치지 않도록 구독을 먼저 엽니다.
        listener = self.listener_factory(self.db, lambda: self.feed_service.load(context))
        listener.subscribe()
        context.listener = listener

        self.feed_service.load(context)
        logging.info(f"세션 시작 (user_id: {viewer.user_id}, status: {context.status.value})")
        return context

    def get(self, user_id: str) -> Optional[FeedContext]:
        with self._lock:
            return self._contexts.get(user_id)

    def get_or_open(self, viewer: Viewer) -> FeedContext:
        """유효한 토큰이지만 서버 재시작 등으로 컨텍스트가 없으면 다시 엽니다."""
        return self.get(viewer.user_id) or self.open(viewer)

    def close(self, user_id: str) -> bool:
        with self._lock:
            context = self._contexts.pop(user_id, None)
        if context is None:
            return False
        if context.listener is not None:
            context.listener.unsubscribe()
            context.listener = None
        logging.info(f"세션 종료 (user_id: {user_id})")
        return True

    def close_all(self):
        with self._lock:
            user_ids = list(self._contexts)
        for user_id in user_ids:
            self.close(user_id)
