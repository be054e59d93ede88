# meydan/services/realtime_service.py
import logging
import threading
from typing import Callable, List, Set

WATCHED_COLLECTIONS = ('profiles', 'posts', 'likes', 'comments')


class ChangeFeedListener:
    """
    피드와 관련된 모든 컬렉션의 변경을 하나의 채널처럼 구독합니다.

    Firestore는 여러 컬렉션을 한 번에 감시할 수 없으므로 컬렉션마다 on_snapshot
    감시를 열고, 어느 쪽에서든 변경이 오면 on_change 를 한 번 호출합니다.
    이벤트 내용은 보지 않으며 디바운스도 하지 않습니다.
    """

    def __init__(self, db, on_change: Callable[[], None], collections=WATCHED_COLLECTIONS):
        self.db = db
        self.on_change = on_change
        self.collections = tuple(collections)
        self._watches: List = []
        self._primed: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return bool(self._watches)

    def subscribe(self):
        if self._watches:
            return
        for name in self.collections:
            watch = self.db.collection(name).on_snapshot(self._callback_for(name))
            self._watches.append(watch)
        logging.info(f"변경 피드 구독 시작: {', '.join(self.collections)}")

    def _callback_for(self, name: str):
        def _on_snapshot(docs, changes, read_time):
            self._handle_snapshot(name)
        return _on_snapshot

    def _handle_snapshot(self, name: str):
        # 감시를 연 직후 한 번 오는 스냅샷은 현재 상태일 뿐 변경이 아님
        with self._lock:
            if name not in self._primed:
                self._primed.add(name)
                return
        try:
            self.on_change()
        except Exception as e:
            logging.error(f"변경 피드 처리 중 오류 ({name}): {e}", exc_info=True)

    def unsubscribe(self):
        watches, self._watches = self._watches, []
        for watch in watches:
            try:
                watch.unsubscribe()
            except Exception as e:
                logging.warning(f"변경 피드 구독 해제 실패: {e}")
        self._primed.clear()
        if watches:
            logging.info("변경 피드 구독 해제 완료")
