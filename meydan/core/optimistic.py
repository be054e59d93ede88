# meydan/core/optimistic.py
import logging
from contextlib import contextmanager

from meydan.core.context import FeedContext


@contextmanager
def optimistic_update(context: FeedContext):
    """
    낙관적 업데이트 래퍼.

    진입 시 현재 뷰의 스냅샷을 잡아두고, 블록 안에서 로컬 뷰를 먼저 바꾼 뒤
    원격 작업을 수행합니다. 블록에서 예외가 나면 새로 조회한 상태가 아니라
    잡아둔 스냅샷 그대로 뷰를 되돌리고 예외를 다시 던집니다.

        with optimistic_update(context):
            context.flip_like(post_id)
            remote_call()
    """
    snapshot = context.snapshot()
    try:
        yield snapshot
    except Exception:
        context.restore(snapshot)
        logging.info(f"낙관적 업데이트 롤백 (user_id: {context.viewer.user_id})")
        raise
