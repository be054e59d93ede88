# meydan/api/users/services.py
import logging
from typing import Dict, Any

from firebase_admin import firestore

from meydan.core.context import FeedContext
from meydan.core.errors import MutationError, describe_error
from meydan.utils.datetime_utils import now


class UserService:
    """프로필 수정. 프로필은 본인만 바꿀 수 있습니다."""

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.profiles_ref = self.db.collection('profiles')

    def update_profile(self, context: FeedContext, changes: Dict[str, Any]):
        """현재 사용자의 프로필을 갱신합니다. 화면 반영은 변경 피드의 재집계가 담당합니다."""
        user_id = context.viewer.user_id
        try:
            self.profiles_ref.document(user_id).update({**changes, 'updated_at': now()})
        except Exception as e:
            message = describe_error(e)
            logging.error(f"프로필 수정 실패 (user_id: {user_id}): {message}", exc_info=True)
            context.report_error(f"프로필 수정 실패: {message}")
            raise MutationError(message) from e
