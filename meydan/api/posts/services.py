# meydan/api/posts/services.py
import logging
import uuid
from typing import Optional

from firebase_admin import firestore

from meydan.core.context import FeedContext
from meydan.core.errors import (
    EmptyPostError, MutationError, PostNotFoundError, describe_error
)
from meydan.core.optimistic import optimistic_update
from meydan.models.comment import Comment
from meydan.models.like import Like, like_id
from meydan.models.post import Media, Post
from meydan.services.storage_service import StorageService
from meydan.utils.datetime_utils import now


class PostService:
    """
    게시물/좋아요/댓글 변경을 담당하는 서비스 클래스.

    - 생성, 수정, 댓글: 낙관적 반영 없이 바로 전송하고, 결과는 다음 전체 집계에서 보입니다.
    - 삭제, 좋아요 토글: 로컬 뷰를 먼저 바꾸고, 실패하면 직전 스냅샷으로 되돌립니다.
    실패 시 백엔드 오류 원문을 컨텍스트의 배너에 남기고 MutationError 를 던집니다.
    """

    def __init__(self, storage_service: StorageService, db=None):
        self.db = db or firestore.client()
        self.storage_service = storage_service
        self.posts_ref = self.db.collection('posts')
        self.likes_ref = self.db.collection('likes')
        self.comments_ref = self.db.collection('comments')

    def _fail(self, context: FeedContext, action: str, err: Exception) -> MutationError:
        message = describe_error(err)
        logging.error(f"{action} 실패 (user_id: {context.viewer.user_id}): {message}", exc_info=True)
        context.report_error(f"{action} 실패: {message}")
        return MutationError(message)

    def _owned_post(self, context: FeedContext, post_id: str):
        post = context.find_post(post_id)
        if post is None:
            raise PostNotFoundError(f"게시물을 찾을 수 없습니다: {post_id}")
        if post.user.id != context.viewer.user_id:
            raise PermissionError("본인이 작성한 게시물만 변경할 수 있습니다.")
        return post

    def create_post(self, context: FeedContext, content: Optional[str], media: Optional[Media] = None) -> Post:
        """새 게시물을 저장합니다. 내용과 미디어가 모두 없으면 네트워크 호출 전에 거부합니다."""
        content = content or ""
        if not content.strip() and media is None:
            raise EmptyPostError("게시물에는 내용이나 미디어가 필요합니다.")

        created_at = now()
        post = Post(
            id=str(uuid.uuid4()),
            user_id=context.viewer.user_id,
            content=content,
            media=media,
            created_at=created_at,
            updated_at=created_at,
        )
        try:
            self.posts_ref.document(post.id).set(post.to_document())
        except Exception as e:
            raise self._fail(context, "게시물 작성", e) from e

        logging.info(f"게시물 생성 (post_id: {post.id}, user_id: {post.user_id})")
        return post

    def update_post(self, context: FeedContext, post_id: str, content: str) -> bool:
        """
        본인 게시물의 내용을 바꿉니다.
        내용이 그대로면 '수정됨' 표시가 생기지 않도록 아무것도 보내지 않고 False 를 반환합니다.
        """
        post = self._owned_post(context, post_id)
        if content == post.content:
            return False
        if not content.strip() and post.media is None:
            raise EmptyPostError("미디어가 없는 게시물의 내용은 비울 수 없습니다.")

        try:
            self.posts_ref.document(post_id).update({'content': content, 'updated_at': now()})
        except Exception as e:
            raise self._fail(context, "게시물 수정", e) from e
        return True

    def delete_post(self, context: FeedContext, post_id: str):
        """
        본인 게시물을 뷰에서 먼저 지운 뒤 백엔드에서 삭제합니다.
        미디어는 문서 삭제가 성공한 뒤에만 지우며, 최선 노력이라 실패해도 예외를 던지지 않습니다.
        """
        post = self._owned_post(context, post_id)
        try:
            with optimistic_update(context):
                context.remove_post(post_id)
                self.posts_ref.document(post_id).delete()
        except Exception as e:
            raise self._fail(context, "게시물 삭제", e) from e

        if post.media is not None:
            self.storage_service.delete_media(post.media.url)
        logging.info(f"게시물 삭제 (post_id: {post_id})")

    def toggle_like(self, context: FeedContext, post_id: str) -> bool:
        """
        좋아요를 누르거나 취소합니다. 로컬 좋아요 상태와 수를 먼저 뒤집고,
        (사용자, 게시물) 좋아요 문서가 있으면 삭제, 없으면 생성합니다.

        :return: 토글 후 좋아요 상태
        """
        if context.find_post(post_id) is None:
            raise PostNotFoundError(f"게시물을 찾을 수 없습니다: {post_id}")

        user_id = context.viewer.user_id
        like_ref = self.likes_ref.document(like_id(user_id, post_id))
        try:
            with optimistic_update(context):
                context.flip_like(post_id)
                if like_ref.get().exists:
                    like_ref.delete()
                    is_liked = False
                else:
                    like = Like(user_id=user_id, post_id=post_id)
                    like_ref.create({'id': like.id, 'user_id': like.user_id, 'post_id': like.post_id, 'created_at': like.created_at})
                    is_liked = True
        except Exception as e:
            raise self._fail(context, "좋아요 처리", e) from e
        return is_liked

    def add_comment(self, context: FeedContext, post_id: str, text: str) -> Comment:
        """댓글을 저장합니다. 로컬 뷰에는 넣지 않으며 다음 집계에서 나타납니다."""
        if not text or not text.strip():
            raise ValueError("댓글 내용이 비어 있습니다.")

        comment = Comment(
            id=str(uuid.uuid4()),
            user_id=context.viewer.user_id,
            post_id=post_id,
            text=text,
        )
        try:
            self.comments_ref.document(comment.id).set({
                'id': comment.id,
                'user_id': comment.user_id,
                'post_id': comment.post_id,
                'text': comment.text,
                'created_at': comment.created_at,
            })
        except Exception as e:
            raise self._fail(context, "댓글 작성", e) from e
        return comment
