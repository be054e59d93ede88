# meydan/api/feed/services.py
import logging
from collections import Counter, defaultdict
from typing import List

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists

from meydan.core.context import FeedContext, Viewer
from meydan.core.errors import describe_error, is_setup_error
from meydan.models.comment import Comment
from meydan.models.feed import FeedAuthor, FeedComment, FeedPost
from meydan.models.post import Post
from meydan.models.profile import Profile, default_avatar_url, default_profile_name
from meydan.utils.datetime_utils import now


class FeedService:
    """
    피드 집계 로직을 담당하는 서비스 클래스.
    - 현재 사용자의 프로필을 확인(없으면 생성)하고
    - 게시물, 작성자, 댓글, 좋아요를 읽어 하나의 비정규화 뷰로 합칩니다.
    증분 갱신은 없으며 호출될 때마다 전체를 다시 계산합니다.
    """

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.profiles_ref = self.db.collection('profiles')
        self.posts_ref = self.db.collection('posts')
        self.likes_ref = self.db.collection('likes')
        self.comments_ref = self.db.collection('comments')

    def ensure_profile(self, viewer: Viewer) -> Profile:
        """
        현재 사용자의 프로필을 반환합니다. 없으면 기본값으로 생성합니다.
        다른 클라이언트가 동시에 먼저 만들어 충돌이 나면 성공으로 보고 다시 읽습니다.
        """
        profile_ref = self.profiles_ref.document(viewer.user_id)
        doc = profile_ref.get()
        if doc.exists:
            return Profile.from_document(doc.id, doc.to_dict())

        profile_data = {
            'id': viewer.user_id,
            'name': default_profile_name(viewer.email),
            'avatar_url': default_avatar_url(viewer.user_id),
            'updated_at': now(),
        }
        try:
            profile_ref.create(profile_data)
            logging.info(f"새 프로필 생성 (user_id: {viewer.user_id})")
            return Profile.from_document(viewer.user_id, profile_data)
        except AlreadyExists:
            logging.info(f"프로필이 동시에 생성되어 다시 조회합니다 (user_id: {viewer.user_id})")

        doc = profile_ref.get()
        return Profile.from_document(doc.id, doc.to_dict())

    def build_feed(self, viewer_id: str) -> List[FeedPost]:
        """게시물(최신순)에 작성자, 댓글(오래된 순), 좋아요 수, 내 좋아요 여부를 붙입니다."""
        post_docs = self.posts_ref.order_by('created_at', direction=firestore.Query.DESCENDING).stream()
        posts = [Post.from_document(doc.id, doc.to_dict()) for doc in post_docs]

        profiles = {doc.id: Profile.from_document(doc.id, doc.to_dict()) for doc in self.profiles_ref.stream()}

        comments_by_post = defaultdict(list)
        for doc in self.comments_ref.stream():
            comment = Comment.from_document(doc.id, doc.to_dict())
            comments_by_post[comment.post_id].append(comment)

        like_rows = [doc.to_dict() for doc in self.likes_ref.stream()]
        like_counts = Counter(row['post_id'] for row in like_rows)
        liked_post_ids = {row['post_id'] for row in like_rows if row['user_id'] == viewer_id}

        feed = []
        for post in posts:
            comments = sorted(comments_by_post.get(post.id, []), key=lambda c: c.created_at)
            feed.append(FeedPost(
                id=post.id,
                user=FeedAuthor.from_profile(profiles.get(post.user_id), post.user_id),
                content=post.content,
                media=post.media,
                created_at=post.created_at,
                updated_at=post.updated_at,
                likes=like_counts.get(post.id, 0),
                is_liked=post.id in liked_post_ids,
                comments=[
                    FeedComment(
                        id=c.id,
                        text=c.text,
                        created_at=c.created_at,
                        user=FeedAuthor.from_profile(profiles.get(c.user_id), c.user_id),
                    )
                    for c in comments
                ],
            ))
        return feed

    def load(self, context: FeedContext) -> FeedContext:
        """
        컨텍스트의 뷰를 백엔드 기준으로 다시 만듭니다.
        컬렉션/스키마가 준비되지 않은 오류는 설정 안내 상태로, 그 외 오류는 배너로 보냅니다.
        """
        viewer = context.viewer
        generation = context.begin_load()
        try:
            profile = self.ensure_profile(viewer)
            posts = self.build_feed(viewer.user_id)
        except Exception as e:
            if not context.is_latest_load(generation):
                logging.info(f"더 최근 집계가 있어 실패한 집계 결과를 무시합니다 (user_id: {viewer.user_id}): {e}")
            elif is_setup_error(e):
                logging.warning(f"피드 백엔드 설정이 필요합니다 (user_id: {viewer.user_id}): {e}")
                context.require_setup()
            else:
                logging.error(f"피드 조회 실패 (user_id: {viewer.user_id}): {e}", exc_info=True)
                context.report_error(f"피드를 불러오지 못했습니다: {describe_error(e)}")
                context.mark_loaded()
            return context

        # 집계 도중 변경 피드가 새 집계를 시작했다면 그쪽 결과가 최신
        if not context.replace_view(profile, posts, generation):
            logging.info(f"더 최근 집계가 있어 이번 결과를 버립니다 (user_id: {viewer.user_id})")
        return context

    def refresh(self, context: FeedContext) -> FeedContext:
        """사용자가 직접 새로고침할 때 이전 배너를 지우고 다시 집계합니다."""
        context.dismiss_error()
        return self.load(context)
