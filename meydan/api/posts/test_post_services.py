# meydan/api/posts/test_post_services.py
import logging
from datetime import datetime, timezone

import pytest
from google.api_core.exceptions import PermissionDenied, ServiceUnavailable

from meydan.api.feed.services import FeedService
from meydan.api.posts.services import PostService
from meydan.core.context import FeedContext, Viewer
from meydan.core.errors import EmptyPostError, MutationError, PostNotFoundError
from meydan.models.post import Media, MediaType
from meydan.services.storage_service import StorageService

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage_service(app, fake_bucket):
    storage = StorageService()
    storage.init_app(app, bucket=fake_bucket)
    return storage


@pytest.fixture
def post_service(fake_db, storage_service):
    return PostService(storage_service=storage_service, db=fake_db)


@pytest.fixture
def context(fake_db, fake_bucket):
    media_url = f"https://storage.googleapis.com/{fake_bucket.name}/alice/abc.png"
    fake_bucket.objects['alice/abc.png'] = b'png'
    fake_db.seed('posts', 'mine', {
        'id': 'mine', 'user_id': 'alice', 'content': 'my post',
        'media_url': media_url, 'media_type': 'image', 'created_at': T0, 'updated_at': T0,
    })
    fake_db.seed('posts', 'theirs', {
        'id': 'theirs', 'user_id': 'bob', 'content': 'their post',
        'media_url': None, 'media_type': None, 'created_at': T0, 'updated_at': T0,
    })
    ctx = FeedContext(Viewer(user_id="alice", email="alice@example.com"))
    FeedService(db=fake_db).load(ctx)
    return ctx


# --- 생성 ---
def test_create_post_requires_content_or_media(fake_db, post_service, context):
    with pytest.raises(EmptyPostError):
        post_service.create_post(context, "   ")
    assert len(fake_db.docs('posts')) == 2


def test_create_post_with_media_only(fake_db, post_service, context):
    media = Media(url="https://storage.googleapis.com/meydan-media/alice/v.mp4", type=MediaType.VIDEO)
    post = post_service.create_post(context, "", media)

    stored = fake_db.docs('posts')[post.id]
    assert stored['media_type'] == 'video'
    assert stored['created_at'] == stored['updated_at']
    assert stored['user_id'] == 'alice'


def test_create_post_failure_reports_backend_message(fake_db, post_service, context):
    fake_db.fail('posts', 'set', PermissionDenied("new row violates row-level security policy"))

    with pytest.raises(MutationError) as exc_info:
        post_service.create_post(context, "hello")

    assert exc_info.value.message == "new row violates row-level security policy"
    assert context.error == "게시물 작성 실패: new row violates row-level security policy"


# --- 수정 ---
def test_update_with_same_content_is_noop(fake_db, post_service, context):
    fake_db.fail('posts', 'update', AssertionError("must not be called"))
    assert post_service.update_post(context, 'mine', 'my post') is False


def test_update_changes_content_and_timestamp(fake_db, post_service, context):
    assert post_service.update_post(context, 'mine', 'edited') is True
    stored = fake_db.docs('posts')['mine']
    assert stored['content'] == 'edited'
    assert stored['updated_at'] > T0


def test_update_others_post_is_forbidden(post_service, context):
    with pytest.raises(PermissionError):
        post_service.update_post(context, 'theirs', 'hijack')


def test_update_unknown_post(post_service, context):
    with pytest.raises(PostNotFoundError):
        post_service.update_post(context, 'nope', 'text')


# --- 좋아요 ---
def test_like_twice_returns_to_original_state(fake_db, post_service, context):
    assert post_service.toggle_like(context, 'theirs') is True
    assert 'alice_theirs' in fake_db.docs('likes')
    post = context.find_post('theirs')
    assert (post.likes, post.is_liked) == (1, True)

    assert post_service.toggle_like(context, 'theirs') is False
    assert fake_db.docs('likes') == {}
    post = context.find_post('theirs')
    assert (post.likes, post.is_liked) == (0, False)


def test_failed_like_rolls_back_to_snapshot(fake_db, post_service, context):
    before = context.snapshot()
    fake_db.fail('likes', 'create', ServiceUnavailable("network down"))

    with pytest.raises(MutationError):
        post_service.toggle_like(context, 'theirs')

    assert context.posts == before
    assert context.error == "좋아요 처리 실패: network down"


# --- 삭제 ---
def test_delete_removes_post_and_media(fake_db, fake_bucket, post_service, context):
    post_service.delete_post(context, 'mine')

    assert context.find_post('mine') is None
    assert 'mine' not in fake_db.docs('posts')
    assert fake_bucket.objects == {}


def test_delete_survives_media_failure(fake_db, fake_bucket, post_service, context, caplog):
    fake_bucket.delete_error = ServiceUnavailable("storage unavailable")

    with caplog.at_level(logging.ERROR):
        post_service.delete_post(context, 'mine')

    assert 'mine' not in fake_db.docs('posts')
    assert "storage unavailable" in caplog.text


def test_failed_delete_restores_post(fake_db, fake_bucket, post_service, context):
    before = context.snapshot()
    fake_db.fail('posts', 'delete', PermissionDenied("permission denied"))

    with pytest.raises(MutationError):
        post_service.delete_post(context, 'mine')

    assert context.posts == before
    assert 'mine' in fake_db.docs('posts')
    # 복원된 게시물의 미디어도 그대로 남아 있어야 함
    assert 'alice/abc.png' in fake_bucket.objects


def test_delete_others_post_is_forbidden(post_service, context):
    with pytest.raises(PermissionError):
        post_service.delete_post(context, 'theirs')
    assert context.find_post('theirs') is not None


# --- 댓글 ---
def test_add_comment_does_not_touch_local_view(fake_db, post_service, context):
    comment = post_service.add_comment(context, 'theirs', 'nice!')

    assert fake_db.docs('comments')[comment.id]['text'] == 'nice!'
    assert context.find_post('theirs').comments == []


def test_add_empty_comment_is_rejected(fake_db, post_service, context):
    with pytest.raises(ValueError):
        post_service.add_comment(context, 'theirs', '  ')
    assert fake_db.docs('comments') == {}
