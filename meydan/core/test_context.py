# meydan/core/test_context.py
from datetime import datetime, timezone

import pytest

from meydan.core.context import FeedContext, FeedStatus, Viewer
from meydan.core.optimistic import optimistic_update
from meydan.models.feed import FeedAuthor, FeedPost
from meydan.models.profile import Profile

CREATED = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_post(post_id, user_id="alice", likes=0, is_liked=False):
    return FeedPost(
        id=post_id,
        user=FeedAuthor(id=user_id, name=user_id, avatar=f"https://avatars.example/{user_id}"),
        content=f"post {post_id}",
        created_at=CREATED,
        updated_at=CREATED,
        likes=likes,
        is_liked=is_liked,
    )


@pytest.fixture
def context():
    ctx = FeedContext(Viewer(user_id="alice", email="alice@example.com"))
    ctx.replace_view(
        Profile(id="alice", name="alice", avatar_url="https://avatars.example/alice"),
        [make_post("p2", likes=3, is_liked=True), make_post("p1", user_id="bob", likes=1)],
    )
    return ctx


def test_new_context_starts_loading():
    ctx = FeedContext(Viewer(user_id="alice"))
    assert ctx.status is FeedStatus.LOADING
    ctx.mark_loaded()
    assert ctx.status is FeedStatus.READY


def test_flip_like_updates_count_and_flag(context):
    context.flip_like("p1")
    post = context.find_post("p1")
    assert (post.likes, post.is_liked) == (2, True)

    context.flip_like("p2")
    post = context.find_post("p2")
    assert (post.likes, post.is_liked) == (2, False)


def test_queries(context):
    assert [p.id for p in context.posts_by("alice")] == ["p2"]
    assert [p.id for p in context.liked_posts()] == ["p2"]
    context.remove_post("p2")
    assert context.find_post("p2") is None


def test_setup_state_transitions(context):
    context.require_setup()
    assert context.setup_required
    context.leave_setup()
    assert context.status is FeedStatus.LOADING
    # 설정 안내 상태는 mark_loaded 로 벗어나지 않음
    context.require_setup()
    context.mark_loaded()
    assert context.setup_required


def test_error_banner(context):
    context.report_error("좋아요 처리 실패: boom")
    assert context.error == "좋아요 처리 실패: boom"
    context.dismiss_error()
    assert context.error is None


def test_optimistic_update_keeps_changes_on_success(context):
    with optimistic_update(context):
        context.flip_like("p1")
    assert context.find_post("p1").is_liked


def test_optimistic_update_restores_exact_snapshot_on_failure(context):
    before = context.snapshot()

    with pytest.raises(RuntimeError):
        with optimistic_update(context):
            context.flip_like("p1")
            context.remove_post("p2")
            raise RuntimeError("network down")

    assert context.posts == before


def test_snapshot_is_independent_copy(context):
    snapshot = context.snapshot()
    context.find_post("p1").comments.append("mutated")
    assert snapshot[1].comments == []


def test_stale_load_result_is_discarded(context):
    older = context.begin_load()
    newer = context.begin_load()
    profile = context.profile

    assert context.replace_view(profile, [make_post("fresh")], newer) is True
    assert context.replace_view(profile, [make_post("stale")], older) is False
    assert [p.id for p in context.posts] == ["fresh"]
    assert not context.is_latest_load(older)
