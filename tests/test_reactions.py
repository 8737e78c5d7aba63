import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.errors import ConflictError, NotFoundError, UnauthenticatedError, ValidationError
from app.modules.notifications.models.notification import Notification
from app.modules.posts.models.post import Post
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.schemas.reaction import ReactionKind, ReactionState
from app.modules.posts.reactions.services import reaction as reaction_service
from app.modules.posts.reactions.services.reaction import get_reaction, toggle_reaction


def _like_count(db, post_id: str) -> int:
    return db.query(Post.like_count).filter(Post.id == post_id).scalar()


def _reaction_rows(db, post_id: str, kind: ReactionKind = ReactionKind.LIKE) -> int:
    return db.query(Reaction).filter(Reaction.post_id == post_id, Reaction.kind == kind.value).count()


def _notifications(db, post_id: str):
    return db.query(Notification).filter(Notification.related_id == post_id).all()


def test_like_adds_reaction_and_notifies_post_author(db, seeded):
    result = toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    assert result.state == ReactionState.ADDED
    assert result.count == 1
    assert _like_count(db, "p1") == 1
    notifications = _notifications(db, "p1")
    assert len(notifications) == 1
    assert notifications[0].user_id == "u2"
    assert notifications[0].actor_id == "u1"
    assert notifications[0].type == "LIKE"
    assert notifications[0].content == "alice liked your post"


def test_second_like_removes_without_new_notification(db, seeded):
    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)
    result = toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    assert result.state == ReactionState.REMOVED
    assert result.count == 0
    assert _like_count(db, "p1") == 0
    assert get_reaction(db, "u1", "p1", ReactionKind.LIKE) is None
    assert len(_notifications(db, "p1")) == 1


@pytest.mark.parametrize("toggles", [2, 4, 6])
def test_even_number_of_toggles_restores_state(db, seeded, toggles):
    for _ in range(toggles):
        toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    assert get_reaction(db, "u1", "p1", ReactionKind.LIKE) is None
    assert _like_count(db, "p1") == 0
    # One notification per added transition only
    assert len(_notifications(db, "p1")) == toggles // 2


def test_repost_toggles_independently_of_like(db, seeded):
    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)
    result = toggle_reaction(db, "u1", "p1", ReactionKind.REPOST)

    assert result.state == ReactionState.ADDED
    assert result.kind == ReactionKind.REPOST
    post = db.query(Post).filter(Post.id == "p1").one()
    assert post.like_count == 1
    assert post.repost_count == 1
    types = sorted(n.type for n in _notifications(db, "p1"))
    assert types == ["LIKE", "REPOST"]
    repost_notification = [n for n in _notifications(db, "p1") if n.type == "REPOST"][0]
    assert repost_notification.content == "alice reposted your post"

    assert toggle_reaction(db, "u1", "p1", "REPOST").state == ReactionState.REMOVED
    assert _reaction_rows(db, "p1", ReactionKind.REPOST) == 0
    assert _reaction_rows(db, "p1", ReactionKind.LIKE) == 1


def test_count_tracks_many_users(db, seeded):
    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)
    toggle_reaction(db, "u3", "p1", ReactionKind.LIKE)
    assert _like_count(db, "p1") == 2

    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)
    assert _like_count(db, "p1") == 1
    assert _reaction_rows(db, "p1") == 1


def test_author_liking_own_post_is_notified(db, seeded):
    result = toggle_reaction(db, "u2", "p1", ReactionKind.LIKE)

    assert result.state == ReactionState.ADDED
    notifications = _notifications(db, "p1")
    assert len(notifications) == 1
    assert notifications[0].user_id == "u2"


def test_toggle_requires_user(db, seeded):
    with pytest.raises(UnauthenticatedError):
        toggle_reaction(db, None, "p1", ReactionKind.LIKE)
    with pytest.raises(UnauthenticatedError):
        toggle_reaction(db, "", "p1", ReactionKind.LIKE)


def test_toggle_rejects_empty_post_id_and_unknown_kind(db, seeded):
    with pytest.raises(ValidationError):
        toggle_reaction(db, "u1", "", ReactionKind.LIKE)
    with pytest.raises(ValidationError):
        toggle_reaction(db, "u1", "p1", "LOVE")


def test_toggle_on_missing_post(db, seeded):
    with pytest.raises(NotFoundError):
        toggle_reaction(db, "u1", "nope", ReactionKind.LIKE)
    assert db.query(Notification).count() == 0


def test_post_deleted_before_recheck(db, seeded, monkeypatch):
    monkeypatch.setattr(reaction_service, "lock_post", lambda db, post_id: None)

    with pytest.raises(NotFoundError):
        toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    assert _reaction_rows(db, "p1") == 0
    assert db.query(Notification).count() == 0


def test_failed_notification_rolls_back_reaction(db, seeded, monkeypatch):
    def broken_notification(*args, **kwargs):
        raise SQLAlchemyError("notifications table unavailable")

    monkeypatch.setattr(reaction_service, "add_post_notification", broken_notification)

    with pytest.raises(SQLAlchemyError):
        toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    assert _reaction_rows(db, "p1") == 0
    assert _like_count(db, "p1") == 0
    assert db.query(Notification).count() == 0


def test_concurrent_like_already_applied_is_a_no_op(db, seeded, monkeypatch):
    # Another request liked the post between our lookup and our insert
    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    real_get_reaction = reaction_service.get_reaction
    calls = []

    def stale_first_read(db, user_id, post_id, kind):
        calls.append(kind)
        if len(calls) == 1:
            return None
        return real_get_reaction(db, user_id, post_id, kind)

    monkeypatch.setattr(reaction_service, "get_reaction", stale_first_read)

    result = toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    assert result.state == ReactionState.ADDED
    assert result.count == 1
    assert _reaction_rows(db, "p1") == 1
    assert len(_notifications(db, "p1")) == 1


def test_conflict_surfaces_after_one_retry(db, seeded, monkeypatch):
    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    calls = []

    def always_stale(db, user_id, post_id, kind):
        calls.append(kind)
        return None

    monkeypatch.setattr(reaction_service, "get_reaction", always_stale)

    with pytest.raises(ConflictError):
        toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    # Two attempts plus a re-read after each failed insert
    assert len(calls) == 4
    assert _reaction_rows(db, "p1") == 1
    assert len(_notifications(db, "p1")) == 1
    assert _like_count(db, "p1") == 1


def test_concurrent_unlike_already_applied(db, seeded, monkeypatch):
    gone = Reaction(id="already-deleted", kind="LIKE", author_id="u1", post_id="p1")
    monkeypatch.setattr(reaction_service, "get_reaction", lambda db, user_id, post_id, kind: gone)

    result = toggle_reaction(db, "u1", "p1", ReactionKind.LIKE)

    assert result.state == ReactionState.REMOVED
    assert result.count == 0
    assert db.query(Notification).count() == 0


def test_toggle_publishes_post_invalidation(db, seeded, bus):
    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE, bus=bus)
    toggle_reaction(db, "u1", "p1", ReactionKind.LIKE, bus=bus)

    assert bus.paths == ["/post/p1", "/post/p1"]


def test_failed_toggle_publishes_nothing(db, seeded, bus):
    with pytest.raises(NotFoundError):
        toggle_reaction(db, "u1", "missing", ReactionKind.LIKE, bus=bus)

    assert bus.paths == []


def test_unknown_kind_keeps_original_error(db, seeded):
    with pytest.raises(ValidationError) as excinfo:
        toggle_reaction(db, "u1", "p1", "LOVE")

    assert isinstance(excinfo.value.__cause__, ValueError)


def test_foreign_key_violation_is_not_retried_as_conflict(db, seeded, monkeypatch):
    real_get_reaction = reaction_service.get_reaction
    calls = []

    def counting_get_reaction(db, user_id, post_id, kind):
        calls.append(kind)
        return real_get_reaction(db, user_id, post_id, kind)

    monkeypatch.setattr(reaction_service, "get_reaction", counting_get_reaction)

    # No users row for this id
    with pytest.raises(IntegrityError) as excinfo:
        toggle_reaction(db, "ghost", "p1", ReactionKind.LIKE)

    assert not isinstance(excinfo.value, ConflictError)
    assert len(calls) == 1
    assert _reaction_rows(db, "p1") == 0
    assert _like_count(db, "p1") == 0
    assert db.query(Notification).count() == 0
