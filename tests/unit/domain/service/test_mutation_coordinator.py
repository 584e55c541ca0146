"""Unit tests for OptimisticMutationCoordinator."""

import asyncio

import pytest

from engage.domain.error import (
    MutationInFlightError,
    NetworkError,
    NotFoundError,
    RejectedError,
    UnknownGatewayError,
    ValidationError,
)
from engage.domain.model.reply import Reply
from engage.domain.repository import EntityCache
from engage.domain.service import EngagementGateway, OptimisticMutationCoordinator
from engage.domain.value import EntityId, MutationKind, MutationState, SubjectId, TopicId
from tests.conftest import make_article, make_reply
from tests.harness import create_env_fixture

# Unit test fixture - gateway mocked
unit_env = create_env_fixture()


class TestCounterMutations:
    """Tests for like and dislike mutations."""

    @pytest.mark.asyncio
    async def test_like_is_visible_before_server_answers(self, unit_env):
        """The cache should hold the incremented count while the call is in flight."""
        # Arrange
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", like_count=4))
        gateway.hold()

        # Act
        ticket = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)

        # Assert
        assert cache.get("kc-1").like_count == 5
        assert ticket.optimistic.like_count == 5
        assert ticket.is_pending
        assert coordinator.state_of("kc-1", MutationKind.LIKE) is MutationState.PENDING

        gateway.release()
        outcome = await ticket.wait()
        assert outcome.state is MutationState.COMMITTED
        assert outcome.succeeded
        assert cache.get("kc-1").like_count == 5
        assert coordinator.state_of("kc-1", MutationKind.LIKE) is MutationState.IDLE

    @pytest.mark.asyncio
    async def test_server_count_wins_on_commit(self, unit_env):
        """An authoritative count in the acknowledgement should overwrite the local one."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", like_count=4))
        # Server already saw other likes
        gateway.like_counts[EntityId("kc-1")] = 10

        ticket = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)
        assert cache.get("kc-1").like_count == 5
        outcome = await ticket.wait()

        assert cache.get("kc-1").like_count == 11
        assert outcome.entity.like_count == 11

    @pytest.mark.asyncio
    async def test_failed_like_restores_count_exactly(self, unit_env):
        """A failed like should restore the value seen before the click."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", like_count=7, dislike_count=2))
        gateway.fail_next(NetworkError("connection reset"))

        ticket = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)
        outcome = await ticket.wait()

        assert outcome.state is MutationState.ROLLED_BACK
        assert isinstance(outcome.error, NetworkError)
        assert outcome.error.retryable
        assert cache.get("kc-1").like_count == 7
        assert cache.get("kc-1").dislike_count == 2
        assert not coordinator.is_pending("kc-1", MutationKind.LIKE)

    @pytest.mark.asyncio
    async def test_like_and_dislike_in_flight_together(self, unit_env):
        """Rolling back one counter should not disturb the other."""
        # Arrange
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", like_count=7, dislike_count=3))
        gateway.hold()

        # Act
        like = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)
        dislike = coordinator.submit(EntityId("kc-1"), MutationKind.DISLIKE)
        assert cache.get("kc-1").like_count == 8
        assert cache.get("kc-1").dislike_count == 4

        # Held calls resume in order, so the like takes the failure
        gateway.fail_next(RejectedError("Not allowed", status_code=403))
        gateway.release()
        like_outcome = await like.wait()
        dislike_outcome = await dislike.wait()

        # Assert
        assert like_outcome.state is MutationState.ROLLED_BACK
        assert dislike_outcome.state is MutationState.COMMITTED
        assert cache.get("kc-1").like_count == 7
        assert cache.get("kc-1").dislike_count == 4

    @pytest.mark.asyncio
    async def test_like_on_reply_rejected(self, unit_env):
        """Replies have no like counter."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1"))

        with pytest.raises(ValidationError):
            coordinator.submit(EntityId("r1"), MutationKind.LIKE)

        assert gateway.calls == []
        assert coordinator.pending_count == 0


class TestInFlightRejection:
    """Tests for duplicate (entity, kind) submissions."""

    @pytest.mark.asyncio
    async def test_repeat_while_pending_rejected(self, unit_env):
        """A second identical action should fail without touching cache or network."""
        # Arrange
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1"))
        gateway.hold()
        changes = []
        cache.subscribe(changes.append)

        ticket = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        assert len(changes) == 1

        # Act / Assert
        with pytest.raises(MutationInFlightError) as exc_info:
            coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))

        assert exc_info.value.entity_id == "r1"
        assert exc_info.value.kind == "upvote"
        assert len(changes) == 1
        assert cache.get("r1").upvoters == {"u1"}

        gateway.release()
        await ticket.wait()
        assert len(gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_repeat_allowed_after_settle(self, unit_env):
        """Once the first call settles, the same action is accepted again."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        cache.put(make_reply("r1"))

        first = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        await first.wait()
        second = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        await second.wait()

        assert cache.get("r1").upvoters == frozenset()

    @pytest.mark.asyncio
    async def test_different_kinds_do_not_block_each_other(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1"))
        gateway.hold()

        up = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        down = coordinator.submit(EntityId("r1"), MutationKind.DOWNVOTE, SubjectId("u1"))

        assert coordinator.pending_count == 2
        assert cache.get("r1").downvoters == {"u1"}
        assert cache.get("r1").upvoters == frozenset()

        gateway.release()
        await up.wait()
        await down.wait()
        assert coordinator.pending_count == 0


class TestVoteMutations:
    """Tests for upvote and downvote mutations."""

    @pytest.mark.asyncio
    async def test_vote_commits_membership(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1", downvoters=["u1"]))

        ticket = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        outcome = await ticket.wait()

        assert outcome.succeeded
        assert cache.get("r1").upvoters == {"u1"}
        assert cache.get("r1").downvoters == frozenset()
        assert gateway.calls[0][0] == "submit_vote"

    @pytest.mark.asyncio
    async def test_rejected_vote_restores_both_sets(self, unit_env):
        """A rejected upvote that displaced a downvote should put the downvote back."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1", upvoters=["u2"], downvoters=["u1"]))
        gateway.fail_next(RejectedError("Topic closed", status_code=409))

        ticket = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        outcome = await ticket.wait()

        assert outcome.state is MutationState.ROLLED_BACK
        assert isinstance(outcome.error, RejectedError)
        assert outcome.error.status_code == 409
        assert not outcome.error.retryable
        assert cache.get("r1").upvoters == {"u2"}
        assert cache.get("r1").downvoters == {"u1"}

    @pytest.mark.asyncio
    async def test_rejected_upvote_keeps_later_downvote(self, unit_env):
        """Rolling back an upvote should not undo the same subject's later downvote."""
        # Arrange
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1"))
        gateway.hold()

        up = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        down = coordinator.submit(EntityId("r1"), MutationKind.DOWNVOTE, SubjectId("u1"))
        assert cache.get("r1").downvoters == {"u1"}

        # Act
        gateway.fail_next(RejectedError("Vote refused", status_code=409))
        gateway.release()
        up_outcome = await up.wait()
        down_outcome = await down.wait()

        # Assert
        assert up_outcome.state is MutationState.ROLLED_BACK
        assert down_outcome.succeeded
        assert cache.get("r1").upvoters == frozenset()
        assert cache.get("r1").downvoters == {"u1"}

    @pytest.mark.asyncio
    async def test_rejected_vote_keeps_other_subjects_votes(self, unit_env):
        """Rollback should only touch the acting subject's membership."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1"))
        gateway.hold()

        up = coordinator.submit(EntityId("r1"), MutationKind.UPVOTE, SubjectId("u1"))
        down = coordinator.submit(EntityId("r1"), MutationKind.DOWNVOTE, SubjectId("u2"))
        gateway.fail_next(NetworkError("timeout"))
        gateway.release()
        await up.wait()
        await down.wait()

        assert cache.get("r1").upvoters == frozenset()
        assert cache.get("r1").downvoters == {"u2"}

    @pytest.mark.asyncio
    async def test_vote_without_subject_rejected(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        cache.put(make_reply("r1"))

        with pytest.raises(ValidationError, match="subject"):
            coordinator.submit(EntityId("r1"), MutationKind.UPVOTE)

        assert coordinator.pending_count == 0

    @pytest.mark.asyncio
    async def test_vote_on_article_rejected(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        cache.put(make_article("kc-1"))

        with pytest.raises(ValidationError, match="not votable"):
            coordinator.submit(EntityId("kc-1"), MutationKind.DOWNVOTE, SubjectId("u1"))


class TestFailureHandling:
    """Tests for error mapping and unusual reconciliation paths."""

    @pytest.mark.asyncio
    async def test_unknown_entity_raises_not_found(self, unit_env):
        """Nothing should be dispatched for an entity that is not cached."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        gateway = await unit_env.get(EngagementGateway)

        with pytest.raises(NotFoundError):
            coordinator.submit(EntityId("missing"), MutationKind.LIKE)

        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_reply_kind_rejected_by_submit(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)

        with pytest.raises(ValidationError):
            coordinator.submit(EntityId("r1"), MutationKind.REPLY, SubjectId("u1"))

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_unknown_error(self, unit_env):
        """Errors outside the gateway taxonomy should still roll back."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", dislike_count=1))
        gateway.fail_next(RuntimeError("boom"))

        outcome = await coordinator.submit(EntityId("kc-1"), MutationKind.DISLIKE).wait()

        assert isinstance(outcome.error, UnknownGatewayError)
        assert isinstance(outcome.error.__cause__, RuntimeError)
        assert cache.get("kc-1").dislike_count == 1

    @pytest.mark.asyncio
    async def test_entity_removed_while_in_flight(self, unit_env):
        """Reconciliation should not resurrect an entity that left the cache."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1"))
        cache.put(make_article("kc-2"))
        gateway.hold()

        # Calls run in submission order, so the first one takes the failure
        failed = coordinator.submit(EntityId("kc-2"), MutationKind.LIKE)
        committed = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)
        cache.remove(EntityId("kc-1"))
        cache.remove(EntityId("kc-2"))

        gateway.fail_next(NetworkError("timeout"))
        gateway.release()
        rolled_back = await failed.wait()
        accepted = await committed.wait()

        assert rolled_back.state is MutationState.ROLLED_BACK
        assert rolled_back.entity is None
        assert accepted.state is MutationState.COMMITTED
        assert accepted.entity is None
        assert not cache.contains("kc-1")
        assert not cache.contains("kc-2")
        assert coordinator.pending_count == 0

    @pytest.mark.asyncio
    async def test_cancelled_round_trip_rolls_back(self, unit_env):
        """Cancelling the round trip should restore the snapshot."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", like_count=2))
        gateway.hold()

        ticket = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(ticket.wait(), timeout=0.05)

        assert not ticket.is_pending
        assert cache.get("kc-1").like_count == 2
        assert not coordinator.is_pending("kc-1", MutationKind.LIKE)
        gateway.release()

    @pytest.mark.asyncio
    async def test_reset_forgets_pending(self, unit_env):
        """After a reset the same action is accepted even if the old call is in flight."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1"))
        gateway.hold()

        old = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)
        coordinator.reset()
        new = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)

        assert coordinator.pending_count == 1
        assert cache.get("kc-1").like_count == 2

        gateway.release()
        await old.wait()
        await new.wait()
        assert coordinator.pending_count == 0
        assert cache.get("kc-1").like_count == 2


class TestStaleRoundTrips:
    """Tests for round trips that outlive a session reset."""

    @pytest.mark.asyncio
    async def test_rollback_after_reset_leaves_reseeded_cache_alone(self, unit_env):
        """A failure from the previous session should not restore its snapshot."""
        # Arrange
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", like_count=4))
        gateway.hold()
        ticket = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)

        coordinator.reset()
        cache.clear()
        cache.put(make_article("kc-1", like_count=10))

        # Act
        gateway.fail_next(NetworkError("offline"))
        gateway.release()
        outcome = await ticket.wait()

        # Assert
        assert outcome.state is MutationState.ROLLED_BACK
        assert outcome.entity is None
        assert cache.get("kc-1").like_count == 10

    @pytest.mark.asyncio
    async def test_commit_after_reset_ignores_server_count(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_article("kc-1", like_count=4))
        gateway.like_counts[EntityId("kc-1")] = 20
        gateway.hold()
        ticket = coordinator.submit(EntityId("kc-1"), MutationKind.LIKE)

        coordinator.reset()
        cache.clear()
        cache.put(make_article("kc-1", like_count=10))
        gateway.release()
        outcome = await ticket.wait()

        assert outcome.succeeded
        assert outcome.entity is None
        assert cache.get("kc-1").like_count == 10


class TestReplyMutations:
    """Tests for submit_reply."""

    @pytest.mark.asyncio
    async def test_provisional_reply_swapped_for_server_reply(self, unit_env):
        """The confirmed reply should take the provisional reply's position."""
        # Arrange
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("r1"))
        gateway.hold()

        # Act
        ticket = coordinator.submit_reply(
            TopicId("topic-1"), SubjectId("user-123456"), "  New reply  ", "You", "just now"
        )
        provisional = cache.get(ticket.entity_id)

        # Assert
        assert isinstance(provisional, Reply)
        assert provisional.is_provisional
        assert provisional.text == "New reply"
        assert [r.id for r in cache.find_replies("topic-1")] == ["r1", ticket.entity_id]

        cache.put(make_reply("r2"))
        gateway.release()
        outcome = await ticket.wait()

        assert outcome.succeeded
        assert outcome.entity.id == "reply-1"
        assert not cache.contains(ticket.entity_id)
        assert [r.id for r in cache.find_replies("topic-1")] == ["r1", "reply-1", "r2"]
        assert cache.get("reply-1").author_label == "User 123456"
        assert gateway.calls[0] == (
            "submit_reply",
            "topic-1",
            "user-123456",
            "New reply",
            None,
            None,
        )

    @pytest.mark.asyncio
    async def test_failed_reply_removed(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        gateway.fail_next(NetworkError("offline"))

        ticket = coordinator.submit_reply(
            TopicId("topic-1"), SubjectId("u1"), "Hello", replying_to_id="r9"
        )
        assert cache.contains(ticket.entity_id)
        outcome = await ticket.wait()

        assert outcome.state is MutationState.ROLLED_BACK
        assert outcome.entity is None
        assert cache.find_replies("topic-1") == []
        # Parent not cached, so it is taken as the thread root
        assert gateway.calls[0][-2:] == ("r9", "r9")

    @pytest.mark.asyncio
    async def test_blank_reply_rejected(self, unit_env):
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)

        with pytest.raises(ValidationError):
            coordinator.submit_reply(TopicId("topic-1"), SubjectId("u1"), "   ")

        assert cache.find_replies("topic-1") == []

    @pytest.mark.asyncio
    async def test_reply_to_nested_reply_joins_parent_thread(self, unit_env):
        """Replying inside a thread should carry the thread's root, not the parent."""
        coordinator = await unit_env.get(OptimisticMutationCoordinator)
        cache = await unit_env.get(EntityCache)
        gateway = await unit_env.get(EngagementGateway)
        cache.put(make_reply("root"))
        cache.put(make_reply("child", parent_reply_id="root", root_reply_id="root"))

        ticket = coordinator.submit_reply(
            TopicId("topic-1"), SubjectId("u1"), "Same thread", replying_to_id="child"
        )
        assert cache.get(ticket.entity_id).root_reply_id == "root"
        outcome = await ticket.wait()

        assert gateway.calls[0][-2:] == ("child", "root")
        assert outcome.entity.parent_reply_id == "child"
        assert outcome.entity.root_reply_id == "root"
