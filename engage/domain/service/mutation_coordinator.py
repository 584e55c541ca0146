"""Optimistic mutation coordinator.

Makes a user action (like, dislike, upvote, downvote, reply) visible in
the cache immediately, then reconciles with the gateway:

    IDLE -> PENDING -> COMMITTED   (gateway accepted; server counts win)
                    -> ROLLED_BACK (gateway failed; snapshot restored)

Everything except the gateway await runs synchronously on the event loop,
so cache writes need no locking.
"""

import asyncio
from typing import Any, Callable, Optional, Union
from uuid import uuid4

import logfire

from engage.domain.error import (
    GatewayError,
    MutationInFlightError,
    NotFoundError,
    UnknownGatewayError,
    ValidationError,
)
from engage.domain.model.knowledge import KnowledgeArticle
from engage.domain.model.pending import PendingMutation
from engage.domain.model.reply import Reply
from engage.domain.model.votable import VotableItem
from engage.domain.repository import Entity, EntityCache
from engage.domain.value import (
    CounterAck,
    EntityId,
    MutationKind,
    MutationState,
    ReplyId,
    SubjectId,
    TopicId,
    VoteAck,
)
from engage.domain.value.common import ValueObject

from .base import Service
from .gateway import EngagementGateway
from .vote_ledger import VoteLedger

Ack = Union[CounterAck, VoteAck, Reply]

_COUNTER_FIELDS = {
    MutationKind.LIKE: "like_count",
    MutationKind.DISLIKE: "dislike_count",
}


class MutationOutcome(ValueObject):
    """Final result of one optimistic mutation.

    ``entity`` is the cached value after reconciliation, or None when the
    entity left the cache while the request was in flight.
    """

    entity_id: EntityId
    kind: MutationKind
    state: MutationState
    entity: Optional[Entity] = None
    error: Optional[GatewayError] = None

    @property
    def succeeded(self) -> bool:
        return self.state is MutationState.COMMITTED


class MutationTicket:
    """Handle on an in-flight mutation.

    Returned as soon as the optimistic patch is in the cache. UI callers
    poll ``is_pending`` for spinners and may await ``wait()`` for the outcome.
    """

    def __init__(
        self,
        pending: PendingMutation,
        optimistic: Entity,
        task: "asyncio.Task[MutationOutcome]",
    ) -> None:
        self.pending = pending
        self.optimistic = optimistic  # Cached value right after the patch
        self._task = task

    @property
    def entity_id(self) -> EntityId:
        return self.pending.entity_id

    @property
    def kind(self) -> MutationKind:
        return self.pending.kind

    @property
    def is_pending(self) -> bool:
        return not self._task.done()

    async def wait(self) -> MutationOutcome:
        """Wait for the gateway round trip and return the outcome."""
        return await self._task

    def add_done_callback(self, callback: Callable[[MutationOutcome], None]) -> None:
        """Run a callback with the outcome once reconciliation finishes.

        Not called if the round trip was cancelled.
        """

        def _deliver(task: "asyncio.Task[MutationOutcome]") -> None:
            if not task.cancelled() and task.exception() is None:
                callback(task.result())

        self._task.add_done_callback(_deliver)


class OptimisticMutationCoordinator(Service):
    """Domain service that owns every optimistic write to the entity cache.

    At most one mutation may be pending per (entity, kind) pair; a repeat
    while the first is in flight is rejected, never queued.
    """

    def __init__(
        self,
        entity_cache: EntityCache,
        gateway: EngagementGateway,
        vote_ledger: VoteLedger,
    ) -> None:
        """Initialize mutation coordinator.

        Args:
            entity_cache: Session entity cache
            gateway: Remote engagement gateway
            vote_ledger: Vote ledger domain service
        """
        self.entity_cache = entity_cache
        self.gateway = gateway
        self.vote_ledger = vote_ledger
        self._pending: dict[tuple[EntityId, MutationKind], PendingMutation] = {}

    def is_pending(self, entity_id: EntityId, kind: MutationKind) -> bool:
        return (entity_id, kind) in self._pending

    def state_of(self, entity_id: EntityId, kind: MutationKind) -> MutationState:
        """Current state of an (entity, kind) pair.

        Terminal states are reported on the outcome; once delivered the
        pair is IDLE again.
        """
        if self.is_pending(entity_id, kind):
            return MutationState.PENDING
        return MutationState.IDLE

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(
        self,
        entity_id: EntityId,
        kind: MutationKind,
        subject: Optional[SubjectId] = None,
    ) -> MutationTicket:
        """Apply a like, dislike or vote optimistically and dispatch it.

        Must be called from a running event loop. The cache is patched
        before this returns; the gateway call runs in a background task.

        Args:
            entity_id: Target entity
            kind: Action to apply
            subject: Acting subject, required for vote kinds

        Returns:
            Ticket for the in-flight mutation

        Raises:
            MutationInFlightError: If the same action is already pending
            NotFoundError: If the entity is not cached
            ValidationError: If the action does not fit the entity
        """
        if kind is MutationKind.REPLY:
            raise ValidationError("Replies are submitted with submit_reply")

        self._check_not_in_flight(entity_id, kind)

        entity = self.entity_cache.get(entity_id)
        if entity is None:
            raise NotFoundError("Entity", entity_id)

        if kind.is_vote:
            if subject is None:
                raise ValidationError(f"A subject is required to {kind.value}")
            if not isinstance(entity, VotableItem):
                raise ValidationError(f"Cannot {kind.value} {entity_id}: not votable")
            snapshot: dict[str, Any] = {
                "upvoters": entity.upvoters,
                "downvoters": entity.downvoters,
            }
            patched: Entity = self.vote_ledger.toggle(entity, subject, kind.direction)
        else:
            if not isinstance(entity, KnowledgeArticle):
                raise ValidationError(
                    f"Cannot {kind.value} {entity_id}: no {kind.value} counter"
                )
            field = _COUNTER_FIELDS[kind]
            snapshot = {field: getattr(entity, field)}
            patched = entity.model_copy(update={field: snapshot[field] + 1})

        pending = self._begin(entity_id, kind, snapshot, patched, subject)
        return self._schedule(pending, patched, subject)

    def submit_reply(
        self,
        topic_id: TopicId,
        subject: SubjectId,
        text: str,
        author_label: str = "",
        created_at_label: str = "",
        replying_to_id: Optional[ReplyId] = None,
    ) -> MutationTicket:
        """Append a provisional reply and dispatch it.

        The provisional reply is swapped for the server's reply on success
        and removed on failure.

        Args:
            topic_id: Topic being replied to
            subject: Author
            text: Reply text (trimmed here)
            author_label: Display label for the provisional reply
            created_at_label: Display time for the provisional reply
            replying_to_id: Quoted parent reply, if any

        Returns:
            Ticket for the in-flight reply

        Raises:
            ValidationError: If the trimmed text is empty
        """
        text = text.strip()
        if not text:
            raise ValidationError("Reply text cannot be empty")

        provisional = Reply(
            id=EntityId(f"provisional-{uuid4()}"),
            topic_id=topic_id,
            text=text,
            author_label=author_label,
            created_at_label=created_at_label,
            parent_reply_id=replying_to_id,
            root_reply_id=self._thread_root(replying_to_id),
            is_provisional=True,
        )

        # Empty snapshot: rollback removes the provisional reply
        pending = self._begin(provisional.id, MutationKind.REPLY, {}, provisional)
        return self._schedule(pending, provisional, subject, provisional)

    def reset(self) -> None:
        """Forget every pending mutation.

        Round trips still in flight finish as no-ops: they no longer own a
        pending record, so they leave the cache of the next session alone.
        """
        if self._pending:
            logfire.info("Discarding pending mutations", count=len(self._pending))
        self._pending.clear()

    def _thread_root(self, replying_to_id: Optional[ReplyId]) -> Optional[ReplyId]:
        """Root of the thread a reply joins: the parent's root, else the parent."""
        if replying_to_id is None:
            return None
        parent = self.entity_cache.get(EntityId(replying_to_id))
        if isinstance(parent, Reply) and parent.root_reply_id:
            return parent.root_reply_id
        return replying_to_id

    def _check_not_in_flight(self, entity_id: EntityId, kind: MutationKind) -> None:
        if self.is_pending(entity_id, kind):
            logfire.warn(
                "Mutation already in flight",
                entity_id=entity_id,
                kind=kind.value,
            )
            raise MutationInFlightError(entity_id, kind.value)

    def _begin(
        self,
        entity_id: EntityId,
        kind: MutationKind,
        snapshot: dict[str, Any],
        patched: Entity,
        subject: Optional[SubjectId] = None,
    ) -> PendingMutation:
        pending = PendingMutation(
            entity_id=entity_id,
            kind=kind,
            previous_snapshot=snapshot,
            subject=subject if kind.is_vote else None,
        )
        self._pending[pending.key] = pending
        self.entity_cache.put(patched)
        logfire.debug("Optimistic patch applied", entity_id=entity_id, kind=kind.value)
        return pending

    def _schedule(
        self,
        pending: PendingMutation,
        patched: Entity,
        subject: Optional[SubjectId],
        reply: Optional[Reply] = None,
    ) -> MutationTicket:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._reconcile(pending, subject, reply))
        return MutationTicket(pending, patched, task)

    async def _reconcile(
        self,
        pending: PendingMutation,
        subject: Optional[SubjectId],
        reply: Optional[Reply],
    ) -> MutationOutcome:
        with logfire.span(
            "optimistic_mutation",
            entity_id=pending.entity_id,
            kind=pending.kind.value,
        ):
            try:
                ack = await self._dispatch(pending, subject, reply)
            except asyncio.CancelledError:
                if self._release(pending):
                    self._restore(pending)
                raise
            except GatewayError as e:
                return self._roll_back(pending, e)
            except Exception as e:
                error = UnknownGatewayError(str(e) or type(e).__name__)
                error.__cause__ = e
                return self._roll_back(pending, error)

            return self._commit(pending, ack)

    async def _dispatch(
        self,
        pending: PendingMutation,
        subject: Optional[SubjectId],
        reply: Optional[Reply],
    ) -> Ack:
        kind = pending.kind
        if kind is MutationKind.LIKE:
            return await self.gateway.submit_like(pending.entity_id)
        if kind is MutationKind.DISLIKE:
            return await self.gateway.submit_dislike(pending.entity_id)
        if kind is MutationKind.REPLY and reply is not None and subject is not None:
            return await self.gateway.submit_reply(
                reply.topic_id,
                subject,
                reply.text,
                reply.parent_reply_id,
                reply.root_reply_id,
            )
        if kind.is_vote and subject is not None:
            return await self.gateway.submit_vote(
                pending.entity_id, subject, kind.direction
            )
        raise ValidationError(f"Nothing to dispatch for {kind.value}")

    def _commit(self, pending: PendingMutation, ack: Ack) -> MutationOutcome:
        if not self._release(pending):
            logfire.info(
                "Committed mutation outlived its session",
                entity_id=pending.entity_id,
                kind=pending.kind.value,
            )
            return self._outcome(pending, MutationState.COMMITTED)

        if not self.entity_cache.contains(pending.entity_id):
            logfire.info(
                "Committed mutation for entity no longer cached",
                entity_id=pending.entity_id,
                kind=pending.kind.value,
            )
            return self._outcome(pending, MutationState.COMMITTED)

        entity: Optional[Entity]
        if isinstance(ack, Reply):
            self.entity_cache.replace(pending.entity_id, ack)
            entity = ack
        else:
            entity = self.entity_cache.get(pending.entity_id)
            update = self._authoritative_update(pending.kind, ack)
            if entity is not None and update:
                entity = self.entity_cache.put(entity.model_copy(update=update))

        logfire.info(
            "Mutation committed",
            entity_id=pending.entity_id,
            kind=pending.kind.value,
        )
        return self._outcome(pending, MutationState.COMMITTED, entity=entity)

    def _roll_back(self, pending: PendingMutation, error: GatewayError) -> MutationOutcome:
        entity = self._restore(pending) if self._release(pending) else None
        logfire.warn(
            "Mutation rolled back",
            entity_id=pending.entity_id,
            kind=pending.kind.value,
            error_type=type(error).__name__,
            error=str(error),
        )
        return self._outcome(
            pending, MutationState.ROLLED_BACK, entity=entity, error=error
        )

    def _restore(self, pending: PendingMutation) -> Optional[Entity]:
        """Put the snapshot fields back, or drop a provisional entity.

        Votes restore only the acting subject's membership, so a concurrent
        vote in the other direction survives.
        """
        entity = self.entity_cache.get(pending.entity_id)
        if entity is None:
            return None

        if not pending.previous_snapshot:
            self.entity_cache.remove(pending.entity_id)
            return None

        if pending.subject is not None and isinstance(entity, VotableItem):
            return self._restore_vote(entity, pending, pending.subject)

        return self.entity_cache.put(
            entity.model_copy(update=pending.previous_snapshot)
        )

    def _restore_vote(
        self, item: VotableItem, pending: PendingMutation, subject: SubjectId
    ) -> Entity:
        """Undo one subject's toggle unless a later vote already replaced it."""
        snapshot = pending.previous_snapshot
        before = self.vote_ledger.vote_of(
            VotableItem(
                id=item.id,
                upvoters=snapshot["upvoters"],
                downvoters=snapshot["downvoters"],
            ),
            subject,
        )
        direction = pending.kind.direction
        applied = None if before is direction else direction

        if self.vote_ledger.vote_of(item, subject) is not applied:
            return item
        return self.entity_cache.put(self.vote_ledger.set_vote(item, subject, before))

    def _release(self, pending: PendingMutation) -> bool:
        """Drop the pending record if it is still ours.

        Returns:
            False if a reset discarded the record, in which case the cache
            belongs to a newer session and must not be written
        """
        if self._pending.get(pending.key) is not pending:
            return False
        del self._pending[pending.key]
        return True

    @staticmethod
    def _authoritative_update(kind: MutationKind, ack: Ack) -> dict[str, Any]:
        if kind.is_counter and isinstance(ack, CounterAck) and ack.count is not None:
            return {_COUNTER_FIELDS[kind]: ack.count}
        return {}

    @staticmethod
    def _outcome(
        pending: PendingMutation,
        state: MutationState,
        entity: Optional[Entity] = None,
        error: Optional[GatewayError] = None,
    ) -> MutationOutcome:
        return MutationOutcome(
            entity_id=pending.entity_id,
            kind=pending.kind,
            state=state,
            entity=entity,
            error=error,
        )
