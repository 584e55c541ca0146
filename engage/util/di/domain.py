"""Domain layer DI providers."""

from dishka import Scope, provide

from engage.domain.repository import EntityCache
from engage.domain.service import (
    EngagementGateway,
    OptimisticMutationCoordinator,
    ReplyOrderer,
    VoteLedger,
)
from engage.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped: one request container is one user
    session, so each session gets its own coordinator and pending set.
    """

    scope = Scope.REQUEST

    @provide
    def get_vote_ledger(self) -> VoteLedger:
        """Provide vote ledger domain service."""
        return VoteLedger()

    @provide
    def get_reply_orderer(self, vote_ledger: VoteLedger) -> ReplyOrderer:
        """Provide reply orderer domain service."""
        return ReplyOrderer(vote_ledger=vote_ledger)

    @provide
    def get_mutation_coordinator(
        self,
        entity_cache: EntityCache,
        gateway: EngagementGateway,
        vote_ledger: VoteLedger,
    ) -> OptimisticMutationCoordinator:
        """Provide optimistic mutation coordinator."""
        return OptimisticMutationCoordinator(
            entity_cache=entity_cache,
            gateway=gateway,
            vote_ledger=vote_ledger,
        )
