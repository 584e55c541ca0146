"""Domain services."""

from .base import Service
from .gateway import EngagementGateway
from .mutation_coordinator import (
    MutationOutcome,
    MutationTicket,
    OptimisticMutationCoordinator,
)
from .reply_orderer import PreviewWindow, ReplyOrderer
from .vote_ledger import VoteLedger

__all__ = [
    "EngagementGateway",
    "MutationOutcome",
    "MutationTicket",
    "OptimisticMutationCoordinator",
    "PreviewWindow",
    "ReplyOrderer",
    "Service",
    "VoteLedger",
]
