"""Domain model entities for the engagement engine."""

from engage.domain.model.common import DomainModel
from engage.domain.model.knowledge import KnowledgeArticle
from engage.domain.model.pending import PendingMutation
from engage.domain.model.reply import Reply
from engage.domain.model.votable import VotableItem

__all__ = [
    "DomainModel",
    "VotableItem",
    "Reply",
    "KnowledgeArticle",
    "PendingMutation",
]
