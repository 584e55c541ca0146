"""Knowledge article use cases."""

from .react_to_knowledge import (
    DislikeKnowledgeUseCase,
    KnowledgeReactionRequest,
    KnowledgeReactionResponse,
    LikeKnowledgeUseCase,
)

__all__ = [
    "KnowledgeReactionRequest",
    "KnowledgeReactionResponse",
    "LikeKnowledgeUseCase",
    "DislikeKnowledgeUseCase",
]
