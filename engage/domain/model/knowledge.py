"""Knowledge article entity."""

from pydantic import Field

from engage.domain.model.common import DomainModel
from engage.domain.value import EntityId


class KnowledgeArticle(DomainModel):
    """Knowledge center article.

    Likes and dislikes are independent counters. Which subjects reacted is
    tracked by the server only; the client increments optimistically.
    """

    id: EntityId
    title: str = ""
    like_count: int = Field(default=0, ge=0)
    dislike_count: int = Field(default=0, ge=0)
