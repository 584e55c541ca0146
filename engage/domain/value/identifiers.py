"""Typed identifiers for engagement entities.

Identifiers are opaque strings issued by the LMS backend. NewType keeps
subject ids and entity ids from being mixed up.
"""

from typing import NewType

SubjectId = NewType("SubjectId", str)
EntityId = NewType("EntityId", str)
ReplyId = NewType("ReplyId", str)
TopicId = NewType("TopicId", str)
KnowledgeId = NewType("KnowledgeId", str)
NoticeId = NewType("NoticeId", str)
