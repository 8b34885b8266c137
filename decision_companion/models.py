from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple


class Stage(IntEnum):
    CLARIFY = 1
    EXPLORE = 2
    COMPARE = 3
    REFLECT = 4
    DECIDE = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Question:
    text: str
    answer: str = ""
    choices: Tuple[str, ...] = ()

    @property
    def answered(self) -> bool:
        return bool(self.answer and self.answer.strip())


@dataclass(frozen=True)
class Option:
    name: str
    pros: Tuple[str, ...] = ()
    cons: Tuple[str, ...] = ()


IMPORTANCE_LEVELS = (1, 2, 3)


@dataclass(frozen=True)
class Priority:
    name: str
    importance: int = 1

    def __post_init__(self) -> None:
        low, high = IMPORTANCE_LEVELS[0], IMPORTANCE_LEVELS[-1]
        if self.importance not in IMPORTANCE_LEVELS:
            object.__setattr__(self, "importance", min(max(int(self.importance), low), high))

    @property
    def label(self) -> str:
        if self.importance >= 3:
            return "High"
        if self.importance >= 2:
            return "Medium"
        return "Low"

    @property
    def color(self) -> str:
        if self.importance >= 3:
            return "orange"
        if self.importance >= 2:
            return "blue"
        return "gray"


@dataclass(frozen=True)
class Bias:
    name: str
    explanation: str = ""


@dataclass(frozen=True)
class Clarification:
    decision_statement: str
    questions: Tuple[Question, ...]


@dataclass(frozen=True)
class Comparison:
    options: Tuple[Option, ...]
    priorities: Tuple[Priority, ...]


class ArtifactStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self is not ArtifactStatus.DRAFT


class PostStyle(str, Enum):
    PROFESSIONAL = "professional"
    CONVERSATIONAL = "conversational"
    STORYTELLING = "storytelling"
    THOUGHT_LEADERSHIP = "thought_leadership"


@dataclass(frozen=True)
class Citation:
    source: str
    claim: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    stat: Optional[str] = None

    @property
    def assertion(self) -> Optional[str]:
        return self.claim or self.stat

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Citation":
        return cls(
            source=str(data["source"]),
            claim=data.get("claim"),
            title=data.get("title"),
            url=data.get("url"),
            stat=data.get("stat"),
        )


@dataclass(frozen=True)
class GeneratedArtifact:
    id: str
    content: str
    style: PostStyle
    date: str
    status: ArtifactStatus = ArtifactStatus.DRAFT
    citations: Tuple[Citation, ...] = ()
    post_url: Optional[str] = None
    word_count: Optional[int] = None
    hashtags: frozenset = field(default_factory=frozenset)
    topic: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "citations": [citation.to_dict() for citation in self.citations],
            "style": self.style.value,
            "date": self.date,
            "status": self.status.value,
        }
        if self.post_url is not None:
            payload["postUrl"] = self.post_url
        if self.word_count is not None:
            payload["wordCount"] = self.word_count
        if self.hashtags:
            payload["hashtags"] = sorted(self.hashtags)
        if self.topic is not None:
            payload["topic"] = self.topic
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratedArtifact":
        citations: List[Citation] = [
            Citation.from_dict(item) for item in data.get("citations", [])
        ]
        return cls(
            id=str(data["id"]),
            content=data["content"],
            style=PostStyle(data["style"]),
            date=data["date"],
            status=ArtifactStatus(data["status"]),
            citations=tuple(citations),
            post_url=data.get("postUrl"),
            word_count=data.get("wordCount"),
            hashtags=frozenset(data.get("hashtags", [])),
            topic=data.get("topic"),
        )
