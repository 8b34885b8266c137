"""Turn whatever an agent replied into the canonical record for a stage.

Agents do not agree on a schema: the same list may arrive under
``result.questions``, ``result.data.questions``, as a bare list, as a JSON
string or buried in ``message``. Each extractor walks an ordered tuple of
candidate paths and keeps the first one that coerces to something non-empty.
Elements are coerced one by one and dropped when they do not fit. Nothing in
this module raises on bad input; an empty result means "use the fallback".
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from decision_companion.gateway import AgentResult
from decision_companion.models import Bias, Citation, Clarification, Comparison, Option, Priority, Question
from decision_companion.utils.parsers import looks_like_json, try_extract_json

T = TypeVar("T")

QUESTION_PATHS = (
    "result.questions",
    "result.data.questions",
    "result.clarifying_questions",
    "result",
    "message.questions",
    "message",
)
STATEMENT_PATHS = (
    "result.decision_statement",
    "result.clarified_decision",
    "result.restatement",
    "result.data.decision_statement",
)
OPTION_PATHS = (
    "result.options",
    "result.data.options",
    "result.canvas.options",
    "message.options",
)
PRIORITY_PATHS = (
    "result.user_priorities",
    "result.priorities",
    "result.data.priorities",
    "result.canvas.priorities",
    "message.priorities",
)
BIAS_PATHS = (
    "result.biases",
    "result.data.biases",
    "result.detected_biases",
    "message.biases",
)
RECOMMENDATION_PATHS = (
    "result.framing",
    "result.neutral_framing",
    "result.recommendation",
    "result.summary",
    "result.text",
    "result",
    "message",
)
POST_PATHS = (
    "result.post",
    "result.content",
    "result.linkedin_post",
    "result.text",
    "result.data.post",
    "message",
)
CITATION_PATHS = (
    "result.citations",
    "result.sources",
    "result.references",
    "result.data.citations",
)
HASHTAG_PATHS = (
    "result.hashtags",
    "result.tags",
)
POST_URL_PATHS = (
    "result.post_url",
    "result.postUrl",
    "result.url",
    "result.data.url",
)

_IMPORTANCE_WORDS = {
    "high": 3,
    "critical": 3,
    "very high": 3,
    "medium": 2,
    "moderate": 2,
    "low": 1,
}
_HASHTAG_RE = re.compile(r"#(\w+)")


def response_of(result: Optional[AgentResult]) -> Optional[Dict[str, Any]]:
    if result is None or not result.ok:
        return None
    return result.response


def _decode(node: Any) -> Any:
    if isinstance(node, str) and looks_like_json(node):
        decoded = try_extract_json(node)
        if decoded is not None:
            return decoded
    return node


def lookup(payload: Any, path: str) -> Any:
    node = _decode(payload)
    for key in path.split("."):
        if not isinstance(node, dict):
            return None
        node = _decode(node.get(key))
    return node


def _first(
    response: Optional[Dict[str, Any]],
    paths: Iterable[str],
    coerce: Callable[[Any], T],
) -> Optional[T]:
    if response is None:
        return None
    for path in paths:
        value = coerce(lookup(response, path))
        if value:
            return value
    return None


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def _pick(item: Dict[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        value = _text(item.get(key))
        if value:
            return value
    return ""


def _strings(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value.strip(),) if value.strip() else ()
    if not isinstance(value, list):
        return ()
    return tuple(text for text in (_text(item) for item in value) if text)


def _coerce_list(value: Any, coerce_item: Callable[[Any], Optional[T]]) -> Tuple[T, ...]:
    if not isinstance(value, list):
        return ()
    items: List[T] = []
    for item in value:
        coerced = coerce_item(item)
        if coerced is not None:
            items.append(coerced)
    return tuple(items)


# questions

def _coerce_question(item: Any) -> Optional[Question]:
    if isinstance(item, str):
        text = item.strip()
    elif isinstance(item, dict):
        text = _pick(item, ("question", "text", "q", "prompt"))
    else:
        return None
    if not text:
        return None
    choices = _strings(item.get("choices") or item.get("options")) if isinstance(item, dict) else ()
    return Question(text=text, answer="", choices=choices)


def _coerce_questions(value: Any) -> Tuple[Question, ...]:
    if isinstance(value, str):
        # Prose reply: keep the sentences that are actually questions.
        lines = (line.strip(" -*\t0123456789.)") for line in value.splitlines())
        return tuple(Question(text=line) for line in lines if line.endswith("?"))
    return _coerce_list(value, _coerce_question)


def extract_questions(response: Optional[Dict[str, Any]]) -> Tuple[Question, ...]:
    return _first(response, QUESTION_PATHS, _coerce_questions) or ()


def extract_decision_statement(response: Optional[Dict[str, Any]]) -> Optional[str]:
    return _first(response, STATEMENT_PATHS, _text)


def normalize_clarification(result: Optional[AgentResult], raw_decision: str) -> Optional[Clarification]:
    response = response_of(result)
    questions = extract_questions(response)
    if not questions:
        return None
    statement = extract_decision_statement(response) or raw_decision.strip()
    return Clarification(decision_statement=statement, questions=questions)


# options and priorities

def _coerce_option(item: Any) -> Optional[Option]:
    if isinstance(item, str):
        return Option(name=item.strip()) if item.strip() else None
    if not isinstance(item, dict):
        return None
    name = _pick(item, ("name", "option", "title", "label"))
    if not name:
        return None
    return Option(
        name=name,
        pros=_strings(item.get("pros") or item.get("advantages")),
        cons=_strings(item.get("cons") or item.get("disadvantages")),
    )


def coerce_importance(value: Any) -> int:
    """Clamp any importance value into 1..3; anything unreadable is 1."""
    if isinstance(value, bool):
        return 1
    number: float
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        word = value.strip().lower()
        if word in _IMPORTANCE_WORDS:
            return _IMPORTANCE_WORDS[word]
        try:
            number = float(word)
        except ValueError:
            return 1
    else:
        return 1
    if math.isnan(number):
        return 1
    if number >= 3:
        return 3
    if number >= 2:
        return 2
    return 1


def _coerce_priority(item: Any) -> Optional[Priority]:
    if isinstance(item, str):
        return Priority(name=item.strip(), importance=1) if item.strip() else None
    if not isinstance(item, dict):
        return None
    name = _pick(item, ("priority", "name", "label", "title"))
    if not name:
        return None
    raw = item.get("importance", item.get("weight", item.get("level")))
    return Priority(name=name, importance=coerce_importance(raw))


def extract_options(response: Optional[Dict[str, Any]]) -> Tuple[Option, ...]:
    return _first(response, OPTION_PATHS, lambda value: _coerce_list(value, _coerce_option)) or ()


def extract_priorities(response: Optional[Dict[str, Any]]) -> Tuple[Priority, ...]:
    return _first(response, PRIORITY_PATHS, lambda value: _coerce_list(value, _coerce_priority)) or ()


def normalize_comparison(result: Optional[AgentResult]) -> Optional[Comparison]:
    response = response_of(result)
    options = extract_options(response)
    priorities = extract_priorities(response)
    if not options and not priorities:
        return None
    return Comparison(options=options, priorities=priorities)


# biases

def _coerce_bias(item: Any) -> Optional[Bias]:
    if isinstance(item, str):
        return Bias(name=item.strip()) if item.strip() else None
    if not isinstance(item, dict):
        return None
    name = _pick(item, ("name", "bias", "title"))
    explanation = _pick(item, ("explanation", "description", "applies_to", "reason"))
    if not name and not explanation:
        return None
    return Bias(name=name or "Cognitive Bias", explanation=explanation)


def extract_biases(response: Optional[Dict[str, Any]]) -> Tuple[Bias, ...]:
    return _first(response, BIAS_PATHS, lambda value: _coerce_list(value, _coerce_bias)) or ()


def normalize_biases(result: Optional[AgentResult]) -> Optional[Tuple[Bias, ...]]:
    return extract_biases(response_of(result)) or None


# free text

def extract_recommendation(response: Optional[Dict[str, Any]]) -> Optional[str]:
    return _first(response, RECOMMENDATION_PATHS, _text)


def normalize_recommendation(result: Optional[AgentResult]) -> Optional[str]:
    return extract_recommendation(response_of(result))


# generated posts

def _coerce_citation(item: Any) -> Optional[Citation]:
    if isinstance(item, str):
        return Citation(source=item.strip()) if item.strip() else None
    if not isinstance(item, dict):
        return None
    source = _pick(item, ("source", "publisher", "publication", "name"))
    if not source:
        return None
    return Citation(
        source=source,
        claim=_pick(item, ("claim", "statement", "fact")) or None,
        title=_pick(item, ("title",)) or None,
        url=_pick(item, ("url", "link")) or None,
        stat=_pick(item, ("stat", "statistic")) or None,
    )


def _coerce_hashtags(value: Any) -> frozenset:
    return frozenset(tag.lstrip("#") for tag in _strings(value) if tag.lstrip("#"))


def extract_post_content(response: Optional[Dict[str, Any]]) -> Optional[str]:
    return _first(response, POST_PATHS, _text)


def extract_citations(response: Optional[Dict[str, Any]]) -> Tuple[Citation, ...]:
    return _first(response, CITATION_PATHS, lambda value: _coerce_list(value, _coerce_citation)) or ()


def extract_hashtags(response: Optional[Dict[str, Any]], content: str = "") -> frozenset:
    tags = _first(response, HASHTAG_PATHS, _coerce_hashtags)
    if tags:
        return tags
    return frozenset(_HASHTAG_RE.findall(content))


def extract_post_url(response: Optional[Dict[str, Any]]) -> Optional[str]:
    return _first(response, POST_URL_PATHS, _text)
