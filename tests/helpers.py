from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple, Union

from decision_companion.adapters.llm_base import LLMResponse
from decision_companion.gateway import AgentResult


def ok(result: Any = None, message: Optional[str] = None) -> AgentResult:
    return AgentResult(success=True, response={"status": "success", "result": result, "message": message})


def failed() -> AgentResult:
    return AgentResult(success=False, response=None)


Reply = Union[AgentResult, Exception, Callable[[str, str], AgentResult]]


class StubGateway:
    """Answers every call with a fixed reply, a raised error, or a callable."""

    def __init__(self, reply: Reply) -> None:
        self.reply = reply
        self.calls: List[Tuple[str, str]] = []

    def call(self, prompt: str, agent_id: str) -> AgentResult:
        self.calls.append((prompt, agent_id))
        if isinstance(self.reply, Exception):
            raise self.reply
        if callable(self.reply):
            return self.reply(prompt, agent_id)
        return self.reply


class ScriptedAdapter:
    name = "scripted"

    def __init__(self, replies: List[Union[str, Exception]]) -> None:
        self.replies = list(replies)
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> LLMResponse:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(raw_text=reply, usage={"prompt_tokens": 3, "completion_tokens": 5, "total_tokens": 8})


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds
