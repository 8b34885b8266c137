from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from decision_companion.adapters.gemini_adapter import GeminiAdapter
from decision_companion.adapters.llm_base import LLMAdapter, LLMResponse
from decision_companion.adapters.mock_adapter import MockAdapter
from decision_companion.adapters.openai_adapter import OpenAIAdapter
from decision_companion.config import AgentDirectory, agent_timeout_seconds
from decision_companion.errors import GatewayError
from decision_companion.utils.io import write_json, write_text
from decision_companion.utils.parsers import try_extract_json


@dataclass(frozen=True)
class AgentResult:
    """Pass/fail envelope around whatever the agent sent back."""

    success: bool
    response: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return (
            self.success
            and isinstance(self.response, dict)
            and self.response.get("status") == "success"
        )


def envelope_from_text(raw_text: str) -> AgentResult:
    parsed = try_extract_json(raw_text)
    if isinstance(parsed, dict) and "status" in parsed and (
        "result" in parsed or "message" in parsed
    ):
        # The agent already answered with a response envelope.
        return AgentResult(success=True, response=parsed)
    if isinstance(parsed, dict):
        return AgentResult(
            success=True,
            response={"status": "success", "result": parsed, "message": parsed.get("message")},
        )
    if isinstance(parsed, list):
        return AgentResult(success=True, response={"status": "success", "result": parsed})
    return AgentResult(
        success=True,
        response={"status": "success", "result": None, "message": raw_text.strip()},
    )


class AgentGateway:
    def __init__(
        self,
        agents: AgentDirectory,
        adapter_factory: Callable[[str], LLMAdapter],
        transcript_dir: Optional[Path] = None,
    ) -> None:
        self.agents = agents
        self.adapter_factory = adapter_factory
        self.transcript_dir = transcript_dir
        self._adapters: Dict[str, LLMAdapter] = {}
        self._turn = 0

    def call(self, prompt: str, agent_id: str) -> AgentResult:
        spec = self.agents.by_id(agent_id)
        if spec is None:
            raise GatewayError(f"No agent registered for id {agent_id}.", agent_id=agent_id)

        self._turn += 1
        label = f"turn{self._turn:02d}_{spec.role}"
        print(f"[gateway] role={spec.role} provider={spec.provider} turn={self._turn}")
        try:
            self._record(f"{label}_prompt.txt", prompt)
            response = self._adapter(spec.provider).complete(prompt)
            self._record(f"{label}_raw.txt", response.raw_text)
            self._record_usage(f"{label}_usage.json", response)
        except Exception as exc:
            print(f"[gateway] role={spec.role} failed: {exc}")
            raise GatewayError(f"Agent {spec.role} call failed: {exc}", agent_id=agent_id) from exc
        return envelope_from_text(response.raw_text)

    def _adapter(self, provider: str) -> LLMAdapter:
        if provider not in self._adapters:
            self._adapters[provider] = self.adapter_factory(provider)
        return self._adapters[provider]

    def _record(self, name: str, content: str) -> None:
        if self.transcript_dir is not None:
            write_text(self.transcript_dir / name, content)

    def _record_usage(self, name: str, response: LLMResponse) -> None:
        if self.transcript_dir is not None and response.usage:
            write_json(self.transcript_dir / name, response.usage)


def build_gateway(
    mode: str,
    agents: AgentDirectory,
    scenario: str = "default",
    transcript_dir: Optional[Path] = None,
) -> AgentGateway:
    if mode == "mock":
        return AgentGateway(agents, lambda provider: MockAdapter(scenario), transcript_dir)

    timeout = agent_timeout_seconds()

    def factory(provider: str) -> LLMAdapter:
        if provider == "gemini":
            return GeminiAdapter(timeout=timeout)
        return OpenAIAdapter(timeout=timeout)

    return AgentGateway(agents, factory, transcript_dir)
