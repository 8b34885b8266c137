from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict

from .llm_base import LLMAdapter, LLMResponse

SCENARIOS = ("default", "empty", "prose", "offline")


@dataclass
class MockAdapter(LLMAdapter):
    """Deterministic stand-in for the live providers.

    ``default`` answers every task with a well-formed payload, ``empty``
    answers ``{}``, ``prose`` answers plain text and ``offline`` raises.
    """

    scenario: str = "default"
    name: str = "mock"

    def complete(self, prompt: str) -> LLMResponse:
        if self.scenario == "offline":
            raise RuntimeError("Mock provider is offline.")
        if self.scenario == "prose":
            return LLMResponse(raw_text="I am not sure, it depends on what you value.")
        if self.scenario == "empty":
            return LLMResponse(raw_text="{}")
        payload = self._build_payload(prompt)
        return LLMResponse(raw_text=json.dumps(payload))

    def _build_payload(self, prompt: str) -> Dict:
        if "TASK: clarify_decision" in prompt:
            return {
                "decision_statement": "Choose between a new role at Job A and staying at Job B.",
                "questions": [
                    "What would make you proud of this choice a year from now?",
                    {"question": "How much financial risk can you absorb right now?"},
                    {"text": "Who else is affected by this decision?"},
                ],
            }
        if "TASK: map_trade_offs" in prompt:
            return {
                "options": [
                    {
                        "name": "Take Job A",
                        "pros": ["Higher salary", "Broader scope"],
                        "cons": ["Longer commute"],
                    },
                    {
                        "name": "Stay at Job B",
                        "pros": ["Known team", "Flexible hours"],
                        "cons": ["Slower promotion track"],
                    },
                ],
                "user_priorities": [
                    {"priority": "Growth", "importance": 3},
                    {"priority": "Stability", "importance": "medium"},
                ],
            }
        if "TASK: detect_biases" in prompt:
            return {
                "biases": [
                    {"bias": "Anchoring", "description": "The first salary figure frames every comparison."},
                    {"name": "Sunk Cost Fallacy", "applies_to": "Years already invested in Job B."},
                ]
            }
        if "TASK: frame_recommendation" in prompt:
            return {
                "framing": (
                    "RECOMMENDATION: Take Job A\n\n"
                    "Growth ranks highest for you and Job A offers the broader scope."
                )
            }
        if "TASK: write_post" in prompt:
            return {
                "post": (
                    "Most decisions stall because we compare feelings, not trade-offs. "
                    "Write the options down. #decisions #clarity"
                ),
                "citations": [
                    {"source": "Harvard Business Review", "claim": "Structured choices reduce regret."},
                    "Decision Lab",
                ],
            }
        if "TASK: publish_post" in prompt:
            return {"post_url": "https://example.invalid/posts/mock-1"}
        return {"message": "Unrecognized task."}
