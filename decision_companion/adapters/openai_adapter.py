from __future__ import annotations

import os
import time

from openai import OpenAI
from openai import APIConnectionError, APITimeoutError, RateLimitError, InternalServerError

from .llm_base import LLMAdapter, LLMResponse


class OpenAIAdapter(LLMAdapter):
    name = "openai"

    def __init__(self, timeout: float | None = None) -> None:
        self.api_key = os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is not set.")
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.max_attempts = int(os.getenv("OPENAI_MAX_ATTEMPTS", "4"))
        if timeout is None:
            timeout = float(os.getenv("AGENT_TIMEOUT_SECONDS", "60"))
        self.client = OpenAI(api_key=self.api_key, timeout=timeout, max_retries=0)

    def complete(self, prompt: str) -> LLMResponse:
        max_tokens = int(os.getenv("ORCH_MAX_OUTPUT_TOKENS", "800"))
        temperature = float(os.getenv("ORCH_TEMPERATURE", "0.2"))
        attempt = 0
        backoff = 1.0
        while True:
            attempt += 1
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=max_tokens,
                    temperature=temperature,
                    response_format={"type": "json_object"},
                )
                content = response.choices[0].message.content
                if content is None:
                    raise RuntimeError("OpenAI returned empty content.")
                usage = getattr(response, "usage", None)
                usage_payload = None
                if usage:
                    usage_payload = {
                        "prompt_tokens": getattr(usage, "prompt_tokens", None),
                        "completion_tokens": getattr(usage, "completion_tokens", None),
                        "total_tokens": getattr(usage, "total_tokens", None),
                    }
                    print(
                        f"[openai] model={self.model} "
                        f"prompt_tokens={usage_payload['prompt_tokens']} "
                        f"completion_tokens={usage_payload['completion_tokens']} "
                        f"total_tokens={usage_payload['total_tokens']}"
                    )
                else:
                    print("[openai] usage not provided by SDK")
                return LLMResponse(raw_text=content, usage=usage_payload)
            except RateLimitError as exc:
                error = getattr(exc, "error", None)
                code = getattr(error, "code", None)
                if code == "insufficient_quota":
                    raise RuntimeError(
                        "OpenAI API quota exceeded. Please enable billing in your OpenAI account."
                    ) from exc
                if attempt >= self.max_attempts:
                    raise
            except APITimeoutError:
                # A timed-out call is not retried; the caller decides whether to try again.
                raise
            except (APIConnectionError, InternalServerError):
                if attempt >= self.max_attempts:
                    raise
            print(f"[openai] transient error, retrying in {backoff:.1f}s ({attempt}/{self.max_attempts})")
            time.sleep(backoff)
            backoff *= 2
