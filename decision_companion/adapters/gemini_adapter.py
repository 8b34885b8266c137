from __future__ import annotations

import os
import random
import time
from typing import List

from google import genai
from google.genai import types

from .llm_base import LLMAdapter, LLMResponse


class GeminiAdapter(LLMAdapter):
    name = "gemini"

    def __init__(self, timeout: float | None = None) -> None:
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is not set.")
        if timeout is None:
            timeout = float(os.getenv("AGENT_TIMEOUT_SECONDS", "60"))

        # HttpOptions.timeout is expressed in milliseconds.
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

        primary = os.getenv("GEMINI_MODEL", "gemini-flash-latest")
        self.model_candidates: List[str] = [
            primary,
            "gemini-2.5-flash",
            "gemini-2.5-pro",
        ]

        self.max_attempts = int(os.getenv("GEMINI_MAX_ATTEMPTS", "3"))
        self.base_delay = float(os.getenv("GEMINI_BASE_DELAY_SECONDS", "1.0"))

    def _is_transient(self, err: Exception) -> bool:
        msg = str(err).lower()
        return any(s in msg for s in ["503", "unavailable", "429", "too many", "temporarily"])

    def _config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            max_output_tokens=int(os.getenv("ORCH_MAX_OUTPUT_TOKENS", "800")),
            temperature=float(os.getenv("ORCH_TEMPERATURE", "0.2")),
            response_mime_type="application/json",
        )

    def complete(self, prompt: str) -> LLMResponse:
        last_err: Exception | None = None

        for model in self.model_candidates:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    print(f"[gemini] model={model} attempt={attempt}/{self.max_attempts}")
                    response = self.client.models.generate_content(
                        model=model,
                        contents=prompt,
                        config=self._config(),
                    )
                    text = getattr(response, "text", None)
                    if not text:
                        raise RuntimeError("Gemini returned empty content.")
                    metadata = getattr(response, "usage_metadata", None)
                    usage = None
                    if metadata is not None:
                        usage = {
                            "prompt_tokens": getattr(metadata, "prompt_token_count", None),
                            "completion_tokens": getattr(metadata, "candidates_token_count", None),
                            "total_tokens": getattr(metadata, "total_token_count", None),
                        }
                    return LLMResponse(raw_text=text, usage=usage)

                except Exception as e:
                    last_err = e
                    if not self._is_transient(e):
                        break

                    delay = self.base_delay * (2 ** (attempt - 1)) + random.random() * 0.5
                    print(f"[gemini] transient error: {e} -> sleeping {delay:.2f}s")
                    time.sleep(delay)

            print(f"[gemini] switching model after failures: {model}")

        raise RuntimeError(
            "Gemini generate_content failed for all candidate models. "
            f"Last error: {last_err}"
        ) from last_err
