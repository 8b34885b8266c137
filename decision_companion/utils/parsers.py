from __future__ import annotations

import json
import re
from typing import Any, Optional

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", flags=re.DOTALL | re.IGNORECASE)


def _strip_code_fences(text: str) -> str:
    fenced = _FENCE_RE.findall(text)
    if fenced:
        return "\n".join(fenced)
    return text


def _iter_json_candidates(text: str) -> list[str]:
    stripped = _strip_code_fences(text)
    candidates: list[str] = [stripped]
    for match in re.finditer(r"[\[{]", stripped):
        candidates.append(stripped[match.start():])
    return candidates


def _try_parse(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def looks_like_json(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith(("{", "[", "```"))


def try_extract_json(raw_text: str) -> Optional[Any]:
    """Best-effort JSON extraction from a model reply.

    Tries the whole text, then fenced blocks, then every suffix starting at a
    brace or bracket, finally a raw_decode that ignores trailing prose.
    Returns ``None`` when nothing decodes to a JSON object or array.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        return None

    parsed = _try_parse(raw_text)
    if isinstance(parsed, (dict, list)):
        return parsed

    candidates = _iter_json_candidates(raw_text)
    for candidate in candidates:
        parsed = _try_parse(candidate)
        if isinstance(parsed, (dict, list)):
            return parsed

    decoder = json.JSONDecoder()
    for candidate in candidates:
        try:
            parsed, _ = decoder.raw_decode(candidate.lstrip())
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, (dict, list)):
            return parsed
    return None


def extract_json(raw_text: str) -> Any:
    parsed = try_extract_json(raw_text)
    if parsed is not None:
        return parsed
    snippet = (raw_text or "").strip().replace("\n", " ")
    snippet = (snippet[:200] + "...") if len(snippet) > 200 else snippet
    raise ValueError(f"No JSON object found in response. Snippet: {snippet}")
