from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from jsonschema import ValidationError as SchemaValidationError
from jsonschema import validate

from decision_companion.config import SCHEMAS_DIR
from decision_companion.errors import InvalidTransition
from decision_companion.models import ArtifactStatus, Citation, GeneratedArtifact, PostStyle
from decision_companion.utils.io import read_text, write_text

LEDGER_KEY = "generated_posts"

ALLOWED_TRANSITIONS = {
    ArtifactStatus.DRAFT: {ArtifactStatus.DRAFT, ArtifactStatus.POSTED, ArtifactStatus.FAILED},
    ArtifactStatus.POSTED: {ArtifactStatus.POSTED},
    ArtifactStatus.FAILED: {ArtifactStatus.FAILED},
}


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFileStore:
    """Key-value pairs kept in one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        try:
            data = json.loads(read_text(self.path))
        except (OSError, ValueError):
            # ValueError covers JSONDecodeError and UnicodeDecodeError.
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        write_text(self.path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def check_transition(current: ArtifactStatus, target: ArtifactStatus) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(
            f"Artifact status cannot change from {current.value} to {target.value}."
        )


PATCHABLE_FIELDS = frozenset(item.name for item in fields(GeneratedArtifact)) - {"id"}


def coerce_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update artifact fields: {', '.join(sorted(unknown))}")
    coerced = dict(patch)
    if "status" in coerced:
        coerced["status"] = ArtifactStatus(coerced["status"])
    if "style" in coerced:
        coerced["style"] = PostStyle(coerced["style"])
    if "citations" in coerced:
        coerced["citations"] = tuple(
            item if isinstance(item, Citation) else Citation.from_dict(item)
            for item in coerced["citations"] or ()
        )
    if "hashtags" in coerced:
        coerced["hashtags"] = frozenset(coerced["hashtags"] or ())
    return coerced


class ArtifactLedger:
    """Newest-first log of generated posts, persisted wholesale on each change.

    An unreadable or corrupt store loads as an empty ledger, and entries that
    fail the artifact schema are skipped. A failed write is reported and the
    in-memory ledger stays authoritative.
    """

    def __init__(self, store: KeyValueStore, key: str = LEDGER_KEY) -> None:
        self.store = store
        self.key = key
        self._schema = json.loads(read_text(SCHEMAS_DIR / "generated_artifact.schema.json"))
        self._artifacts: List[GeneratedArtifact] = self._load()

    def _load(self) -> List[GeneratedArtifact]:
        try:
            raw = self.store.get(self.key)
        except Exception as exc:
            print(f"[ledger] store unreadable, starting empty: {exc}")
            return []
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except (TypeError, ValueError):
            print("[ledger] stored ledger is not valid JSON, starting empty")
            return []
        if not isinstance(items, list):
            return []

        artifacts: List[GeneratedArtifact] = []
        for index, item in enumerate(items):
            try:
                validate(instance=item, schema=self._schema)
            except SchemaValidationError as exc:
                print(f"[ledger] skipping stored entry {index}: {exc.message}")
                continue
            artifacts.append(GeneratedArtifact.from_dict(item))
        return artifacts

    def _persist(self, artifacts: Optional[List[GeneratedArtifact]] = None) -> None:
        artifacts = self._artifacts if artifacts is None else artifacts
        payload = json.dumps([artifact.to_dict() for artifact in artifacts])
        try:
            self.store.set(self.key, payload)
        except Exception as exc:
            print(f"[ledger] failed to persist {len(artifacts)} entries: {exc}")

    def save(self, artifact: GeneratedArtifact) -> GeneratedArtifact:
        self._artifacts.insert(0, artifact)
        self._persist()
        print(f"[ledger] saved id={artifact.id} status={artifact.status.value}")
        return artifact

    def update(self, artifact_id: str, **patch: Any) -> Optional[GeneratedArtifact]:
        """Merge ``patch`` into the artifact with ``artifact_id``.

        Values are coerced to the artifact's field types and the merged entry
        must still satisfy the artifact schema; otherwise nothing changes.
        """
        for position, artifact in enumerate(self._artifacts):
            if artifact.id != artifact_id:
                continue
            patch = coerce_patch(patch)
            if "status" in patch:
                check_transition(artifact.status, patch["status"])
            updated = replace(artifact, **patch)
            validate(instance=updated.to_dict(), schema=self._schema)
            artifacts = list(self._artifacts)
            artifacts[position] = updated
            self._persist(artifacts)
            self._artifacts = artifacts
            print(f"[ledger] updated id={artifact_id} status={updated.status.value}")
            return updated
        return None

    def get(self, artifact_id: str) -> Optional[GeneratedArtifact]:
        for artifact in self._artifacts:
            if artifact.id == artifact_id:
                return artifact
        return None

    def all(self) -> List[GeneratedArtifact]:
        return list(self._artifacts)

    def by_status(self, status: ArtifactStatus) -> List[GeneratedArtifact]:
        status = ArtifactStatus(status)
        return [artifact for artifact in self._artifacts if artifact.status is status]

    def counts(self) -> Dict[str, int]:
        totals = {status.value: 0 for status in ArtifactStatus}
        for artifact in self._artifacts:
            totals[artifact.status.value] += 1
        return totals
