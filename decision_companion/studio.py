from __future__ import annotations

import uuid
from pathlib import Path
from typing import Callable, Optional

from decision_companion.config import PROMPTS_DIR, AgentDirectory
from decision_companion.errors import GatewayError, InvalidTransition
from decision_companion.gateway import AgentGateway, AgentResult
from decision_companion.ledger import ArtifactLedger
from decision_companion.models import ArtifactStatus, GeneratedArtifact, PostStyle
from decision_companion.normalizer import (
    extract_citations,
    extract_hashtags,
    extract_post_content,
    extract_post_url,
    response_of,
)
from decision_companion.utils.io import read_text
from decision_companion.utils.time import utc_isoformat


def word_count(content: str) -> int:
    return len(content.split())


class ContentStudio:
    """Generates posts as drafts and publishes them by artifact id."""

    def __init__(
        self,
        gateway: AgentGateway,
        agents: AgentDirectory,
        ledger: ArtifactLedger,
        prompts_dir: Path = PROMPTS_DIR,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self.gateway = gateway
        self.agents = agents
        self.ledger = ledger
        self.prompts_dir = prompts_dir
        self.id_factory = id_factory
        self.error = ""

    def _prompt(self, name: str, context: str) -> str:
        template = read_text(self.prompts_dir / f"{name}.md")
        return f"{template}\n\nINPUT:\n{context}\n"

    def _call(self, role: str, prompt: str) -> Optional[AgentResult]:
        try:
            return self.gateway.call(prompt, self.agents.id_for(role))
        except GatewayError as exc:
            print(f"[studio] role={role} gateway error: {exc}")
            self.error = "An error occurred. Please try again."
            return None

    def generate(self, topic: str, style: PostStyle = PostStyle.PROFESSIONAL) -> Optional[GeneratedArtifact]:
        self.error = ""
        try:
            style = PostStyle(style)
        except ValueError:
            self.error = f"Unknown post style: {style}"
            return None
        if not topic.strip():
            self.error = "Please enter a topic"
            return None

        result = self._call(
            "content_writer",
            self._prompt("write_post", f"Topic: {topic.strip()}\nStyle: {style.value}"),
        )
        response = response_of(result)
        content = extract_post_content(response)
        if not content:
            if result is not None:
                self.error = "The writer returned no usable post. Please try again."
            return None

        artifact = GeneratedArtifact(
            id=self.id_factory(),
            content=content,
            style=style,
            date=utc_isoformat(),
            status=ArtifactStatus.DRAFT,
            citations=extract_citations(response),
            word_count=word_count(content),
            hashtags=extract_hashtags(response, content),
            topic=topic.strip(),
        )
        return self.ledger.save(artifact)

    def edit(self, artifact_id: str, content: str) -> GeneratedArtifact:
        artifact = self._draft(artifact_id)
        updated = self.ledger.update(
            artifact.id,
            content=content,
            word_count=word_count(content),
            hashtags=extract_hashtags(None, content) or artifact.hashtags,
        )
        return updated

    def publish(self, artifact_id: str) -> GeneratedArtifact:
        artifact = self._draft(artifact_id)
        self.error = ""
        result = self._call("post_publisher", self._prompt("publish_post", artifact.content))
        if result is not None and result.ok:
            updated = self.ledger.update(
                artifact.id,
                status=ArtifactStatus.POSTED,
                post_url=extract_post_url(result.response),
            )
        else:
            if result is not None:
                self.error = "Publishing failed."
            updated = self.ledger.update(artifact.id, status=ArtifactStatus.FAILED)
        print(f"[studio] publish id={artifact.id} -> {updated.status.value}")
        return updated

    def _draft(self, artifact_id: str) -> GeneratedArtifact:
        artifact = self.ledger.get(artifact_id)
        if artifact is None:
            raise KeyError(f"Unknown artifact id: {artifact_id}")
        if artifact.status is not ArtifactStatus.DRAFT:
            raise InvalidTransition(
                f"Artifact {artifact_id} is {artifact.status.value}; only drafts can change."
            )
        return artifact
