import itertools

import pytest

from decision_companion.errors import GatewayError, InvalidTransition
from decision_companion.gateway import AgentResult, build_gateway
from decision_companion.models import ArtifactStatus, PostStyle
from decision_companion.studio import ContentStudio

from helpers import StubGateway, failed, ok


@pytest.fixture
def studio_for(agents, ledger):
    counter = itertools.count(1)

    def factory(gateway):
        return ContentStudio(gateway, agents, ledger, id_factory=lambda: f"post-{next(counter)}")

    return factory


def test_generate_saves_a_draft_from_mock(agents, studio_for):
    studio = studio_for(build_gateway("mock", agents))
    artifact = studio.generate("Making better decisions", PostStyle.STORYTELLING)
    assert artifact.id == "post-1"
    assert artifact.status is ArtifactStatus.DRAFT
    assert artifact.style is PostStyle.STORYTELLING
    assert artifact.topic == "Making better decisions"
    assert artifact.hashtags == frozenset({"decisions", "clarity"})
    assert [citation.source for citation in artifact.citations] == ["Harvard Business Review", "Decision Lab"]
    assert artifact.word_count == len(artifact.content.split())
    assert studio.ledger.get("post-1") == artifact


def test_generate_without_content_creates_nothing(studio_for):
    studio = studio_for(StubGateway(failed()))
    assert studio.generate("topic") is None
    assert studio.ledger.all() == []
    assert studio.error


def test_generate_gateway_error_creates_nothing(studio_for):
    studio = studio_for(StubGateway(GatewayError("down")))
    assert studio.generate("topic") is None
    assert studio.error == "An error occurred. Please try again."


def test_publish_success_marks_posted(studio_for):
    gateway = StubGateway(ok({"post": "Hello world #hi"}))
    studio = studio_for(gateway)
    draft = studio.generate("hello")
    gateway.reply = ok({"postUrl": "https://social.example/p/9"})
    posted = studio.publish(draft.id)
    assert posted.status is ArtifactStatus.POSTED
    assert posted.post_url == "https://social.example/p/9"
    assert posted.content == draft.content
    assert "Hello world #hi" in gateway.calls[-1][0]


@pytest.mark.parametrize(
    "reply",
    [GatewayError("publisher down"), failed(), AgentResult(success=True, response={"status": "error"})],
)
def test_publish_failure_marks_failed_and_keeps_content(studio_for, reply):
    gateway = StubGateway(ok({"post": "Original text"}))
    studio = studio_for(gateway)
    draft = studio.generate("topic")
    gateway.reply = reply
    result = studio.publish(draft.id)
    assert result.status is ArtifactStatus.FAILED
    assert result.content == "Original text"
    assert studio.ledger.get(draft.id).status is ArtifactStatus.FAILED


def test_publish_targets_artifact_by_id_not_content(studio_for):
    gateway = StubGateway(ok({"post": "Identical text"}))
    studio = studio_for(gateway)
    first = studio.generate("one")
    second = studio.generate("two")
    gateway.reply = ok({"url": "https://social.example/p/2"})
    studio.publish(first.id)
    assert studio.ledger.get(first.id).status is ArtifactStatus.POSTED
    assert studio.ledger.get(second.id).status is ArtifactStatus.DRAFT


def test_only_drafts_can_be_published_or_edited(studio_for):
    gateway = StubGateway(ok({"post": "Text"}))
    studio = studio_for(gateway)
    draft = studio.generate("topic")
    studio.publish(draft.id)
    with pytest.raises(InvalidTransition):
        studio.publish(draft.id)
    with pytest.raises(InvalidTransition):
        studio.edit(draft.id, "new text")
    with pytest.raises(KeyError):
        studio.publish("missing")


def test_edit_rewrites_draft_before_publish(studio_for):
    gateway = StubGateway(ok({"post": "First version"}))
    studio = studio_for(gateway)
    draft = studio.generate("topic")
    edited = studio.edit(draft.id, "Second version, longer now #edited")
    assert edited.id == draft.id
    assert edited.word_count == 5
    assert edited.hashtags == frozenset({"edited"})
    gateway.reply = ok({"post_url": "https://social.example/p/3"})
    studio.publish(draft.id)
    assert "Second version, longer now" in gateway.calls[-1][0]


def test_unknown_style_sets_error_without_calling_writer(studio_for):
    gateway = StubGateway(ok({"post": "Text"}))
    studio = studio_for(gateway)
    assert studio.generate("topic", "haiku") is None
    assert studio.error == "Unknown post style: haiku"
    assert gateway.calls == []
    assert studio.ledger.all() == []


def test_style_given_as_text_is_accepted(studio_for):
    studio = studio_for(StubGateway(ok({"post": "Text"})))
    assert studio.generate("topic", "thought_leadership").style is PostStyle.THOUGHT_LEADERSHIP
