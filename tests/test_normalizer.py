import pytest

from decision_companion.gateway import AgentResult
from decision_companion.models import Bias, Option, Priority, Question
from decision_companion.normalizer import (
    coerce_importance,
    extract_citations,
    extract_hashtags,
    extract_post_content,
    extract_post_url,
    extract_questions,
    lookup,
    normalize_biases,
    normalize_clarification,
    normalize_comparison,
    normalize_recommendation,
)

from helpers import failed, ok


@pytest.mark.parametrize(
    "response",
    [
        {"status": "success", "result": {"questions": ["Why now?", "Who is affected?"]}},
        {"status": "success", "result": {"data": {"questions": ["Why now?", "Who is affected?"]}}},
        {"status": "success", "result": {"questions": [{"question": "Why now?"}, {"text": "Who is affected?"}]}},
        {"status": "success", "result": ["Why now?", "Who is affected?"]},
        {"status": "success", "result": '{"questions": ["Why now?", "Who is affected?"]}'},
        {"status": "success", "result": None, "message": "```json\n{\"questions\": [\"Why now?\", \"Who is affected?\"]}\n```"},
        {"status": "success", "message": "Think about:\n1. Why now?\n2. Who is affected?\nGood luck."},
    ],
)
def test_questions_found_across_shapes(response):
    questions = extract_questions(response)
    assert [question.text for question in questions] == ["Why now?", "Who is affected?"]
    assert all(question.answer == "" for question in questions)


def test_question_elements_that_do_not_fit_are_dropped():
    result = ok({"questions": ["Keep me?", 42, {"foo": "bar"}, {"question": "  "}, None, {"q": "And me?"}]})
    record = normalize_clarification(result, "raw")
    assert [question.text for question in record.questions] == ["Keep me?", "And me?"]


def test_question_choices_are_kept():
    record = normalize_clarification(ok({"questions": [{"question": "Budget?", "choices": ["Low", "High", 3]}]}), "x")
    assert record.questions == (Question(text="Budget?", choices=("Low", "High")),)


def test_clarification_prefers_agent_restatement():
    record = normalize_clarification(
        ok({"clarified_decision": "  Job A versus Job B ", "questions": ["Why?"]}), "raw input"
    )
    assert record.decision_statement == "Job A versus Job B"


def test_clarification_falls_back_to_raw_input_statement():
    record = normalize_clarification(ok({"questions": ["Why?"]}), "  Should I move?  ")
    assert record.decision_statement == "Should I move?"


@pytest.mark.parametrize(
    "result",
    [
        failed(),
        AgentResult(success=True, response={"status": "error", "result": {"questions": ["Why?"]}}),
        ok({}),
        ok({"questions": "not a list of questions"}),
        ok(None, "No questions from me."),
        None,
    ],
)
def test_clarification_empty_signals_fallback(result):
    assert normalize_clarification(result, "anything") is None


def test_comparison_reads_options_and_user_priorities():
    record = normalize_comparison(
        ok(
            {
                "options": [
                    {"name": "Move", "pros": ["Sun", 7], "cons": "Cost"},
                    "Stay",
                    {"pros": ["nameless"]},
                ],
                "user_priorities": [{"priority": "Money", "importance": 2}],
                "priorities": [{"name": "ignored", "importance": 3}],
            }
        )
    )
    assert record.options == (
        Option(name="Move", pros=("Sun",), cons=("Cost",)),
        Option(name="Stay"),
    )
    assert record.priorities == (Priority(name="Money", importance=2),)


def test_comparison_reads_nested_canvas():
    record = normalize_comparison(
        ok({"canvas": {"options": [{"title": "Rent"}], "priorities": [{"label": "Space", "importance": "high"}]}})
    )
    assert record.options == (Option(name="Rent"),)
    assert record.priorities == (Priority(name="Space", importance=3),)


def test_comparison_with_nothing_usable_is_none():
    assert normalize_comparison(ok({"options": [], "priorities": [1, 2]})) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 3),
        (3, 3),
        (2.5, 2),
        (2, 2),
        (1, 1),
        (0, 1),
        (-4, 1),
        ("5", 3),
        ("medium", 2),
        ("High", 3),
        ("urgent", 1),
        (None, 1),
        (True, 1),
        (float("nan"), 1),
        ([3], 1),
    ],
)
def test_importance_is_clamped(value, expected):
    assert coerce_importance(value) == expected


def test_out_of_range_importance_labels_high():
    record = normalize_comparison(ok({"priorities": [{"name": "Risk", "importance": 5}]}))
    assert record.priorities[0].importance == 3
    assert record.priorities[0].label == "High"


def test_biases_map_synonym_fields():
    biases = normalize_biases(
        ok(
            {
                "biases": [
                    {"bias": "Anchoring", "description": "First number sticks."},
                    {"applies_to": "Years invested."},
                    "Overconfidence",
                    {},
                ]
            }
        )
    )
    assert biases == (
        Bias(name="Anchoring", explanation="First number sticks."),
        Bias(name="Cognitive Bias", explanation="Years invested."),
        Bias(name="Overconfidence"),
    )


def test_biases_missing_is_none():
    assert normalize_biases(ok({"biases": []})) is None


@pytest.mark.parametrize(
    "result, expected",
    [
        (ok({"framing": "Go with A", "summary": "ignored"}), "Go with A"),
        (ok({"framing": "", "neutral_framing": "Neutral"}), "Neutral"),
        (ok({"summary": "Summary text"}), "Summary text"),
        (ok({"text": "Plain"}), "Plain"),
        (ok({}, "From message"), "From message"),
        (ok("  Bare string result  "), "Bare string result"),
    ],
)
def test_recommendation_path_order(result, expected):
    assert normalize_recommendation(result) == expected


def test_recommendation_ignores_json_text():
    assert normalize_recommendation(ok({}, "{}")) is None
    assert normalize_recommendation(ok({"framing": {"nested": "object"}})) is None


def test_same_input_normalizes_identically():
    result = ok({"questions": ["A?", {"text": "B?"}]})
    assert normalize_clarification(result, "x") == normalize_clarification(result, "x")


def test_lookup_decodes_json_strings_on_the_way():
    payload = {"result": '{"data": "{\\"questions\\": [\\"Q?\\"]}"}'}
    assert lookup(payload, "result.data.questions") == ["Q?"]


def test_post_fields():
    response = ok(
        {
            "content": "Ship small. #focus #shipping",
            "sources": [
                {"publication": "HBR", "stat": "42%", "link": "https://hbr.example"},
                {"claim": "no source here"},
                "Gartner",
            ],
            "url": "https://social.example/p/1",
        }
    ).response
    content = extract_post_content(response)
    assert content == "Ship small. #focus #shipping"
    citations = extract_citations(response)
    assert [citation.source for citation in citations] == ["HBR", "Gartner"]
    assert citations[0].assertion == "42%"
    assert citations[0].url == "https://hbr.example"
    assert extract_hashtags(response, content) == frozenset({"focus", "shipping"})
    assert extract_post_url(response) == "https://social.example/p/1"


def test_explicit_hashtags_win_over_scanned():
    response = ok({"post": "Text #ignored", "hashtags": ["#one", "two", ""]}).response
    assert extract_hashtags(response, "Text #ignored") == frozenset({"one", "two"})
