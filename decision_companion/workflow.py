from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from decision_companion import fallback
from decision_companion.config import PROMPTS_DIR, AgentDirectory
from decision_companion.errors import ValidationError
from decision_companion.gateway import AgentGateway, AgentResult
from decision_companion.models import Bias, Clarification, Comparison, Option, Priority, Question, Stage
from decision_companion.navigator import AutoAdvance, QuestionNavigator
from decision_companion.normalizer import (
    normalize_biases,
    normalize_clarification,
    normalize_comparison,
    normalize_recommendation,
)
from decision_companion.utils.io import read_text

EMPTY_DECISION_MESSAGE = "Please enter your decision or dilemma"
UNANSWERED_MESSAGE = "Please answer all questions before continuing"
GATEWAY_ERROR_MESSAGE = "An error occurred. Please try again."


@dataclass(frozen=True)
class WorkflowState:
    stage: Stage = Stage.CLARIFY
    decision_input: str = ""
    decision_statement: str = ""
    navigator: QuestionNavigator = field(default_factory=QuestionNavigator)
    options: Tuple[Option, ...] = ()
    priorities: Tuple[Priority, ...] = ()
    biases: Tuple[Bias, ...] = ()
    recommendation: str = ""
    error: str = ""
    busy: bool = False

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self.navigator.questions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": int(self.stage),
            "stage_label": self.stage.label,
            "decision_statement": self.decision_statement,
            "questions": [
                {"text": question.text, "answer": question.answer} for question in self.questions
            ],
            "options": [
                {"name": option.name, "pros": list(option.pros), "cons": list(option.cons)}
                for option in self.options
            ],
            "priorities": [
                {"name": priority.name, "importance": priority.importance, "label": priority.label}
                for priority in self.priorities
            ],
            "biases": [{"name": bias.name, "explanation": bias.explanation} for bias in self.biases],
            "recommendation": self.recommendation,
        }


# Actions

@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class EditDecision:
    text: str


@dataclass(frozen=True)
class SetAnswer:
    index: int
    value: str


@dataclass(frozen=True)
class NextQuestion:
    pass


@dataclass(frozen=True)
class PreviousQuestion:
    pass


@dataclass(frozen=True)
class Begin:
    stage: Stage


@dataclass(frozen=True)
class Fail:
    message: str


@dataclass(frozen=True)
class Reject:
    message: str


@dataclass(frozen=True)
class CommitClarification:
    record: Clarification


@dataclass(frozen=True)
class CommitComparison:
    record: Comparison


@dataclass(frozen=True)
class CommitBiases:
    biases: Tuple[Bias, ...]


@dataclass(frozen=True)
class CommitRecommendation:
    text: str


Action = Union[
    Restart,
    EditDecision,
    SetAnswer,
    NextQuestion,
    PreviousQuestion,
    Begin,
    Fail,
    Reject,
    CommitClarification,
    CommitComparison,
    CommitBiases,
    CommitRecommendation,
]

_SETTLING_ACTIONS = (Fail, CommitClarification, CommitComparison, CommitBiases, CommitRecommendation)


def _settled(state: WorkflowState, **changes: Any) -> WorkflowState:
    return replace(state, busy=False, error="", **changes)


def reduce(state: WorkflowState, action: Action) -> WorkflowState:
    """Pure transition function; actions that do not apply leave state as is."""
    if state.busy and not isinstance(action, _SETTLING_ACTIONS):
        return state

    if isinstance(action, Restart):
        return WorkflowState()
    if isinstance(action, EditDecision):
        if state.stage is not Stage.CLARIFY:
            return state
        return replace(state, decision_input=action.text)
    if isinstance(action, SetAnswer):
        if state.stage is not Stage.EXPLORE or not 0 <= action.index < len(state.questions):
            return state
        return replace(state, navigator=state.navigator.set_answer(action.index, action.value))
    if isinstance(action, NextQuestion):
        if state.stage is not Stage.EXPLORE:
            return state
        return replace(state, navigator=state.navigator.advance())
    if isinstance(action, PreviousQuestion):
        if state.stage is not Stage.EXPLORE:
            return state
        return replace(state, navigator=state.navigator.retreat())
    if isinstance(action, Begin):
        if state.stage is not action.stage:
            return state
        return replace(state, busy=True, error="")
    if isinstance(action, Fail):
        return replace(state, busy=False, error=action.message)
    if isinstance(action, Reject):
        return replace(state, error=action.message)
    if isinstance(action, CommitClarification):
        if state.stage is not Stage.CLARIFY:
            return state
        return _settled(
            state,
            stage=Stage.EXPLORE,
            decision_statement=action.record.decision_statement,
            navigator=QuestionNavigator(questions=action.record.questions),
        )
    if isinstance(action, CommitComparison):
        if state.stage is not Stage.EXPLORE:
            return state
        return _settled(
            state,
            stage=Stage.COMPARE,
            options=action.record.options,
            priorities=action.record.priorities,
        )
    if isinstance(action, CommitBiases):
        if state.stage is not Stage.COMPARE:
            return state
        return _settled(state, stage=Stage.REFLECT, biases=action.biases)
    if isinstance(action, CommitRecommendation):
        if state.stage is not Stage.REFLECT:
            return state
        return _settled(state, stage=Stage.DECIDE, recommendation=action.text)
    raise TypeError(f"Unknown workflow action: {action!r}")


# Prompt context

def answers_context(questions: Tuple[Question, ...]) -> str:
    return "\n\n".join(
        f"Q{index}: {question.text}\nA{index}: {question.answer}"
        for index, question in enumerate(questions, start=1)
    )


def priorities_context(priorities: Tuple[Priority, ...]) -> str:
    return ", ".join(f"{priority.name} (Importance: {priority.importance})" for priority in priorities)


def options_context(options: Tuple[Option, ...]) -> str:
    return "\n".join(
        f"{option.name}: Pros - {', '.join(option.pros)}; Cons - {', '.join(option.cons)}"
        for option in options
    )


class WorkflowController:
    """Drives Clarify → Explore → Compare → Reflect → Decide.

    Each forward step validates its precondition, calls the stage's agent,
    normalizes the reply, substitutes the fallback when the reply is empty
    and commits the record. Any error raised by the call leaves the stage where it
    was so the same call can be retried.
    """

    def __init__(
        self,
        gateway: AgentGateway,
        agents: AgentDirectory,
        prompts_dir: Path = PROMPTS_DIR,
        auto_advance: Optional[AutoAdvance] = None,
    ) -> None:
        self.gateway = gateway
        self.agents = agents
        self.prompts_dir = prompts_dir
        self.auto_advance = auto_advance or AutoAdvance()
        self.state = WorkflowState()
        self.history: List[Action] = []

    def dispatch(self, action: Action) -> WorkflowState:
        self.history.append(action)
        self.state = reduce(self.state, action)
        return self.state

    # Stage 1

    def edit_decision(self, text: str) -> WorkflowState:
        return self.dispatch(EditDecision(text))

    def submit_decision(self, text: Optional[str] = None) -> bool:
        if text is not None:
            self.edit_decision(text)
        raw = self.state.decision_input

        def validate() -> None:
            if not raw.strip():
                raise ValidationError(EMPTY_DECISION_MESSAGE)

        def commit(result: AgentResult) -> Action:
            record = normalize_clarification(result, raw)
            return CommitClarification(fallback.fill_clarification(raw, record))

        return self._transition(
            Stage.CLARIFY,
            "decision_clarifier",
            "clarify_decision",
            lambda: f"Help me clarify this decision: {raw}",
            validate,
            commit,
        )

    # Stage 2

    def answer(self, index: int, value: str) -> WorkflowState:
        return self.dispatch(SetAnswer(index, value))

    def select_answer(self, value: str) -> WorkflowState:
        """Quick-pick answer for the current question, then advance shortly after."""
        if self.state.busy or self.state.stage is not Stage.EXPLORE:
            return self.state
        index = self.state.navigator.index
        self.dispatch(SetAnswer(index, value))
        if self.state.navigator.at_last:
            self.auto_advance.cancel()
        else:
            self.auto_advance.schedule(index)
        return self.state

    def poll(self) -> WorkflowState:
        if self.state.stage is Stage.EXPLORE and self.auto_advance.ready(self.state.navigator):
            self.dispatch(NextQuestion())
        return self.state

    def next_question(self) -> WorkflowState:
        self.auto_advance.cancel()
        return self.dispatch(NextQuestion())

    def previous_question(self) -> WorkflowState:
        self.auto_advance.cancel()
        return self.dispatch(PreviousQuestion())

    def complete_questions(self) -> bool:
        state = self.state

        def validate() -> None:
            if not state.navigator.is_complete():
                raise ValidationError(UNANSWERED_MESSAGE)

        def context() -> str:
            return (
                f'Based on the decision: "{state.decision_statement}"\n\n'
                f"User's answers:\n{answers_context(state.questions)}\n\n"
                "Please build a decision canvas with options, pros, cons, and priorities."
            )

        def commit(result: AgentResult) -> Action:
            return CommitComparison(fallback.fill_comparison(normalize_comparison(result)))

        return self._transition(
            Stage.EXPLORE, "trade_off_mapper", "map_trade_offs", context, validate, commit
        )

    # Stage 3

    def proceed_to_reflection(self) -> bool:
        state = self.state

        def context() -> str:
            options = "\n".join(f"- {option.name}" for option in state.options)
            return (
                f'Decision: "{state.decision_statement}"\n\n'
                f"User's answers:\n{answers_context(state.questions)}\n\n"
                f"Options being considered:\n{options}\n\n"
                "Please identify cognitive biases that might be affecting this decision."
            )

        def commit(result: AgentResult) -> Action:
            return CommitBiases(normalize_biases(result) or fallback.fallback_biases())

        return self._transition(
            Stage.COMPARE, "bias_detector", "detect_biases", context, None, commit
        )

    # Stage 4

    def proceed_to_decision(self) -> bool:
        state = self.state

        def context() -> str:
            return (
                f'Decision: "{state.decision_statement}"\n\n'
                f"User priorities: {priorities_context(state.priorities)}\n\n"
                f"Options:\n{options_context(state.options)}"
            )

        def commit(result: AgentResult) -> Action:
            text = normalize_recommendation(result)
            if not text:
                text = fallback.fallback_recommendation(state.options, state.priorities)
            return CommitRecommendation(text)

        return self._transition(
            Stage.REFLECT, "framing_assistant", "frame_recommendation", context, None, commit
        )

    def restart(self) -> WorkflowState:
        if self.state.busy:
            return self.state
        self.auto_advance.cancel()
        print("[workflow] restart")
        return self.dispatch(Restart())

    def _transition(
        self,
        expected: Stage,
        role: str,
        prompt_name: str,
        context: Callable[[], str],
        validate: Optional[Callable[[], None]],
        commit: Callable[[AgentResult], Action],
    ) -> bool:
        if self.state.busy:
            print(f"[workflow] stage={self.state.stage.label} busy; ignoring {prompt_name}")
            return False
        try:
            if self.state.stage is not expected:
                raise ValidationError(
                    f"Cannot run {expected.label} while the workflow is at {self.state.stage.label}."
                )
            if validate is not None:
                validate()
        except ValidationError as exc:
            self.dispatch(Reject(str(exc)))
            return False

        template = read_text(self.prompts_dir / f"{prompt_name}.md")
        prompt = f"{template}\n\nINPUT:\n{context()}\n"
        self.auto_advance.cancel()
        self.dispatch(Begin(expected))
        try:
            result = self.gateway.call(prompt, self.agents.id_for(role))
        except Exception as exc:
            print(f"[workflow] stage={expected.label} gateway error: {exc}")
            self.dispatch(Fail(GATEWAY_ERROR_MESSAGE))
            return False

        if not result.ok:
            print(f"[workflow] stage={expected.label} agent reported failure; using fallback")
        self.dispatch(commit(result))
        print(f"[workflow] stage={expected.label} -> {self.state.stage.label}")
        return True
