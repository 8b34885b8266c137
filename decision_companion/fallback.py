"""Deterministic defaults used when an agent reply yields nothing usable.

These keep a run moving with the reasoning service down; they make no claim
to be good advice.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

from decision_companion.models import Bias, Clarification, Comparison, Option, Priority, Question, Stage

MATTERS_MOST_CHOICES = ("Rest", "Money", "Growth", "Stability", "Peace of mind")
WORRIES_CHOICES = (
    "I might fail",
    "I might miss out",
    "I might regret it",
    "I might lose time",
    "I might lose money",
)


def fallback_questions() -> Tuple[Question, ...]:
    return (
        Question(text="What matters most to you here?", choices=MATTERS_MOST_CHOICES),
        Question(text="What worries you most about the other option?", choices=WORRIES_CHOICES),
    )


def fallback_options() -> Tuple[Option, ...]:
    return (
        Option(
            name="Option A",
            pros=("Potential for growth", "New opportunities", "Fresh perspective"),
            cons=("Uncertainty", "Risk of change", "Learning curve"),
        ),
        Option(
            name="Option B",
            pros=("Familiarity", "Stability", "Proven track record"),
            cons=("Limited growth", "Potential stagnation", "Comfort zone"),
        ),
    )


def fallback_priorities() -> Tuple[Priority, ...]:
    return (
        Priority(name="Long-term success", importance=3),
        Priority(name="Risk management", importance=2),
        Priority(name="Personal satisfaction", importance=3),
    )


def fallback_biases() -> Tuple[Bias, ...]:
    return (
        Bias(
            name="Status Quo Bias",
            explanation=(
                "You might be favoring the current situation simply because it's familiar, "
                "even if change could be beneficial."
            ),
        ),
        Bias(
            name="Loss Aversion",
            explanation=(
                "You may be overweighting potential losses compared to equivalent gains, "
                "making risky options seem worse than they are."
            ),
        ),
    )


def top_priority(priorities: Sequence[Priority]) -> Optional[Priority]:
    """Highest importance wins; ties keep the earlier entry."""
    best: Optional[Priority] = None
    for priority in priorities:
        if best is None or priority.importance > best.importance:
            best = priority
    return best


def fallback_recommendation(options: Sequence[Option], priorities: Sequence[Priority]) -> str:
    choice = options[0].name if options else fallback_options()[0].name
    focus = top_priority(priorities) or top_priority(fallback_priorities())
    return (
        f"RECOMMENDATION: {choice}\n\n"
        f"Based on your priorities, especially {focus.name.lower()}, {choice} aligns better "
        "with where you want to be in the next 6 to 12 months, even though it involves "
        "short-term uncertainty.\n\n"
        f"Next step: Take one small concrete action toward {choice} within the next 48 hours."
    )


def fill_clarification(raw_decision: str, partial: Optional[Clarification]) -> Clarification:
    if partial is not None and partial.questions:
        return partial
    statement = partial.decision_statement if partial is not None else raw_decision.strip()
    return Clarification(decision_statement=statement, questions=fallback_questions())


def fill_comparison(partial: Optional[Comparison]) -> Comparison:
    options = partial.options if partial is not None else ()
    priorities = partial.priorities if partial is not None else ()
    return Comparison(
        options=options or fallback_options(),
        priorities=priorities or fallback_priorities(),
    )


Record = Union[Clarification, Comparison, Tuple[Bias, ...], str]


def synthesize(
    stage: Stage,
    decision: str = "",
    options: Sequence[Option] = (),
    priorities: Sequence[Priority] = (),
) -> Record:
    """Default canonical record committed on entry to ``stage``."""
    if stage is Stage.EXPLORE:
        return fill_clarification(decision, None)
    if stage is Stage.COMPARE:
        return fill_comparison(None)
    if stage is Stage.REFLECT:
        return fallback_biases()
    if stage is Stage.DECIDE:
        return fallback_recommendation(options, priorities)
    raise ValueError(f"No fallback record for stage {stage.label}.")
