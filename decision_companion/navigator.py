from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from decision_companion.models import Question

AUTO_ADVANCE_DELAY_SECONDS = 0.3


@dataclass(frozen=True)
class QuestionNavigator:
    questions: Tuple[Question, ...] = ()
    index: int = 0

    def __post_init__(self) -> None:
        upper = max(len(self.questions) - 1, 0)
        if not 0 <= self.index <= upper:
            object.__setattr__(self, "index", min(max(self.index, 0), upper))

    @property
    def current(self) -> Optional[Question]:
        if not self.questions:
            return None
        return self.questions[self.index]

    @property
    def at_last(self) -> bool:
        return self.index >= len(self.questions) - 1

    @property
    def progress(self) -> Tuple[int, int]:
        answered = sum(1 for question in self.questions if question.answered)
        return answered, len(self.questions)

    def set_answer(self, index: int, value: str) -> "QuestionNavigator":
        if not 0 <= index < len(self.questions):
            raise IndexError(f"Question index {index} out of range.")
        questions = list(self.questions)
        questions[index] = replace(questions[index], answer=value)
        return replace(self, questions=tuple(questions))

    def advance(self) -> "QuestionNavigator":
        if self.at_last:
            return self
        return replace(self, index=self.index + 1)

    def retreat(self) -> "QuestionNavigator":
        if self.index == 0:
            return self
        return replace(self, index=self.index - 1)

    def is_complete(self) -> bool:
        return bool(self.questions) and all(question.answered for question in self.questions)


class AutoAdvance:
    """A single pending "move to the next question" that fires on poll().

    Scheduled after a quick-pick answer so the selection stays visible for a
    moment. Cancelling, or the navigator moving off the origin index, turns
    it into a no-op.
    """

    def __init__(
        self,
        delay: float = AUTO_ADVANCE_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.delay = delay
        self.clock = clock
        self._origin: Optional[int] = None
        self._due_at = 0.0

    @property
    def pending(self) -> bool:
        return self._origin is not None

    def schedule(self, origin_index: int) -> None:
        self._origin = origin_index
        self._due_at = self.clock() + self.delay

    def cancel(self) -> None:
        self._origin = None

    def ready(self, navigator: QuestionNavigator) -> bool:
        """Consume the pending advance if it is due for this navigator."""
        if self._origin is None or self.clock() < self._due_at:
            return False
        origin, self._origin = self._origin, None
        return navigator.index == origin and not navigator.at_last
