from __future__ import annotations

from pathlib import Path
from typing import List

from decision_companion.utils.io import write_text
from decision_companion.workflow import WorkflowState


def write_decision_summary(path: Path, state: WorkflowState) -> None:
    lines: List[str] = [
        "# Decision Summary",
        "",
        f"Stage reached: {state.stage.label} ({int(state.stage)}/5)",
        "",
        "## Decision",
        state.decision_statement or state.decision_input,
        "",
    ]
    if state.questions:
        lines.append("## Questions")
        for index, question in enumerate(state.questions, start=1):
            lines.append(f"{index}. {question.text}")
            lines.append(f"   - {question.answer or '(unanswered)'}")
        lines.append("")
    for option in state.options:
        lines.extend([f"## Option: {option.name}", "", "### Pros"])
        lines.extend([f"- {item}" for item in option.pros])
        lines.extend(["", "### Cons"])
        lines.extend([f"- {item}" for item in option.cons])
        lines.append("")
    if state.priorities:
        lines.append("## Priorities")
        lines.extend(
            [f"- {priority.name}: {priority.label}" for priority in state.priorities]
        )
        lines.append("")
    if state.biases:
        lines.append("## Biases to watch")
        lines.extend([f"- **{bias.name}**: {bias.explanation}" for bias in state.biases])
        lines.append("")
    if state.recommendation:
        lines.extend(["## Recommendation", state.recommendation, ""])
    write_text(path, "\n".join(lines).strip() + "\n")
