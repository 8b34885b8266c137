from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from decision_companion.adapters.mock_adapter import SCENARIOS
from decision_companion.artifacts.writers import write_decision_summary
from decision_companion.config import ensure_env, load_agents
from decision_companion.gateway import build_gateway
from decision_companion.models import Stage
from decision_companion.utils.io import write_json, write_text
from decision_companion.utils.time import utc_timestamp
from decision_companion.workflow import WorkflowController

DEFAULT_ANSWER = "Not sure yet"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decision Companion")
    parser.add_argument("--mode", choices=["mock", "live"], required=True)
    parser.add_argument("--decision", required=True, help="The decision or dilemma to work through")
    parser.add_argument(
        "--answer",
        action="append",
        default=[],
        help="Answer for the next clarifying question; repeat in question order",
    )
    parser.add_argument("--scenario", choices=SCENARIOS, default="default", help="Mock reply scenario")
    parser.add_argument("--runs-dir", default="runs")
    parser.add_argument("--max-output-tokens", type=int, default=800)
    parser.add_argument("--temperature", type=float, default=0.2)
    return parser


def _answer_and_complete(controller: WorkflowController, provided: List[str]) -> bool:
    for index, question in enumerate(controller.state.questions):
        if index < len(provided):
            value = provided[index]
        elif question.choices:
            value = question.choices[0]
        else:
            value = DEFAULT_ANSWER
        print(f"Q{index + 1}: {question.text}\nA{index + 1}: {value}")
        controller.answer(index, value)
    return controller.complete_questions()


def run(args: argparse.Namespace, base_dir: Path) -> int:
    run_dir = Path(args.runs_dir) / utc_timestamp()
    inputs_dir = run_dir / "inputs"
    raw_dir = run_dir / "raw"
    artifacts_dir = run_dir / "artifacts"
    for path in [inputs_dir, raw_dir, artifacts_dir]:
        path.mkdir(parents=True, exist_ok=True)

    os.environ["ORCH_MAX_OUTPUT_TOKENS"] = str(args.max_output_tokens)
    os.environ["ORCH_TEMPERATURE"] = str(args.temperature)

    load_dotenv(base_dir / ".env")
    agents = load_agents()
    if args.mode == "live":
        ensure_env(base_dir, agents.providers())

    write_text(inputs_dir / "decision.md", args.decision + "\n")
    gateway = build_gateway(args.mode, agents, scenario=args.scenario, transcript_dir=raw_dir)
    controller = WorkflowController(gateway, agents)

    steps = [
        lambda: controller.submit_decision(args.decision),
        lambda: _answer_and_complete(controller, args.answer),
        controller.proceed_to_reflection,
        controller.proceed_to_decision,
    ]
    for step in steps:
        if not step():
            print(f"Stopped at {controller.state.stage.label}: {controller.state.error}")
            break

    write_json(artifacts_dir / "decision.json", controller.state.to_dict())
    write_decision_summary(artifacts_dir / "decision_summary.md", controller.state)
    print(f"Run written to {run_dir}")
    if controller.state.stage is not Stage.DECIDE:
        return 1
    print("\n" + controller.state.recommendation)
    return 0


def main() -> None:
    args = build_parser().parse_args()
    sys.exit(run(args, Path.cwd()))


if __name__ == "__main__":
    main()
