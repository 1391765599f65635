"""Quick Start Example - Guided Strategy Session.

Runs one interactive session in the terminal: type a problem, then pick
the offered actions by number (or type feedback when asked to refine).

Requires GEMINI_API_KEY in the environment.
"""

import asyncio
import json
import logging

from strategy_sdk import (
    ConversationEngine,
    EngineObserver,
    GeminiGateway,
    Message,
    ReportModel,
    StrategyConfig,
)


class ConsoleObserver(EngineObserver):
    """Prints engine notifications."""

    def on_loading_changed(self, loading: bool) -> None:
        if loading:
            print("... thinking")

    def on_phase_changed(self, phase) -> None:
        print(f"\n=== Phase: {phase.value} ===")

    def on_report_ready(self, report: ReportModel) -> None:
        print("\n=== Report ===")
        print(json.dumps(report.to_dict(), indent=2))

    def on_input_prefill(self, text: str) -> None:
        print(f"(suggested: {text})")


def print_message(message: Message) -> None:
    print(f"[{message.speaker.value}] {message.text}")
    for index, action in enumerate(message.pending_actions, 1):
        hint = f" - {action.rationale}" if action.rationale else ""
        print(f"  {index}. {action.label}{hint}")


async def main():
    logging.basicConfig(level=logging.WARNING)

    gateway = GeminiGateway(StrategyConfig(max_retries=2))
    engine = ConversationEngine(gateway, observer=ConsoleObserver())
    engine.transcript.subscribe(print_message)

    print("Describe the problem you want to solve (empty line to quit).")
    while True:
        line = input("> ").strip()
        if not line:
            break

        actions = engine.pending_actions()
        if actions and line.isdigit() and 1 <= int(line) <= len(actions):
            result = await engine.submit_choice(actions[int(line) - 1].value)
        else:
            result = await engine.submit_text(line)

        if not result.handled and result.error:
            print(f"(ignored: {result.error})")


if __name__ == "__main__":
    asyncio.run(main())
