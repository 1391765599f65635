"""Resume Example - Evolve a Saved Report.

Loads a report saved with ``ReportModel.to_dict()`` and evolves its
synthesis with extra context.

Usage:
    python examples/resume_report.py report.json "Also consider the EU market"
"""

import asyncio
import json
import sys

from strategy_sdk import ConversationEngine, GeminiGateway, ReportModel


async def main(path: str, note: str):
    with open(path) as f:
        report = ReportModel.from_dict(json.load(f))

    engine = ConversationEngine.resume(GeminiGateway(), report)
    result = await engine.submit_text(note)
    if not result.ok:
        print(f"Evolve failed: {result.error}")
        return

    synthesis = engine.report.synthesis
    print(synthesis.summary)
    print(f"\nRecommendation: {synthesis.recommendation.text}")
    for step in synthesis.recommendation.actionable_steps:
        print(f"  - {step}")

    with open(path, "w") as f:
        json.dump(engine.report.to_dict(), f, indent=2)


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2]))
