"""Observer hooks for the rendering layer.

The engine calls these synchronously right after the state they
describe has changed. All methods are optional: subclass and override
what you need. Transcript appends are observed separately through
``TranscriptLog.subscribe``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from strategy_sdk.types import Phase, ReportModel


class EngineObserver:
    """No-op base observer."""

    def on_loading_changed(self, loading: bool) -> None:
        """A generation call started (True) or finished (False)."""

    def on_phase_changed(self, phase: "Phase") -> None:
        """The session advanced to ``phase``."""

    def on_report_ready(self, report: "ReportModel") -> None:
        """A synthesis is available (first time or after an evolve)."""

    def on_input_prefill(self, text: str) -> None:
        """Suggested content for the editable input box."""


__all__ = ["EngineObserver"]
