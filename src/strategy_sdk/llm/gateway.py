"""Generation Gateway.

The only boundary the conversation engine depends on: one async
operation per generation step, each returning the step's structured
result or raising ``GenerationError``.

``GeminiGateway`` implements the contract on top of GeminiAPIProvider.
Each operation retries failed attempts a bounded number of times with a
fixed wait (tenacity) before surfacing ``GenerationError``; credential
and configuration errors are not retried.

Usage:
    >>> gateway = GeminiGateway(StrategyConfig(max_retries=2, retry_wait=1.0))
    >>> analysis = await gateway.analyze("Revenue is down, need to fix it")
    >>> tree = await gateway.structure(
    ...     analysis.improved_statement, BreakdownType.FORMULAIC
    ... )
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Protocol, TypeVar

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from strategy_sdk.config import StrategyConfig
from strategy_sdk.types import (
    RESPONSE_SCHEMAS,
    Analysis,
    AuthenticationError,
    BreakdownType,
    GenerationError,
    GenerationStep,
    InvalidConfigError,
    IssueTree,
    NothingToPrioritizeError,
    ParseError,
    PrioritizationResult,
    ProviderCallError,
    Synthesis,
    WorkplanItem,
)

from . import prompts
from .providers import GeminiAPIProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors that another attempt cannot fix
NON_RETRYABLE_ERRORS = (AuthenticationError, InvalidConfigError, NothingToPrioritizeError)


class GenerationGateway(Protocol):
    """Remote reasoning capability, one operation per step.

    Implementations raise ``GenerationError`` once their own retry policy
    is exhausted; callers never see individual attempts.
    """

    async def analyze(self, problem: str, context: str = "") -> Analysis:
        ...

    async def structure(
        self, objective: str, breakdown_type: BreakdownType, feedback: str = ""
    ) -> IssueTree:
        ...

    async def prioritize(self, issues: list[str], feedback: str = "") -> PrioritizationResult:
        ...

    async def plan(self, issues: list[str], feedback: str = "") -> list[WorkplanItem]:
        ...

    async def synthesize(self, objective: str, context: str = "") -> Synthesis:
        ...


def _normalize(label: str) -> str:
    return " ".join(label.lower().split())


def _canonical_labels(allowed: list[str]) -> dict[str, str]:
    canonical: dict[str, str] = {}
    for label in allowed:
        canonical.setdefault(_normalize(label), label)
    return canonical


def align_prioritization(
    result: PrioritizationResult, issues: list[str], provider: str = "gemini"
) -> PrioritizationResult:
    """Keep only items whose label is one of the requested issues.

    Labels are matched case- and whitespace-insensitively and rewritten
    to the requested spelling.

    Raises:
        ParseError: If no item matches any requested issue
    """
    canonical = _canonical_labels(issues)
    aligned = []
    for item in result.items:
        label = canonical.get(_normalize(item.label))
        if label is None:
            logger.warning(f"Dropping prioritized item not in issue tree: {item.label!r}")
            continue
        item.label = label
        aligned.append(item)
    if result.items and not aligned:
        raise ParseError(provider, "no prioritized item matches a requested issue")
    result.items = aligned
    return result


def align_workplan(
    items: list[WorkplanItem], issues: list[str], provider: str = "gemini"
) -> list[WorkplanItem]:
    """Keep only workplan items that reference a requested issue.

    Raises:
        ParseError: If no item matches any requested issue
    """
    canonical = _canonical_labels(issues)
    aligned = []
    for item in items:
        label = canonical.get(_normalize(item.issue))
        if label is None:
            logger.warning(f"Dropping workplan item for unknown issue: {item.issue!r}")
            continue
        item.issue = label
        aligned.append(item)
    if items and not aligned:
        raise ParseError(provider, "no workplan item matches a requested issue")
    return aligned


def _parse_workplan(data: Any) -> list[WorkplanItem]:
    if not isinstance(data, list):
        raise ValueError("workplan response is not a list")
    return [WorkplanItem.from_dict(item) for item in data]


class GeminiGateway:
    """GenerationGateway backed by the Gemini API.

    Attributes:
        config: StrategyConfig (models, timeout, retry policy)
        provider: GeminiAPIProvider used for every call
    """

    def __init__(
        self,
        config: Optional[StrategyConfig] = None,
        provider: Optional[GeminiAPIProvider] = None,
    ) -> None:
        """Initialize GeminiGateway.

        Args:
            config: Strategy configuration (defaults to StrategyConfig())
            provider: Provider to call; built from config when omitted

        Raises:
            AuthenticationError: If no API key resolves and provider is omitted
        """
        self.config = config or StrategyConfig()
        self.provider = provider or GeminiAPIProvider(self.config)

        self._retry = retry(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_fixed(self.config.retry_wait),
            retry=retry_if_not_exception_type(NON_RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    # -------------------------------------------------------------------------
    # Step operations
    # -------------------------------------------------------------------------

    async def analyze(self, problem: str, context: str = "") -> Analysis:
        system, prompt = prompts.analyze_prompt(problem, context)
        return await self._generate(GenerationStep.ANALYZE, system, prompt, Analysis.from_dict)

    async def structure(
        self, objective: str, breakdown_type: BreakdownType, feedback: str = ""
    ) -> IssueTree:
        system, prompt = prompts.structure_prompt(objective, breakdown_type, feedback)
        return await self._generate(GenerationStep.STRUCTURE, system, prompt, IssueTree.from_dict)

    async def prioritize(self, issues: list[str], feedback: str = "") -> PrioritizationResult:
        if not issues:
            raise NothingToPrioritizeError()
        system, prompt = prompts.prioritize_prompt(issues, feedback)

        def parse(data: Any) -> PrioritizationResult:
            return align_prioritization(
                PrioritizationResult.from_dict(data), issues, self.provider.provider_name
            )

        return await self._generate(GenerationStep.PRIORITIZE, system, prompt, parse)

    async def plan(self, issues: list[str], feedback: str = "") -> list[WorkplanItem]:
        system, prompt = prompts.plan_prompt(issues, feedback)

        def parse(data: Any) -> list[WorkplanItem]:
            return align_workplan(_parse_workplan(data), issues, self.provider.provider_name)

        return await self._generate(GenerationStep.PLAN, system, prompt, parse)

    async def synthesize(self, objective: str, context: str = "") -> Synthesis:
        system, prompt = prompts.synthesize_prompt(objective, context)
        return await self._generate(GenerationStep.SYNTHESIZE, system, prompt, Synthesis.from_dict)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _generate(
        self,
        step: GenerationStep,
        system_prompt: str,
        prompt: str,
        parse: Callable[[Any], T],
    ) -> T:
        """Run one step with retries, wrapping the final failure.

        Raises:
            GenerationError: After the last attempt failed
        """
        logger.info(f"Generating {step.value} with {self.config.get_model(step)}")

        @self._retry
        async def _do_attempt() -> T:
            return await self._attempt(step, system_prompt, prompt, parse)

        try:
            return await _do_attempt()
        except Exception as e:
            logger.error(f"{step.display_name} failed: {e}")
            raise GenerationError(step, e) from e

    async def _attempt(
        self,
        step: GenerationStep,
        system_prompt: str,
        prompt: str,
        parse: Callable[[Any], T],
    ) -> T:
        provider_name = self.provider.provider_name
        result = await self.provider.run(
            prompt,
            model=self.config.get_model(step),
            system_prompt=system_prompt,
            response_schema=RESPONSE_SCHEMAS[step],
        )
        if not result.success:
            raise ProviderCallError(provider_name, result.error or "unknown error")
        if not result.has_text:
            raise ParseError(provider_name, "empty response")

        try:
            data = json.loads(result.text)
        except json.JSONDecodeError as e:
            raise ParseError(provider_name, f"invalid JSON: {e}") from e

        try:
            return parse(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(provider_name, f"{step.value} response: {e}") from e


__all__ = [
    "GenerationGateway",
    "GeminiGateway",
    "NON_RETRYABLE_ERRORS",
    "align_prioritization",
    "align_workplan",
]
