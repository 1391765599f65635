"""Gemini API Provider.

Direct API access to Google Gemini using the google-genai SDK.
Every call is schema-constrained: the model must answer with JSON that
matches the response schema of the generation step.

Usage:
    >>> from strategy_sdk import GeminiAPIProvider, StrategyConfig
    >>> provider = GeminiAPIProvider(StrategyConfig())
    >>> result = await provider.run(
    ...     'Analyze: "Revenue is down"',
    ...     model="gemini-3-flash-preview",
    ...     response_schema=ANALYSIS_SCHEMA,
    ... )

Requirements:
    pip install google-genai>=1.0.0
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Optional

from strategy_sdk.types import (
    PROVIDER_NAME,
    AuthenticationError,
    ExecutionTimeoutError,
    LLMResult,
    ResultType,
    TokenUsage,
)

from .services import ApiKeyResolver

if TYPE_CHECKING:
    from strategy_sdk.config import StrategyConfig

logger = logging.getLogger(__name__)

# HTTP status codes google-genai reports for bad or missing credentials
_AUTH_ERROR_CODES = {401, 403}


class GeminiAPIProvider:
    """Gemini API Provider using the google-genai SDK.

    Attributes:
        PROVIDER: Provider name used in results and errors
        _config: StrategyConfig instance
        _client: google.genai.Client, created on first use
    """

    PROVIDER = PROVIDER_NAME

    def __init__(
        self,
        config: "StrategyConfig",
        *,
        verify_api_key: bool = True,
    ) -> None:
        """Initialize GeminiAPIProvider.

        Args:
            config: StrategyConfig with credentials and generation settings
            verify_api_key: If True, verify an API key resolves on init

        Raises:
            AuthenticationError: If API key not found (when verify_api_key=True)
            ImportError: If google-genai package not installed
        """
        self._config = config
        self._client: Any = None
        self._api_key_resolver = ApiKeyResolver(config)

        # Lazy import to keep the error message actionable
        try:
            from google import genai

            self._genai = genai
        except ImportError as e:
            raise ImportError(
                "google-genai package required for GeminiAPIProvider. "
                "Install with: pip install google-genai>=1.0.0"
            ) from e

        if verify_api_key and not self._api_key_resolver.resolve():
            raise AuthenticationError(
                self.PROVIDER,
                f"API key not found. Set {self._api_key_resolver.env_var_name} "
                "environment variable.",
            )

    def _get_client(self) -> Any:
        """Get or create the google-genai client (use client.aio for async)."""
        if self._client is None:
            self._client = self._genai.Client(api_key=self._api_key_resolver.resolve())
        return self._client

    @property
    def provider_name(self) -> str:
        """Provider name string."""
        return self.PROVIDER

    async def run(
        self,
        prompt: str,
        *,
        model: str,
        system_prompt: Optional[str] = None,
        response_schema: Optional[Any] = None,
        **kwargs: Any,
    ) -> LLMResult:
        """Run a single prompt through the Gemini API.

        Args:
            prompt: User prompt
            model: API model name
            system_prompt: Optional system instruction
            response_schema: JSON schema the answer must follow; enables
                JSON mode when given
            **kwargs: Additional parameters passed to generate_content

        Returns:
            LLMResult with the response text (JSON text in JSON mode)

        Raises:
            AuthenticationError: If the API rejects the credentials
            ExecutionTimeoutError: If the call exceeds config.timeout
        """
        start_time = time.perf_counter()
        client = self._get_client()

        try:
            response = await asyncio.wait_for(
                self._generate(client, prompt, model, system_prompt, response_schema, **kwargs),
                timeout=self._config.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Gemini API call timed out after {self._config.timeout}s")
            raise ExecutionTimeoutError(self._config.timeout, self.PROVIDER) from e
        except Exception as e:
            if getattr(e, "code", None) in _AUTH_ERROR_CODES:
                raise AuthenticationError(self.PROVIDER, str(e)) from e
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(f"Gemini API error: {e}")
            return LLMResult(
                success=False,
                result_type=ResultType.ERROR,
                provider=self.provider_name,
                model=model,
                error=str(e),
                duration_ms=duration_ms,
            )

        duration_ms = int((time.perf_counter() - start_time) * 1000)

        text = ""
        if getattr(response, "text", None):
            text = response.text

        token_usage = None
        usage = getattr(response, "usage_metadata", None)
        if usage:
            token_usage = TokenUsage(
                input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
                output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
                total_tokens=getattr(usage, "total_token_count", 0) or 0,
            )

        logger.debug(f"Gemini {model} answered in {duration_ms}ms ({len(text)} chars)")
        return LLMResult(
            success=True,
            result_type=ResultType.JSON if response_schema is not None else ResultType.TEXT,
            provider=self.provider_name,
            model=model,
            text=text,
            duration_ms=duration_ms,
            token_usage=token_usage,
            raw=response,
        )

    async def _generate(
        self,
        client: Any,
        prompt: str,
        model: str,
        system_prompt: Optional[str],
        response_schema: Optional[Any],
        **kwargs: Any,
    ) -> Any:
        """Call client.aio.models.generate_content with a built config."""
        from google.genai import types

        config_kwargs: dict[str, Any] = {}
        if system_prompt:
            config_kwargs["system_instruction"] = system_prompt
        if response_schema is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = response_schema
        if self._config.temperature is not None:
            config_kwargs["temperature"] = self._config.temperature
        if self._config.max_output_tokens is not None:
            config_kwargs["max_output_tokens"] = self._config.max_output_tokens

        config = types.GenerateContentConfig(**config_kwargs) if config_kwargs else None

        return await client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=config,
            **kwargs,
        )


__all__ = ["GeminiAPIProvider"]
