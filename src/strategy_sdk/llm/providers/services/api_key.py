"""API Key Resolution Service.

Finds the Gemini API key for GeminiAPIProvider so the provider never
touches files or the environment itself.

Lookup order:
    1. StrategyConfig.api_key
    2. StrategyConfig.env_file (a .env file, ``export`` lines allowed)
    3. The GEMINI_API_KEY environment variable

A .env file is only read when it is a regular file owned by the current
user. Group/world-readable files are logged, or skipped entirely when
``strict_env_security`` is set.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from strategy_sdk.types import GEMINI_API_KEY_ENV

if TYPE_CHECKING:
    from strategy_sdk.config import StrategyConfig

logger = logging.getLogger(__name__)


def parse_env_lines(lines) -> dict[str, str]:
    """Parse KEY=VALUE lines, ignoring blanks, comments and ``export``."""
    values: dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        name, _, value = line.partition("=")
        values[name.strip()] = value.strip().strip("\"'")
    return values


def env_file_problem(path: Path, strict: bool = False) -> Optional[str]:
    """Why ``path`` must not be read, or None when it is safe.

    Symlinks and foreign-owned files are always refused.
    """
    if path.is_symlink():
        return f"Refusing symlinked .env file {path}"
    try:
        info = path.stat()
    except OSError as e:
        return f"Cannot stat .env file {path}: {e}"

    if hasattr(os, "getuid") and info.st_uid != os.getuid():
        return f"Refusing .env file {path}: owned by uid {info.st_uid}"

    if info.st_mode & (stat.S_IRGRP | stat.S_IROTH):
        problem = f".env file {path} is readable by others (mode={oct(info.st_mode & 0o777)}); run chmod 600"
        if strict:
            return problem
        logger.warning(f"{problem}. Set strict_env_security=True to refuse it.")
    return None


class ApiKeyResolver:
    """Resolves the Gemini API key for one StrategyConfig."""

    def __init__(self, config: StrategyConfig, env_var_name: str = GEMINI_API_KEY_ENV) -> None:
        self._config = config
        self._env_var_name = env_var_name

    @property
    def env_var_name(self) -> str:
        return self._env_var_name

    def resolve(self) -> Optional[str]:
        """Return the first configured key, or None."""
        if self._config.api_key:
            return self._config.api_key

        if self._config.env_file:
            key = self._from_env_file(Path(self._config.env_file))
            if key:
                return key

        return os.environ.get(self._env_var_name) or None

    def _from_env_file(self, path: Path) -> Optional[str]:
        if not path.exists():
            logger.debug(f"No .env file at {path}")
            return None

        problem = env_file_problem(path, strict=self._config.strict_env_security)
        if problem:
            logger.error(problem)
            return None

        try:
            with open(path) as f:
                values = parse_env_lines(f)
        except OSError as e:
            logger.warning(f"Failed to read .env file {path}: {e}")
            return None
        return values.get(self._env_var_name) or None


__all__ = ["ApiKeyResolver", "env_file_problem", "parse_env_lines"]
