"""Runtime settings for gridcalc, read from GRIDCALC_* environment variables.

CLI options override whatever the environment provides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from gridcalc.arithmetic import DEFAULT_EPSILON
from gridcalc.models import NumberMode

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_mode(env: Mapping[str, str]) -> NumberMode:
    raw = env.get("GRIDCALC_MODE", NumberMode.COMPLEX.value).strip().lower()
    try:
        return NumberMode(raw)
    except ValueError:
        logger.warning("Ignoring GRIDCALC_MODE=%r (expected 'real' or 'complex')", raw)
        return NumberMode.COMPLEX


def _env_max_depth(env: Mapping[str, str]) -> int:
    raw = env.get("GRIDCALC_MAX_DEPTH")
    if raw is None:
        return DEFAULT_MAX_DEPTH
    try:
        depth = int(raw)
    except ValueError:
        depth = 0
    if depth < 1:
        logger.warning("Ignoring GRIDCALC_MAX_DEPTH=%r (expected a positive integer)", raw)
        return DEFAULT_MAX_DEPTH
    return depth


def _env_epsilon(env: Mapping[str, str]) -> float:
    raw = env.get("GRIDCALC_EPSILON")
    if raw is None:
        return DEFAULT_EPSILON
    try:
        epsilon = float(raw)
    except ValueError:
        epsilon = -1.0
    if not epsilon >= 0.0:
        logger.warning("Ignoring GRIDCALC_EPSILON=%r (expected a non-negative number)", raw)
        return DEFAULT_EPSILON
    return epsilon


def _env_log_level(env: Mapping[str, str]) -> str:
    raw = env.get("GRIDCALC_LOG_LEVEL", "WARNING").strip().upper()
    if raw not in _LOG_LEVELS:
        logger.warning("Ignoring GRIDCALC_LOG_LEVEL=%r", raw)
        return "WARNING"
    return raw


@dataclass(frozen=True)
class Settings:
    """Evaluator and CLI configuration."""

    mode: NumberMode = NumberMode.COMPLEX
    max_depth: int = DEFAULT_MAX_DEPTH
    epsilon: float = DEFAULT_EPSILON
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from GRIDCALC_* variables; bad values fall back to defaults."""
        env = os.environ if env is None else env
        return cls(
            mode=_env_mode(env),
            max_depth=_env_max_depth(env),
            epsilon=_env_epsilon(env),
            log_level=_env_log_level(env),
        )

    def with_overrides(
        self,
        mode: Optional[NumberMode] = None,
        max_depth: Optional[int] = None,
        log_level: Optional[str] = None,
    ) -> Settings:
        """Return a copy with the non-None CLI options applied."""
        changes: dict = {}
        if mode is not None:
            changes["mode"] = mode
        if max_depth is not None:
            changes["max_depth"] = max_depth
        if log_level is not None:
            changes["log_level"] = log_level
        return replace(self, **changes)
