"""
Configuration for the analysis engine, read from the environment once.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


def _env_number(name: str, default, cast):
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("[settings] invalid %s=%r; using default %s", name, raw, default)
        return default


@dataclass(frozen=True)
class AnalysisSettings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: float = 0.1
    max_output_tokens: int = 8192
    max_attempts: int = 3
    backoff_seconds: float = 1.0
    timeout_seconds: float = 60.0

    @property
    def ai_enabled(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


def load_settings() -> AnalysisSettings:
    api_key = (os.environ.get("OPENAI_API_KEY") or "").strip() or None
    model = (os.environ.get("OPENAI_ANALYSIS_MODEL") or "").strip() or DEFAULT_MODEL
    return AnalysisSettings(
        api_key=api_key,
        model=model,
        temperature=_env_number("ANALYSIS_TEMPERATURE", 0.1, float),
        max_attempts=max(1, _env_number("ANALYSIS_MAX_ATTEMPTS", 3, int)),
        backoff_seconds=max(0.0, _env_number("ANALYSIS_BACKOFF_SECONDS", 1.0, float)),
        timeout_seconds=_env_number("ANALYSIS_TIMEOUT_SECONDS", 60.0, float),
    )
