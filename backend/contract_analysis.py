"""
Dual-path contract analysis.

Idle -> AttemptAI -> {Success, RetryAI, FallbackKeyword} -> Done

The AI path is tried first with bounded retries and exponential backoff;
anything it cannot resolve ends in the keyword fallback, so every string input
gets a complete AnalysisResult. Only non-text input raises.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from enum import Enum
from typing import Awaitable, Callable, Optional

from ai_client import AIClient, build_client
from ai_prompt import build_analysis_prompt
from ai_response import parse_ai_response
from errors import ConfigurationError, InvalidInputError, TransientAIError, UnknownAIError
from keyword_analyzer import analyze_with_keywords
from models import AnalysisResult
from settings import AnalysisSettings, load_settings

logger = logging.getLogger(__name__)

# Shorter texts never go to the AI path
MIN_TEXT_LENGTH = 100


class AnalysisState(str, Enum):
    IDLE = "idle"
    ATTEMPT_AI = "attempt_ai"
    RETRY_AI = "retry_ai"
    SUCCESS = "success"
    FALLBACK_KEYWORD = "fallback_keyword"
    DONE = "done"


class ContractAnalyzer:
    """
    Runs one analysis per analyze() call. Holds only configuration and the
    AI client; all per-analysis state lives in the call.
    """

    def __init__(
        self,
        client: Optional[AIClient] = None,
        settings: Optional[AnalysisSettings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.settings = settings or AnalysisSettings()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Optional[AnalysisSettings] = None) -> "ContractAnalyzer":
        settings = settings or load_settings()
        return cls(client=build_client(settings), settings=settings)

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the given 0-based failed attempt: 1s, 2s, 4s ... by default."""
        return self.settings.backoff_seconds * (2 ** attempt)

    async def analyze(self, text: str) -> AnalysisResult:
        if not isinstance(text, str):
            raise InvalidInputError("Contract text must be a string")

        run_id = uuid.uuid4().hex[:8]
        t0 = time.perf_counter()
        self._transition(run_id, AnalysisState.IDLE)

        result = None
        try:
            self._check_preconditions(text)
        except (ConfigurationError, InvalidInputError) as e:
            logger.info("[analysis] run=%s skipping AI path: %s", run_id, e)
        else:
            result = await self._run_ai(run_id, text)

        if result is None:
            self._transition(run_id, AnalysisState.FALLBACK_KEYWORD)
            result = analyze_with_keywords(text)

        processing_ms = int(round((time.perf_counter() - t0) * 1000))
        result = result.model_copy(update={"processing_time": processing_ms})
        self._transition(run_id, AnalysisState.DONE)
        logger.info(
            "[analysis] run=%s method=%s score=%d duration_ms=%d",
            run_id,
            result.analysis_method.value,
            result.overall_risk_score,
            processing_ms,
        )
        return result

    def _check_preconditions(self, text: str) -> None:
        if self.client is None:
            raise ConfigurationError("AI client not configured (no API key)", code="NO_API_KEY")
        if len(text.strip()) < MIN_TEXT_LENGTH:
            raise InvalidInputError("Contract text too short for AI analysis")

    async def _run_ai(self, run_id: str, text: str) -> Optional[AnalysisResult]:
        """AI result, or None when the keyword fallback should take over."""
        prompt = build_analysis_prompt(text)
        max_attempts = self.settings.max_attempts
        for attempt in range(max_attempts):
            self._transition(run_id, AnalysisState.ATTEMPT_AI, attempt=attempt + 1)
            try:
                raw = await asyncio.wait_for(
                    self.client.generate(prompt), timeout=self.settings.timeout_seconds
                )
                if not raw or not raw.strip():
                    raise TransientAIError("Empty response from AI", code="EMPTY_RESPONSE")
                result = parse_ai_response(raw, source_text=text)
            except asyncio.TimeoutError:
                error = TransientAIError(
                    f"AI call exceeded {self.settings.timeout_seconds}s", code="TIMEOUT"
                )
            except TransientAIError as e:
                error = e
            except ConfigurationError as e:
                logger.warning("[analysis] run=%s fatal AI error: %s", run_id, e)
                return None
            except Exception as e:
                unknown = UnknownAIError(str(e) or type(e).__name__)
                unknown.__cause__ = e
                logger.warning(
                    "[analysis] run=%s unclassified AI error type=%s: %s",
                    run_id,
                    type(e).__name__,
                    unknown,
                )
                return None
            else:
                self._transition(run_id, AnalysisState.SUCCESS)
                return result

            logger.warning(
                "[analysis] run=%s attempt %d/%d failed: %s", run_id, attempt + 1, max_attempts, error
            )
            if attempt < max_attempts - 1:
                delay = self.backoff_delay(attempt)
                self._transition(run_id, AnalysisState.RETRY_AI, delay=delay)
                await self._sleep(delay)

        logger.warning("[analysis] run=%s AI retry budget exhausted after %d attempts", run_id, max_attempts)
        return None

    @staticmethod
    def _transition(run_id: str, state: AnalysisState, **info) -> None:
        extra = " ".join(f"{k}={v}" for k, v in info.items())
        logger.debug("[analysis] run=%s state=%s %s", run_id, state.value, extra)


async def analyze_contract(
    text: str,
    client: Optional[AIClient] = None,
    settings: Optional[AnalysisSettings] = None,
) -> AnalysisResult:
    """One-shot analysis; builds the OpenAI client from settings when none is given."""
    settings = settings or load_settings()
    if client is None:
        client = build_client(settings)
    return await ContractAnalyzer(client=client, settings=settings).analyze(text)
