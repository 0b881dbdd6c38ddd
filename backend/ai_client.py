"""
Transport for the AI analysis path: submit one prompt, get text back.

OpenAIClient classifies SDK failures into the analysis error taxonomy;
anything it does not recognise propagates unchanged.
"""
from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

import openai
from openai import AsyncOpenAI

from errors import ConfigurationError, TransientAIError
from settings import AnalysisSettings

logger = logging.getLogger(__name__)


class AIClient(Protocol):
    async def generate(self, prompt: str) -> str: ...


class OpenAIClient:
    def __init__(self, settings: AnalysisSettings, client: Optional[AsyncOpenAI] = None):
        if not settings.ai_enabled:
            raise ConfigurationError("OPENAI_API_KEY not configured", code="NO_API_KEY")
        self.settings = settings
        # SDK retries are disabled; the orchestrator owns retry and backoff
        self._client = client or AsyncOpenAI(api_key=settings.api_key, max_retries=0)

    async def generate(self, prompt: str) -> str:
        t0 = time.perf_counter()
        try:
            response = await self._client.chat.completions.create(
                model=self.settings.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_output_tokens,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise ConfigurationError(f"OpenAI rejected the API key: {e}", code="AUTH_ERROR") from e
        except openai.RateLimitError as e:
            raise TransientAIError(f"AI provider rate limit/quota reached: {e}", code="RATE_LIMIT") from e
        except openai.APITimeoutError as e:
            raise TransientAIError(f"AI request timed out: {e}", code="TIMEOUT") from e
        except (openai.APIConnectionError, openai.InternalServerError) as e:
            raise TransientAIError(f"Could not reach AI provider: {e}", code="NETWORK_ERROR") from e
        elapsed = time.perf_counter() - t0
        logger.info("[ai] LLM call duration=%.2fs model=%s", elapsed, self.settings.model)

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()


def build_client(settings: AnalysisSettings) -> Optional[AIClient]:
    """OpenAIClient when a key is configured, else None (keyword analysis only)."""
    if not settings.ai_enabled:
        return None
    return OpenAIClient(settings)
