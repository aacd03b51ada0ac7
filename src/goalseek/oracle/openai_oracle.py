"""Fix oracle backed by the OpenAI chat completions API.

Works with any OpenAI-compatible endpoint through ``api_base``.
"""

from __future__ import annotations

import logging

from openai import AsyncOpenAI, OpenAIError

from goalseek.config import SeekConfig
from goalseek.domain.models import AttemptSummary
from goalseek.errors import OracleError
from goalseek.oracle.prompts import build_messages, extract_code

logger = logging.getLogger(__name__)


class OpenAIOracle:
    """Asks a chat model for a new version of the code."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.2,
        api_base: str | None = None,
        timeout: float = 120.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=api_base,
            timeout=timeout,
            max_retries=0,
        )

    @classmethod
    def from_config(cls, config: SeekConfig) -> OpenAIOracle:
        """Create an oracle from config. Raises ConfigError without an API key."""
        return cls(
            api_key=config.require_api_key(),
            model=config.model,
            temperature=config.temperature,
            api_base=config.api_base,
            timeout=config.request_timeout,
        )

    async def propose(
        self, original_code: str, goal: str, summary: AttemptSummary
    ) -> str:
        """Request a candidate and extract the code from the reply."""
        messages = build_messages(original_code, goal, summary)
        logger.info(
            "Requesting candidate model=%s messages=%d prior_attempts=%d",
            self._model,
            len(messages),
            summary.total,
        )
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self._temperature,
            )
        except OpenAIError as exc:
            logger.error("Oracle request failed: %s", exc)
            msg = f"Generative service call failed: {exc}"
            raise OracleError(msg) from exc

        if not response.choices:
            msg = "Generative service returned no choices"
            raise OracleError(msg)
        content = response.choices[0].message.content
        if not content or not content.strip():
            msg = "Generative service returned an empty reply"
            raise OracleError(msg)

        logger.debug("Oracle reply (%d chars): %.200s", len(content), content)
        candidate = extract_code(content)
        if not candidate:
            msg = "Generative service reply contained no code"
            raise OracleError(msg)
        return candidate
