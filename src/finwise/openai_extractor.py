"""Text extraction backed by the OpenAI chat completions API.

Requires ``OPENAI_API_KEY`` in the environment when no client is supplied.
"""

import os
from typing import Optional

from openai import OpenAI, OpenAIError

from finwise.domain.errors import UpstreamExtractionFailure
from finwise.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "gpt-4o"

SYSTEM_PROMPT = (
    "You are an expert at reading Dutch bank statements and extracting transaction data. "
    "You understand various Dutch bank formats (ING, Revolut, ABN AMRO, Rabobank, etc.). "
    "Always return valid JSON only - no explanations or markdown formatting. "
    "Focus on finding actual money transactions, not account balances or summaries."
)


class OpenAIExtractor:
    """Extractor callable sending prompts to an OpenAI chat model."""

    def __init__(
        self,
        model: Optional[str] = None,
        client: Optional[OpenAI] = None,
        temperature: float = 0.1,
        max_tokens: int = 4000,
    ):
        self.model = model or os.environ.get("FINWISE_OPENAI_MODEL") or DEFAULT_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not os.environ.get("OPENAI_API_KEY"):
                raise UpstreamExtractionFailure(
                    "OPENAI_API_KEY environment variable is required for AI extraction"
                )
            self._client = OpenAI()
        return self._client

    def __call__(self, prompt: str) -> Optional[str]:
        client = self._get_client()
        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            raise UpstreamExtractionFailure(f"OpenAI API error: {e}") from e

        if not completion.choices:
            return None
        content = completion.choices[0].message.content
        logger.debug("OpenAI response length: %d", len(content or ""))
        return content
