"""Translation providers used by the batch translation engine."""

import logging
from typing import Any, Dict, List, Optional, Protocol

from openai import AsyncOpenAI

from common.config import settings

logger = logging.getLogger(__name__)


class TranslationClient(Protocol):
    """Anything that can translate one numbered batch of subtitle text."""

    async def translate_subtitle(
        self,
        batch_text: str,
        source_language: str,
        target_language: str,
        prompt: str,
    ) -> str:
        """
        Translate a batch.

        Args:
            batch_text: Numbered entries, one blank line apart
            source_language: Source language, "detected" when unknown
            target_language: Target language code or name
            prompt: Full instruction prompt for this batch

        Returns:
            Raw reply text (numbered entries are expected)
        """
        ...


class OpenAITranslationClient:
    """Translates batches with the OpenAI chat completions API."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        """
        Initialize the client.

        Args:
            client: Preconfigured AsyncOpenAI instance. When None, one is built
                from settings, or mock mode is used if no API key is set.
        """
        self.client = client
        if self.client is None and settings.openai_api_key:
            # Retries are driven by the engine, one call per attempt
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout,
                max_retries=0,
            )
            logger.info(
                f"Initialized OpenAI async client with model: {settings.openai_model}"
            )
        elif self.client is None:
            logger.warning(
                "OpenAI API key not configured - translator will run in mock mode"
            )

    @staticmethod
    def build_messages(batch_text: str, prompt: str) -> List[Dict[str, str]]:
        """
        Chat messages for one batch.

        The default prompt already embeds the batch; a custom prompt does not,
        so the batch is then sent as the user message.
        """
        if batch_text in prompt:
            return [{"role": "user", "content": prompt}]
        return [
            {"role": "system", "content": prompt},
            {"role": "user", "content": batch_text},
        ]

    async def translate_subtitle(
        self,
        batch_text: str,
        source_language: str,
        target_language: str,
        prompt: str,
    ) -> str:
        """
        Translate a numbered batch.

        Raises:
            ValueError: If the API returns no choices
        """
        if not self.client:
            logger.warning("Mock mode: Returning batch with [TRANSLATED] prefix")
            return "\n\n".join(
                f"{block.split('. ', 1)[0]}. [TRANSLATED to {target_language}] "
                f"{block.split('. ', 1)[-1]}"
                for block in batch_text.split("\n\n")
            )

        api_params: Dict[str, Any] = {
            "model": settings.openai_model,
            "messages": self.build_messages(batch_text, prompt),
            "max_completion_tokens": settings.openai_max_tokens,
        }

        # Nano models only support the default temperature
        if "nano" not in settings.openai_model.lower():
            api_params["temperature"] = settings.openai_temperature

        logger.info(
            f"Requesting translation from {source_language} to {target_language} "
            f"({len(batch_text)} chars)"
        )
        response = await self.client.chat.completions.create(**api_params)

        if not response.choices:
            raise ValueError("OpenAI API returned no choices in response")

        choice = response.choices[0]
        content = choice.message.content or ""

        if choice.finish_reason == "length":
            logger.warning(
                f"⚠️  Response was truncated (finish_reason=length). "
                f"Received {len(content)} characters but may be incomplete."
            )

        return content
