"""Structure-first batch translation of SRT documents."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

from common.config import settings
from common.exceptions import (
    StructuralError,
    TransientProviderError,
    TranslationValidationError,
)
from common.retry_utils import retry_with_exponential_backoff
from common.schemas import TranslationProgress
from common.string_utils import truncate_for_logging
from common.subtitle_parser import SRTParser, SubtitleEntry, chunk_entries
from translator.entry_cache import EntryCache
from translator.prompt_builder import build_batch_prompt, prepare_batch_text
from translator.response_parser import parse_batch_response
from translator.translation_service import TranslationClient

logger = logging.getLogger(__name__)

# Passed to the provider in place of a source language
DETECTED_SOURCE_LANGUAGE = "detected"

ProgressCallback = Callable[[TranslationProgress], Any]


def _is_provider_attempt_failure(error: Exception) -> bool:
    return isinstance(error, TransientProviderError)


class TranslationEngine:
    """
    Translates subtitle text while keeping ids and timecodes untouched.

    Only entry text is sent to the provider, as numbered batches. Each reply
    must yield exactly one entry per input entry or the attempt fails and is
    retried with exponential backoff. Translated text is merged back onto the
    original entries, so timing never depends on the provider.
    """

    def __init__(
        self,
        client: TranslationClient,
        entry_cache: Optional[EntryCache] = None,
        batch_size: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_initial_delay: Optional[float] = None,
        batch_delay: Optional[float] = None,
    ):
        """
        Initialize the engine.

        Args:
            client: Translation provider
            entry_cache: Shared entry cache (a private one is created if None)
            batch_size: Entries per provider call
            max_retries: Total attempts per batch
            retry_initial_delay: Backoff before the second attempt, in seconds
            batch_delay: Pause between successive batches, in seconds
        """
        self.client = client
        self.entry_cache = entry_cache if entry_cache is not None else EntryCache()
        self.batch_size = (
            batch_size if batch_size is not None else settings.translation_batch_size
        )
        self.max_retries = (
            max_retries if max_retries is not None else settings.translation_max_retries
        )
        self.retry_initial_delay = (
            retry_initial_delay
            if retry_initial_delay is not None
            else settings.translation_retry_initial_delay
        )
        self.batch_delay = (
            batch_delay if batch_delay is not None else settings.translation_batch_delay
        )

    async def translate_subtitle(
        self,
        content: str,
        target_language: str,
        custom_prompt: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Translate an SRT document.

        Args:
            content: SRT document
            target_language: Target language code or name
            custom_prompt: Optional prompt template ({target_language} is substituted)
            on_progress: Optional sync or async callback invoked after every
                merged entry

        Returns:
            Translated SRT document with the original ids and timecodes

        Raises:
            StructuralError: If the document has no parseable entries
            TranslationValidationError: If a batch cannot be validated after
                all attempts, or the final entry count differs
        """
        entries = SRTParser.parse(content)
        if not entries:
            raise StructuralError("Invalid SRT content: no valid entries found")

        batches = chunk_entries(entries, self.batch_size)
        total_batches = len(batches)
        logger.info(
            f"Starting translation of {len(entries)} entries to {target_language} "
            f"in {total_batches} batch(es)"
        )

        translated_entries: List[SubtitleEntry] = []

        for batch_index, batch in enumerate(batches):
            logger.info(
                f"Processing batch {batch_index + 1}/{total_batches} "
                f"({len(batch)} entries)"
            )

            texts = await self._translate_batch(
                batch, target_language, custom_prompt, batch_index, total_batches
            )

            for original, text in zip(batch, texts):
                merged = SubtitleEntry(
                    id=original.id, timecode=original.timecode, text=text
                )
                translated_entries.append(merged)
                await self._notify_progress(
                    on_progress,
                    TranslationProgress(
                        total_entries=len(entries),
                        completed_entries=len(translated_entries),
                        current_batch=batch_index + 1,
                        total_batches=total_batches,
                        entry=merged,
                    ),
                )

            logger.info(f"✅ Batch {batch_index + 1}/{total_batches} completed")

            if batch_index < total_batches - 1 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        if len(translated_entries) != len(entries):
            raise TranslationValidationError(
                expected_count=len(entries), actual_count=len(translated_entries)
            )

        logger.info(f"✅ Translation completed: {len(translated_entries)} entries")
        return SRTParser.format(translated_entries)

    async def _translate_batch(
        self,
        batch: List[SubtitleEntry],
        target_language: str,
        custom_prompt: Optional[str],
        batch_index: int,
        total_batches: int,
    ) -> List[str]:
        """
        Translated texts for one batch, in batch order.

        The entry cache is used only when every entry of the batch hits;
        a single miss sends the whole batch to the provider.
        """
        cached = [self.entry_cache.get(entry.text, target_language) for entry in batch]
        hits = sum(1 for text in cached if text is not None)
        if hits:
            logger.info(f"Cache: {hits}/{len(batch)} entries cached")
        if hits == len(batch):
            logger.info(f"Batch {batch_index + 1} fully cached ({len(batch)} entries)")
            return cached

        batch_text = prepare_batch_text(batch)
        prompt = build_batch_prompt(batch_text, target_language, len(batch), custom_prompt)

        attempts = 0

        @retry_with_exponential_backoff(
            max_attempts=self.max_retries,
            initial_delay=self.retry_initial_delay,
            exponential_base=settings.translation_retry_exponential_base,
            is_retryable=_is_provider_attempt_failure,
        )
        async def attempt() -> List[str]:
            nonlocal attempts
            attempts += 1
            logger.info(
                f"🔄 Translating batch {batch_index + 1}/{total_batches} "
                f"(attempt {attempts}/{self.max_retries})"
            )
            return await self._request_batch(batch_text, prompt, target_language, len(batch))

        try:
            texts = await attempt()
        except TransientProviderError as e:
            logger.error(
                f"❌ Batch {batch_index + 1}/{total_batches} failed after "
                f"{attempts} attempt(s): {e}"
            )
            raise TranslationValidationError(
                expected_count=len(batch),
                actual_count=e.actual_count,
                batch_index=batch_index,
                total_batches=total_batches,
                attempts=attempts,
                last_error=e,
            ) from e

        for entry, text in zip(batch, texts):
            self.entry_cache.set(entry.text, target_language, text)

        return texts

    async def _request_batch(
        self, batch_text: str, prompt: str, target_language: str, expected_count: int
    ) -> List[str]:
        """
        One provider call, parsed and validated.

        Raises:
            TransientProviderError: On provider error, empty reply or count mismatch
        """
        try:
            reply = await self.client.translate_subtitle(
                batch_text, DETECTED_SOURCE_LANGUAGE, target_language, prompt
            )
        except Exception as e:
            raise TransientProviderError(
                f"Provider call failed: {e}", expected_count=expected_count
            ) from e

        if not reply or not reply.strip():
            raise TransientProviderError(
                "Provider returned an empty reply", expected_count=expected_count
            )

        try:
            parsed = parse_batch_response(reply, expected_count)
        except ValueError as e:
            raise TransientProviderError(
                f"Unparseable reply: {e}",
                expected_count=expected_count,
                response_sample=reply,
            ) from e

        if len(parsed) != expected_count:
            logger.debug(f"Reply sample:\n{truncate_for_logging(reply)}")
            raise TransientProviderError(
                f"Expected {expected_count} translated entries, got {len(parsed)}",
                expected_count=expected_count,
                actual_count=len(parsed),
                response_sample=reply,
            )

        return [entry.text for entry in parsed]

    @staticmethod
    async def _notify_progress(
        on_progress: Optional[ProgressCallback], progress: TranslationProgress
    ) -> None:
        if on_progress is None:
            return
        try:
            result = on_progress(progress)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"⚠️  Progress callback error: {e}")

    def clear_cache(self) -> None:
        """Drop every cached entry translation."""
        self.entry_cache.clear()

    def get_cache_stats(self) -> Dict[str, int]:
        """Entry cache size and capacity."""
        return self.entry_cache.stats()
