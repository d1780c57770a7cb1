"""Exception hierarchy for subtitle translation and caching."""

from typing import Optional

from common.string_utils import truncate_for_logging


class SubtitleTranslationError(Exception):
    """Base class for all errors raised by the translation core."""

    pass


class StructuralError(SubtitleTranslationError, ValueError):
    """
    Raised when a subtitle document has no parseable entries.

    This is a permanent error: the document is rejected before any
    provider call is made.
    """

    pass


class TransientProviderError(SubtitleTranslationError):
    """
    A single failed translation attempt.

    Covers provider exceptions, empty replies and replies whose parsed
    entry count does not match the batch. The engine retries these with
    exponential backoff.
    """

    def __init__(
        self,
        message: str,
        expected_count: Optional[int] = None,
        actual_count: Optional[int] = None,
        response_sample: Optional[str] = None,
    ):
        self.expected_count = expected_count
        self.actual_count = actual_count
        self.response_sample = (
            truncate_for_logging(response_sample) if response_sample else None
        )
        super().__init__(message)


class TranslationValidationError(SubtitleTranslationError):
    """
    Raised when a batch cannot be validated after exhausting retries.

    The whole document translation is aborted; no partial output is
    returned.
    """

    def __init__(
        self,
        expected_count: int,
        actual_count: Optional[int],
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
        attempts: Optional[int] = None,
        last_error: Optional[BaseException] = None,
    ):
        """
        Initialize the error with detailed context.

        Args:
            expected_count: Number of entries the batch (or document) holds
            actual_count: Entries recovered on the last attempt, None if the
                provider never answered
            batch_index: 0-based index of the failing batch
            total_batches: Total number of batches in the document
            attempts: Number of attempts made
            last_error: Underlying error of the final attempt
        """
        self.expected_count = expected_count
        self.actual_count = actual_count
        self.batch_index = batch_index
        self.total_batches = total_batches
        self.attempts = attempts
        self.last_error = last_error

        if batch_index is not None and total_batches is not None:
            message = f"Translation failed at batch {batch_index + 1}/{total_batches}"
        else:
            message = "Translation validation failed"

        if actual_count is None:
            message += f": no usable response for {expected_count} entries"
        else:
            message += f": expected {expected_count} entries, got {actual_count}"

        if attempts is not None:
            message += f" after {attempts} attempt(s)"

        if last_error is not None:
            message += f". Last error: {last_error}"

        super().__init__(message)


class CacheIOError(SubtitleTranslationError):
    """Raised when the persisted cache cannot write to its storage adapter."""

    def __init__(self, operation: str, key: str, namespace: str, cause: Exception):
        self.operation = operation
        self.key = key
        self.namespace = namespace
        super().__init__(
            f"Cache {operation} failed for {namespace}/{key}: {cause}"
        )


class RateLimiterFault(SubtitleTranslationError):
    """Internal bookkeeping failure inside the rate limiter (logged, not raised)."""

    pass
