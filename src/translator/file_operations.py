"""File I/O helpers for translating subtitle files on disk."""

import logging
from pathlib import Path
from typing import Optional, Union

from translator.translation_engine import ProgressCallback, TranslationEngine

logger = logging.getLogger(__name__)


def generate_output_path(source_path: Union[str, Path], target_language: str) -> Path:
    """
    Path for a translated copy next to the source file.

    Example:
        >>> str(generate_output_path("/media/movie.srt", "es"))
        '/media/movie.es.srt'
    """
    source = Path(source_path)
    return source.with_name(f"{source.stem}.{target_language}{source.suffix or '.srt'}")


async def translate_subtitle_file(
    subtitle_file_path: Union[str, Path],
    target_language: str,
    engine: TranslationEngine,
    output_path: Optional[Union[str, Path]] = None,
    custom_prompt: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> Path:
    """
    Read an SRT file, translate it and write the result.

    Args:
        subtitle_file_path: Path to the source SRT file
        target_language: Target language code or name
        engine: Engine performing the translation
        output_path: Destination (defaults to `<stem>.<lang>.srt` beside the source)
        custom_prompt: Optional prompt template passed to the engine
        on_progress: Optional progress callback passed to the engine

    Returns:
        Path of the written file

    Raises:
        FileNotFoundError: If the source file doesn't exist
        StructuralError: If the file holds no subtitle entries
        TranslationValidationError: If translation fails
    """
    logger.info(f"Reading subtitle file: {subtitle_file_path}")

    subtitle_path = Path(subtitle_file_path)
    if not subtitle_path.exists():
        raise FileNotFoundError(f"Subtitle file not found: {subtitle_file_path}")

    # utf-8-sig drops a leading BOM
    srt_content = subtitle_path.read_text(encoding="utf-8-sig")
    logger.info(f"Read {len(srt_content)} characters from subtitle file")

    translated_srt = await engine.translate_subtitle(
        srt_content, target_language, custom_prompt, on_progress
    )

    destination = (
        Path(output_path)
        if output_path
        else generate_output_path(subtitle_path, target_language)
    )
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(translated_srt, encoding="utf-8")

    logger.info(f"✅ Saved translated subtitle to: {destination}")
    logger.info(f"   File size: {destination.stat().st_size} bytes")
    return destination
