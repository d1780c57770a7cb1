"""Utility functions for common operations across the application."""

import logging
from datetime import datetime, timezone
from typing import Dict

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """Date and time utility functions."""

    @staticmethod
    def get_current_utc_datetime() -> datetime:
        """
        Get the current UTC datetime.

        Returns:
            Current datetime in UTC timezone
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def get_date_string_for_log_file() -> str:
        """
        Get a date string suitable for log file names.

        Returns:
            Date string in YYYYMMDD format
        """
        return datetime.now().strftime("%Y%m%d")

    @staticmethod
    def get_current_timestamp_ms() -> int:
        """
        Get the current Unix timestamp in milliseconds.

        Returns:
            Current timestamp as int (milliseconds since epoch)

        Example:
            >>> DateTimeUtils.get_current_timestamp_ms() > 0
            True
        """
        dt = DateTimeUtils.get_current_utc_datetime()
        return int(dt.timestamp() * 1000)


class LanguageUtils:
    """Language code conversion utility functions."""

    # Mapping from ISO 639-2 3-letter codes to ISO 639-1 2-letter codes
    ISO3_TO_ISO: Dict[str, str] = {
        "eng": "en",
        "heb": "he",
        "spa": "es",
        "fre": "fr",
        "fra": "fr",
        "ger": "de",
        "deu": "de",
        "ita": "it",
        "por": "pt",
        "rus": "ru",
        "jpn": "ja",
        "kor": "ko",
        "chi": "zh",
        "zho": "zh",
        "ara": "ar",
        "dut": "nl",
        "nld": "nl",
        "pol": "pl",
        "tur": "tr",
        "swe": "sv",
        "nor": "no",
        "dan": "da",
        "fin": "fi",
        "cze": "cs",
        "hun": "hu",
        "rum": "ro",
        "gre": "el",
        "ukr": "uk",
        "tha": "th",
        "vie": "vi",
        "ind": "id",
        "hin": "hi",
    }

    # Mapping from ISO 639-1 2-letter codes to language names for prompts
    ISO_TO_LANGUAGE_NAME: Dict[str, str] = {
        "en": "English",
        "he": "Hebrew",
        "es": "Spanish",
        "fr": "French",
        "de": "German",
        "it": "Italian",
        "pt": "Portuguese",
        "ru": "Russian",
        "ja": "Japanese",
        "ko": "Korean",
        "zh": "Chinese",
        "ar": "Arabic",
        "nl": "Dutch",
        "pl": "Polish",
        "tr": "Turkish",
        "sv": "Swedish",
        "no": "Norwegian",
        "da": "Danish",
        "fi": "Finnish",
        "cs": "Czech",
        "hu": "Hungarian",
        "ro": "Romanian",
        "el": "Greek",
        "uk": "Ukrainian",
        "th": "Thai",
        "vi": "Vietnamese",
        "id": "Indonesian",
        "hi": "Hindi",
    }

    # Regional variants a bare language name would leave ambiguous
    EUROPEAN_PORTUGUESE = "European Portuguese (Português de Portugal)"
    BRAZILIAN_PORTUGUESE = "Brazilian Portuguese (Português do Brasil)"
    CASTILIAN_SPANISH = "Castilian Spanish (Español de España)"
    LATAM_SPANISH = "Latin American Spanish (Español de Latinoamérica)"
    SIMPLIFIED_CHINESE = "Simplified Chinese (简体中文)"
    TRADITIONAL_CHINESE = "Traditional Chinese (繁體中文)"

    @staticmethod
    def iso_to_language_name(iso_code: str) -> str:
        """
        Convert a 2- or 3-letter language code to a language name.

        Args:
            iso_code: Language code (e.g., 'en', 'heb')

        Returns:
            Language name (e.g., 'English', 'Hebrew'), or the code itself if not found

        Example:
            >>> LanguageUtils.iso_to_language_name('en')
            'English'
            >>> LanguageUtils.iso_to_language_name('spa')
            'Spanish'
        """
        if not iso_code:
            return iso_code

        normalized = iso_code.strip().lower()
        normalized = LanguageUtils.ISO3_TO_ISO.get(normalized, normalized)
        return LanguageUtils.ISO_TO_LANGUAGE_NAME.get(normalized, iso_code)

    @staticmethod
    def normalize_target_language_for_prompt(target_language: str) -> str:
        """
        Resolve a target language (code or name) into an unambiguous prompt label.

        Portuguese, Spanish and Chinese are expanded to the regional variant
        the code designates (pob = Brazilian, spn = Latin American, zht =
        Traditional); bare names fall back to the European/Simplified forms.

        Args:
            target_language: Language code or display name

        Returns:
            Language label to embed in a translation prompt

        Example:
            >>> LanguageUtils.normalize_target_language_for_prompt('pob')
            'Brazilian Portuguese (Português do Brasil)'
            >>> LanguageUtils.normalize_target_language_for_prompt('fr')
            'French'
        """
        raw = (target_language or "").strip()
        if not raw:
            return "target language"

        code_key = raw.lower().replace("_", "-")
        name_key = LanguageUtils.iso_to_language_name(raw).strip().lower()

        if code_key in ("pt-br", "pob") or "brazil" in name_key:
            return LanguageUtils.BRAZILIAN_PORTUGUESE
        if code_key in ("pt-pt", "por", "pt") or name_key.startswith("portuguese"):
            return LanguageUtils.EUROPEAN_PORTUGUESE

        if code_key in ("es-419", "spn") or "latin america" in name_key or "latam" in name_key:
            return LanguageUtils.LATAM_SPANISH
        if code_key in ("es", "spa") or name_key == "spanish":
            return LanguageUtils.CASTILIAN_SPANISH

        if code_key in ("zh-hant", "zht") or "traditional" in name_key:
            return LanguageUtils.TRADITIONAL_CHINESE
        if (
            code_key in ("zh-hans", "zhs", "chi", "zh")
            or "simplified" in name_key
            or name_key == "chinese"
        ):
            return LanguageUtils.SIMPLIFIED_CHINESE

        return LanguageUtils.iso_to_language_name(raw)
