"""
Configuration settings for CSV reading, writing and HTTP acquisition.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). All settings are validated
when constructed, so a bad encoding name or a non-numeric timeout fails at
startup instead of halfway through a download.

**Environment variables** (all optional):
  - CSVTABLE_ENCODING: text encoding for reading and writing (default utf-8).
  - CSVTABLE_DELIMITER: row delimiter, CRLF / LF / CR or a literal string
    (default CRLF).
  - CSVTABLE_TITLED: whether the first line holds column titles (default false).
  - CSVTABLE_BUFFER_SIZE: bytes per read call (default 10000).
  - CSVTABLE_HTTP_TIMEOUT_SECONDS: HTTP read timeout (default 10).
  - CSVTABLE_HTTP_PROXY: proxy URL such as http://host:port (default: none,
    i.e. whatever the environment's HTTP_PROXY/HTTPS_PROXY say).
  - CSVTABLE_HTTP_CONTENT_TYPE: required response media type
    (default text/csv; set empty to accept anything).

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import codecs
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


DELIMITER_ALIASES = {
    "CRLF": "\r\n",
    "LF": "\n",
    "CR": "\r",
}

_TRUE_VALUES = ("true", "1", "yes")


def parse_delimiter(value: str) -> str:
    """
    Translate a delimiter name (CRLF, LF, CR) into the delimiter string.

    Any other value is returned unchanged, so a literal such as ";" or "|"
    works too.

    Example:
        >>> parse_delimiter("lf")
        '\\n'
    """
    return DELIMITER_ALIASES.get(value.upper(), value)


@dataclass(frozen=True)
class CsvSettings:
    """
    Configuration for CsvReader and CsvWriter.

    Attributes:
        encoding: Codec name used to decode input and encode output.
        delimiter: Row delimiter expected on read and written between rows.
        titled: Whether the first line of parsed text is the title row.
        buffer_size: Number of bytes requested per read call. An I/O tuning
                    knob only; it never changes what is parsed.
    """
    encoding: str = "utf-8"
    delimiter: str = "\r\n"
    titled: bool = False
    buffer_size: int = 10000

    def __post_init__(self):
        """Validate settings after initialization."""
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown text encoding: {self.encoding!r}")
        if not self.delimiter:
            raise ValueError("Row delimiter must be a non-empty string")
        if self.buffer_size <= 0:
            raise ValueError(
                f"buffer_size must be positive, got: {self.buffer_size}"
            )

    @classmethod
    def from_env(cls) -> "CsvSettings":
        """
        Load CSV settings from environment variables.

        Returns:
            CsvSettings object with values loaded from environment.

        Raises:
            ValueError: If CSVTABLE_BUFFER_SIZE is not an integer, or any
                       value fails validation.
        """
        encoding = os.getenv("CSVTABLE_ENCODING", "utf-8")
        delimiter = parse_delimiter(os.getenv("CSVTABLE_DELIMITER", "CRLF"))
        titled = os.getenv("CSVTABLE_TITLED", "false").lower() in _TRUE_VALUES
        buffer_str = os.getenv("CSVTABLE_BUFFER_SIZE", "10000")

        try:
            buffer_size = int(buffer_str)
        except ValueError:
            raise ValueError(
                f"CSVTABLE_BUFFER_SIZE must be an integer, got: {buffer_str}"
            )

        return cls(
            encoding=encoding,
            delimiter=delimiter,
            titled=titled,
            buffer_size=buffer_size,
        )


@dataclass(frozen=True)
class HttpSettings:
    """
    Configuration for fetching CSV data over HTTP.

    Attributes:
        timeout_seconds: Read timeout for HTTP requests, in seconds.
        proxy: Proxy URL (e.g. "http://10.0.0.1:808") used for both http and
              https. None defers to the environment's proxy variables.
        expected_content_type: Media type the response must declare. None or
                              empty disables the check.
        user_agent: User-Agent header sent with every request.
    """
    timeout_seconds: float = 10.0
    proxy: Optional[str] = None
    expected_content_type: Optional[str] = "text/csv"
    user_agent: str = "csvtable/1.0"

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got: {self.timeout_seconds}"
            )

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """
        Load HTTP settings from environment variables.

        Raises:
            ValueError: If CSVTABLE_HTTP_TIMEOUT_SECONDS is not a number.
        """
        timeout_str = os.getenv("CSVTABLE_HTTP_TIMEOUT_SECONDS", "10")
        proxy = os.getenv("CSVTABLE_HTTP_PROXY") or None
        content_type = os.getenv("CSVTABLE_HTTP_CONTENT_TYPE", "text/csv") or None

        try:
            timeout_seconds = float(timeout_str)
        except ValueError:
            raise ValueError(
                f"CSVTABLE_HTTP_TIMEOUT_SECONDS must be a number, got: {timeout_str}"
            )

        return cls(
            timeout_seconds=timeout_seconds,
            proxy=proxy,
            expected_content_type=content_type,
        )


@dataclass(frozen=True)
class Settings:
    """
    Top-level settings aggregating the CSV and HTTP subsystems.

    Usage:
        >>> settings = Settings.from_env()
        >>> settings.csv.encoding
        'utf-8'
    """
    csv: CsvSettings = field(default_factory=CsvSettings)
    http: HttpSettings = field(default_factory=HttpSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load all subsystem settings from environment variables."""
        return cls(
            csv=CsvSettings.from_env(),
            http=HttpSettings.from_env(),
        )


# Lazily loaded on first get_settings() call. Tests build Settings directly
# or call reset_settings() after changing the environment.
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton, loading it from the environment on
    first use.

    Raises:
        ValueError: If any environment value fails validation.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """Clear the cached settings so the next get_settings() reloads them."""
    global _default_settings
    _default_settings = None
