"""Sample prompt content offered when a partition has never been saved."""

from pathlib import Path
from typing import Protocol

from loguru import logger

from prompt_ledger.config.settings import settings


class SampleTextSource(Protocol):
    """Supplies fallback template text. Returns "" when none is available."""

    def fetch_sample_text(self) -> str: ...


class FileSampleTextSource:
    """Reads the sample prompt from a markdown file.

    A missing or unreadable file yields "" and an error log entry;
    the editing session then reports that no sample is available.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or settings.sample_prompt_path)

    def fetch_sample_text(self) -> str:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.error(f"Sample prompt file not found: {self.path}")
            return ""
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to load sample prompt from {self.path}: {e}")
            return ""
        return content.strip()


class StaticSampleTextSource:
    """In-memory sample text."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    def fetch_sample_text(self) -> str:
        return self.text.strip()
