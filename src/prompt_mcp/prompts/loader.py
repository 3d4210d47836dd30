"""Startup loading of template instruction texts.

Instruction texts are plain ``.txt`` files stored next to this module. They
are read once when the application is built; a missing or empty file aborts
startup rather than shipping a prompt without its instructions.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import PromptAssetError

logger = logging.getLogger(__name__)


def _prompts_dir() -> Path:
    """Directory containing the packaged prompt .txt files."""
    return Path(__file__).resolve().parent


def load_prompt_text(filename: str, directory: str | Path | None = None) -> str:
    """Read a prompt text file and return its trimmed contents.

    Args:
        filename: File name including the ``.txt`` suffix.
        directory: Override for the directory to read from.

    Raises:
        PromptAssetError: If the file is missing, unreadable or blank.
    """
    path = Path(directory) / filename if directory else _prompts_dir() / filename
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise PromptAssetError(f"Failed to read prompt text {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise PromptAssetError(f"Prompt text {path} is not valid UTF-8") from exc

    if not text:
        raise PromptAssetError(f"Prompt text {path} is empty")

    logger.info("Loaded prompt text %s (%d chars)", path.name, len(text))
    return text
