"""Prompt templates served over MCP.

Template instruction texts are stored as ``.txt`` files in this package and
loaded once at startup; set PROMPTS_DIR to read them from elsewhere.
"""

from __future__ import annotations

from .essay import (
    GradingArguments,
    LectureArguments,
    build_prompt_registry,
    essay_grading_template,
    essay_lecture_template,
)
from .loader import load_prompt_text
from .templates import (
    SYSTEM_GUARD,
    PromptArgument,
    PromptMessage,
    PromptRegistry,
    PromptSection,
    PromptTemplate,
)

__all__ = [
    "SYSTEM_GUARD",
    "GradingArguments",
    "LectureArguments",
    "PromptArgument",
    "PromptMessage",
    "PromptRegistry",
    "PromptSection",
    "PromptTemplate",
    "build_prompt_registry",
    "essay_grading_template",
    "essay_lecture_template",
    "load_prompt_text",
]
