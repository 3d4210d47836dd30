"""Essay lecture and essay grading templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .loader import load_prompt_text
from .templates import PromptArgument, PromptRegistry, PromptSection, PromptTemplate

LECTURE_PROMPT_FILE = "essay_lecture.txt"
GRADING_PROMPT_FILE = "essay_grading.txt"


@dataclass(frozen=True)
class LectureArguments:
    cover_title: str
    material_text: str


@dataclass(frozen=True)
class GradingArguments:
    material_text: str
    student_essay: str


def essay_lecture_template(instructions: str) -> PromptTemplate:
    return PromptTemplate(
        name="essay-lecture",
        title="作文讲义",
        description="生成作文材料的深度思辨与写作指导HTML讲义。",
        arguments=(
            PromptArgument(name="cover_title", description="封面主标题"),
            PromptArgument(name="material_text", description="作文材料原文"),
        ),
        sections=(
            PromptSection(label="封面主标题", argument="cover_title"),
            PromptSection(label="作文材料原文", argument="material_text"),
        ),
        instructions=instructions,
        record=LectureArguments,
    )


def essay_grading_template(instructions: str) -> PromptTemplate:
    return PromptTemplate(
        name="essay-grading",
        title="作文批改",
        description="生成高考作文阅卷与批改的完整HTML报告。",
        arguments=(
            PromptArgument(name="material_text", description="作文题干材料"),
            PromptArgument(name="student_essay", description="学生作文原文"),
        ),
        sections=(
            PromptSection(label="作文材料", argument="material_text"),
            PromptSection(label="学生作文", argument="student_essay"),
        ),
        instructions=instructions,
        record=GradingArguments,
    )


def build_prompt_registry(prompts_dir: str | Path | None = None) -> PromptRegistry:
    """Load both instruction texts and register the essay templates.

    Raises PromptAssetError if either text cannot be loaded.
    """
    lecture = load_prompt_text(LECTURE_PROMPT_FILE, prompts_dir)
    grading = load_prompt_text(GRADING_PROMPT_FILE, prompts_dir)
    return PromptRegistry((essay_lecture_template(lecture), essay_grading_template(grading)))
