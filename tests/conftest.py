"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from prompt_mcp.main import create_app
from prompt_mcp.prompts import build_prompt_registry
from tests.helpers import GRADING_TEXT, LECTURE_TEXT, make_settings


@pytest.fixture
def prompts_dir(tmp_path):
    """Directory with small stand-in instruction texts."""
    (tmp_path / "essay_lecture.txt").write_text(f"\n  {LECTURE_TEXT}  \n", encoding="utf-8")
    (tmp_path / "essay_grading.txt").write_text(f"{GRADING_TEXT}\n", encoding="utf-8")
    return tmp_path

@pytest.fixture
def prompt_registry(prompts_dir):
    return build_prompt_registry(prompts_dir)

@pytest.fixture
def auth_settings(prompts_dir):
    return make_settings(MCP_AUTH_TOKENS="alpha, beta", PROMPTS_DIR=str(prompts_dir))

@pytest.fixture
def open_settings(prompts_dir):
    return make_settings(PROMPTS_DIR=str(prompts_dir))

@pytest.fixture
def auth_app(auth_settings):
    return create_app(auth_settings)

@pytest.fixture
def auth_client(auth_app):
    return TestClient(auth_app)

@pytest.fixture
def open_client(open_settings):
    return TestClient(create_app(open_settings))
