from __future__ import annotations

import os
from pathlib import Path

SOURCE_DIR_ENV = "MARKDOC_SOURCE_DIR"
OUTPUT_DIR_ENV = "MARKDOC_OUTPUT_DIR"
TEMPLATE_PATH_ENV = "MARKDOC_TEMPLATE_PATH"
TITLE_ENV = "MARKDOC_TITLE"
OUTPUT_NAME_ENV = "MARKDOC_OUTPUT_NAME"
QUESTION_COUNT_ENV = "MARKDOC_QUESTION_COUNT"
MAX_WORKERS_ENV = "MARKDOC_MAX_WORKERS"

DEFAULT_TITLE = "BÀI TẬP CÁC HỆ THỐNG PHÂN TÁN"
DEFAULT_OUTPUT_NAME = "bai-tap-he-thong-phan-tan.docx"
DEFAULT_QUESTION_COUNT = 10
DEFAULT_MAX_WORKERS = 4


def _get_env_path(name: str) -> Path | None:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    return Path(value)


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise SystemExit(f"ERROR: {name} must be an integer, got {value!r}")
    if parsed < 1:
        raise SystemExit(f"ERROR: {name} must be at least 1, got {parsed}")
    return parsed


def get_source_dir() -> Path:
    return _get_env_path(SOURCE_DIR_ENV) or Path.cwd()


def get_output_dir() -> Path:
    return _get_env_path(OUTPUT_DIR_ENV) or get_source_dir()


def get_template_path() -> Path | None:
    return _get_env_path(TEMPLATE_PATH_ENV)


def get_title() -> str:
    return os.getenv(TITLE_ENV, "").strip() or DEFAULT_TITLE


def get_output_name() -> str:
    return os.getenv(OUTPUT_NAME_ENV, "").strip() or DEFAULT_OUTPUT_NAME


def get_question_count() -> int:
    return _get_env_int(QUESTION_COUNT_ENV, DEFAULT_QUESTION_COUNT)


def get_max_workers() -> int:
    return _get_env_int(MAX_WORKERS_ENV, DEFAULT_MAX_WORKERS)
