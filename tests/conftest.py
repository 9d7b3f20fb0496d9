"""Shared pytest fixtures for blob-folder-upload tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from blob_folder_upload.config import (
    ENV_ACCOUNT,
    ENV_CONN_STR,
    ENV_CONTAINER,
    ENV_LOCAL_FOLDER,
    ENV_LOG_PATH,
    ENV_SUBFOLDER,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's Azure settings out of every test."""
    for name in (
        ENV_ACCOUNT,
        ENV_CONTAINER,
        ENV_SUBFOLDER,
        ENV_LOCAL_FOLDER,
        ENV_CONN_STR,
        ENV_LOG_PATH,
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """A folder holding a.txt and sub/b.txt."""
    root = tmp_path / "data"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("alpha", encoding="utf-8")
    (root / "sub" / "b.txt").write_text("bravo", encoding="utf-8")
    return root


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("tests.blob_folder_upload")
