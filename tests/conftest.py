"""
Pytest configuration and fixtures for dockersave tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from dockersave.artifact import DOCKER_IMPORT_BUILDER_ID, ImageArtifact
from dockersave.ui import RecordingUi


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DOCKERSAVE_* variables from the outer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("DOCKERSAVE_"):
            monkeypatch.delenv(key)


# ============================================================================
# Artifact / UI Fixtures
# ============================================================================


@pytest.fixture
def import_artifact() -> ImageArtifact:
    """Artifact as produced by the docker-import stage."""
    return ImageArtifact(id="sha256:abc123", builder_id=DOCKER_IMPORT_BUILDER_ID)


@pytest.fixture
def ui() -> RecordingUi:
    return RecordingUi()


# ============================================================================
# Fake Executables
# ============================================================================


@pytest.fixture
def make_fake_docker(tmp_path: Path) -> Callable[..., str]:
    """Write an executable shell script standing in for the docker CLI.

    Returns a factory taking the script body and returning its path.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(body: str, name: str = "docker") -> str:
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(0o755)
        return str(script)

    return _make
