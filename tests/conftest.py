"""Shared fixtures for depbundle tests."""

from __future__ import annotations

import pathlib

import pytest

from depbundle.config import RuntimeEnvironment
from depbundle.core.bundle import RecordingReports


@pytest.fixture
def packages_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty package repository directory."""
    root = tmp_path / "packages"
    root.mkdir()
    return root


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Directory for the project under test (manifest not yet written)."""
    directory = tmp_path / "src" / "App"
    directory.mkdir(parents=True)
    return directory


@pytest.fixture
def reports() -> RecordingReports:
    return RecordingReports()


@pytest.fixture
def empty_environment(tmp_path: pathlib.Path) -> RuntimeEnvironment:
    """A runtime environment with no variables set and an empty home."""
    home = tmp_path / "home"
    home.mkdir()
    return RuntimeEnvironment(user_home=home)
