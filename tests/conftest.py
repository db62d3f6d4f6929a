"""Shared test fixtures for Mend.

Provides a temporary Java project, a minimized working copy of it, and
the fake collaborators from tests.fakes.
"""

from __future__ import annotations

import shutil

import pytest

from mend.llm.backends import ScriptedBackend
from mend.target import parse_target
from mend.workspace import WorkingCopy
from tests.fakes import (
    FIXED_RESPONSE,
    TARGET_FILE,
    TARGET_METHOD,
    CopyMinimizer,
    ResourceLeakVerifier,
    write_project,
)


@pytest.fixture
def project(tmp_path):
    """Project root holding com/example/C.java with a leaked socket."""
    root = tmp_path / "proj"
    write_project(root)
    return root


@pytest.fixture
def target_file(project):
    return project / "com" / "example" / "C.java"


@pytest.fixture
def descriptor(project):
    return parse_target(project, TARGET_FILE, TARGET_METHOD)


@pytest.fixture
def working_copy(tmp_path, target_file):
    """Working copy of the project file, removed after the test."""
    root = tmp_path / "minimized"
    dst = root / "com" / "example" / "C.java"
    dst.parent.mkdir(parents=True)
    shutil.copyfile(target_file, dst)
    copy = WorkingCopy(root, TARGET_FILE)
    yield copy
    copy.cleanup()


@pytest.fixture
def minimizer():
    return CopyMinimizer()


@pytest.fixture
def verifier():
    return ResourceLeakVerifier()


@pytest.fixture
def backend():
    """Backend that answers every prompt with the try-with-resources fix."""
    return ScriptedBackend([FIXED_RESPONSE])
