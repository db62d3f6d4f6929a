"""Tests for the Specimin and Checker Framework adapters.

subprocess.run is replaced in every test; no JVM or Gradle is started.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from mend.exceptions import MinimizationError
from mend.models.diagnostics import Diagnostics, DiagnosticsStatus
from mend.tools import CheckerVerifier, Minimizer, SpeciminMinimizer, Verifier, extract_error


class FakeRun:
    """Records subprocess.run calls and returns a canned result."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "", error=None):
        self.calls: list[tuple[list[str], dict]] = []
        self._result = SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)
        self._error = error

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self._error is not None:
            raise self._error
        return self._result


JAVAC_OUTPUT = """\
Note: Some input files use unchecked or unsafe operations.
/tmp/C.java:10: error: [required.method.not.called] @MustCall method close may not have been invoked.
        Socket socket = new Socket("localhost", port);
               ^
1 error
"""


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class TestDiagnostics:
    def test_clean(self):
        d = Diagnostics.clean()
        assert d.is_clean
        assert d.status == DiagnosticsStatus.CLEAN
        assert d.report == ""

    def test_findings(self):
        d = Diagnostics.findings("  error: x  \n")
        assert d.status == DiagnosticsStatus.FINDINGS
        assert d.report == "error: x"
        assert not d.is_clean

    def test_blank_findings_are_clean(self):
        assert Diagnostics.findings("   \n").is_clean

    def test_tool_error(self):
        d = Diagnostics.tool_error("java not found")
        assert d.is_tool_error
        assert not d.is_clean
        assert d.cause == "java not found"


# ---------------------------------------------------------------------------
# CheckerVerifier
# ---------------------------------------------------------------------------


class TestExtractError:
    def test_keeps_text_from_first_marker(self):
        report = extract_error(JAVAC_OUTPUT)
        assert report.startswith("error: [required.method.not.called]")
        assert report.endswith("1 error")
        assert "Note:" not in report

    def test_no_marker(self):
        assert extract_error("Note: nothing to see\n") == ""

    def test_empty(self):
        assert extract_error("") == ""


class TestCheckerVerifier:
    def test_command(self):
        verifier = CheckerVerifier("/opt/checker.jar", classpath="/lib/a.jar", processors="nullness")
        assert verifier.command(Path("/w/C.java")) == [
            "java", "-jar", "/opt/checker.jar",
            "-cp", "/lib/a.jar",
            "-processor", "nullness",
            "/w/C.java",
        ]

    def test_command_without_classpath(self):
        cmd = CheckerVerifier("/opt/checker.jar").command(Path("C.java"))
        assert "-cp" not in cmd
        assert cmd[-3:] == ["-processor", "resourceleak", "C.java"]

    def test_findings(self, monkeypatch):
        fake = FakeRun(returncode=1, stderr=JAVAC_OUTPUT)
        monkeypatch.setattr(subprocess, "run", fake)
        result = CheckerVerifier("/opt/checker.jar").verify(Path("/w/C.java"))
        assert result.status == DiagnosticsStatus.FINDINGS
        assert result.report.startswith("error:")
        assert fake.calls[0][1]["capture_output"] is True

    def test_clean(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(returncode=0, stderr=""))
        assert CheckerVerifier("/opt/checker.jar").verify(Path("C.java")).is_clean

    def test_warnings_only_are_clean(self, monkeypatch):
        fake = FakeRun(returncode=0, stderr="C.java:3: warning: [deprecation]\n1 warning\n")
        monkeypatch.setattr(subprocess, "run", fake)
        assert CheckerVerifier("/opt/checker.jar").verify(Path("C.java")).is_clean

    def test_missing_java_is_tool_error(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(error=FileNotFoundError("java")))
        result = CheckerVerifier("/opt/checker.jar").verify(Path("C.java"))
        assert result.is_tool_error
        assert "java" in result.cause

    def test_timeout_is_tool_error(self, monkeypatch):
        error = subprocess.TimeoutExpired(cmd="java", timeout=1)
        monkeypatch.setattr(subprocess, "run", FakeRun(error=error))
        result = CheckerVerifier("/opt/checker.jar", timeout=1).verify(Path("C.java"))
        assert result.is_tool_error

    def test_satisfies_protocol(self):
        assert isinstance(CheckerVerifier("/opt/checker.jar"), Verifier)


# ---------------------------------------------------------------------------
# SpeciminMinimizer
# ---------------------------------------------------------------------------


class TestSpeciminMinimizer:
    def test_command(self, tmp_path):
        minimizer = SpeciminMinimizer(tmp_path)
        cmd = minimizer.command("/out", "/proj", "com/example/C.java", "com.example.C#m(int)")
        assert cmd == [
            str(tmp_path / "gradlew"),
            "run",
            '--args=--outputDirectory "/out" --root "/proj" '
            '--targetFile "com/example/C.java" --targetMethod "com.example.C#m(int)"',
        ]

    def test_success_returns_output_dir(self, tmp_path, monkeypatch):
        fake = FakeRun(returncode=0, stdout="BUILD SUCCESSFUL\n")
        monkeypatch.setattr(subprocess, "run", fake)
        output = SpeciminMinimizer(tmp_path).minimize("/proj", "C.java", "C#m()")
        try:
            assert output.is_dir()
            assert output.name.startswith("mend-specimin-")
            cmd, kwargs = fake.calls[0]
            assert kwargs["cwd"] == tmp_path
            assert kwargs["stderr"] == subprocess.STDOUT
            assert f'--outputDirectory "{output}"' in cmd[2]
        finally:
            output.rmdir()

    def test_fresh_directory_per_run(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun())
        minimizer = SpeciminMinimizer(tmp_path)
        first = minimizer.minimize("/proj", "C.java", "C#m()")
        second = minimizer.minimize("/proj", "C.java", "C#m()")
        try:
            assert first != second
        finally:
            first.rmdir()
            second.rmdir()

    def test_failure_raises_and_cleans_up(self, tmp_path, monkeypatch):
        fake = FakeRun(returncode=1, stdout="FAILURE\n")
        monkeypatch.setattr(subprocess, "run", fake)
        with pytest.raises(MinimizationError, match="exited with code 1"):
            SpeciminMinimizer(tmp_path).minimize("/proj", "C.java", "C#m()")
        cmd, _ = fake.calls[0]
        output_dir = cmd[2].split('"')[1]
        assert not Path(output_dir).exists()

    def test_failure_tolerated(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(returncode=1))
        output = SpeciminMinimizer(tmp_path, tolerate_failure=True).minimize(
            "/proj", "C.java", "C#m()"
        )
        try:
            assert output.is_dir()
        finally:
            output.rmdir()

    def test_missing_gradle(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(error=FileNotFoundError("gradlew")))
        with pytest.raises(MinimizationError, match="Failed to run Specimin"):
            SpeciminMinimizer(tmp_path).minimize("/proj", "C.java", "C#m()")

    def test_satisfies_protocol(self, tmp_path):
        assert isinstance(SpeciminMinimizer(tmp_path), Minimizer)
