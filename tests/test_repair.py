"""End-to-end tests for the repair driver.

The minimizer copies the target file, the verifier looks for a
try-with-resources block, and the backend replays a canned fix.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from mend.correction import CorrectionConfig, LoopState
from mend.exceptions import (
    ConfigError,
    MinimizationError,
    ModelSelectionError,
    NonConvergenceError,
    TargetFormatError,
)
from mend.llm.backends import DryRunBackend, ScriptedBackend
from mend.models.config import MendConfig
from mend.models.diagnostics import Diagnostics
from mend.repair import Repairer, RepairSettings, repair
from mend.tools import CheckerVerifier, SpeciminMinimizer
from tests.fakes import (
    SOCKET_SOURCE,
    TARGET_FILE,
    TARGET_METHOD,
    CopyMinimizer,
    ScriptedVerifier,
)


def _run(project, minimizer, verifier, backend, **settings_kwargs):
    events = []
    correction = CorrectionConfig(on_event=events.append)
    settings = RepairSettings(correction=correction, **settings_kwargs)
    outcome = repair(
        project, TARGET_FILE, TARGET_METHOD,
        minimizer=minimizer, verifier=verifier, backend=backend, settings=settings,
    )
    return outcome, events


# ---------------------------------------------------------------------------
# End-to-end scenario
# ---------------------------------------------------------------------------


class TestUnclosedResourceScenario:
    def test_fix_is_promoted(self, project, target_file, minimizer, verifier, backend):
        outcome, events = _run(project, minimizer, verifier, backend)

        assert outcome.promoted
        assert outcome.result.is_clean
        assert outcome.result.llm_calls == 1
        assert outcome.descriptor.method_reference == TARGET_METHOD

        text = target_file.read_text(encoding="utf-8")
        start = SOCKET_SOURCE.index("public void testSocket")
        end = SOCKET_SOURCE.index("\n\n    public int other")
        assert text.startswith(SOCKET_SOURCE[:start])
        assert text.endswith(SOCKET_SOURCE[end:])
        assert text[start:len(text) - len(SOCKET_SOURCE) + end] == (
            "public void testSocket(int port) throws IOException {\n"
            "        try (Socket socket = new Socket(\"localhost\", port)) {\n"
            "            socket.getOutputStream().write(count);\n"
            "        }\n"
            "    }"
        )

        states = [e.state for e in events]
        assert states[:2] == [LoopState.START, LoopState.MINIMIZED]
        assert states[-2:] == [LoopState.PROMOTING, LoopState.DONE]

    def test_minimizer_called_once_with_descriptor(self, project, minimizer, verifier, backend):
        _run(project, minimizer, verifier, backend)
        assert minimizer.calls == [(str(project), TARGET_FILE, TARGET_METHOD)]

    def test_working_copy_removed(self, project, minimizer, verifier, backend):
        _run(project, minimizer, verifier, backend)
        assert not minimizer.outputs[0].exists()

    def test_verifier_only_sees_working_copy(self, project, target_file, minimizer, verifier, backend):
        _run(project, minimizer, verifier, backend)
        assert all(path != target_file for path in verifier.calls)


# ---------------------------------------------------------------------------
# No-op runs
# ---------------------------------------------------------------------------


class TestNoOpRuns:
    def test_clean_first_verification(self, project, target_file, minimizer, backend):
        before = target_file.read_bytes()
        outcome, _ = _run(project, minimizer, ScriptedVerifier(Diagnostics.clean()), backend)

        assert outcome.result.llm_calls == 0
        assert backend.prompts == []
        assert not outcome.promoted
        assert target_file.read_bytes() == before

    def test_dry_run_is_byte_identical(self, project, target_file, minimizer, verifier):
        before = target_file.read_bytes()
        outcome, _ = _run(project, minimizer, verifier, DryRunBackend(), model="dryrun")

        assert outcome.result.state == LoopState.DONE
        assert not outcome.promoted
        assert target_file.read_bytes() == before

    def test_dry_run_clean_is_not_promoted(self, project, target_file, backend):
        class EditingMinimizer(CopyMinimizer):
            def minimize(self, root, relative_file_path, method_reference):
                output = super().minimize(root, relative_file_path, method_reference)
                path = output / "com" / "example" / "C.java"
                path.write_text(
                    path.read_text(encoding="utf-8").replace("write(count)", "write(0)"),
                    encoding="utf-8",
                )
                return output

        before = target_file.read_bytes()
        outcome, _ = _run(
            project, EditingMinimizer(), ScriptedVerifier(Diagnostics.clean()), backend,
            model="dryrun",
        )
        assert outcome.result.is_clean
        assert not outcome.promoted
        assert target_file.read_bytes() == before

    def test_dry_run_without_minimized_output(self, project, target_file, backend):
        minimizer = CopyMinimizer(produce=False)
        before = target_file.read_bytes()
        outcome, _ = _run(
            project, minimizer, ScriptedVerifier(Diagnostics.clean()), backend, model="dryrun"
        )
        assert outcome.result.state == LoopState.DONE
        assert target_file.read_bytes() == before
        assert not minimizer.outputs[0].exists()


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_invalid_descriptor_stops_before_minimizing(self, project, minimizer, verifier, backend):
        with pytest.raises(TargetFormatError):
            repair(
                project, "com/example/C.txt", TARGET_METHOD,
                minimizer=minimizer, verifier=verifier, backend=backend,
            )
        assert minimizer.calls == []

    def test_invalid_model(self, project, minimizer, verifier, backend):
        with pytest.raises(ModelSelectionError):
            _run(project, minimizer, verifier, backend, model="gpt-5")
        assert minimizer.calls == []

    def test_empty_minimizer_output(self, project, verifier, backend):
        minimizer = CopyMinimizer(produce=False)
        with pytest.raises(MinimizationError, match="no output"):
            _run(project, minimizer, verifier, backend)
        assert not minimizer.outputs[0].exists()

    def test_empty_output_path_leaves_working_directory(self, project, target_file, backend, monkeypatch):
        class EmptyPathMinimizer:
            def minimize(self, root, relative_file_path, method_reference):
                return Path("")

        (project / "README.txt").write_text("keep me", encoding="utf-8")
        before = target_file.read_bytes()
        monkeypatch.chdir(project)

        with pytest.raises(MinimizationError, match="empty output path"):
            _run(project, EmptyPathMinimizer(), ScriptedVerifier(Diagnostics.clean()), backend)

        assert target_file.read_bytes() == before
        assert (project / "README.txt").read_text(encoding="utf-8") == "keep me"

    def test_output_path_is_project_root(self, project, target_file, backend):
        class InPlaceMinimizer:
            def minimize(self, root, relative_file_path, method_reference):
                return Path(root)

        before = target_file.read_bytes()
        with pytest.raises(MinimizationError, match="refusing"):
            _run(project, InPlaceMinimizer(), ScriptedVerifier(Diagnostics.clean()), backend)
        assert target_file.read_bytes() == before

    def test_missing_output_directory(self, project, tmp_path, backend):
        missing = tmp_path / "never-created"

        class MissingDirMinimizer:
            def minimize(self, root, relative_file_path, method_reference):
                return missing

        with pytest.raises(MinimizationError, match="not a directory"):
            _run(
                project, MissingDirMinimizer(), ScriptedVerifier(Diagnostics.clean()), backend,
                model="dryrun",
            )

    def test_failure_cleans_up_and_leaves_original(self, project, target_file, minimizer, backend):
        before = target_file.read_bytes()
        verifier = ScriptedVerifier(Diagnostics.findings("error: stuck"))
        with pytest.raises(NonConvergenceError):
            _run(project, minimizer, verifier, backend)
        assert target_file.read_bytes() == before
        assert not minimizer.outputs[0].exists()

    def test_max_prompt_tokens_from_config(self, project, minimizer, verifier):
        from mend.exceptions import PromptTooLargeError
        from tests.fakes import LengthTokenCounter

        backend = ScriptedBackend(["unused"])
        settings = RepairSettings(config=MendConfig(max_prompt_tokens=5))
        with pytest.raises(PromptTooLargeError):
            repair(
                project, TARGET_FILE, TARGET_METHOD,
                minimizer=minimizer, verifier=verifier, backend=backend,
                settings=settings, token_counter=LengthTokenCounter(),
            )


# ---------------------------------------------------------------------------
# Repairer
# ---------------------------------------------------------------------------


class TestRepairer:
    def test_requires_specimin_path(self):
        with pytest.raises(ConfigError, match="MEND_SPECIMIN_PATH"):
            Repairer(MendConfig(), model="dryrun").build_minimizer()

    def test_requires_checker_jar(self):
        with pytest.raises(ConfigError, match="MEND_CHECKER_JAR"):
            Repairer(MendConfig(), model="dryrun").build_verifier()

    def test_builds_adapters(self, tmp_path):
        config = MendConfig(specimin_path=str(tmp_path), checker_jar="/opt/checker.jar")
        repairer = Repairer(config, model="mock")
        assert isinstance(repairer.build_minimizer(), SpeciminMinimizer)
        assert isinstance(repairer.build_verifier(), CheckerVerifier)

    def test_dry_run_tolerates_minimizer_failure(self, tmp_path):
        config = MendConfig(specimin_path=str(tmp_path))
        assert Repairer(config, model="dryrun").build_minimizer()._tolerate_failure
        assert not Repairer(config, model="mock").build_minimizer()._tolerate_failure

    def test_model_threaded_into_settings(self):
        repairer = Repairer(MendConfig(max_iterations=2), model="dryrun")
        settings = repairer.settings
        assert settings.model == "dryrun"
        assert settings.correction.model == "dryrun"
        assert settings.correction.max_iterations == 2

    def test_invalid_model(self):
        with pytest.raises(ModelSelectionError):
            Repairer(MendConfig(), model="unknown")

    def test_end_to_end_with_patched_tools(self, project, target_file, tmp_path, monkeypatch):
        from tests.fakes import FIXED_RESPONSE, ResourceLeakVerifier

        responses = tmp_path / "response.txt"
        responses.write_text(FIXED_RESPONSE, encoding="utf-8")
        monkeypatch.setattr(Repairer, "build_minimizer", lambda self: CopyMinimizer())
        monkeypatch.setattr(Repairer, "build_verifier", lambda self: ResourceLeakVerifier())

        with Repairer(MendConfig(), model="mock", responses_path=responses) as repairer:
            outcome = repairer.repair(project, TARGET_FILE, TARGET_METHOD)

        assert outcome.promoted
        assert "try (Socket socket" in target_file.read_text(encoding="utf-8")
