"""
Unit tests for CueEngine: lint / eval / format orchestration.
All cue invocations are mocked: no real cue binary needed.
"""
import os
import pytest
from pathlib import Path
from unittest.mock import patch, MagicMock
from cuebolt.compiler.driver import CueResult
from cuebolt.engine import CueEngine, MODULE_ROOT_GUIDANCE
from cuebolt.errors import CueCommandError, CueNotFoundError, DirectoryReadError
from cuebolt.utils.config import ConfigManager

VET_OUTPUT = (
    "expected operand, found 'EOF':\n"
    "    ./pkg/a.cue:7:3\n"
    "x: incomplete value int:\n"
    "    ./pkg/a.cue:2:1\n"
)


@pytest.fixture
def workspace(tmp_path):
    """<tmp>/ws with cue.mod at the root and a file in a nested package."""
    ws = tmp_path / "ws"
    (ws / "cue.mod").mkdir(parents=True)
    (ws / "pkg").mkdir()
    cue_file = ws / "pkg" / "a.cue"
    cue_file.write_text("a: 1\n")
    return ws, cue_file


@pytest.fixture
def engine(tmp_path, workspace):
    ws, cue_file = workspace
    config = ConfigManager(config_dir=tmp_path / ".cuebolt")
    with patch("shutil.which", return_value="/usr/bin/cue"):
        eng = CueEngine(str(cue_file), config_manager=config, workspace_folder=str(ws))
    yield eng
    eng.temp_workspace.cleanup()


class TestEngineLint:

    def test_lint_publishes_diagnostics(self, engine, workspace):
        ws, cue_file = workspace
        with patch.object(engine.driver, "vet", return_value=CueResult("", VET_OUTPUT, 1)) as vet:
            engine.lint()
        # run from the module root, not the file's directory
        assert vet.call_args[1]["cwd"] == os.path.realpath(ws)
        assert engine.state.module_root == os.path.realpath(ws)
        assert len(engine.state.diagnostics) == 1
        d = engine.state.diagnostics[0]
        assert (d.line, d.column) == (6, 3)
        assert engine.diagnostics.get(str(cue_file)) == engine.state.diagnostics
        assert engine.state.compiler_output == VET_OUTPUT
        assert engine.state.has_errors

    def test_lint_passes_flags_verbatim(self, engine):
        engine.lint_flags = ["-t", "env=prod", "--strict"]
        with patch.object(engine.driver, "vet", return_value=CueResult("", "", 0)) as vet:
            engine.lint()
        assert vet.call_args[0][1] == ["-t", "env=prod", "--strict"]

    def test_lint_clean_file(self, engine):
        with patch.object(engine.driver, "vet", return_value=CueResult("", "", 0)):
            engine.lint()
        assert engine.state.diagnostics == []
        assert engine.state.status_message == "No problems"
        assert engine.state.last_error == ""

    def test_new_lint_replaces_previous(self, engine, workspace):
        _, cue_file = workspace
        with patch.object(engine.driver, "vet", return_value=CueResult("", VET_OUTPUT, 1)):
            engine.lint()
        with patch.object(engine.driver, "vet", return_value=CueResult("", "", 0)):
            engine.lint()
        assert engine.diagnostics.get(str(cue_file)) == []

    def test_lint_ignores_exit_code(self, engine):
        with patch.object(engine.driver, "vet", return_value=CueResult("", VET_OUTPUT, 0)):
            engine.lint()
        assert len(engine.state.diagnostics) == 1

    def test_module_root_not_found_gives_guidance(self, tmp_path):
        ws = tmp_path / "bare"
        ws.mkdir()
        cue_file = ws / "a.cue"
        cue_file.write_text("a: 1\n")
        config = ConfigManager(config_dir=tmp_path / ".cuebolt")
        with patch("shutil.which", return_value="/usr/bin/cue"):
            eng = CueEngine(str(cue_file), config_manager=config, workspace_folder=str(ws))
        try:
            with patch.object(eng.driver, "vet") as vet:
                eng.lint()
            vet.assert_not_called()
            assert eng.state.status_message == MODULE_ROOT_GUIDANCE
            assert eng.state.last_error == MODULE_ROOT_GUIDANCE
        finally:
            eng.temp_workspace.cleanup()

    def test_directory_read_error_is_reported_differently(self, engine):
        err = DirectoryReadError("/ws/pkg", PermissionError("denied"))
        with patch("cuebolt.engine.get_config_module_root", side_effect=err):
            engine.lint()
        assert engine.state.last_error.startswith("Failed to lint file, cannot read /ws/pkg")
        assert engine.state.last_error != MODULE_ROOT_GUIDANCE

    def test_cue_not_found_propagates(self, engine):
        with patch.object(engine.driver, "vet", side_effect=CueNotFoundError("no cue")):
            with pytest.raises(CueNotFoundError):
                engine.lint()

    def test_lint_invokes_callback(self, engine):
        callback = MagicMock()
        engine.on_update_callback = callback
        with patch.object(engine.driver, "vet", return_value=CueResult("", "", 0)):
            engine.lint()
        callback.assert_called_once_with(engine.state)
        assert engine.state.last_update > 0


class TestEngineFlags:

    def test_set_flags_persists_clears_and_relints(self, engine, tmp_path):
        engine.diagnostics.set("/other/file.cue", [MagicMock()])
        with patch.object(engine, "lint") as lint:
            engine.set_flags(["-t", "x=1"])
        lint.assert_called_once()
        assert engine.lint_flags == ["-t", "x=1"]
        assert engine.state.lint_flags == ["-t", "x=1"]
        assert len(engine.diagnostics) == 0
        assert ConfigManager(config_dir=tmp_path / ".cuebolt").get("lint_flags") == ["-t", "x=1"]

    def test_set_lint_on_save_clears(self, engine):
        engine.diagnostics.set("/other/file.cue", [MagicMock()])
        engine.set_lint_on_save(False)
        assert len(engine.diagnostics) == 0
        assert engine.lint_on_save is False
        assert engine.state.status_message == "Lint on save: off"

    def test_lint_on_save_off_string(self, engine):
        engine.config.config["lint_on_save"] = "off"
        assert engine.lint_on_save is False


class TestEngineEval:

    def test_eval_writes_temp_file(self, engine, workspace):
        ws, cue_file = workspace
        with patch.object(engine.driver, "eval", return_value="a: 1\n") as ev:
            path = engine.evaluate(["a"], "yaml")
        assert ev.call_args[0] == (str(cue_file), ["a"], "yaml")
        assert ev.call_args[1]["cwd"] == str(ws)
        assert path.endswith("eval.yaml")
        assert Path(path).read_text() == "a: 1\n"
        assert Path(path).parent.parent == Path(engine.temp_workspace.root)
        assert engine.state.eval_output == "a: 1\n"
        assert engine.state.eval_file == path

    def test_eval_outside_a_module(self, tmp_path):
        ws = tmp_path / "loose"
        ws.mkdir()
        cue_file = ws / "a.cue"
        cue_file.write_text("a: 1\n")
        config = ConfigManager(config_dir=tmp_path / ".cuebolt")
        with patch("shutil.which", return_value="/usr/bin/cue"):
            eng = CueEngine(str(cue_file), config_manager=config, workspace_folder=str(ws))
        try:
            with patch.object(eng.driver, "eval", return_value="a: 1\n") as ev:
                path = eng.evaluate()
            ev.assert_called_once()
            assert ev.call_args[1]["cwd"] == str(ws)
            assert path is not None
            assert eng.state.last_error == ""
        finally:
            eng.temp_workspace.cleanup()

    def test_eval_without_workspace_uses_cwd(self, engine, monkeypatch, tmp_path):
        engine.workspace_folder = None
        monkeypatch.chdir(tmp_path)
        with patch.object(engine.driver, "eval", return_value="{}") as ev:
            engine.evaluate()
        assert ev.call_args[1]["cwd"] == os.getcwd()

    def test_text_output_uses_txt(self, engine):
        with patch.object(engine.driver, "eval", return_value="hello"):
            path = engine.evaluate(out_type="text")
        assert path.endswith("eval.txt")

    def test_default_out_type_from_state(self, engine):
        engine.state.eval_out_type = "json"
        with patch.object(engine.driver, "eval", return_value="{}") as ev:
            engine.evaluate()
        assert ev.call_args[0][2] == "json"

    def test_each_eval_gets_fresh_dir(self, engine):
        with patch.object(engine.driver, "eval", return_value="{}"):
            first = engine.evaluate(out_type="json")
            second = engine.evaluate(out_type="json")
        assert Path(first).parent != Path(second).parent

    def test_eval_failure_reported(self, engine):
        err = CueCommandError(["eval", "a.cue", "-c"], "boom", 1)
        with patch.object(engine.driver, "eval", side_effect=err):
            assert engine.evaluate() is None
        assert engine.state.last_error.startswith("Failed to evaluate file, error:")
        assert "boom" in engine.state.last_error

    def test_eval_cue_not_found_propagates(self, engine):
        with patch.object(engine.driver, "eval", side_effect=CueNotFoundError("no cue")):
            with pytest.raises(CueNotFoundError):
                engine.evaluate()


class TestEngineFormat:

    def test_format_reloads_source(self, engine, workspace):
        _, cue_file = workspace

        def fake_fmt(path, cwd=None):
            Path(path).write_text("a: 2\n")

        with patch.object(engine.driver, "fmt", side_effect=fake_fmt) as fmt:
            engine.format()
        assert fmt.call_args[1]["cwd"] == str(cue_file.parent)
        assert engine.state.source_code == "a: 2\n"
        assert engine.state.last_error == ""

    def test_format_failure_reported(self, engine):
        err = CueCommandError(["fmt", "a.cue"], "expected '}'", 1)
        with patch.object(engine.driver, "fmt", side_effect=err):
            engine.format()
        assert engine.state.last_error.startswith("Failed to format file")


class TestEngineLifecycle:

    def test_start_lints_and_watches(self, engine):
        with patch.object(engine, "lint") as lint, \
             patch.object(engine.watcher, "start_watching") as watch:
            engine.start()
        lint.assert_called_once()
        watch.assert_called_once_with(engine.state.source_path, engine._on_file_saved)
        assert engine.state.source_code == "a: 1\n"

    def test_start_without_lint_on_save(self, engine):
        engine.config.config["lint_on_save"] = False
        callback = MagicMock()
        engine.on_update_callback = callback
        with patch.object(engine, "lint") as lint, \
             patch.object(engine.watcher, "start_watching"):
            engine.start()
        lint.assert_not_called()
        callback.assert_called_once()

    def test_save_triggers_lint(self, engine):
        with patch.object(engine, "lint") as lint:
            engine._on_file_saved(engine.state.source_path)
        lint.assert_called_once()

    def test_save_with_missing_cue_sets_status(self, engine):
        with patch.object(engine, "lint", side_effect=CueNotFoundError("install cue")):
            engine._on_file_saved(engine.state.source_path)
        assert engine.state.status_message == "install cue"

    def test_stop_drops_diagnostics_and_temp(self, engine):
        engine.diagnostics.set(engine.state.source_path, [MagicMock()])
        root = engine.temp_workspace.root
        with patch.object(engine.watcher, "stop_watching") as stop:
            engine.stop()
        stop.assert_called_once()
        assert engine.state.source_path not in engine.diagnostics
        assert not os.path.exists(root)
