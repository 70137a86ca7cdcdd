import logging
import os
import time
from typing import Callable, List, Optional, Sequence
from .compiler.driver import CueDriver
from .compiler.module_root import get_config_module_root
from .errors import CueNotFoundError, DirectoryReadError, ModuleRootNotFoundError
from .parsing import parse_diagnostics
from .utils.config import ConfigManager
from .utils.lang import out_type_extension
from .utils.state import CueBoltState, DiagnosticCollection
from .utils.tempdir import TempWorkspace
from .utils.watcher import FileWatcher

logger = logging.getLogger(__name__)

MODULE_ROOT_GUIDANCE = (
    "No cue.mod found between this file and the workspace root. "
    "Run `cue mod init` in your module directory or set `module_root` "
    "in ~/.cuebolt/config.json."
)


class CueEngine:
    def __init__(
        self,
        source_file: str,
        config_manager: Optional[ConfigManager] = None,
        workspace_folder: Optional[str] = None,
    ):
        self.config = config_manager if config_manager else ConfigManager()
        self.workspace_folder = workspace_folder
        self.state = CueBoltState(source_path=os.path.abspath(source_file))
        self.driver = CueDriver(self.config)
        self.watcher = FileWatcher()
        self.diagnostics = DiagnosticCollection()
        self.temp_workspace = TempWorkspace()
        self.on_update_callback: Optional[Callable[[CueBoltState], None]] = None
        self.lint_flags: List[str] = list(self.config.get("lint_flags", []) or [])
        self.state.lint_flags = list(self.lint_flags)
        self.state.eval_out_type = self.config.get("eval_out_type", "cue")

    def _notify(self):
        self.state.last_update = time.time()
        if self.on_update_callback:
            self.on_update_callback(self.state)

    @property
    def lint_on_save(self) -> bool:
        value = self.config.get("lint_on_save", True)
        return bool(value) and value != "off"

    def start(self):
        self.reload_source()
        if self.lint_on_save:
            self.lint()
        else:
            self._notify()
        self.watcher.start_watching(self.state.source_path, self._on_file_saved)

    def stop(self):
        self.watcher.stop_watching()
        self.diagnostics.delete(self.state.source_path)
        self.temp_workspace.cleanup()

    def _on_file_saved(self, path: str):
        logger.debug("save detected for %s", path)
        try:
            self.reload_source()
            if self.lint_on_save:
                self.lint()
                return
        except CueNotFoundError as e:
            # Runs on the watcher thread; nobody above us to re-raise to
            self.state.status_message = str(e)
        except OSError as e:
            self.state.status_message = f"Failed to read file, error: {e}"
        self._notify()

    def reload_source(self):
        with open(self.state.source_path, "r") as f:
            self.state.source_code = f.read()

    def module_root(self) -> str:
        root = get_config_module_root(
            self.config, self.state.source_path, self.workspace_folder
        )
        self.state.module_root = root
        return root

    def set_flags(self, flags: Sequence[str]):
        self.lint_flags = list(flags)
        self.state.lint_flags = list(flags)
        self.config.set("lint_flags", self.lint_flags)
        # Flags changed: previously published diagnostics are stale
        self.diagnostics.clear()
        self.lint()

    def set_lint_on_save(self, enabled: bool):
        self.config.set("lint_on_save", enabled)
        self.diagnostics.clear()
        self.state.diagnostics = []
        self.state.status_message = f"Lint on save: {'on' if enabled else 'off'}"
        self._notify()

    def set_out_type(self, out_type: str):
        self.state.eval_out_type = out_type
        self.config.set("eval_out_type", out_type)

    def _report_failure(self, action: str, e: Exception):
        if isinstance(e, ModuleRootNotFoundError):
            self.state.status_message = MODULE_ROOT_GUIDANCE
        elif isinstance(e, DirectoryReadError):
            self.state.status_message = f"Failed to {action} file, cannot read {e.path}: {e.cause}"
        else:
            self.state.status_message = f"Failed to {action} file, error: {e}"
        self.state.last_error = self.state.status_message
        logger.error("%s failed: %s", action, e)

    def lint(self):
        """
        Runs `cue vet` from the module root and publishes diagnostics for the
        source file. CueNotFoundError propagates; other failures end up in
        state.status_message.
        """
        path = self.state.source_path
        logger.info("Linting %s with flags %s", path, self.lint_flags)
        self.state.last_error = ""
        try:
            cwd = self.module_root()
            result = self.driver.vet(path, self.lint_flags, cwd=cwd)
            logger.debug("vet stderr:\n%s", result.stderr)
            diagnostics = parse_diagnostics(result.stderr)
            self.diagnostics.set(path, diagnostics)
            self.state.update_lint(result.stderr, diagnostics)
            self.state.status_message = (
                f"{len(diagnostics)} error(s)" if diagnostics else "No problems"
            )
        except CueNotFoundError:
            raise
        except Exception as e:
            self._report_failure("lint", e)
        self._notify()

    def evaluate(self, expressions: Sequence[str] = (), out_type: Optional[str] = None) -> Optional[str]:
        """
        Runs `cue eval`, writes the output to eval.<ext> in a fresh temp dir
        and returns that file's path (None on failure).
        """
        out_type = out_type or self.state.eval_out_type
        self.state.last_error = ""
        try:
            # eval runs from the configured root; no cue.mod walk
            cwd = get_config_module_root(self.config, workspace_folder=self.workspace_folder)
            content = self.driver.eval(
                self.state.source_path, list(expressions), out_type, cwd=cwd
            )
            tmp_dir = self.temp_workspace.allocate("eval")
            eval_file = os.path.join(tmp_dir.path, f"eval.{out_type_extension(out_type)}")
            with open(eval_file, "w") as f:
                f.write(content)
            self.state.update_eval(content, out_type, eval_file)
            self.state.status_message = f"Evaluated as {out_type}"
        except CueNotFoundError:
            raise
        except Exception as e:
            self._report_failure("evaluate", e)
            eval_file = None
        self._notify()
        return eval_file

    def format(self):
        """
        Runs `cue fmt` on the source file in place and reloads it.
        The rewrite is a save, so a running watcher re-lints on its own.
        """
        self.state.last_error = ""
        try:
            # fmt works on a single file and needs no module context
            self.driver.fmt(
                self.state.source_path, cwd=os.path.dirname(self.state.source_path)
            )
            self.reload_source()
            self.state.status_message = "Formatted"
        except CueNotFoundError:
            raise
        except Exception as e:
            self._report_failure("format", e)
        self._notify()
