import logging
import subprocess
import shutil
from typing import NamedTuple, Optional, Sequence
from ..errors import CueCommandError, CueNotFoundError, InvalidOutTypeError
from ..utils.config import ConfigManager
from ..utils.lang import OUT_TYPE_VALUES, OutType

logger = logging.getLogger(__name__)

INSTALL_HINT = (
    "CUE is not installed. Please make sure 'cue' is in your PATH. "
    "Check https://cuelang.org/docs/install/ to install CUE."
)


class CueResult(NamedTuple):
    stdout: str
    stderr: str
    code: int


class CueDriver:
    def __init__(self, config_manager: Optional[ConfigManager] = None):
        # Use provided config or load default
        self.config = config_manager if config_manager else ConfigManager()

        target_binary = self.config.get("cue_binary", "cue")
        self.set_binary(target_binary)

    def set_binary(self, binary: str):
        """
        Updates the cue binary used by the driver.
        """
        path = shutil.which(binary)
        if not path:
            # Don't raise here so the app can start; running a command will
            # raise CueNotFoundError instead.
            logger.warning("cue binary '%s' not found.", binary)

        self.binary = binary
        self.binary_path = path

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> CueResult:
        """
        Runs `cue <args>` and captures its output.
        A non-zero exit code is returned, not raised.
        """
        if not self.binary_path:
            raise CueNotFoundError(INSTALL_HINT)

        command = [self.binary_path, *args]
        logger.info("cue %s --- cwd=%s", " ".join(args), cwd)

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            raise CueNotFoundError(f"{INSTALL_HINT} ({e})") from e

        return CueResult(result.stdout, result.stderr, result.returncode)

    def vet(self, file_path: str, flags: Sequence[str] = (), cwd: Optional[str] = None) -> CueResult:
        """
        Lints a file. Diagnostics are on stderr regardless of the exit code.
        """
        # -c: require concrete values
        args = ["vet", file_path, *flags, "-c"]
        return self.run(args, cwd=cwd)

    def eval(
        self,
        file_path: str,
        expressions: Sequence[str] = (),
        out_type: str = OutType.CUE.value,
        cwd: Optional[str] = None,
    ) -> str:
        """
        Evaluates a file (optionally selected expressions) and returns stdout.
        """
        out_type = getattr(out_type, "value", out_type)
        if out_type not in OUT_TYPE_VALUES:
            raise InvalidOutTypeError(
                f"Invalid outType: {out_type}, support ({', '.join(OUT_TYPE_VALUES)})"
            )

        args = ["eval", file_path]
        for expr in expressions:
            args.extend(["-e", expr])
        if out_type != OutType.CUE.value:
            args.extend(["--out", out_type])
        args.append("-c")

        result = self.run(args, cwd=cwd)
        if result.code != 0:
            raise CueCommandError(args, result.stderr, result.code)
        return result.stdout

    def fmt(self, file_path: str, cwd: Optional[str] = None) -> CueResult:
        """
        Formats a file in place.
        """
        args = ["fmt", file_path]
        result = self.run(args, cwd=cwd)
        if result.code != 0:
            raise CueCommandError(args, result.stderr, result.code)
        return result
