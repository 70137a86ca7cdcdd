import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "cue_binary": "cue",
    # Upper bound for the module-root walk; see expand_variables()
    "module_root": "${workspaceFolder}",
    # Appended verbatim to `cue vet`
    "lint_flags": [],
    "lint_on_save": True,
    "eval_out_type": "cue",
    "log_level": "INFO",
}

RE_VARIABLE = re.compile(r"\$\{([^}]+)\}")


def expand_variables(template: str, workspace_folder: Optional[str] = None) -> str:
    """
    Expands editor-style placeholders in a path template.
    Supported: ${workspaceFolder}, ${workspaceFolderBasename}, ${userHome},
    ${cwd}, ${pathSeparator}, ${env:NAME}. Unknown variables are kept as-is.
    """
    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name == "workspaceFolder":
            return workspace_folder or ""
        if name == "workspaceFolderBasename":
            return os.path.basename(workspace_folder.rstrip(os.sep)) if workspace_folder else ""
        if name == "userHome":
            return str(Path.home())
        if name == "cwd":
            return os.getcwd()
        if name == "pathSeparator":
            return os.sep
        if name.startswith("env:"):
            return os.environ.get(name[len("env:"):], "")
        return match.group(0)

    return RE_VARIABLE.sub(replace, template)


class ConfigManager:
    """
    JSON-backed user settings stored in ~/.cuebolt/config.json,
    layered over DEFAULT_CONFIG.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".cuebolt"
        self.config_file = self.config_dir / "config.json"
        self.config = self.load_config()

    def load_config(self) -> Dict[str, Any]:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        config = json.loads(json.dumps(DEFAULT_CONFIG))  # deep copy of defaults

        if not self.config_file.exists():
            return config

        try:
            with open(self.config_file, "r") as f:
                user_config = json.load(f)
            if isinstance(user_config, dict):
                config.update(user_config)
            else:
                logger.warning("Ignoring non-object config in %s", self.config_file)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Error loading config %s: %s", self.config_file, e)

        return config

    def save_config(self):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        self.config[key] = value
        self.save_config()
