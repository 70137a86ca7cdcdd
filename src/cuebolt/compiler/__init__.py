from .driver import CueDriver, CueResult
from .module_root import MODULE_MARKER, get_config_module_root, resolve_module_root
