from .parsing.diagnostics import Diagnostic, parse_diagnostics
from .compiler.module_root import resolve_module_root

__version__ = "0.1.0"
