from .diagnostics import Diagnostic, ParserState, VetOutputParser, parse_diagnostics
