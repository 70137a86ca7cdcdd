import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

@dataclass
class Diagnostic:
    line: int # 0-based
    column: int # 1-based, as reported by cue
    severity: str # always 'error' for cue vet output
    message: str
    file_path: str = ""

    @property
    def start(self) -> Tuple[int, int]:
        return (self.line, self.column)

    @property
    def end(self) -> Tuple[int, int]:
        # cue reports single points, so the range is zero-length
        return (self.line, self.column)


class ParserState(str, Enum):
    AWAITING_MESSAGE = "awaiting-message"
    AWAITING_LOCATION = "awaiting-location"


RE_NEWLINE = re.compile(r"\r?\n")
# Pattern: <path>:<line>:<col>, path may itself contain colons
RE_LOCATION = re.compile(r"^(.+):(\d+):(\d+)$")
LOCATION_INDENT = "  "
SUPPRESSED_MARKER = "incomplete value"


class VetOutputParser:
    """
    Line-at-a-time state machine over `cue vet` stderr.

    AWAITING_MESSAGE  --message-->   AWAITING_LOCATION
    AWAITING_LOCATION --message-->   AWAITING_LOCATION (message replaced)
    any state         --location-->  AWAITING_LOCATION (+ Diagnostic unless suppressed)
    any state         --blank-->     unchanged
    """

    def __init__(self):
        self.state = ParserState.AWAITING_MESSAGE
        self.message = ""

    @property
    def suppressed(self) -> bool:
        return SUPPRESSED_MARKER in self.message

    @staticmethod
    def match_location(line: str) -> Optional[re.Match]:
        if not line.startswith(LOCATION_INDENT):
            return None
        return RE_LOCATION.match(line)

    def feed(self, line: str) -> Optional[Diagnostic]:
        stripped = line.strip()
        if not stripped:
            return None

        match = self.match_location(line)
        if match is None:
            # remove last colon `xxx:` -> `xxx`
            self.message = stripped[:-1] if stripped.endswith(":") else stripped
            self.state = ParserState.AWAITING_LOCATION
            return None

        if self.state is ParserState.AWAITING_MESSAGE:
            # location before any message line
            logger.debug("orphan location %r", stripped)
            self.state = ParserState.AWAITING_LOCATION
        if self.suppressed:
            return None
        return Diagnostic(
            line=int(match.group(2)) - 1,
            column=int(match.group(3)),
            severity="error",
            message=self.message,
            file_path=match.group(1).strip(),
        )


def parse_diagnostics(stderr: str) -> List[Diagnostic]:
    """
    Parses `cue vet` error output into structured objects.
    Example:
        expected operand, found 'EOF':
            ./examples/simple1.cue:7:3
    """
    parser = VetOutputParser()
    diagnostics = []
    # only \n and \r\n end a line; cue messages may quote other separators
    for line in RE_NEWLINE.split(stderr):
        diag = parser.feed(line)
        if diag is not None:
            diagnostics.append(diag)
    return diagnostics
