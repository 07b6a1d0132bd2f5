"""Shell integration: OSC 133 parsing, command tracking and the PTY loop."""

from neuroshell.shell.osc133 import (
    CommandState,
    OSCSequence,
    extract_osc_sequences,
    filter_osc_sequences,
    format_osc_sequence,
    get_command_state,
    is_command_complete,
    parse_osc_sequence,
)
from neuroshell.shell.parser import ParseResult, StreamParser
from neuroshell.shell.tracker import CommandTracker, ProcessResult, SessionInfo, SessionState

__all__ = [
    "CommandState",
    "CommandTracker",
    "OSCSequence",
    "ParseResult",
    "ProcessResult",
    "SessionInfo",
    "SessionState",
    "StreamParser",
    "extract_osc_sequences",
    "filter_osc_sequences",
    "format_osc_sequence",
    "get_command_state",
    "is_command_complete",
    "parse_osc_sequence",
]
