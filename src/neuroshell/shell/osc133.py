"""OSC 133 shell-integration markers.

A marker has the shape ``ESC ] 133 ; <letter> [; <data>]... (BEL | ESC \\)``.
The shell emits ``A`` when the prompt is drawn, ``B`` and ``C`` when a
command starts producing output, and ``D;<exit code>`` when it finishes.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from neuroshell.shell.constants import (
    BEL,
    OSC,
    OSC133_COMMAND_END,
    OSC133_COMMAND_START,
    OSC133_MARKER,
    OSC133_OUTPUT_START,
    OSC133_PREFIX,
    OSC133_PROMPT_START,
    ST,
)

_EXIT_CODE_RE = re.compile(r"[+-]?\d+")


class CommandState(enum.Enum):
    IDLE = "Idle"
    PROMPT_START = "PromptStart"
    COMMAND_START = "CommandStart"
    OUTPUT_START = "OutputStart"
    COMMAND_END = "CommandEnd"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OSCSequence:
    type: str
    exit_code: int
    raw: str


def is_marker_at(text: str, pos: int) -> bool:
    """Return whether an OSC 133 marker (not e.g. ``ESC ] 1337``) starts at *pos*."""
    if not text.startswith(OSC133_MARKER, pos):
        return False
    return not text[pos + len(OSC133_MARKER) : pos + len(OSC133_MARKER) + 1].isdigit()


def find_sequence_end(text: str, start: int = 0) -> int:
    """Return the index just past the terminator of the marker at *start*.

    The earliest of ``BEL`` and ``ESC \\`` wins.  Returns -1 when the
    marker is not terminated yet.
    """
    search_from = start + len(OSC)
    bel = text.find(BEL, search_from)
    st = text.find(ST, search_from)
    if bel == -1 and st == -1:
        return -1
    if st == -1 or (bel != -1 and bel < st):
        return bel + len(BEL)
    return st + len(ST)


def parse_osc_sequence(text: str) -> OSCSequence | None:
    """Parse the marker at the start of *text*.

    Returns None when *text* does not start with an OSC 133 marker, the
    marker is not terminated, or it has no command letter.
    """
    if not text.startswith(OSC133_PREFIX):
        return None
    end = find_sequence_end(text)
    if end == -1:
        return None

    raw = text[:end]
    terminator_len = len(BEL) if raw.endswith(BEL) else len(ST)
    content = raw[len(OSC) : -terminator_len]
    parts = content.split(";")
    if len(parts) < 2 or parts[0] != "133" or not parts[1].isalpha():
        return None

    exit_code = 0
    if parts[1] == "D" and len(parts) >= 3 and _EXIT_CODE_RE.fullmatch(parts[2]):
        exit_code = int(parts[2])
    return OSCSequence(type=content, exit_code=exit_code, raw=raw)


def get_command_state(osc_type: str) -> CommandState:
    if osc_type == OSC133_PROMPT_START:
        return CommandState.PROMPT_START
    if osc_type == OSC133_COMMAND_START:
        return CommandState.COMMAND_START
    if osc_type == OSC133_OUTPUT_START:
        return CommandState.OUTPUT_START
    if osc_type.startswith(OSC133_COMMAND_END):
        return CommandState.COMMAND_END
    return CommandState.IDLE


def is_command_complete(seq: OSCSequence | None) -> bool:
    return seq is not None and seq.type.startswith(OSC133_COMMAND_END)


def format_osc_sequence(command: str, *data: str) -> str:
    """Build a BEL-terminated marker, e.g. ``format_osc_sequence("D", "0")``."""
    fields = ";".join((command, *data))
    return f"{OSC133_PREFIX}{fields}{BEL}"


def _scan(text: str):
    """Yield ``(start, end)`` spans of terminated markers in *text*."""
    i = 0
    while True:
        start = text.find(OSC133_MARKER, i)
        if start == -1:
            return
        if not is_marker_at(text, start):
            i = start + 1
            continue
        end = find_sequence_end(text, start)
        if end == -1:
            return
        yield start, end
        i = end


def filter_osc_sequences(text: str) -> str:
    """Remove every terminated OSC 133 marker from *text*."""
    parts = []
    i = 0
    for start, end in _scan(text):
        parts.append(text[i:start])
        i = end
    parts.append(text[i:])
    return "".join(parts)


def extract_osc_sequences(text: str) -> list[OSCSequence]:
    """Return the parseable markers in *text*, in order."""
    sequences = []
    for start, end in _scan(text):
        seq = parse_osc_sequence(text[start:end])
        if seq is not None:
            sequences.append(seq)
    return sequences
