"""Incremental parser separating OSC 133 markers from PTY output."""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field

from neuroshell.shell.constants import ESC, MAX_PENDING_SEQUENCE, OSC133_MARKER
from neuroshell.shell.osc133 import (
    CommandState,
    OSCSequence,
    find_sequence_end,
    get_command_state,
    is_marker_at,
    parse_osc_sequence,
)

log = logging.getLogger(__name__)


@dataclass
class ParseResult:
    output: str
    new_output: str
    sequences: list[OSCSequence] = field(default_factory=list)
    # Position in new_output at which each of sequences occurred.
    offsets: list[int] = field(default_factory=list)
    state: CommandState = CommandState.IDLE
    is_complete: bool = False
    exit_code: int = 0
    has_new_output: bool = False


class StreamParser:
    """Feed PTY chunks in order; get clean text and state changes back.

    A marker split across chunks is held back until its terminator
    arrives, as is a trailing ``ESC ] 1 3`` that may turn out to be the
    start of one.  Bytes are decoded incrementally, so a multibyte
    character split across chunks is not mangled.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._raw_output = ""
        self._clean_output = ""
        self._sequences: list[OSCSequence] = []
        self._state = CommandState.IDLE
        self._exit_code = 0

    def parse_output(self, data: bytes | str) -> ParseResult:
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        self._raw_output += text
        content = self._pending + text
        self._pending = ""

        clean: list[str] = []
        found: list[OSCSequence] = []
        offsets: list[int] = []
        emitted = 0
        i = 0
        while i < len(content):
            start = content.find(ESC, i)
            if start == -1:
                clean.append(content[i:])
                break
            clean.append(content[i:start])
            emitted += start - i

            if is_marker_at(content, start):
                end = find_sequence_end(content, start)
                if end == -1:
                    if len(content) - start > MAX_PENDING_SEQUENCE:
                        log.debug(
                            "giving up on unterminated OSC 133 marker after %d chars",
                            MAX_PENDING_SEQUENCE,
                        )
                        clean.append(ESC)
                        emitted += 1
                        i = start + 1
                        continue
                    self._pending = content[start:]
                    break
                seq = parse_osc_sequence(content[start:end])
                if seq is None:
                    log.debug("skipping malformed OSC 133 marker %r", content[start:end])
                else:
                    found.append(seq)
                    offsets.append(emitted)
                    self._apply(seq)
                i = end
                continue

            if OSC133_MARKER.startswith(content[start:]):
                # Chunk ends partway through a marker prefix.
                self._pending = content[start:]
                break

            clean.append(ESC)
            emitted += 1
            i = start + 1

        new_output = "".join(clean)
        self._clean_output += new_output
        self._sequences.extend(found)
        return ParseResult(
            output=self._clean_output,
            new_output=new_output,
            sequences=found,
            offsets=offsets,
            state=self._state,
            is_complete=self._state in (CommandState.COMMAND_END, CommandState.PROMPT_START),
            exit_code=self._exit_code,
            has_new_output=bool(new_output),
        )

    def _apply(self, seq: OSCSequence) -> None:
        new_state = get_command_state(seq.type)
        if new_state is CommandState.COMMAND_END:
            self._exit_code = seq.exit_code
        if new_state is not self._state:
            log.debug("state %s -> %s", self._state, new_state)
        self._state = new_state

    def reset(self) -> None:
        self._decoder.reset()
        self._pending = ""
        self._raw_output = ""
        self._clean_output = ""
        self._sequences = []
        self._state = CommandState.IDLE
        self._exit_code = 0

    @property
    def state(self) -> CommandState:
        return self._state

    @property
    def raw_output(self) -> str:
        return self._raw_output

    @property
    def sequences(self) -> list[OSCSequence]:
        return list(self._sequences)
