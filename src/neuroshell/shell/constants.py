"""Shared constants for shell integration."""

ESC = "\033"
BEL = "\007"
OSC = ESC + "]"
# String terminator, the two-character alternative to BEL.
ST = ESC + "\\"

# Every shell-integration marker starts with this.
OSC133_MARKER = OSC + "133"
OSC133_PREFIX = OSC133_MARKER + ";"

OSC133_PROMPT_START = "133;A"
OSC133_COMMAND_START = "133;B"
OSC133_OUTPUT_START = "133;C"
OSC133_COMMAND_END = "133;D"

# An unterminated marker longer than this is treated as plain text.
MAX_PENDING_SEQUENCE = 4096

# Bytes read from the PTY per select wakeup.
READ_SIZE = 4096

# Tracker session name used by the interactive loop.
SHELL_SESSION_NAME = "neuro-shell"

BOLD = "\033[1m"
CYAN = "\033[36m"
RESET = "\033[0m"
