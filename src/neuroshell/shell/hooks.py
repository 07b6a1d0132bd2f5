"""Bash-side hooks that emit OSC 133 markers around every command."""

import tempfile

INTEGRATION_SCRIPT = r"""
# neuroshell integration
__neuro_command_started=0

__neuro_prompt_start() {
    printf '\033]133;A\007'
}

# Runs before each command via the DEBUG trap.
__neuro_pre_command() {
    case "$BASH_COMMAND" in
        __neuro_*) return ;;
    esac
    if [ "$__neuro_command_started" -eq 0 ]; then
        __neuro_command_started=1
        printf '\033]133;B\007'
        printf '\033]133;C\007'
    fi
}

# Runs before each prompt via PROMPT_COMMAND.
__neuro_post_command() {
    local exit_code=$?
    if [ "$__neuro_command_started" -eq 1 ]; then
        printf '\033]133;D;%s\007' "$exit_code"
    fi
    __neuro_prompt_start
    __neuro_command_started=0
    return $exit_code
}

PROMPT_COMMAND="__neuro_post_command${PROMPT_COMMAND:+; $PROMPT_COMMAND}"
__neuro_prompt_start
# Armed last so nothing above counts as a user command.
trap '__neuro_pre_command' DEBUG
"""


def integration_script() -> str:
    """Return the bash snippet that emits prompt/command/output/end markers."""
    return INTEGRATION_SCRIPT


def write_bash_rcfile() -> str:
    """Write a temporary bashrc that loads the user's bashrc, then the hooks.

    Returns:
        Path of the written file.  The caller removes it when the shell exits.
    """
    with tempfile.NamedTemporaryFile(
        mode="w", prefix="neuroshell_", suffix=".bashrc", delete=False
    ) as rc:
        # Source the user's normal bashrc so the shell feels familiar.
        rc.write("[ -f ~/.bashrc ] && source ~/.bashrc\n")
        rc.write(INTEGRATION_SCRIPT)
    return rc.name
