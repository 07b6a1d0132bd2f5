"""Command-line interface for neuroshell."""

import argparse
import logging
import sys

from neuroshell import __version__
from neuroshell.config import load_config
from neuroshell.context import NeuroContext, set_global_context
from neuroshell.shell.hooks import integration_script
from neuroshell.shell.loop import shell_loop


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neuro",
        description="NeuroShell context engine and shell integration",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    interpolate = subparsers.add_parser(
        "interpolate", help="Expand ${name} placeholders in TEXT and print the result"
    )
    interpolate.add_argument(
        "--test-mode",
        action="store_true",
        help="Use fixed values for system variables, ids and timestamps",
    )
    interpolate.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Set a variable before interpolating (repeatable)",
    )
    interpolate.add_argument("text", metavar="TEXT")

    subparsers.add_parser(
        "integration-script", help="Print the bash snippet that emits OSC 133 markers"
    )
    subparsers.add_parser("sessions", help="List ids of saved chat sessions")
    subparsers.add_parser("shell", help="Run bash with command tracking")
    return parser


def _run_interpolate(args: argparse.Namespace, context: NeuroContext) -> int:
    if args.test_mode:
        context.set_test_mode(True)
    for assignment in args.assignments:
        name, sep, value = assignment.partition("=")
        if not sep:
            print(f"Error: expected NAME=VALUE, got {assignment!r}", file=sys.stderr)
            return 1
        try:
            context.set_variable(name, value)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    print(context.interpolate_variables(args.text))
    return 0


def _run_sessions(context: NeuroContext) -> int:
    for session_id in context.sessions.list_saved_session_ids():
        print(session_id)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    if args.command == "integration-script":
        print(integration_script())
        return 0

    context = NeuroContext(load_config())
    set_global_context(context)

    if args.command == "interpolate":
        return _run_interpolate(args, context)
    if args.command == "sessions":
        return _run_sessions(context)
    return shell_loop(context)


def entrypoint() -> None:
    raise SystemExit(main())
