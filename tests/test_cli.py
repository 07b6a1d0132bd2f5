"""Unit tests for neuroshell.cli."""

from unittest.mock import MagicMock, patch

import pytest

from neuroshell import __version__
from neuroshell.cli import build_parser, entrypoint, main
from neuroshell.context import get_global_context
from neuroshell.models import NeuroConfig


def _cli_patches(**overrides):
    defaults = dict(
        load_config=MagicMock(return_value=NeuroConfig()),
        shell_loop=MagicMock(return_value=0),
    )
    defaults.update(overrides)
    return patch.multiple("neuroshell.cli", **defaults)


class TestInterpolate:
    def test_prints_interpolated_text(self, capsys):
        with _cli_patches():
            code = main(["interpolate", "--set", "name=neo", "hello ${name}"])

        assert code == 0
        assert capsys.readouterr().out == "hello neo\n"

    def test_multiple_assignments_and_indirection(self, capsys):
        with _cli_patches():
            main(
                [
                    "interpolate",
                    "--set",
                    "which=b",
                    "--set",
                    "val_b=bee",
                    "${val_${which}}",
                ]
            )

        assert capsys.readouterr().out.strip() == "bee"

    def test_value_may_contain_equals(self, capsys):
        with _cli_patches():
            main(["interpolate", "--set", "expr=a=b", "${expr}"])
        assert capsys.readouterr().out.strip() == "a=b"

    def test_test_mode_uses_fixed_values(self, capsys):
        with _cli_patches():
            main(["interpolate", "--test-mode", "${@user} ${@date} ${#test_mode}"])

        assert capsys.readouterr().out.strip() == "testuser 2025-01-01 true"

    def test_config_test_mode_is_respected(self, capsys):
        with _cli_patches(load_config=MagicMock(return_value=NeuroConfig(test_mode=True))):
            main(["interpolate", "${@time}"])
        assert capsys.readouterr().out.strip() == "00:00:00"

    def test_missing_equals_is_an_error(self, capsys):
        with _cli_patches():
            code = main(["interpolate", "--set", "novalue", "x"])

        assert code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error: expected NAME=VALUE, got 'novalue'" in captured.err

    def test_system_variable_assignment_is_an_error(self, capsys):
        with _cli_patches():
            code = main(["interpolate", "--set", "@pwd=/", "${@pwd}"])

        assert code == 1
        assert "Error: cannot set system variable: @pwd" in capsys.readouterr().err

    def test_installs_global_context(self):
        with _cli_patches():
            main(["interpolate", "--set", "k=v", "x"])
        assert get_global_context().get_variable("k") == "v"


class TestOtherCommands:
    def test_integration_script_skips_config(self, capsys):
        mock_load = MagicMock()
        with _cli_patches(load_config=mock_load):
            code = main(["integration-script"])

        assert code == 0
        assert "trap '__neuro_pre_command' DEBUG" in capsys.readouterr().out
        mock_load.assert_not_called()

    def test_sessions_lists_saved_ids(self, capsys, neuro_config_paths):
        config_dir, _ = neuro_config_paths
        sessions_dir = config_dir / "sessions"
        sessions_dir.mkdir(parents=True)
        (sessions_dir / "bbb.json").write_text("{}")
        (sessions_dir / "aaa.json").write_text("{}")

        with _cli_patches():
            code = main(["sessions"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["aaa", "bbb"]

    def test_shell_runs_loop_with_context(self):
        mock_loop = MagicMock(return_value=3)
        with _cli_patches(shell_loop=mock_loop):
            assert main(["shell"]) == 3

        (context,), _ = mock_loop.call_args
        assert context is get_global_context()


class TestArguments:
    def test_subcommand_is_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_debug_flag_parses(self):
        args = build_parser().parse_args(["-d", "sessions"])
        assert args.debug is True
        assert args.command == "sessions"

    def test_debug_configures_logging(self):
        with _cli_patches(), patch("neuroshell.cli.logging.basicConfig") as mock_basic:
            main(["-d", "integration-script"])

        assert mock_basic.call_args.kwargs["level"] == 10


class TestEntrypoint:
    def test_exits_with_main_return_code(self):
        with patch("neuroshell.cli.main", return_value=5):
            with pytest.raises(SystemExit) as exc_info:
                entrypoint()
        assert exc_info.value.code == 5
