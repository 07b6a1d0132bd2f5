"""Unit tests for neuroshell.context.variables."""

import pytest

from neuroshell.context import VariableType, analyze_variable, validate_variable_name
from neuroshell.context.variables import SCRIPT_PARAMETER_NAMES, is_system_variable
from neuroshell.errors import InvalidNameError, SystemVariableError


class TestValidateVariableName:
    @pytest.mark.parametrize("name", ["x", "my_var", "CamelCase", "v1", "_style", "_editor"])
    def test_accepts_settable_names(self, name):
        validate_variable_name(name)

    @pytest.mark.parametrize(
        ("name", "message"),
        [
            ("", "cannot be empty"),
            ("two words", "whitespace"),
            ("tab\there", "whitespace"),
            ("@pwd", "system prefixes"),
            ("#session_id", "system prefixes"),
            ("_output", "unless whitelisted"),
        ],
    )
    def test_rejects_unsettable_names(self, name, message):
        with pytest.raises(InvalidNameError, match=message):
            validate_variable_name(name)


class TestAnalyzeVariable:
    def test_system_variable(self):
        info = analyze_variable("@pwd")
        assert info.type is VariableType.SYSTEM
        assert info.is_system and info.is_read_only

    def test_metadata_variable(self):
        info = analyze_variable("#message_count")
        assert info.type is VariableType.METADATA
        assert info.is_read_only

    def test_command_variable_is_read_only_unless_whitelisted(self):
        assert analyze_variable("_output").is_read_only
        assert not analyze_variable("_style").is_read_only
        assert analyze_variable("_style").type is VariableType.COMMAND

    def test_user_variable(self):
        info = analyze_variable("name")
        assert info.type is VariableType.USER
        assert not info.is_system
        assert not info.is_read_only
        assert info.description == "User-defined variable"

    def test_is_system_variable(self):
        assert is_system_variable("@x")
        assert is_system_variable("#x")
        assert is_system_variable("_x")
        assert not is_system_variable("x")


class TestVariableSubcontext:
    def test_delegates_to_context(self, ctx):
        ctx.variables.set_variable("a", "1")
        assert ctx.get_variable("a") == "1"
        assert ctx.variables.get_variable("a") == "1"
        assert ctx.variables.interpolate_variables("<${a}>") == "<1>"
        assert ctx.variables.get_all_variables()["a"] == "1"

    def test_user_path_rejects_system_names(self, ctx):
        with pytest.raises(SystemVariableError):
            ctx.variables.set_variable("@pwd", "/")

    def test_system_path_accepts_system_names(self, ctx):
        ctx.variables.set_system_variable("_output", "text")
        assert ctx.variables.get_variable("_output") == "text"


class TestScriptParameters:
    def test_positional_parameters(self, ctx):
        ctx.variables.setup_script_parameters("greet", "hello world")

        assert ctx.get_variable("_0") == "greet"
        assert ctx.get_variable("_1") == "hello world"
        assert ctx.get_variable("_*") == "hello world"
        assert ctx.get_variable("_@") == ""

    def test_named_arguments(self, ctx):
        ctx.variables.setup_script_parameters(
            "greet", "body", {"name": "neo", "_style": "dark", "@tag": "t"}
        )

        assert ctx.get_variable("name") == "neo"
        assert ctx.get_variable("_style") == "dark"
        assert ctx.variable_cache.get("@tag") == "t"
        assert ctx.get_variable("_@") == "name=neo _style=dark @tag=t"

    def test_invalid_named_argument_is_rejected(self, ctx):
        with pytest.raises(InvalidNameError):
            ctx.variables.setup_script_parameters("cmd", "", {"": "x"})

    def test_cleanup_blanks_positional_parameters_only(self, ctx):
        ctx.variables.setup_script_parameters("greet", "body", {"name": "neo"})
        ctx.variables.cleanup_script_parameters()

        for name in SCRIPT_PARAMETER_NAMES:
            assert ctx.get_variable(name) == ""
        assert ctx.get_variable("name") == "neo"
