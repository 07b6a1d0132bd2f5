"""Unit tests for neuroshell.context.configuration."""

import os

import neuroshell.config as config_module
from neuroshell.context import ConfigurationSubcontext
from neuroshell.models import NeuroConfig


def make(test_mode: bool, **settings) -> ConfigurationSubcontext:
    return ConfigurationSubcontext(NeuroConfig(**settings), lambda: test_mode)


class TestConfigMap:
    def test_values_round_trip(self):
        configuration = make(False)
        assert configuration.get_config_value("theme") is None

        configuration.set_config_value("theme", "dark")

        assert configuration.get_config_value("theme") == "dark"
        assert configuration.config_map() == {"theme": "dark"}

    def test_default_command(self):
        configuration = make(False, default_command="bash")
        assert configuration.default_command == "bash"
        configuration.default_command = "echo"
        assert configuration.default_command == "echo"

    def test_allowed_globals(self):
        configuration = make(False)
        assert configuration.is_allowed_global_variable("_style")
        assert not configuration.is_allowed_global_variable("_output")
        assert configuration.allowed_global_variables() == list(
            config_module.ALLOWED_GLOBAL_VARIABLES
        )


class TestTestModeEnvironment:
    def test_override_then_clear(self):
        configuration = make(True)
        configuration.set_test_env_override("USER", "alice")
        assert configuration.get_env("USER") == "alice"
        assert configuration.test_env_overrides() == {"USER": "alice"}

        configuration.clear_test_env_override("USER")
        assert configuration.get_env("USER") == "testuser"

    def test_production_writes_process_environment(self, monkeypatch):
        # Registers the variable with monkeypatch so it is restored afterwards.
        monkeypatch.setenv("NEURO_CONFIG_PROBE", "off")
        configuration = make(False)

        configuration.set_env_variable("NEURO_CONFIG_PROBE", "on")

        assert os.environ["NEURO_CONFIG_PROBE"] == "on"


class TestPaths:
    def test_config_dir_follows_mode(self, neuro_config_paths):
        config_dir, _ = neuro_config_paths
        assert make(False).user_config_dir() == config_dir
        assert make(True).user_config_dir() == config_module.TEST_CONFIG_DIR
        assert make(False).sessions_dir() == config_dir / "sessions"

    def test_config_dir_override(self, tmp_path):
        configuration = make(False)
        configuration.set_config_dir(tmp_path)
        assert configuration.sessions_dir() == tmp_path / "sessions"

        configuration.set_config_dir(None)
        assert configuration.user_config_dir() == config_module.CONFIG_DIR

    def test_test_mode_identity(self):
        configuration = make(True)
        assert configuration.working_dir() == config_module.TEST_WORKING_DIR
        assert configuration.home_dir() == "/home/testuser"
        assert configuration.user_name() == "testuser"
