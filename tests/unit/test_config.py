"""Tests for the configuration system."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from pythonbuild.config import Config
from pythonbuild.errors import ConfigurationError
from pythonbuild.types import BuildOptions, ErrorCategory

PUBLISH_ENV = {
    "PYTHONBUILD_PUBLISH": "true",
    "PYTHONBUILD_TARGET_REPOSITORY_URL": "https://repo.example.com/legacy/",
    "PYTHONBUILD_TARGET_REPOSITORY_USER": "env-user",
    "PYTHONBUILD_TARGET_REPOSITORY_PASSWORD": "env-pass",
}


class TestConfig(unittest.TestCase):
    """Test the configuration management system."""

    def setUp(self):
        patcher = patch("pythonbuild.config.load_dotenv")
        self.mock_load_dotenv = patcher.start()
        self.addCleanup(patcher.stop)

    def test_default_configuration(self):
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

        self.assertEqual(config.build_flags, [])
        self.assertEqual(config.python_executable, "python3")
        self.assertEqual(config.working_dir, Path(".").resolve())
        self.assertFalse(config.create_bom)
        self.assertFalse(config.publish)
        self.assertEqual(config.target_repository_url, "")

    def test_environment_variable_loading(self):
        """Test loading configuration from environment variables."""
        env_vars = dict(PUBLISH_ENV)
        env_vars.update(
            {
                "PYTHONBUILD_BUILD_FLAGS": "--sdist --config-setting 'key=a b'",
                "PYTHONBUILD_CREATE_BOM": "yes",
                "PYTHONBUILD_PYTHON_EXECUTABLE": "python3.12",
            }
        )

        with patch.dict(os.environ, env_vars, clear=True):
            config = Config()

        self.assertEqual(config.build_flags, ["--sdist", "--config-setting", "key=a b"])
        self.assertTrue(config.create_bom)
        self.assertTrue(config.publish)
        self.assertEqual(config.python_executable, "python3.12")
        self.assertEqual(config.target_repository_user, "env-user")

    def test_cli_override_priority(self):
        """Test that CLI overrides take priority over environment variables."""
        overrides = {
            "build_flags": ["--wheel"],
            "target_repository_user": "cli-user",
            "create_bom": True,
        }

        with patch.dict(os.environ, PUBLISH_ENV, clear=True):
            config = Config(config_overrides=overrides)

        self.assertEqual(config.build_flags, ["--wheel"])
        self.assertEqual(config.target_repository_user, "cli-user")
        self.assertEqual(config.target_repository_password, "env-pass")
        self.assertTrue(config.create_bom)

    def test_env_file_is_loaded(self):
        """Test that an explicit env file is passed to python-dotenv."""
        with patch.dict(os.environ, {}, clear=True):
            Config(env_file="ci.env")

        self.mock_load_dotenv.assert_called_once_with("ci.env")

    def test_publish_requires_http_url(self):
        env_vars = dict(PUBLISH_ENV, PYTHONBUILD_TARGET_REPOSITORY_URL="ftp://repo")

        with patch.dict(os.environ, env_vars, clear=True):
            with self.assertRaisesRegex(ConfigurationError, "http:// or https://"):
                Config()

    def test_publish_requires_credentials(self):
        env_vars = dict(PUBLISH_ENV)
        del env_vars["PYTHONBUILD_TARGET_REPOSITORY_PASSWORD"]

        with patch.dict(os.environ, env_vars, clear=True):
            with self.assertRaises(ConfigurationError) as ctx:
                Config()

        self.assertIn("password", str(ctx.exception))
        self.assertIs(ctx.exception.category, ErrorCategory.CONFIGURATION)

    def test_credentials_not_required_without_publish(self):
        with patch.dict(os.environ, {"PYTHONBUILD_PUBLISH": "false"}, clear=True):
            config = Config()

        self.assertFalse(config.publish)

    def test_empty_python_executable_rejected(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigurationError):
                Config(config_overrides={"python_executable": " "})

    def test_unbalanced_quotes_in_build_flags(self):
        with patch.dict(os.environ, {"PYTHONBUILD_BUILD_FLAGS": "--x 'oops"}, clear=True):
            with self.assertRaises(ConfigurationError):
                Config()

    def test_to_build_options(self):
        with patch.dict(os.environ, PUBLISH_ENV, clear=True):
            config = Config(config_overrides={"build_flags": ["--sdist"]})

        options = config.to_build_options()

        self.assertIsInstance(options, BuildOptions)
        self.assertEqual(options.build_flags, ("--sdist",))
        self.assertTrue(options.publish)
        self.assertEqual(options.target_repository_password, "env-pass")
        self.assertNotIn("env-pass", repr(options))

    def test_config_summary_masks_password(self):
        with patch.dict(os.environ, PUBLISH_ENV, clear=True):
            summary = Config().get_config_summary()

        self.assertEqual(summary["target_repository_password"], "****")
        self.assertEqual(summary["target_repository_user"], "env-user")


if __name__ == "__main__":
    unittest.main()
