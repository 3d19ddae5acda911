"""Configuration management for pythonbuild.

This module handles environment variable configuration and validation for
the build step: extra build flags, the BOM and publish switches and the
credentials of the target repository.
"""

import os
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .types import BuildOptions


class Config:
    """Configuration manager for the Python build step.

    Loads and validates environment variables, letting CLI overrides take
    precedence over them.
    """

    def __init__(
        self,
        env_file: Optional[str] = None,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize configuration from environment variables with optional CLI overrides.

        Args:
            env_file: Optional path to .env file to load
            config_overrides: Optional dictionary of configuration overrides from CLI arguments
        """
        self.config_overrides = config_overrides or {}
        # Load environment variables from .env file if it exists
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path(".env")
            if env_path.exists():
                load_dotenv(env_path)

        # Build settings
        self.build_flags = self._get_list_config(
            "PYTHONBUILD_BUILD_FLAGS", [], override_key="build_flags"
        )
        self.python_executable = self._get_config(
            "PYTHONBUILD_PYTHON_EXECUTABLE",
            "python3",
            override_key="python_executable",
        )
        self.working_dir = self._get_path_config(
            "PYTHONBUILD_WORKING_DIR", ".", override_key="working_dir"
        )

        # Optional phases
        self.create_bom = self._get_bool_config(
            "PYTHONBUILD_CREATE_BOM", False, override_key="create_bom"
        )
        self.publish = self._get_bool_config(
            "PYTHONBUILD_PUBLISH", False, override_key="publish"
        )

        # Target repository
        self.target_repository_user = self._get_config(
            "PYTHONBUILD_TARGET_REPOSITORY_USER",
            "",
            override_key="target_repository_user",
        )
        self.target_repository_password = self._get_config(
            "PYTHONBUILD_TARGET_REPOSITORY_PASSWORD",
            "",
            override_key="target_repository_password",
        )
        self.target_repository_url = self._get_config(
            "PYTHONBUILD_TARGET_REPOSITORY_URL",
            "",
            override_key="target_repository_url",
        )

        self._validate_config()

    def _get_config(self, env_key: str, default: Any, override_key: Optional[str] = None) -> Any:
        """Get configuration value with CLI override priority.

        Priority: CLI override > Environment variable > Default

        Args:
            env_key: Environment variable key
            default: Default value if neither override nor env var is set
            override_key: Key in config_overrides dictionary

        Returns:
            Configuration value with proper priority
        """
        if override_key and override_key in self.config_overrides:
            return self.config_overrides[override_key]

        return os.getenv(env_key, default)

    def _get_bool_config(self, key: str, default: bool, override_key: Optional[str] = None) -> bool:
        """Get boolean configuration value with CLI override priority."""
        if override_key and override_key in self.config_overrides:
            return bool(self.config_overrides[override_key])

        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def _get_list_config(
        self, key: str, default: List[str], override_key: Optional[str] = None
    ) -> List[str]:
        """Get a list of strings; environment values are split shell-style."""
        if override_key and override_key in self.config_overrides:
            return [str(item) for item in self.config_overrides[override_key]]

        value = os.getenv(key)
        if value is None:
            return list(default)
        try:
            return shlex.split(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {key}: {e}") from e

    def _get_path_config(self, key: str, default: str, override_key: Optional[str] = None) -> Path:
        """Get path configuration value with CLI override priority."""
        if override_key and override_key in self.config_overrides:
            value = str(self.config_overrides[override_key])
        else:
            value = os.getenv(key, default)

        return Path(value).resolve()

    def _validate_config(self) -> None:
        """Validate configuration values."""
        if not str(self.python_executable).strip():
            raise ConfigurationError("Python executable cannot be empty")

        if self.publish:
            if not self.target_repository_url.startswith(("http://", "https://")):
                raise ConfigurationError(
                    "Target repository URL must start with http:// or https:// "
                    "when publishing"
                )
            if not self.target_repository_user:
                raise ConfigurationError(
                    "Target repository user is required when publishing"
                )
            if not self.target_repository_password:
                raise ConfigurationError(
                    "Target repository password is required when publishing"
                )

    def to_build_options(self) -> BuildOptions:
        """Freeze the configuration into the orchestrator's input."""
        return BuildOptions(
            build_flags=tuple(self.build_flags),
            create_bom=self.create_bom,
            publish=self.publish,
            target_repository_user=self.target_repository_user,
            target_repository_password=self.target_repository_password,
            target_repository_url=self.target_repository_url,
            python_executable=self.python_executable,
        )

    def get_config_summary(self) -> Dict[str, Any]:
        """Get a summary of current configuration with secrets masked."""
        return {
            "build_flags": list(self.build_flags),
            "python_executable": self.python_executable,
            "working_dir": str(self.working_dir),
            "create_bom": self.create_bom,
            "publish": self.publish,
            "target_repository_user": self.target_repository_user,
            "target_repository_password": (
                "****" if self.target_repository_password else ""
            ),
            "target_repository_url": self.target_repository_url,
        }
