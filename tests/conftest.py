"""Test configuration and fixtures for pythonbuild.

The orchestrator is exercised against a recording StepUtils fake so that no
test spawns pip, build, cyclonedx-bom or twine.
"""

import os
from unittest.mock import patch

import pytest

from pythonbuild.errors import CommandError
from pythonbuild.types import BuildOptions
from pythonbuild.utils import StepUtils


class RecordingStepUtils(StepUtils):
    """StepUtils fake that records invocations instead of running them.

    Args:
        files: Filenames reported as existing
        fail_on: Command prefixes, e.g. ("python3", "-m", "build"), that fail
        broken_files: Filenames whose existence check raises OSError
    """

    def __init__(self, files=(), fail_on=(), broken_files=()):
        self.files = set(files)
        self.fail_on = [tuple(prefix) for prefix in fail_on]
        self.broken_files = set(broken_files)
        self.calls = []
        self.checked_files = []

    def run_executable(self, executable, *args):
        command = (executable, *args)
        self.calls.append(command)
        for prefix in self.fail_on:
            if command[: len(prefix)] == prefix:
                raise CommandError(executable, args, returncode=1)

    def file_exists(self, filename):
        self.checked_files.append(filename)
        if filename in self.broken_files:
            raise OSError(13, "Permission denied", filename)
        return filename in self.files


@pytest.fixture
def make_utils():
    """Factory for RecordingStepUtils instances."""
    return RecordingStepUtils


@pytest.fixture
def options():
    """Options with both optional phases disabled."""
    return BuildOptions()


@pytest.fixture
def publish_options():
    """Options that enable every phase."""
    return BuildOptions(
        build_flags=("--sdist",),
        create_bom=True,
        publish=True,
        target_repository_user="ci-user",
        target_repository_password="s3cr3t pass",
        target_repository_url="https://repo.example.com/legacy/",
    )


@pytest.fixture
def project_dir(tmp_path):
    """Provide a temporary project directory containing pyproject.toml."""
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "demo"\nversion = "0.0.1"\n', encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def clean_env():
    """Run with no PYTHONBUILD_* variables and without loading .env files."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("PYTHONBUILD_")}
    with patch.dict(os.environ, env, clear=True):
        with patch("pythonbuild.config.load_dotenv"):
            yield


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "subprocess: spawns real processes through DefaultStepUtils"
    )
    config.addinivalue_line(
        "markers", "integration: drives the console entry point end to end"
    )


def pytest_addoption(parser):
    parser.addoption(
        "--no-subprocess",
        action="store_true",
        default=False,
        help="skip tests that start real child processes",
    )


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--no-subprocess"):
        return

    skip_subprocess = pytest.mark.skip(reason="--no-subprocess given")
    for item in items:
        if "subprocess" in item.keywords:
            item.add_marker(skip_subprocess)
