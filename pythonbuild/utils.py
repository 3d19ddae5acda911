"""Process and filesystem utilities consumed by the build orchestrator.

The orchestrator only talks to a StepUtils instance, so tests can swap in
a recording fake and never spawn real processes.
"""

import logging
import os
import stat
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .errors import CommandError

logger = logging.getLogger(__name__)

# Arguments whose following value must never reach the logs
_SECRET_FLAGS = ("--password",)


def mask_secrets(args: Sequence[str]) -> List[str]:
    """Return a copy of ``args`` with values of secret flags replaced."""
    masked = []
    hide_next = False
    for arg in args:
        if hide_next:
            masked.append("****")
            hide_next = False
            continue
        masked.append(arg)
        if arg in _SECRET_FLAGS:
            hide_next = True
    return masked


class StepUtils(ABC):
    """Capabilities the orchestrator needs from its environment."""

    @abstractmethod
    def run_executable(self, executable: str, *args: str) -> None:
        """Run ``executable`` with ``args`` and block until it exits.

        Raises:
            CommandError: If the process exits non-zero or cannot be started
        """
        pass

    @abstractmethod
    def file_exists(self, filename: str) -> bool:
        """Return True if ``filename`` exists and is not a directory.

        Raises:
            OSError: If the existence check itself fails
        """
        pass


class DefaultStepUtils(StepUtils):
    """StepUtils backed by real subprocesses and the local filesystem."""

    def __init__(self, working_dir: Optional[Union[str, Path]] = None) -> None:
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()

    def _resolve(self, filename: str) -> Path:
        path = Path(filename)
        if path.is_absolute():
            return path
        return self.working_dir / path

    def run_executable(self, executable: str, *args: str) -> None:
        command = [executable, *args]
        logger.info(f"running command: {' '.join(mask_secrets(command))}")

        try:
            with subprocess.Popen(
                command,
                cwd=str(self.working_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            ) as process:
                for line in process.stdout:
                    line = line.rstrip()
                    if line:
                        logger.info(line)
                returncode = process.wait()
        except OSError as e:
            raise CommandError(executable, args, reason=str(e)) from e

        if returncode != 0:
            raise CommandError(executable, args, returncode=returncode)

    def file_exists(self, filename: str) -> bool:
        path = self._resolve(filename)
        try:
            info = os.stat(path)
        except FileNotFoundError:
            return False
        return not stat.S_ISDIR(info.st_mode)
