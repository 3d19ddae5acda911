"""Exception hierarchy for pythonbuild.

Every failure surfaced by the orchestrator derives from PythonBuildError.
The ``category`` class attribute lets callers tell configuration problems
apart from generic step failures.
"""

from typing import Optional, Sequence

from .types import ErrorCategory


class PythonBuildError(Exception):
    """Base exception for build step failures."""

    category: ErrorCategory = ErrorCategory.UNDEFINED


class ConfigurationError(PythonBuildError):
    """Raised when the project or the step configuration is unusable."""

    category = ErrorCategory.CONFIGURATION


class ConfigurationSystemError(ConfigurationError):
    """Raised when a required file could not even be checked for."""

    pass


class CommandError(PythonBuildError):
    """Raised when an external command fails or cannot be started."""

    def __init__(
        self,
        executable: str,
        args: Sequence[str],
        returncode: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.executable = executable
        self.args_list = list(args)
        self.returncode = returncode
        if reason is None:
            reason = f"exit status {returncode}"
        super().__init__(f"running command '{executable}' failed: {reason}")


class ToolInstallError(PythonBuildError):
    """Raised when installing a tool through pip fails."""

    def __init__(self, tool: str, message: Optional[str] = None) -> None:
        self.tool = tool
        super().__init__(message or f"failed to install '{tool}'")


class BuildError(PythonBuildError):
    """Failure of the build invocation itself.

    Never raised out of the orchestrator; it is logged and attached to a
    degraded phase result instead.
    """

    pass


class BOMError(PythonBuildError):
    """Raised when creating the bill of materials fails."""

    pass


class PublishError(PythonBuildError):
    """Raised when uploading the distribution fails."""

    pass
