"""pythonbuild - build, inventory and publish Python packages in CI."""

from importlib import metadata as _metadata

from .config import Config
from .errors import (
    BOMError,
    BuildError,
    CommandError,
    ConfigurationError,
    ConfigurationSystemError,
    PublishError,
    PythonBuildError,
    ToolInstallError,
)
from .orchestrator import run_python_build
from .types import (
    BuildOptions,
    BuildReport,
    ErrorCategory,
    Phase,
    PhaseResult,
    PhaseStatus,
    TelemetryRecord,
)
from .utils import DefaultStepUtils, StepUtils

try:  # pragma: no cover - exercised when installed as a package
    __version__ = _metadata.version("pythonbuild")
except _metadata.PackageNotFoundError:  # pragma: no cover - local editable installs
    __version__ = "0.1.0"

__license__ = "MIT"

__all__ = [
    "BOMError",
    "BuildError",
    "BuildOptions",
    "BuildReport",
    "CommandError",
    "Config",
    "ConfigurationError",
    "ConfigurationSystemError",
    "DefaultStepUtils",
    "ErrorCategory",
    "Phase",
    "PhaseResult",
    "PhaseStatus",
    "PublishError",
    "PythonBuildError",
    "StepUtils",
    "TelemetryRecord",
    "ToolInstallError",
    "run_python_build",
    "__version__",
]
