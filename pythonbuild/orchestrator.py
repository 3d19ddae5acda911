"""Build orchestration for Python projects.

Runs the phases of a build step in a fixed order: the precondition check,
the build, the optional bill-of-materials creation and the optional upload.
All real work is delegated to external tools through a StepUtils instance.
"""

import logging
from typing import Optional

from .errors import (
    BOMError,
    BuildError,
    CommandError,
    ConfigurationError,
    ConfigurationSystemError,
    PublishError,
    ToolInstallError,
)
from .types import (
    BuildOptions,
    BuildReport,
    Phase,
    PhaseResult,
    PhaseStatus,
    TelemetryRecord,
)
from .utils import StepUtils

logger = logging.getLogger(__name__)

PROJECT_DESCRIPTOR = "pyproject.toml"
LEGACY_DESCRIPTORS = ("setup.py", "setup.cfg")

BUILD_TOOL = "build"
BOM_TOOL = "cyclonedx-bom"
PUBLISH_TOOL = "twine"

BOM_FILENAME = "bom.xml"
DIST_PATTERN = "dist/*.tar.gz"

# Never extended in place; each install derives its own tuple from it
INSTALL_ARGS = ("-m", "pip", "install", "--upgrade")
BUILD_ARGS = ("-m", "build")


def install_args(tool: str) -> tuple:
    """Return the installer arguments for exactly one tool."""
    return (*INSTALL_ARGS, tool)


def install_tool(options: BuildOptions, utils: StepUtils, tool: str) -> None:
    """Install or upgrade ``tool`` with pip.

    Raises:
        ToolInstallError: If the installer exits with an error
    """
    logger.info(f"Installing '{tool}'")
    try:
        utils.run_executable(options.python_executable, *install_args(tool))
    except CommandError as e:
        raise ToolInstallError(tool, f"failed to install '{tool}': {e}") from e


def check_preconditions(utils: StepUtils) -> PhaseResult:
    """Ensure the project descriptor exists in the working directory.

    Raises:
        ConfigurationSystemError: If the existence check itself fails
        ConfigurationError: If the project descriptor is missing
    """
    try:
        descriptor_exists = utils.file_exists(PROJECT_DESCRIPTOR)
    except OSError as e:
        raise ConfigurationSystemError(
            f"failed to check for important file: {PROJECT_DESCRIPTOR}: {e}"
        ) from e

    if not descriptor_exists:
        raise ConfigurationError(
            f"cannot run without important file: {PROJECT_DESCRIPTOR}"
        )

    logger.debug(f"Found {PROJECT_DESCRIPTOR}")
    return PhaseResult(Phase.PRECONDITION, PhaseStatus.SUCCEEDED)


def _legacy_descriptor_present(utils: StepUtils) -> bool:
    for filename in LEGACY_DESCRIPTORS:
        try:
            if utils.file_exists(filename):
                logger.debug(f"Found legacy descriptor {filename}")
                return True
        except OSError as e:
            logger.debug(f"Could not check for {filename}, treating as absent: {e}")
    return False


def build_execute(options: BuildOptions, utils: StepUtils) -> PhaseResult:
    """Install the build frontend and build legacy projects.

    A failing build invocation is logged and reported as a degraded result
    so that the following phases still run. Only a failed installation of
    the build frontend aborts the run.

    Raises:
        ToolInstallError: If installing the build frontend fails
    """
    install_tool(options, utils, BUILD_TOOL)

    if not _legacy_descriptor_present(utils):
        logger.info(
            f"No {' or '.join(LEGACY_DESCRIPTORS)} found, "
            f"build backend is driven by {PROJECT_DESCRIPTOR}"
        )
        return PhaseResult(Phase.BUILD, PhaseStatus.SUCCEEDED)

    logger.info("starting building python project")
    try:
        utils.run_executable(
            options.python_executable, *BUILD_ARGS, *options.build_flags
        )
    except CommandError as e:
        logger.error(f"building python project failed: {e}")
        error = BuildError(f"building python project failed: {e}")
        error.__cause__ = e
        return PhaseResult(Phase.BUILD, PhaseStatus.DEGRADED, error)

    return PhaseResult(Phase.BUILD, PhaseStatus.SUCCEEDED)


def run_bom_creation(options: BuildOptions, utils: StepUtils) -> PhaseResult:
    """Generate an environment-wide CycloneDX BOM into ``bom.xml``.

    Raises:
        BOMError: If installing or running the generator fails
    """
    try:
        install_tool(options, utils, BOM_TOOL)
        logger.info(f"Creating bill of materials {BOM_FILENAME}")
        utils.run_executable(BOM_TOOL, "--e", "--output", BOM_FILENAME)
    except (ToolInstallError, CommandError) as e:
        raise BOMError(f"BOM creation failed: {e}") from e

    return PhaseResult(Phase.BOM, PhaseStatus.SUCCEEDED)


def publish_with_twine(options: BuildOptions, utils: StepUtils) -> PhaseResult:
    """Upload the source distributions to the target repository.

    Raises:
        PublishError: If installing or running twine fails
    """
    try:
        install_tool(options, utils, PUBLISH_TOOL)
        logger.info(f"Publishing {DIST_PATTERN} to {options.target_repository_url}")
        utils.run_executable(
            PUBLISH_TOOL,
            "upload",
            "--username",
            options.target_repository_user,
            "--password",
            options.target_repository_password,
            "--repository-url",
            options.target_repository_url,
            DIST_PATTERN,
        )
    except (ToolInstallError, CommandError) as e:
        raise PublishError(f"failed to publish: {e}") from e

    return PhaseResult(Phase.PUBLISH, PhaseStatus.SUCCEEDED)


def run_python_build(
    options: BuildOptions,
    utils: StepUtils,
    telemetry: Optional[TelemetryRecord] = None,
) -> BuildReport:
    """Run all phases of the build step in order.

    Args:
        options: Immutable step configuration
        utils: Process and filesystem capabilities
        telemetry: Caller-owned record, passed through untouched

    Returns:
        BuildReport with one result per phase

    Raises:
        PythonBuildError: On the first fatal failure
    """
    report = BuildReport()

    report.add(check_preconditions(utils))

    try:
        report.add(build_execute(options, utils))
    except ToolInstallError as e:
        raise ToolInstallError(e.tool, f"Python build failed with error: {e}") from e

    if options.create_bom:
        report.add(run_bom_creation(options, utils))
    else:
        logger.debug("BOM creation not requested, skipping")
        report.add(PhaseResult(Phase.BOM, PhaseStatus.SKIPPED))

    if options.publish:
        report.add(publish_with_twine(options, utils))
    else:
        logger.debug("Publishing not requested, skipping")
        report.add(PhaseResult(Phase.PUBLISH, PhaseStatus.SKIPPED))

    return report
