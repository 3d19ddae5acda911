"""Command-line entry point for the Python build step.

Parses arguments, loads the configuration, runs the orchestrator and maps
its outcome to a process exit status.
"""

import argparse
import logging
import sys
import time
from typing import Any, Dict, List, Optional

from .config import Config
from .errors import PythonBuildError
from .orchestrator import run_python_build
from .types import BuildReport, ErrorCategory, TelemetryRecord
from .utils import DefaultStepUtils, StepUtils

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the build step."""
    parser = argparse.ArgumentParser(
        prog="pythonbuild",
        description=(
            "Build a Python project, optionally create a CycloneDX BOM "
            "and publish the source distribution"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Build the project in the current directory
  pythonbuild

  # Pass extra flags to 'python3 -m build'
  pythonbuild --build-flag=--sdist --build-flag=--no-isolation

  # Build, create bom.xml and upload dist/*.tar.gz
  pythonbuild --create-bom --publish \\
      --target-repository-url https://upload.pypi.org/legacy/ \\
      --target-repository-user __token__

Configuration priority: CLI arguments > Environment variables > Defaults

Prefer PYTHONBUILD_TARGET_REPOSITORY_PASSWORD over the command line for the
repository password.
        """,
    )

    # Build configuration
    parser.add_argument(
        "--build-flag",
        dest="build_flags",
        action="append",
        metavar="FLAG",
        help=(
            "Extra flag passed to 'python3 -m build', repeatable. Flags that "
            "start with a dash need the = form: --build-flag=--sdist "
            "(overrides PYTHONBUILD_BUILD_FLAGS)"
        ),
    )
    parser.add_argument(
        "--python-executable",
        type=str,
        help="Interpreter used for pip and build (overrides PYTHONBUILD_PYTHON_EXECUTABLE)",
    )
    parser.add_argument(
        "--working-dir",
        type=str,
        help="Project directory (overrides PYTHONBUILD_WORKING_DIR, default: .)",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        help="Path to a .env file to load before reading the environment",
    )

    # Optional phases
    bom_group = parser.add_mutually_exclusive_group()
    bom_group.add_argument(
        "--create-bom",
        dest="create_bom",
        action="store_const",
        const=True,
        help="Create a CycloneDX bill of materials (overrides PYTHONBUILD_CREATE_BOM)",
    )
    bom_group.add_argument(
        "--no-create-bom",
        dest="create_bom",
        action="store_const",
        const=False,
        help="Skip the bill of materials even if PYTHONBUILD_CREATE_BOM is set",
    )
    publish_group = parser.add_mutually_exclusive_group()
    publish_group.add_argument(
        "--publish",
        dest="publish",
        action="store_const",
        const=True,
        help="Upload dist/*.tar.gz with twine (overrides PYTHONBUILD_PUBLISH)",
    )
    publish_group.add_argument(
        "--no-publish",
        dest="publish",
        action="store_const",
        const=False,
        help="Skip the upload even if PYTHONBUILD_PUBLISH is set",
    )

    # Target repository
    parser.add_argument(
        "--target-repository-url",
        type=str,
        help="Repository upload URL (overrides PYTHONBUILD_TARGET_REPOSITORY_URL)",
    )
    parser.add_argument(
        "--target-repository-user",
        type=str,
        help="Repository user (overrides PYTHONBUILD_TARGET_REPOSITORY_USER)",
    )
    parser.add_argument(
        "--target-repository-password",
        type=str,
        help="Repository password (overrides PYTHONBUILD_TARGET_REPOSITORY_PASSWORD)",
    )

    # Logging
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Minimize logging output (WARNING level only)",
    )

    return parser.parse_args(argv)


def args_to_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Convert CLI arguments to configuration overrides dictionary.

    Args:
        args: Parsed command-line arguments

    Returns:
        Dictionary of configuration overrides
    """
    overrides = {}

    if args.build_flags:
        overrides["build_flags"] = list(args.build_flags)
    if args.python_executable:
        overrides["python_executable"] = args.python_executable
    if args.working_dir:
        overrides["working_dir"] = args.working_dir

    # None means the switch was not given on the command line
    if args.create_bom is not None:
        overrides["create_bom"] = args.create_bom
    if args.publish is not None:
        overrides["publish"] = args.publish

    if args.target_repository_url:
        overrides["target_repository_url"] = args.target_repository_url
    if args.target_repository_user:
        overrides["target_repository_user"] = args.target_repository_user
    if args.target_repository_password:
        overrides["target_repository_password"] = args.target_repository_password

    return overrides


def setup_logging(args: argparse.Namespace) -> None:
    """Configure the root logger from -v and --quiet; tool output is logged at INFO."""
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


def python_build(
    config: Config,
    telemetry: TelemetryRecord,
    utils: Optional[StepUtils] = None,
) -> BuildReport:
    """Run the build step and record its outcome in ``telemetry``.

    Raises:
        PythonBuildError: Re-raised after the telemetry record is filled
    """
    if utils is None:
        utils = DefaultStepUtils(config.working_dir)

    options = config.to_build_options()
    logger.debug(f"Running with options {options!r}")

    started = time.time()
    try:
        report = run_python_build(options, utils, telemetry)
    except PythonBuildError as e:
        telemetry.error_category = e.category
        raise
    finally:
        telemetry.duration_seconds = round(time.time() - started, 3)

    telemetry.custom_data["phases"] = report.summary()
    telemetry.custom_data["degraded"] = report.degraded
    return report


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the build step."""
    args = parse_args(argv)
    setup_logging(args)

    telemetry = TelemetryRecord()
    config_overrides = args_to_config_overrides(args)
    if config_overrides:
        logger.info(f"Using CLI configuration overrides: {sorted(config_overrides)}")

    try:
        config = Config(env_file=args.env_file, config_overrides=config_overrides)
        logger.debug(f"Configuration: {config.get_config_summary()}")
        report = python_build(config, telemetry)
    except PythonBuildError as e:
        telemetry.error_category = e.category
        logger.critical(f"step execution failed: {e}")
        logger.debug(f"Telemetry: {telemetry}")
        if e.category is ErrorCategory.CONFIGURATION:
            return EXIT_CONFIGURATION_ERROR
        return EXIT_FAILURE

    for phase, status in report.summary().items():
        logger.info(f"  {phase}: {status}")
    if report.degraded:
        logger.warning("Build step finished with errors in the build phase")
    else:
        logger.info("Build step finished successfully")
    logger.debug(f"Telemetry: {telemetry}")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
