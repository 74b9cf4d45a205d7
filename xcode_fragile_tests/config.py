"""Options for a rescan setup run, read from arguments, environment variables and a .env file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SETUP_FRAGILE_TESTS_FOR_RESCAN_"
CONFIG_PATH_ENV = f"{ENV_PREFIX}CONFIG"

ENV_PROJECT_PATH = f"{ENV_PREFIX}PROJECT_PATH"
ENV_SCHEME = f"{ENV_PREFIX}SCHEME"
ENV_REPORT_FILEPATH = f"{ENV_PREFIX}TEST_REPORT_FILEPATH"
ENV_ALLOW_DUPLICATES = f"{ENV_PREFIX}ALLOW_DUPLICATES"
ENV_PLATFORM = f"{ENV_PREFIX}PLATFORM"

DEFAULT_PLATFORM = "ios"
SUPPORTED_PLATFORMS = ("ios", "mac")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_config() -> dict:
    """Load config from environment variables and .env file.

    Environment variables take precedence over .env file values.
    """
    paths = [
        os.environ.get(CONFIG_PATH_ENV),
        Path.cwd() / '.env',
    ]
    config = {}
    for p in paths:
        if p and Path(p).exists():
            try:
                for line in Path(p).read_text().splitlines():
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        config[key.strip()] = value.strip().strip('"').strip("'")
                break
            except OSError as e:
                logger.warning(f"Failed to read config file {p}: {e}")

    for key in [ENV_PROJECT_PATH, ENV_SCHEME, ENV_REPORT_FILEPATH,
                ENV_ALLOW_DUPLICATES, ENV_PLATFORM]:
        env_value = os.environ.get(key)
        if env_value is not None:
            config[key] = env_value

    return config


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass
class Options:
    """Settings for one run."""
    project_path: Optional[str] = None
    scheme: Optional[str] = None
    report_filepath: Optional[str] = None
    allow_duplicates: bool = False
    dry_run: bool = False
    platform: str = DEFAULT_PLATFORM

    @classmethod
    def resolve(cls, project_path: Optional[str] = None, scheme: Optional[str] = None,
                report_filepath: Optional[str] = None, allow_duplicates: Optional[bool] = None,
                dry_run: bool = False, platform: Optional[str] = None) -> "Options":
        """Fill unset arguments from the environment / .env file."""
        config = load_config()
        if allow_duplicates is None:
            allow_duplicates = _as_bool(config.get(ENV_ALLOW_DUPLICATES, False))
        return cls(
            project_path=project_path or config.get(ENV_PROJECT_PATH),
            scheme=scheme or config.get(ENV_SCHEME),
            report_filepath=report_filepath or config.get(ENV_REPORT_FILEPATH),
            allow_duplicates=allow_duplicates,
            dry_run=dry_run,
            platform=platform or config.get(ENV_PLATFORM, DEFAULT_PLATFORM),
        )


def validate_project_path(value: Optional[str]):
    if not value:
        raise ConfigError("No project file for SetupFragileTestsForRescanAction given, "
                          "pass using `project_path: 'path/to/project.xcodeproj'`")
    path = Path(value)
    if not path.is_dir():
        raise ConfigError(f"SetupFragileTestsForRescanAction cannot find project file at '{value}'")
    if path.suffix.lower() != ".xcodeproj":
        raise ConfigError(f"The project '{value}' is not a valid Xcode project")
    if not (path / "project.pbxproj").exists():
        raise ConfigError(f"The Xcode project at '{value}' is invalid: missing the project.pbxproj file")


def validate_scheme(value: Optional[str]):
    if not value:
        raise ConfigError("No scheme for SetupFragileTestsForRescanAction given, "
                          "pass using `scheme: 'scheme name'`")


def validate_report_filepath(value: Optional[str]):
    if not value:
        raise ConfigError("No test report file for SetupFragileTestsForRescanAction given, "
                          "pass using `report_filepath: 'path/to/report.xml'`")
    if not Path(value).exists():
        raise ConfigError(f"SetupFragileTestsForRescanAction cannot find test report file at '{value}'")


def validate_options(options: Options):
    """Raise ConfigError for the first invalid option."""
    validate_project_path(options.project_path)
    validate_scheme(options.scheme)
    validate_report_filepath(options.report_filepath)
