"""Exceptions raised while preparing a scheme for a rescan."""


class FragileTestsError(Exception):
    """Base class for user-facing errors."""


class ValidationError(FragileTestsError):
    """The test report is not usable."""


class ConfigError(FragileTestsError):
    """An option is missing or points at something that does not exist."""


class TestableNotFoundError(RuntimeError):
    """The report names a test bundle the scheme does not know about."""

    def __init__(self, buildable_name: str):
        super().__init__(f"Unable to find testable named {buildable_name}")
        self.buildable_name = buildable_name
