"""
Data models for Xcode test reports and rescan results.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class TestStatus(Enum):
    """Outcome of a single test case in a report."""
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True)
class TestIdentifier:
    """Identifier Xcode uses for a test in a scheme's skip list.

    Swift test classes are reported with a module prefix ("MyAppTests.FooTests")
    and their methods carry a trailing "()" in the scheme; Objective-C ones have
    neither.
    """
    class_name: str
    method_name: str
    swift: bool = False

    @classmethod
    def from_report(cls, classname: str, name: str) -> "TestIdentifier":
        swift = "." in classname
        class_name = classname.rsplit(".", 1)[-1]
        method_name = f"{name}()" if swift else name
        return cls(class_name=class_name, method_name=method_name, swift=swift)

    @property
    def display(self) -> str:
        """Identifier without the Swift call parentheses."""
        text = str(self)
        return text[:-2] if text.endswith("()") else text

    def __str__(self) -> str:
        return f"{self.class_name}/{self.method_name}"


@dataclass
class TestCase:
    """A <testcase> element."""
    classname: str
    name: str
    status: TestStatus = TestStatus.PASSED
    failure_message: Optional[str] = None

    @property
    def identifier(self) -> TestIdentifier:
        return TestIdentifier.from_report(self.classname, self.name)

    @property
    def failed(self) -> bool:
        return self.status == TestStatus.FAILED


@dataclass
class TestSuite:
    """A <testsuite> element (collection of test cases)."""
    name: str
    test_cases: list[TestCase] = field(default_factory=list)


@dataclass
class TestSuiteGroup:
    """A <testsuites> element; its name is the test bundle, e.g. "MyAppTests.xctest"."""
    name: str
    suites: list[TestSuite] = field(default_factory=list)

    @property
    def buildable_name(self) -> str:
        """Bundle name without its extension ("MyAppTests")."""
        return Path(self.name).stem

    @property
    def test_cases(self) -> list[TestCase]:
        return [case for suite in self.suites for case in suite.test_cases]


@dataclass
class RescanResult:
    """Outcome of one rescan setup run."""
    passed_tests: list[str] = field(default_factory=list)
    failed_tests: list[str] = field(default_factory=list)
    skipped_identifiers: list[str] = field(default_factory=list)
    scheme_path: Optional[Path] = None
    saved: bool = False

    def to_dict(self) -> dict:
        return {
            "passed_tests": list(self.passed_tests),
            "failed_tests": list(self.failed_tests),
        }
