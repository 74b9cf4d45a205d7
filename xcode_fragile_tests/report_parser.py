"""Parser for the JUnit-style XML reports written by scan/xcpretty for Xcode test runs."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from bs4 import BeautifulSoup
from lxml import etree

from .errors import ValidationError
from .models import TestCase, TestStatus, TestSuite, TestSuiteGroup

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    """Report test cases split by outcome.

    ``passed`` keeps each case next to the group it belongs to, since the
    group name is what ties the case to a testable in the scheme.
    """
    passed: list[tuple[TestSuiteGroup, TestCase]] = field(default_factory=list)
    failed_tests: list[str] = field(default_factory=list)


class XcodeReportParser:
    """Reads an Xcode test report into TestSuiteGroup models."""

    def parse_file(self, path: Union[str, Path]) -> list[TestSuiteGroup]:
        with open(path, "rb") as f:
            content = f.read()
        return self._parse_document(self._load(content))

    def parse_string(self, content: Union[str, bytes]) -> list[TestSuiteGroup]:
        return self._parse_document(self._load(content))

    def _load(self, content: Union[str, bytes]) -> BeautifulSoup:
        # bs4 recovers from broken markup, so well-formedness is checked first
        if isinstance(content, str):
            content = content.encode("utf-8")
        parser = etree.XMLParser(recover=False, resolve_entities=False, no_network=True)
        try:
            etree.fromstring(content, parser)
        except etree.XMLSyntaxError as e:
            logger.debug(f"Report is not well-formed XML: {e}")
            raise ValidationError("Malformed XML test report file given") from e
        return BeautifulSoup(content, "xml")

    def _parse_document(self, soup: BeautifulSoup) -> list[TestSuiteGroup]:
        if soup.find(True, recursive=False) is None:
            raise ValidationError("Malformed XML test report file given")

        group_elements = soup.find_all("testsuites", recursive=False)
        if not group_elements:
            raise ValidationError("Valid XML file is not an Xcode test report")

        groups = [self._parse_group(el) for el in group_elements]
        total = sum(len(g.test_cases) for g in groups)
        logger.debug(f"Parsed {len(groups)} test suite group(s) with {total} test case(s)")
        return groups

    def _parse_group(self, element) -> TestSuiteGroup:
        group = TestSuiteGroup(name=element.get("name", ""))
        for suite_el in element.find_all("testsuite", recursive=False):
            suite = TestSuite(name=suite_el.get("name", ""))
            for case_el in suite_el.find_all("testcase", recursive=False):
                suite.test_cases.append(self._parse_case(case_el))
            group.suites.append(suite)
        return group

    def _parse_case(self, element) -> TestCase:
        case = TestCase(
            classname=element.get("classname", ""),
            name=element.get("name", ""),
        )
        failure = element.find("failure", recursive=False)
        if failure is not None:
            case.status = TestStatus.FAILED
            case.failure_message = failure.get("message") or failure.get_text(strip=True) or None
        return case


def classify(groups: list[TestSuiteGroup]) -> Classification:
    """Split report test cases into passed cases and failed test names.

    Failed tests are listed as "<bundle>/<Class>/<method>" without the Swift
    "()" suffix, in report order.
    """
    result = Classification()

    for group in groups:
        for case in group.test_cases:
            if case.failed:
                result.failed_tests.append(f"{group.buildable_name}/{case.identifier.display}")

    for group in groups:
        for case in group.test_cases:
            if not case.failed:
                result.passed.append((group, case))

    logger.info(f"Found {len(result.passed)} passing and {len(result.failed_tests)} failing tests")
    return result
