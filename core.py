#!/usr/bin/env python3
"""
Core operations shared between MCP server and CLI.
Contains the business logic for preparing an Xcode scheme so that a rescan
only runs the tests that failed.
"""

import logging
from pathlib import Path
from typing import Optional

from xcode_fragile_tests.config import (
    SUPPORTED_PLATFORMS,
    Options,
    validate_options,
    validate_project_path,
    validate_report_filepath,
    validate_scheme,
)
from xcode_fragile_tests.errors import TestableNotFoundError
from xcode_fragile_tests.models import RescanResult
from xcode_fragile_tests.report_parser import XcodeReportParser, classify
from xcode_fragile_tests.reporter import SUMMARY_TITLE, LoggingReporter, Reporter, format_table
from xcode_fragile_tests.xcscheme import SkippedTest, XCScheme, find_scheme_path

logger = logging.getLogger(__name__)


def is_supported(platform: str) -> bool:
    """Whether a run is possible for the given platform (ios or mac)."""
    print(f"platform: {platform}")
    return str(platform) in SUPPORTED_PLATFORMS


def setup_fragile_tests_for_rescan(
    options: Options,
    reporter: Optional[Reporter] = None,
    user: Optional[str] = None,
) -> RescanResult:
    """
    Skip every passing test of a report in the matching Xcode scheme.

    Steps:
        1. Parse and validate the report
        2. Split its test cases into passed and failed
        3. Locate the scheme (shared schemes first, then the user's)
        4. Add a skipped test entry for each passed test to the testable
           whose buildable name matches the report's test bundle
        5. Save the scheme if anything new was skipped and report a summary

    Args:
        options: Resolved options (validated here before anything is read)
        reporter: Receives the summary table or the "nothing passed" warning
        user: Owner of the user-specific scheme directory (defaults to $USER)

    Returns:
        RescanResult; ``to_dict()`` gives {"passed_tests": [...], "failed_tests": [...]}

    Raises:
        ConfigError: an option is invalid or the scheme does not exist
        ValidationError: the report is malformed or not a test report
        TestableNotFoundError: the report names a test bundle the scheme lacks
    """
    reporter = reporter or LoggingReporter()
    validate_options(options)

    groups = XcodeReportParser().parse_file(options.report_filepath)
    classification = classify(groups)

    result = RescanResult(failed_tests=list(classification.failed_tests))

    scheme_path = find_scheme_path(options.project_path, options.scheme, user=user)
    scheme = XCScheme(scheme_path)
    result.scheme_path = scheme_path

    is_dirty = False
    summary = []
    for group in groups:
        testable = scheme.testable_named(group.name)
        if testable is None:
            raise TestableNotFoundError(group.name)

        for case_group, case in classification.passed:
            if case_group is not group:
                continue
            skipped_test = SkippedTest(identifier=str(case.identifier))
            added = testable.add_skipped_test(skipped_test, allow_duplicates=options.allow_duplicates)
            result.passed_tests.append(f"{group.buildable_name}/{case.identifier.display}")
            if added:
                result.skipped_identifiers.append(skipped_test.identifier)
                summary.append([skipped_test.identifier])
                is_dirty = True

    if is_dirty:
        if options.dry_run:
            logger.info(f"Dry run: not saving {scheme_path}")
        else:
            scheme.save()
            result.saved = True
        reporter.success("\n" + format_table(SUMMARY_TITLE, summary))
    elif result.passed_tests:
        reporter.success(f"All {len(result.passed_tests)} passing tests are already suppressed in {scheme.name}")
    else:
        reporter.error("No passing tests found for suppression")

    return result


def inspect_report(report_filepath: str) -> dict:
    """Classify a report without touching any scheme."""
    validate_report_filepath(report_filepath)
    groups = XcodeReportParser().parse_file(report_filepath)
    classification = classify(groups)
    return {
        "report": str(Path(report_filepath)),
        "bundles": [g.name for g in groups],
        "passed_tests": [f"{g.buildable_name}/{c.identifier.display}" for g, c in classification.passed],
        "failed_tests": classification.failed_tests,
    }


def list_testables(project_path: str, scheme_name: str, user: Optional[str] = None) -> dict:
    """Describe the testables of a scheme and the tests each one skips."""
    validate_project_path(project_path)
    validate_scheme(scheme_name)
    scheme_path = find_scheme_path(project_path, scheme_name, user=user)
    scheme = XCScheme(scheme_path)
    return {
        "scheme": scheme.name,
        "path": str(scheme_path),
        "testables": [
            {
                "buildable_name": t.buildable_name,
                "skipped": t.skipped,
                "skipped_tests": [s.identifier for s in t.skipped_tests],
            }
            for t in scheme.testables
        ],
    }
