#!/usr/bin/env python3
"""
MCP Server for setup-fragile-tests-for-rescan.
Provides tools for suppressing passing tests in Xcode schemes before a rescan.
"""

import os
import logging
import json
from fastmcp import FastMCP

import core
from xcode_fragile_tests.config import Options
from xcode_fragile_tests.reporter import RecordingReporter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# FastMCP server
mcp = FastMCP("setup-fragile-tests-for-rescan")


def run_setup(
    project_path: str = None,
    scheme: str = None,
    report_filepath: str = None,
    allow_duplicates: bool = None,
    dry_run: bool = False,
    platform: str = None,
) -> str:
    """Run the rescan setup and return its result (or error) as JSON."""
    reporter = RecordingReporter()
    try:
        options = Options.resolve(
            project_path=project_path,
            scheme=scheme,
            report_filepath=report_filepath,
            allow_duplicates=allow_duplicates,
            dry_run=dry_run,
            platform=platform,
        )
        if not core.is_supported(options.platform):
            return json.dumps({"error": f"platform '{options.platform}' is not supported",
                               "passed_tests": [], "failed_tests": []})
        result = core.setup_fragile_tests_for_rescan(options, reporter=reporter)
        output = result.to_dict()
        output["saved"] = result.saved
        output["scheme_path"] = str(result.scheme_path)
        output["messages"] = [{"level": level, "text": text} for level, text in reporter.messages]
        return json.dumps(output, indent=2)
    except Exception as e:
        logger.error(f"Error in setup_fragile_tests: {str(e)}")
        return json.dumps({"error": str(e), "passed_tests": [], "failed_tests": []})


def run_inspect(report_filepath: str) -> str:
    try:
        return json.dumps(core.inspect_report(report_filepath), indent=2)
    except Exception as e:
        logger.error(f"Error in inspect_test_report: {str(e)}")
        return json.dumps({"error": str(e)})


@mcp.tool(
    name="setup_fragile_tests",
    description="""Suppress the passing tests of an Xcode test report in a scheme,
    so that the next scan only reruns the tests that failed.

    Args:
        project_path: Path to the .xcodeproj (falls back to SETUP_FRAGILE_TESTS_FOR_RESCAN_PROJECT_PATH)
        scheme: Scheme name (falls back to SETUP_FRAGILE_TESTS_FOR_RESCAN_SCHEME)
        report_filepath: Path to the JUnit report written by scan
        allow_duplicates: Add skip entries even for tests the scheme already skips
        dry_run: Report what would be skipped without saving the scheme
        platform: Platform being tested, ios or mac (default: ios)
    """
)
async def setup_fragile_tests(
    project_path: str = None,
    scheme: str = None,
    report_filepath: str = None,
    allow_duplicates: bool = None,
    dry_run: bool = False,
    platform: str = None
) -> str:
    return run_setup(project_path, scheme, report_filepath, allow_duplicates, dry_run, platform)


@mcp.tool(
    name="inspect_test_report",
    description="""List the passed and failed tests of an Xcode test report without touching any scheme.
    Args:
        report_filepath: Path to the JUnit report written by scan
    """
)
async def inspect_test_report(report_filepath: str) -> str:
    return run_inspect(report_filepath)


if __name__ == "__main__":
    port = int(os.getenv("FASTMCP_PORT", "8978"))
    mcp.run(transport="sse", host="0.0.0.0", port=port)
