#!/usr/bin/env python3
"""CLI for setting up fragile tests for an Xcode rescan."""

import argparse
import json
import logging
import sys

import core
from xcode_fragile_tests.config import Options
from xcode_fragile_tests.errors import FragileTestsError


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )


def cmd_run(args):
    """Skip the passing tests of a report in the scheme."""
    options = Options.resolve(
        project_path=args.project_path,
        scheme=args.scheme,
        report_filepath=args.report_filepath,
        allow_duplicates=True if args.allow_duplicates else None,
        dry_run=args.dry_run,
        platform=args.platform,
    )

    if not core.is_supported(options.platform):
        print(f"Error: platform '{options.platform}' is not supported", file=sys.stderr)
        return 1

    try:
        result = core.setup_fragile_tests_for_rescan(options)
    except FragileTestsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(result)
    return 0


def _print_result(result):
    """Print human-readable summary."""
    print(f"\n{'='*60}")
    print(f"Scheme: {result.scheme_path}")
    print(f"Saved: {'yes' if result.saved else 'no'}")
    print(f"\nPassed (suppressed): {len(result.passed_tests)}")
    print(f"Failed (to rescan):  {len(result.failed_tests)}")

    if result.failed_tests:
        print(f"\nFailed Tests ({len(result.failed_tests)}):")
        for name in result.failed_tests:
            print(f"  - {name}")
    print(f"{'='*60}\n")


def cmd_inspect_report(args):
    """Show which tests of a report passed and failed."""
    try:
        data = core.inspect_report(args.report_filepath)
    except FragileTestsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps(data, indent=2))
        return 0

    print(f"Report: {data['report']}")
    print(f"Bundles: {', '.join(data['bundles'])}")
    print(f"  Passed: {len(data['passed_tests'])}")
    print(f"  Failed: {len(data['failed_tests'])}")
    if data['failed_tests']:
        print("\nFailed tests:")
        for name in data['failed_tests']:
            print(f"  - {name}")
    return 0


def cmd_list_testables(args):
    """List the testables of a scheme with their skipped tests."""
    options = Options.resolve(project_path=args.project_path, scheme=args.scheme)
    try:
        data = core.list_testables(options.project_path, options.scheme)
    except FragileTestsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps(data, indent=2))
        return 0

    print(f"Scheme: {data['scheme']} ({data['path']})")
    testables = data['testables']
    if not testables:
        print("No testables found")
        return 0

    name_len = max(len(t['buildable_name'] or '') for t in testables)
    name_len = max(name_len, len('Testable'))
    print(f"{'Testable':<{name_len}}  {'Skipped':<7}  {'Skipped tests':>13}")
    print(f"{'-'*name_len}  {'-'*7}  {'-'*13}")
    for t in testables:
        skipped = 'YES' if t['skipped'] else 'NO'
        print(f"{t['buildable_name'] or '?':<{name_len}}  {skipped:<7}  {len(t['skipped_tests']):>13}")
        if args.verbose:
            for identifier in t['skipped_tests']:
                print(f"    - {identifier}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Suppress stable tests so that scan can run the fragile tests again'
    )
    parser.add_argument('-v', '--verbose', action='store_true')

    sub = parser.add_subparsers(dest='command')

    p = sub.add_parser('run', help='Skip the passing tests of a report in an Xcode scheme')
    p.add_argument('--project-path', '-p', help='The file path to the Xcode project file')
    p.add_argument('--scheme', '-s', help='The Xcode scheme used to manage the tests')
    p.add_argument('--report-filepath', '-r', help='The file path to the test report file')
    p.add_argument('--allow-duplicates', action='store_true',
                   help='Add skip entries even if the scheme already skips the test')
    p.add_argument('--dry-run', action='store_true', help='Do not save the scheme')
    p.add_argument('--platform', help='Platform being tested (ios or mac, default: ios)')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    p = sub.add_parser('inspect-report', help='Show passed and failed tests of a report')
    p.add_argument('report_filepath', help='The file path to the test report file')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    p = sub.add_parser('list-testables', help='List the testables of a scheme')
    p.add_argument('--project-path', '-p', help='The file path to the Xcode project file')
    p.add_argument('--scheme', '-s', help='The Xcode scheme used to manage the tests')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    cmds = {
        'run': cmd_run,
        'inspect-report': cmd_inspect_report,
        'list-testables': cmd_list_testables,
    }
    return cmds[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
