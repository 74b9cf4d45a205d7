import os
from pathlib import Path

import pytest

# Keep developer settings out of the tests
for _key in list(os.environ):
    if _key.startswith("SETUP_FRAGILE_TESTS_FOR_RESCAN_"):
        del os.environ[_key]


SCHEME_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<Scheme
   LastUpgradeVersion = "0900"
   version = "1.3">
   <BuildAction
      parallelizeBuildables = "YES"
      buildImplicitDependencies = "YES">
   </BuildAction>
   <TestAction
      buildConfiguration = "Debug"
      selectedDebuggerIdentifier = "Xcode.DebuggerFoundation.Debugger.LLDB"
      shouldUseLaunchSchemeArgsEnv = "YES">
      <Testables>
{testables}
      </Testables>
   </TestAction>
   <LaunchAction
      buildConfiguration = "Debug"
      launchStyle = "0">
   </LaunchAction>
</Scheme>
"""

TESTABLE_TEMPLATE = """         <TestableReference
            skipped = "NO">
            <BuildableReference
               BuildableIdentifier = "primary"
               BlueprintIdentifier = "{blueprint}"
               BuildableName = "{name}"
               BlueprintName = "{stem}"
               ReferencedContainer = "container:MyApp.xcodeproj">
            </BuildableReference>
         </TestableReference>"""


# a run that crashed while writing a failure
TRUNCATED_REPORT = (
    '<testsuites name="MyAppTests.xctest"><testsuite name="S">'
    '<testcase classname="FooTests" name="testBar"/>'
    '<testcase classname="FooTests" name="testBaz"><fail'
)

MISMATCHED_REPORT = (
    '<testsuites name="MyAppTests.xctest"><testsuite name="S">'
    '<testcase classname="FooTests" name="testBar"></testsuite></testcase></testsuites>'
)


def scheme_xml(*buildable_names: str) -> str:
    testables = "\n".join(
        TESTABLE_TEMPLATE.format(blueprint=f"A1B2C3D4E5F6000{i}", name=name, stem=Path(name).stem)
        for i, name in enumerate(buildable_names)
    )
    return SCHEME_TEMPLATE.format(testables=testables)


def report_xml(groups: dict) -> str:
    """Build a report from {bundle: {suite: [(classname, name, failed), ...]}}."""
    lines = ['<?xml version="1.0" encoding="UTF-8"?>']
    for bundle, suites in groups.items():
        lines.append(f'<testsuites name="{bundle}">')
        for suite, cases in suites.items():
            lines.append(f'  <testsuite name="{suite}" tests="{len(cases)}">')
            for classname, name, failed in cases:
                if failed:
                    lines.append(f'    <testcase classname="{classname}" name="{name}">')
                    lines.append('      <failure message="XCTAssertTrue failed">FooTests.swift:12</failure>')
                    lines.append('    </testcase>')
                else:
                    lines.append(f'    <testcase classname="{classname}" name="{name}" time="0.01"/>')
            lines.append('  </testsuite>')
        lines.append('</testsuites>')
    return "\n".join(lines) + "\n"


@pytest.fixture
def xcodeproj(tmp_path):
    """An Xcode project with a shared "MyApp" scheme testing MyAppTests.xctest."""
    project = tmp_path / "MyApp.xcodeproj"
    project.mkdir()
    (project / "project.pbxproj").write_text("// !$*UTF8*$!\n{\n}\n")
    schemes = project / "xcshareddata" / "xcschemes"
    schemes.mkdir(parents=True)
    (schemes / "MyApp.xcscheme").write_text(scheme_xml("MyAppTests.xctest"))
    return project


@pytest.fixture
def scheme_file(xcodeproj):
    return xcodeproj / "xcshareddata" / "xcschemes" / "MyApp.xcscheme"


@pytest.fixture
def write_report(tmp_path):
    def _write(groups: dict, name: str = "report.junit") -> Path:
        path = tmp_path / name
        path.write_text(report_xml(groups))
        return path
    return _write


@pytest.fixture
def mixed_report(write_report):
    """One passing Swift test and one failing Objective-C test."""
    return write_report({
        "MyAppTests.xctest": {
            "FooTests": [
                ("com.example.FooTests", "testBar", False),
                ("FooTests", "testBaz", True),
            ],
        },
    })
