"""
Minimal Xcode scheme (.xcscheme) model.

Loads a scheme, exposes the testables of its TestAction, lets callers add
skipped tests to a testable and writes the scheme back in the layout Xcode
itself uses, so saving a scheme produces no spurious diffs.
"""

import getpass
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from xml.sax.saxutils import escape

from lxml import etree

from .errors import ConfigError

logger = logging.getLogger(__name__)

SCHEME_EXTENSION = ".xcscheme"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = 3

_ATTRIBUTE_ENTITIES = {'"': "&quot;", "\n": "&#10;", "\t": "&#9;"}


def shared_data_dir(project_path: Union[str, Path]) -> Path:
    """Directory holding the schemes shared through version control."""
    return Path(project_path) / "xcshareddata" / "xcschemes"


def user_data_dir(project_path: Union[str, Path], user: Optional[str] = None) -> Path:
    """Directory holding the schemes private to ``user`` (defaults to the current user)."""
    user = user or os.environ.get("USER") or getpass.getuser()
    return Path(project_path) / "xcuserdata" / f"{user}.xcuserdatad" / "xcschemes"


def find_scheme_path(project_path: Union[str, Path], scheme_name: str,
                     user: Optional[str] = None) -> Path:
    """Locate ``<scheme_name>.xcscheme``, preferring the shared scheme over the user one."""
    filename = f"{scheme_name}{SCHEME_EXTENSION}"
    for directory in (shared_data_dir(project_path), user_data_dir(project_path, user)):
        candidate = directory / filename
        if candidate.exists():
            logger.debug(f"Using scheme file {candidate}")
            return candidate
    message = f"Scheme '{scheme_name}' does not exist in Xcode project found at '{project_path}'"
    available = list_schemes(project_path, user)
    if available:
        message += f" (available schemes: {', '.join(available)})"
    raise ConfigError(message)


def list_schemes(project_path: Union[str, Path], user: Optional[str] = None) -> list[str]:
    """Names of the schemes available in a project, shared ones first."""
    names = []
    for directory in (shared_data_dir(project_path), user_data_dir(project_path, user)):
        if directory.is_dir():
            for path in sorted(directory.glob(f"*{SCHEME_EXTENSION}")):
                if path.stem not in names:
                    names.append(path.stem)
    return names


@dataclass
class SkippedTest:
    """A <Test Identifier="Class/method"> entry under a testable's <SkippedTests>."""
    identifier: str

    def to_element(self) -> etree._Element:
        element = etree.Element("Test")
        element.set("Identifier", self.identifier)
        return element


class Testable:
    """A <TestableReference> inside the scheme's TestAction."""

    def __init__(self, element: etree._Element):
        self.element = element

    @property
    def buildable_name(self) -> Optional[str]:
        reference = self.element.find("BuildableReference")
        if reference is None:
            return None
        return reference.get("BuildableName")

    @property
    def skipped(self) -> bool:
        return self.element.get("skipped") == "YES"

    @property
    def skipped_tests(self) -> list[SkippedTest]:
        container = self.element.find("SkippedTests")
        if container is None:
            return []
        return [SkippedTest(identifier=t.get("Identifier", "")) for t in container.findall("Test")]

    def add_skipped_test(self, skipped_test: SkippedTest, allow_duplicates: bool = True) -> bool:
        """Append ``skipped_test`` to the skip list.

        Returns False when ``allow_duplicates`` is off and the identifier is
        already skipped.
        """
        container = self.element.find("SkippedTests")
        if container is None:
            container = etree.SubElement(self.element, "SkippedTests")
        elif not allow_duplicates:
            for existing in container.findall("Test"):
                if existing.get("Identifier") == skipped_test.identifier:
                    logger.debug(f"{skipped_test.identifier} is already skipped in {self.buildable_name}")
                    return False
        container.append(skipped_test.to_element())
        return True

    def __repr__(self) -> str:
        return f"Testable({self.buildable_name!r})"


class XCScheme:
    """An .xcscheme file loaded into memory."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        parser = etree.XMLParser(remove_blank_text=True)
        try:
            self.tree = etree.parse(str(self.path), parser)
        except etree.XMLSyntaxError as e:
            raise ConfigError(f"Scheme file '{self.path}' is not valid XML: {e}") from e
        self.root = self.tree.getroot()

    @property
    def name(self) -> str:
        return self.path.stem

    @property
    def testables(self) -> list[Testable]:
        testables = self.root.find("TestAction/Testables")
        if testables is None:
            return []
        return [Testable(el) for el in testables.findall("TestableReference")]

    def testable_named(self, buildable_name: str) -> Optional[Testable]:
        for testable in self.testables:
            if testable.buildable_name == buildable_name:
                return testable
        return None

    def to_xml(self) -> str:
        lines = [XML_DECLARATION]
        _write_element(self.root, 0, lines)
        return "\n".join(lines) + "\n"

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the scheme to ``path`` (its own file by default)."""
        target = Path(path) if path else self.path
        target.write_text(self.to_xml(), encoding="utf-8")
        logger.info(f"Saved scheme {self.name} to {target}")
        return target


def _write_element(element, level: int, lines: list[str]):
    pad = " " * level
    if not isinstance(element.tag, str):
        # comments and processing instructions
        lines.append(pad + etree.tostring(element, encoding="unicode", with_tail=False))
        return

    attributes = list(element.attrib.items())
    if attributes:
        lines.append(f"{pad}<{element.tag}")
        attr_pad = " " * (level + INDENT)
        for key, value in attributes:
            lines.append(f'{attr_pad}{key} = "{escape(value, _ATTRIBUTE_ENTITIES)}"')
        lines[-1] += ">"
    else:
        lines.append(f"{pad}<{element.tag}>")

    children = list(element)
    if children:
        for child in children:
            _write_element(child, level + INDENT, lines)
    elif element.text and element.text.strip():
        lines[-1] += escape(element.text)
        lines[-1] += f"</{element.tag}>"
        return
    lines.append(f"{pad}</{element.tag}>")
