"""User-facing messages for a run."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

SUMMARY_TITLE = "setup_fragile_tests_for_rescan suppressed the following tests"


def format_table(title: str, rows: list[list[str]]) -> str:
    """Render a boxed, single-title text table."""
    columns = max((len(r) for r in rows), default=1)
    widths = [0] * columns
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    inner = sum(widths) + 3 * (columns - 1)
    if len(title) > inner:
        widths[-1] += len(title) - inner
        inner = len(title)

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = ["+" + "-" * (inner + 2) + "+", f"| {title:^{inner}} |", border]
    for row in rows:
        cells = list(row) + [""] * (columns - len(row))
        lines.append("| " + " | ".join(f"{str(c):<{w}}" for c, w in zip(cells, widths)) + " |")
    lines.append(border)
    return "\n".join(lines)


class Reporter(ABC):
    """Where a run sends its success and warning messages."""

    @abstractmethod
    def success(self, text: str):
        ...

    @abstractmethod
    def error(self, text: str):
        ...


class LoggingReporter(Reporter):
    def success(self, text: str):
        logger.info(text)

    def error(self, text: str):
        logger.error(text)


class RecordingReporter(Reporter):
    """Keeps messages in memory as (level, text) pairs."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def success(self, text: str):
        self.messages.append(("success", text))

    def error(self, text: str):
        self.messages.append(("error", text))

    def texts(self, level: str) -> list[str]:
        return [text for lvl, text in self.messages if lvl == level]
