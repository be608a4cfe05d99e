"""Markdown job summary for GitHub Actions.

Lines are collected during the run and appended to the file named by
GITHUB_STEP_SUMMARY when write() is called. Outside of Actions the summary is
only logged.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

STEP_SUMMARY_ENV = "GITHUB_STEP_SUMMARY"


class StepSummary:
    """Buffered job summary.

    Attributes:
        path (Optional[Path]): Summary file, None when not running in Actions
        lines (List[str]): Buffered Markdown lines
    """

    def __init__(self, path: Optional[str] = None):
        path = path or os.environ.get(STEP_SUMMARY_ENV)
        self.path = Path(path) if path else None
        self.lines: List[str] = []

    def add_heading(self, text: str, level: int = 2) -> "StepSummary":
        self.lines.append(f"{'#' * level} {text}")
        return self

    def add_raw(self, text: str) -> "StepSummary":
        self.lines.append(text)
        return self

    def render(self) -> str:
        return "\n".join(self.lines) + "\n" if self.lines else ""

    def write(self) -> bool:
        """Append the buffered summary to the summary file and clear the buffer.

        Returns:
            bool: True if the summary was written to a file
        """
        content = self.render()
        self.lines = []
        if not content:
            return False
        if self.path is None:
            logging.info(f"{STEP_SUMMARY_ENV} not set, summary:\n{content}")
            return False
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(content)
            return True
        except OSError as e:
            logging.warning(f"Could not write step summary to {self.path}: {str(e)}")
            return False
