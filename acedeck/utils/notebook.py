"""Splits generated study content into titled sections for display.

A new section starts at a line beginning with ``TOPIC:``, ``QUESTION:`` or a
single ``#`` heading. Lines before the first heading go into an
"Exam Overview" section. Blank lines are dropped.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

SECTION_MARKERS = ("QUESTION:", "TOPIC:")
OVERVIEW_TITLE = "Exam Overview"

_MARKER_RE = re.compile(r"QUESTION:|TOPIC:|#")


@dataclass
class Section:
    """A titled block of generated content."""
    title: str
    lines: List[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        return "\n".join(self.lines)


def is_section_heading(line: str) -> bool:
    """True if `line` (already stripped) opens a new section."""
    if line.startswith(SECTION_MARKERS):
        return True
    return line.startswith("#") and not line.startswith("##")


def split_sections(content: str) -> List[Section]:
    """Groups the lines of `content` into sections, preserving order."""
    sections: List[Section] = []
    current: Optional[Section] = None

    for line in (content or "").splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if is_section_heading(stripped):
            if current is not None:
                sections.append(current)
            current = Section(title=_MARKER_RE.sub("", stripped).strip())
        elif current is not None:
            current.lines.append(line)
        else:
            current = Section(title=OVERVIEW_TITLE, lines=[line])

    if current is not None:
        sections.append(current)
    return sections
