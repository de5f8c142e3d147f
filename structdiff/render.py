"""
structdiff.render — Flatten a Difference tree into text.

One string per top-level Difference.  A leaf prints its detail lines;
a grouping prints ``<header>:`` and then every line of every child with
one more indentation marker in front:

    address:
    |	street:
    |	|	Received: 2nd Street
    |	|	Expected: Times Square

Every physical line ends with a newline, including lines that came
from a multi-line textual representation.
"""

from typing import Optional

from .core import Difference
from .options import DiffOptions


def render(differences: list[Difference], options: Optional[DiffOptions] = None) -> list[str]:
    """Render each top-level difference to a newline-terminated string."""
    if options is None:
        options = DiffOptions()
    return [
        "".join(line + "\n" for line in _lines(d, options))
        for d in differences
    ]


def _lines(node: Difference, options: DiffOptions) -> list[str]:
    if node.is_leaf:
        lines: list[str] = []
        for text in node.detail:
            if text.endswith("\n"):
                text = text[:-1]
            lines.extend(text.split("\n"))
        return lines

    marker = options.indentation.value
    lines = [f"{node.segment.header(options.labels)}:"]
    for child in node.children:
        lines.extend(marker + line for line in _lines(child, options))
    return lines
