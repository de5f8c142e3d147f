"""
structdiff.options — Knobs for the diff engine and the renderer.

Everything here is an immutable value.  A call to ``diff`` builds one
``DiffOptions`` and threads it through the engine and the renderer; no
module-level state is ever mutated.
"""

from dataclasses import dataclass, field
from enum import Enum


# Maximum nesting depth the engine descends before it stops and compares
# the remaining subtree by its textual representation.  Guards against
# cyclic object graphs.
DEFAULT_MAX_DEPTH = 64


class Indentation(Enum):
    """Marker prefixed to every line of a nested difference."""
    PIPE = "|\t"
    TAB = "\t"


@dataclass(frozen=True, slots=True)
class Labels:
    """Words used in rendered differences."""
    received: str = "Received"
    expected: str = "Expected"
    missing: str = "Missing"
    extra: str = "Extra"
    different_count: str = "Different count"
    absent: str = "nil"
    present: str = "Optional"


@dataclass(frozen=True, slots=True)
class DiffOptions:
    """
    Configuration for a single diff.

        max_depth                    nesting levels to descend (0 = compare
                                     the roots as plain text)
        indentation                  marker for nested lines
        skip_printing_on_diff_count  show only the counts, not the full
                                     collections, on "Different count"
        labels                       words used in the output
    """
    max_depth: int = DEFAULT_MAX_DEPTH
    indentation: Indentation = Indentation.PIPE
    skip_printing_on_diff_count: bool = False
    labels: Labels = field(default_factory=Labels)

    def __post_init__(self):
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ValueError(f"max_depth must be an int, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if not isinstance(self.indentation, Indentation):
            raise ValueError(f"indentation must be an Indentation, got {self.indentation!r}")
