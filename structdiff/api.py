"""
structdiff.api — The one function a test helper needs.

    >>> diff(2, 3)
    ['Received: 3\\nExpected: 2\\n']
    >>> diff([1], [1, 3])
    ['Different count:\\n|\\tReceived: [1, 3] (2)\\n|\\tExpected: [1] (1)\\n']
"""

from typing import Any, Optional

from .core import compare
from .options import DEFAULT_MAX_DEPTH, DiffOptions, Indentation, Labels
from .render import render


def diff(
    expected: Any,
    received: Any,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    indentation: Indentation = Indentation.PIPE,
    skip_printing_on_diff_count: bool = False,
    labels: Optional[Labels] = None,
) -> list[str]:
    """
    Describe how ``received`` differs from ``expected``.

    Returns one newline-terminated (possibly multi-line) string per
    top-level divergence, in field / index / key order.  Equal values
    give an empty list.  Never raises for any pair of values; only an
    invalid option (a negative ``max_depth``, say) raises ValueError.
    """
    options = DiffOptions(
        max_depth=max_depth,
        indentation=indentation,
        skip_printing_on_diff_count=skip_printing_on_diff_count,
        labels=labels if labels is not None else Labels(),
    )
    return render(compare(expected, received, options), options)
