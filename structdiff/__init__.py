"""
Structural Difference (structdiff)
==================================

Explain why two values are not equal, one localized divergence at a time.

    diff(2, 3)                    → ["Received: 3\\nExpected: 2\\n"]
    diff([1], [1, 3])             → ["Different count:\\n|\\tReceived: [1, 3] (2)\\n..."]
    diff({"d": 4}, {"d": 0})      → ["Key d:\\n|\\tReceived: 0\\n|\\tExpected: 4\\n"]

Values are classified into Shapes (scalar, optional, product, sum,
sequence, set, map), compared recursively shape by shape, and rendered
as indented, path-labelled text meant for test-assertion messages:

    address:
    |	counter:
    |	|	counter:
    |	|	|	Received: 1
    |	|	|	Expected: 2

The first argument is the expected value, the second the received one.
"""

import logging

from structdiff.api import diff
from structdiff.core import (
    # Difference tree
    Difference,
    Segment,
    SegmentKind,
    # Engine
    compare,
    equal,
)
from structdiff.formats import (
    Shape, ScalarShape, OptionalShape, ProductShape, SumShape,
    SequenceShape, SetShape, MapShape,
    Tagged, describe, shape_of,
)
from structdiff.options import DEFAULT_MAX_DEPTH, DiffOptions, Indentation, Labels
from structdiff.render import render

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "diff",
    "Difference", "Segment", "SegmentKind", "compare", "equal",
    "Shape", "ScalarShape", "OptionalShape", "ProductShape", "SumShape",
    "SequenceShape", "SetShape", "MapShape",
    "Tagged", "describe", "shape_of",
    "DEFAULT_MAX_DEPTH", "DiffOptions", "Indentation", "Labels",
    "render",
]
