"""
structdiff.core — Structural Difference Engine
===============================================

Given an expected and a received value, explain WHY they are not equal
as a tree of localized, path-labelled divergences instead of a single
"not equal".

THE ALGORITHM
─────────────

compare(e, r) is defined recursively on the Shapes of e and r:

    equal(e, r)                       → []           (short-circuit)
    depth limit reached               → [leaf(e, r)] (no descent)
    None vs present                   → [leaf("nil", "Optional(v)")]
    different shape or Python type    → [leaf(e, r)]

    Scalar                            → [leaf(e, r)]
    Product   for each field f        → FIELD f  ⟶ compare(e.f, r.f)
    Sum       labels differ           → [leaf(label_e, label_r)]
              labels equal            → CASE label ⟶ PAYLOAD .k ⟶ compare(e_k, r_k)
    Sequence  lengths differ          → [COUNT ⟶ leaf(e (m), r (n))]
              lengths equal           → INDEX i ⟶ compare(e[i], r[i])
    Set       sizes differ            → [COUNT ...]
              sizes equal             → Missing: v ... / Extra: v ...
    Map       sizes differ            → [COUNT ...]
              sizes equal             → KEY k ⟶ compare(e[k], r[k])
                                        KEY k ⟶ leaf(nil, v)  (one side only)

Subtrees with no divergence contribute nothing.  A node is either a
leaf (detail lines, no children) or a grouping (children, no detail).

ORDERING
────────

Product fields and sum payloads: declaration order.
Sequence elements: index order.
Set elements: Missing first then Extra, each sorted by textual form.
Map keys: union of both key sets sorted by (textual form, type name).

The engine is pure: it never mutates its inputs, keeps no state between
calls, and never raises.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional

from .formats import (
    MapShape, OptionalShape, ProductShape, ScalarShape, SequenceShape,
    SetShape, SumShape, describe, shape_of,
)
from .options import DiffOptions, Labels

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  DIFFERENCE TREE
# ═══════════════════════════════════════════════════════════════════

class SegmentKind(Enum):
    """How a difference nests under its parent."""
    ROOT = auto()      # Top-level leaf, no header
    FIELD = auto()     # Product field name
    INDEX = auto()     # Sequence position
    KEY = auto()       # Map key
    CASE = auto()      # Sum case label
    PAYLOAD = auto()   # Position inside a sum payload
    COUNT = auto()     # Collection size mismatch


@dataclass(frozen=True, slots=True)
class Segment:
    """One step of the path from the root to a divergence."""
    kind: SegmentKind
    name: Any = None

    def header(self, labels: Labels) -> str:
        if self.kind == SegmentKind.FIELD:
            return str(self.name)
        if self.kind == SegmentKind.INDEX:
            return f"Collection[{self.name}]"
        if self.kind == SegmentKind.KEY:
            return f"Key {describe(self.name)}"
        if self.kind == SegmentKind.CASE:
            return f"Enum {self.name}"
        if self.kind == SegmentKind.PAYLOAD:
            return f".{self.name}"
        if self.kind == SegmentKind.COUNT:
            return labels.different_count
        return ""


ROOT = Segment(SegmentKind.ROOT)


@dataclass
class Difference:
    """A single reported divergence: a leaf or a grouping of nested ones."""
    segment: Segment = ROOT
    detail: tuple[str, ...] = ()
    children: list["Difference"] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"Difference({self.segment.kind.name}: {' / '.join(self.detail)})"
        return f"Difference({self.segment.kind.name} {self.segment.name!r}, {len(self.children)} children)"


def _group(segment: Segment, children: list[Difference]) -> list[Difference]:
    """Wrap non-empty children under one header; empty stays empty."""
    if not children:
        return []
    return [Difference(segment, children=children)]


def _received_expected(received: str, expected: str, labels: Labels) -> Difference:
    return Difference(detail=(
        f"{labels.received}: {received}",
        f"{labels.expected}: {expected}",
    ))


# ═══════════════════════════════════════════════════════════════════
#  EQUALITY ORACLE
# ═══════════════════════════════════════════════════════════════════

def _has_own_eq(value: Any) -> bool:
    return type(value).__eq__ is not object.__eq__


# Element-wise, like the walk itself; the walk only differs on NaN
_CONTAINER_EQ = frozenset({
    list.__eq__, tuple.__eq__, dict.__eq__, set.__eq__, frozenset.__eq__,
})


def _eq_sees_more(value: Any) -> bool:
    """True when ``__eq__`` may look at more than the walked children."""
    return _has_own_eq(value) and type(value).__eq__ not in _CONTAINER_EQ


def equal(a: Any, b: Any) -> bool:
    """
    Exact equality used to prune subtrees before descending.

    Uses the values' own ``__eq__`` when their type defines one, and
    otherwise compares textual representations.  Total: an ``__eq__``
    that raises, or returns something other than a bool (an array, say),
    falls back to the textual comparison.
    """
    if a is b:
        return True

    # In Python True == 1; for a diff they are different values.
    if (type(a) is bool) != (type(b) is bool):
        return False

    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True

    if _has_own_eq(a) or _has_own_eq(b):
        try:
            result = a == b
        except Exception as exc:
            # RecursionError from cyclic graphs lands here too
            logger.debug("equal: __eq__ of %s raised %r", type(a).__name__, exc)
        else:
            if isinstance(result, bool):
                return result
            logger.debug("equal: __eq__ of %s returned %s", type(a).__name__, type(result).__name__)

    return describe(a) == describe(b)


# ═══════════════════════════════════════════════════════════════════
#  DIFF ENGINE
# ═══════════════════════════════════════════════════════════════════

def compare(
    expected: Any,
    received: Any,
    options: Optional[DiffOptions] = None,
    depth: int = 0,
) -> list[Difference]:
    """
    Structural differences between ``expected`` and ``received``.

    Returns one Difference per differing first-level position (field,
    index, key, set element), or a single leaf when the values are
    scalars or cannot be compared structurally.  Equal values yield [].
    """
    if options is None:
        options = DiffOptions()

    if equal(expected, received):
        return []

    if depth >= options.max_depth:
        logger.debug(
            "compare: depth limit %d reached at %s, comparing as text",
            options.max_depth, type(expected).__name__,
        )
        return [_scalar(expected, received, options)]

    e_shape = shape_of(expected)
    r_shape = shape_of(received)

    if isinstance(e_shape, OptionalShape) or isinstance(r_shape, OptionalShape):
        return _compare_optional(e_shape, r_shape, options, depth)

    # Never merge structurally incompatible values
    if type(e_shape) is not type(r_shape) or type(expected) is not type(received):
        return [_scalar(expected, received, options)]

    if isinstance(e_shape, ProductShape):
        results = _compare_product(e_shape, r_shape, options, depth)
    elif isinstance(e_shape, SumShape):
        results = _compare_sum(e_shape, r_shape, options, depth)
    elif isinstance(e_shape, SequenceShape):
        results = _compare_sequence(e_shape, r_shape, options, depth)
    elif isinstance(e_shape, SetShape):
        results = _compare_set(e_shape, r_shape, options)
    elif isinstance(e_shape, MapShape):
        results = _compare_map(e_shape, r_shape, options, depth)
    else:
        return [_scalar(expected, received, options)]

    # The value's own __eq__ sees a difference the walk cannot place
    # (key order of an OrderedDict, attributes outside the fields, ...)
    if not results and (_eq_sees_more(expected) or _eq_sees_more(received)):
        return [_scalar(expected, received, options)]
    return results


def _scalar(expected: Any, received: Any, options: DiffOptions) -> Difference:
    return _received_expected(describe(received), describe(expected), options.labels)


def _compare_optional(
    e: Any, r: Any, options: DiffOptions, depth: int
) -> list[Difference]:
    """
    Either side may be a plain Shape, which counts as present.

    Both present → compare what they wrap, with no extra path segment.
    One absent   → nil vs Optional(<value>).
    """
    e_present, e_value = _unwrap(e)
    r_present, r_value = _unwrap(r)

    if not e_present and not r_present:
        return []
    if e_present and r_present:
        return compare(e_value, r_value, options, depth + 1)

    labels = options.labels
    e_text = f"{labels.present}({describe(e_value)})" if e_present else labels.absent
    r_text = f"{labels.present}({describe(r_value)})" if r_present else labels.absent
    return [_received_expected(r_text, e_text, labels)]


def _unwrap(shape: Any) -> tuple[bool, Any]:
    if isinstance(shape, OptionalShape):
        return shape.present, shape.wrapped
    return True, shape.value


def _compare_product(
    e: ProductShape, r: ProductShape, options: DiffOptions, depth: int
) -> list[Difference]:
    """Field by field, in declaration order."""
    e_names = [name for name, _ in e.fields]
    r_names = [name for name, _ in r.fields]
    if e_names != r_names:
        # Same type, different attributes (e.g. set dynamically)
        return [_scalar(e.value, r.value, options)]

    results: list[Difference] = []
    for (name, e_child), (_, r_child) in zip(e.fields, r.fields):
        nested = compare(e_child, r_child, options, depth + 1)
        results.extend(_group(Segment(SegmentKind.FIELD, name), nested))
    return results


def _compare_sum(
    e: SumShape, r: SumShape, options: DiffOptions, depth: int
) -> list[Difference]:
    """
    Label first.  The payload is only inspected when the labels match:
    a different case is reported by its label alone.
    """
    if e.label != r.label:
        return [_received_expected(str(r.label), str(e.label), options.labels)]

    if len(e.payload) != len(r.payload):
        return [_scalar(e.value, r.value, options)]

    nested: list[Difference] = []
    for k, (e_item, r_item) in enumerate(zip(e.payload, r.payload)):
        diffs = compare(e_item, r_item, options, depth + 1)
        nested.extend(_group(Segment(SegmentKind.PAYLOAD, k), diffs))

    return _group(Segment(SegmentKind.CASE, e.label), nested)


def _different_count(e: Any, r: Any, options: DiffOptions) -> Difference:
    labels = options.labels
    if options.skip_printing_on_diff_count:
        leaf = _received_expected(f"({len(r)})", f"({len(e)})", labels)
    else:
        leaf = _received_expected(
            f"{describe(r.value)} ({len(r)})",
            f"{describe(e.value)} ({len(e)})",
            labels,
        )
    return Difference(Segment(SegmentKind.COUNT), children=[leaf])


def _compare_sequence(
    e: SequenceShape, r: SequenceShape, options: DiffOptions, depth: int
) -> list[Difference]:
    """Position by position; a length mismatch is reported alone."""
    if len(e) != len(r):
        return [_different_count(e, r, options)]

    results: list[Difference] = []
    for i, (e_item, r_item) in enumerate(zip(e.items, r.items)):
        nested = compare(e_item, r_item, options, depth + 1)
        results.extend(_group(Segment(SegmentKind.INDEX, i), nested))
    return results


def _sort_key(value: Any) -> tuple[str, str]:
    return describe(value), type(value).__name__


def _members(shape: SetShape) -> Any:
    # Self-described sets may hold unhashable elements
    if isinstance(shape.value, (set, frozenset)):
        return shape.value
    return list(shape.elements)


def _compare_set(e: SetShape, r: SetShape, options: DiffOptions) -> list[Difference]:
    """
    Elements are atomic here: each one is either present on both sides
    or reported as Missing (expected only) / Extra (received only).
    """
    if len(e) != len(r):
        return [_different_count(e, r, options)]

    labels = options.labels
    e_members = _members(e)
    r_members = _members(r)
    missing = sorted((v for v in e.elements if v not in r_members), key=_sort_key)
    extra = sorted((v for v in r.elements if v not in e_members), key=_sort_key)

    results = [Difference(detail=(f"{labels.missing}: {describe(v)}",)) for v in missing]
    results.extend(Difference(detail=(f"{labels.extra}: {describe(v)}",)) for v in extra)
    return results


class _PairIndex:
    """Key lookup over entry pairs whose keys cannot be hashed."""

    def __init__(self, entries):
        self.entries = entries

    def __iter__(self):
        return (key for key, _ in self.entries)

    def __contains__(self, key) -> bool:
        return any(equal(key, k) for k, _ in self.entries)

    def __getitem__(self, key):
        for k, v in self.entries:
            if equal(key, k):
                return v
        raise KeyError(key)


def _index(e: MapShape, r: MapShape):
    try:
        return dict(e.entries), dict(r.entries)
    except TypeError:
        # Self-described maps may use unhashable keys
        return _PairIndex(e.entries), _PairIndex(r.entries)


def _compare_map(
    e: MapShape, r: MapShape, options: DiffOptions, depth: int
) -> list[Difference]:
    """Key by key over the union of both key sets."""
    if len(e) != len(r):
        return [_different_count(e, r, options)]

    labels = options.labels
    e_entries, r_entries = _index(e, r)

    keys = list(e_entries)
    keys.extend(k for k in r_entries if k not in e_entries)
    keys.sort(key=_sort_key)

    results: list[Difference] = []
    for key in keys:
        segment = Segment(SegmentKind.KEY, key)
        if key not in r_entries:
            leaf = _received_expected(labels.absent, describe(e_entries[key]), labels)
            results.append(Difference(segment, children=[leaf]))
        elif key not in e_entries:
            leaf = _received_expected(describe(r_entries[key]), labels.absent, labels)
            results.append(Difference(segment, children=[leaf]))
        else:
            nested = compare(e_entries[key], r_entries[key], options, depth + 1)
            results.extend(_group(segment, nested))
    return results
