"""
structdiff.formats — Turn arbitrary Python values into Shapes.

A Shape is a transient, discriminated view of one value.  It tells the
diff engine which comparison rule applies and hands it the value's
children in a stable order.  Children are kept as plain Python values;
they are only turned into Shapes when the engine descends into them.

Mapping:
    None                      → OptionalShape (absent)
    Tagged / enum member      → SumShape
    str, bytes, numbers, ...  → ScalarShape
    dataclass / namedtuple    → ProductShape (declaration order)
    dict / Mapping            → MapShape
    set / frozenset           → SetShape
    list / tuple / Sequence   → SequenceShape
    object with attributes    → ProductShape (attribute order)
    anything else             → ScalarShape

A type can describe itself by defining ``__diff_shape__(self)`` and
returning one of the Shape classes below.
"""

import dataclasses
import logging
import types
from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  SHAPES
# ═══════════════════════════════════════════════════════════════════

class Shape:
    """Base class for shapes.  Not instantiated directly."""
    __slots__ = ()


@dataclass(frozen=True, slots=True)
class ScalarShape(Shape):
    """A leaf compared by equality and rendered by its text."""
    value: Any


@dataclass(frozen=True, slots=True)
class OptionalShape(Shape):
    """
    A value that is either present (wrapping ``wrapped``) or absent.

    Examples:
        OptionalShape(None, None, present=False)     # None
        OptionalShape(box, box.item, present=True)   # a user Maybe type
    """
    value: Any
    wrapped: Any
    present: bool


@dataclass(frozen=True, slots=True)
class ProductShape(Shape):
    """A fixed, ordered set of named children."""
    value: Any
    fields: tuple[tuple[str, Any], ...]


@dataclass(frozen=True, slots=True)
class SumShape(Shape):
    """
    Exactly one of several named cases, with an ordered payload.

    Examples:
        SumShape(Color.RED, "RED", ())
        SumShape(Tagged("loaded", [0]), "loaded", ([0],))
    """
    value: Any
    label: str
    payload: tuple


@dataclass(frozen=True, slots=True)
class SequenceShape(Shape):
    """Ordered children compared by position."""
    value: Any
    items: tuple

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True)
class SetShape(Shape):
    """Unordered, unique children compared by membership."""
    value: Any
    elements: tuple

    def __len__(self) -> int:
        return len(self.elements)


@dataclass(frozen=True, slots=True)
class MapShape(Shape):
    """Key → child pairs compared key by key."""
    value: Any
    entries: tuple[tuple[Any, Any], ...]

    def __len__(self) -> int:
        return len(self.entries)


# ═══════════════════════════════════════════════════════════════════
#  SUM VALUES
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Tagged:
    """
    A case label with an ordered payload: Python's stand-in for an
    enum with associated values.

    Examples:
        Tagged("loaded", [1, 2])
        Tagged("failed", "timeout", 3)
        Tagged("idle")
    """
    label: str
    payload: tuple

    def __init__(self, label: str, *payload: Any):
        object.__setattr__(self, 'label', label)
        object.__setattr__(self, 'payload', tuple(payload))

    def __str__(self) -> str:
        if not self.payload:
            return self.label
        return f"{self.label}({', '.join(describe(p) for p in self.payload)})"


# ═══════════════════════════════════════════════════════════════════
#  TEXTUAL REPRESENTATION
# ═══════════════════════════════════════════════════════════════════

def describe(value: Any) -> str:
    """
    Textual representation of a value, as shown in rendered differences.

    This is ``str(value)``.  A ``__str__`` that raises (or recurses
    forever on a cyclic graph) falls back to the default object repr.
    """
    try:
        return str(value)
    except Exception as exc:
        logger.debug("describe: str() failed for %s: %r", type(value).__name__, exc)
        return object.__repr__(value)


# ═══════════════════════════════════════════════════════════════════
#  PYTHON VALUES → SHAPES
# ═══════════════════════════════════════════════════════════════════

# Instances of these never expose their attributes as fields.
_ATOMIC_TYPES = (
    str, bytes, bytearray, memoryview, bool, int, float, complex,
    type, types.ModuleType, types.FunctionType, types.BuiltinFunctionType,
    types.MethodType, BaseException,
)


def shape_of(value: Any) -> Shape:
    """
    Classify a value.  Total: anything unrecognised is a ScalarShape.

    Product fields and sum payloads keep declaration order, sequences
    keep storage order, maps keep insertion order.  The engine is the
    one that sorts keys and set elements for output.
    """
    hook = getattr(type(value), "__diff_shape__", None)
    if hook is not None:
        return _described_shape(value, hook)

    if value is None:
        return OptionalShape(None, None, present=False)

    if isinstance(value, Tagged):
        return SumShape(value, value.label, value.payload)

    # Before the atom check: IntEnum and StrEnum members are also ints/strs
    if isinstance(value, Enum):
        return SumShape(value, value.name, ())

    if isinstance(value, _ATOMIC_TYPES):
        return ScalarShape(value)

    if dataclasses.is_dataclass(value):
        return _product(value, _dataclass_fields(value))

    if isinstance(value, tuple) and hasattr(type(value), "_fields"):
        return _product(value, list(zip(type(value)._fields, value)))

    if isinstance(value, Mapping):
        return MapShape(value, tuple(value.items()))

    if isinstance(value, Set):
        return SetShape(value, tuple(value))

    if isinstance(value, Sequence):
        return SequenceShape(value, tuple(value))

    return _product(value, _instance_fields(value))


def _described_shape(value: Any, hook) -> Shape:
    """Shape reported by a type's own ``__diff_shape__``."""
    try:
        shape = hook(value)
    except Exception as exc:
        logger.debug("shape_of: __diff_shape__ of %s raised %r", type(value).__name__, exc)
        return ScalarShape(value)

    if not isinstance(shape, Shape):
        logger.debug(
            "shape_of: __diff_shape__ of %s returned %s, not a Shape",
            type(value).__name__, type(shape).__name__,
        )
        return ScalarShape(value)
    return shape


def _product(value: Any, fields: list[tuple[str, Any]]) -> Shape:
    # Nothing to descend into: compare as a whole
    if not fields:
        return ScalarShape(value)
    return ProductShape(value, tuple(fields))


def _dataclass_fields(value: Any) -> list[tuple[str, Any]]:
    fields: list[tuple[str, Any]] = []
    for f in dataclasses.fields(value):
        if not f.compare:
            continue
        try:
            fields.append((f.name, getattr(value, f.name)))
        except AttributeError:
            continue  # init=False field not assigned yet
    return fields


def _instance_fields(value: Any) -> list[tuple[str, Any]]:
    """Instance attributes from ``__slots__`` and ``__dict__``, in definition order."""
    fields: list[tuple[str, Any]] = []
    seen: set[str] = set()

    for klass in reversed(type(value).__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__") or name in seen:
                continue
            try:
                child = object.__getattribute__(value, name)
            except AttributeError:
                continue  # declared but never assigned
            seen.add(name)
            fields.append((name, child))

    attrs = getattr(value, "__dict__", None)
    if isinstance(attrs, dict):
        for name, child in attrs.items():
            if name.startswith("__") or name in seen:
                continue
            seen.add(name)
            fields.append((name, child))

    return fields
