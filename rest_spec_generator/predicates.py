"""
Filter predicates and their set algebra.

A ``Predicate`` is a bitmask over the atomic filter operations. Groups are not
separate bits: each one is the union of the atomic members it documents, so a
field's whole filter capability fits in a single integer.

    >>> p = Predicate.GROUP_EQUAL_EXACT.remove(Predicate.NEQ)
    >>> [op.value for op in p.explode()]
    ['EQ', 'IsNil', 'EqualFold']
"""

from enum import Enum, IntFlag
from typing import Dict, Iterable, List

from .exceptions import PredicateError


class Op(str, Enum):
    """Canonical name of an atomic filter operation."""

    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    IS_NIL = "IsNil"
    NOT_NIL = "NotNil"
    IN = "In"
    NOT_IN = "NotIn"
    EQUAL_FOLD = "EqualFold"
    CONTAINS = "Contains"
    CONTAINS_FOLD = "ContainsFold"
    HAS_PREFIX = "HasPrefix"
    HAS_SUFFIX = "HasSuffix"

    def __str__(self) -> str:
        return self.value


class Predicate(IntFlag):
    """Set of filter operations allowed on a field or edge."""

    # Applied to an edge: expose the edge target's own fields as filters too.
    EDGE = 1 << 0

    EQ = 1 << 1             # =
    NEQ = 1 << 2            # <>
    GT = 1 << 3             # >
    GTE = 1 << 4            # >=
    LT = 1 << 5             # <
    LTE = 1 << 6            # <=
    IS_NIL = 1 << 7         # IS NULL / has
    NOT_NIL = 1 << 8        # IS NOT NULL / hasNot
    IN = 1 << 9             # within
    NOT_IN = 1 << 10        # without
    EQUAL_FOLD = 1 << 11    # equals case-insensitive
    CONTAINS = 1 << 12      # containing
    CONTAINS_FOLD = 1 << 13  # containing case-insensitive
    HAS_PREFIX = 1 << 14    # startingWith
    HAS_SUFFIX = 1 << 15    # endingWith

    # is nil.
    GROUP_NIL = IS_NIL
    # eq, neq, equal fold, is nil.
    GROUP_EQUAL_EXACT = EQ | NEQ | EQUAL_FOLD | GROUP_NIL
    # contains, contains fold, is nil.
    GROUP_CONTAINS = CONTAINS | CONTAINS_FOLD | GROUP_NIL
    # eq, neq, equal fold, contains, contains fold, prefix, suffix, is nil.
    GROUP_EQUAL = GROUP_EQUAL_EXACT | GROUP_CONTAINS | HAS_PREFIX | HAS_SUFFIX
    # gt, lt (gte/lte are rarely needed).
    GROUP_LENGTH = GT | LT
    # in, not in.
    GROUP_ARRAY = IN | NOT_IN

    def has(self, other: "Predicate") -> bool:
        """Report whether every bit of ``other`` is also set here."""
        return (int(self) & int(other)) == int(other)

    def add(self, other: "Predicate") -> "Predicate":
        """Return the union of both sets."""
        return Predicate(int(self) | int(other))

    def remove(self, other: "Predicate") -> "Predicate":
        """Return this set with the bits of ``other`` cleared."""
        return Predicate(int(self) & ~int(other))

    def is_atomic(self) -> bool:
        """True when exactly one catalogued operation bit is set."""
        return self in PREDICATE_OPS

    def explode(self) -> List[Op]:
        """Return every atomic operation in this set, ascending by bit value."""
        return [op for pred, op in PREDICATE_OPS.items() if self.has(pred)]

    def op(self) -> Op:
        """
        Return the operation of a single atomic predicate.

        Raises:
            PredicateError: if this value is a group, holds several bits, or
                only carries ``EDGE``. Call ``explode()`` first.
        """
        try:
            return PREDICATE_OPS[self]
        except KeyError:
            raise PredicateError(
                "Predicate.op() called with grouped predicate, use explode() first",
                predicate=self,
            ) from None

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "Predicate":
        """
        Build a set from member names, e.g. ``["GROUP_EQUAL", "gt"]``.

        Unknown names raise ``ValueError`` since they come from user input.
        """
        result = cls(0)
        for name in names:
            key = str(name).strip().upper()
            try:
                result = result.add(cls[key])
            except KeyError:
                raise ValueError(f"Unknown filter predicate: {name!r}") from None
        return result


# Ordered ascending by bit so explode() is deterministic.
PREDICATE_OPS: Dict[Predicate, Op] = {
    Predicate.EQ: Op.EQ,
    Predicate.NEQ: Op.NEQ,
    Predicate.GT: Op.GT,
    Predicate.GTE: Op.GTE,
    Predicate.LT: Op.LT,
    Predicate.LTE: Op.LTE,
    Predicate.IS_NIL: Op.IS_NIL,
    Predicate.NOT_NIL: Op.NOT_NIL,
    Predicate.IN: Op.IN,
    Predicate.NOT_IN: Op.NOT_IN,
    Predicate.EQUAL_FOLD: Op.EQUAL_FOLD,
    Predicate.CONTAINS: Op.CONTAINS,
    Predicate.CONTAINS_FOLD: Op.CONTAINS_FOLD,
    Predicate.HAS_PREFIX: Op.HAS_PREFIX,
    Predicate.HAS_SUFFIX: Op.HAS_SUFFIX,
}

OP_PREDICATES: Dict[Op, Predicate] = {op: pred for pred, op in PREDICATE_OPS.items()}
