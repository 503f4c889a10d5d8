"""
Term canonicalization.

Canonicalization normalizes terms for deterministic derivation IDs and
structural comparison. Each pass rewrites bottom-up (children before
parent) and applies, in order:

  (a) Involution cancellation: f(f(x)) → x for f ∈ {neg, bnot}
  (b) Derived expansion: succ(x) → neg(bnot(x)), pred(x) → bnot(neg(x))
  (c) Constant folding: constants reduced mod 2^bits, constant subtrees evaluated
  (d) Associative flattening: xor/and/or nested in themselves become one n-ary node
  (e) Commutative sorting: constants first, then by serialization
  (f) Identity elimination: x xor 0 → x, x and mask → x, x or 0 → x;
      annihilators: x and 0 → 0, x or mask → mask
  (g) Self-cancellation: x xor x → 0; idempotence: x and x → x, x or x → x

Passes repeat until the serialization stops changing, capped at
MAX_ITERATIONS. Every rule but (e) shrinks the term and (e) never grows it.

NOT normalized (would require semantic equality testing):
  - Absorption: x and (x or y) → x
  - Distributivity
  - Partial constant folding: xor(3, 5, ?x) keeps both constants

This is sufficient for syntactic determinism and common algebraic
identities, but is NOT a complete decision procedure for term equivalence.
"""

import logging
from collections import Counter
from functools import lru_cache
from typing import Callable, List, Tuple

from .errors import UnknownOperation
from .ring import ByteTuple, Ring, RingConfig, from_bytes
from .term import INVOLUTIONS, Const, Nary, Term, Unary, Var, serialize

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100


@lru_cache(maxsize=None)
def _ring_for(config: RingConfig) -> Ring:
    return Ring.from_config(config)


def _identity(op: str, config: RingConfig) -> int:
    return config.mask if op == "and" else 0


# ═══════════════════════════════════════════════════════════════════════════════
# RULES
# ═══════════════════════════════════════════════════════════════════════════════

def involution_cancellation(t: Term, config: RingConfig) -> Term:
    """(a) neg(neg(x)) → x, bnot(bnot(x)) → x."""
    if (isinstance(t, Unary) and t.op in INVOLUTIONS
            and isinstance(t.operand, Unary) and t.operand.op == t.op):
        return t.operand.operand
    return t


def derived_expansion(t: Term, config: RingConfig) -> Term:
    """(b) Canonical forms never contain succ or pred."""
    if isinstance(t, Unary):
        if t.op == "succ":
            return Unary("neg", Unary("bnot", t.operand))
        if t.op == "pred":
            return Unary("bnot", Unary("neg", t.operand))
    return t


def constant_folding(t: Term, config: RingConfig) -> Term:
    """(c) Reduce constants mod 2^bits and evaluate fully constant nodes."""
    if isinstance(t, Const):
        reduced = t.value % config.cycle
        return t if reduced == t.value else Const(reduced)

    ring = _ring_for(config)
    if isinstance(t, Unary) and isinstance(t.operand, Const):
        unary: Callable[[int], ByteTuple] = getattr(ring, t.op)
        return Const(from_bytes(unary(t.operand.value)))

    if isinstance(t, Nary) and t.operands and all(isinstance(op, Const) for op in t.operands):
        binary = {"xor": ring.xor, "and": ring.band, "or": ring.bor}[t.op]
        result = ring.normalize(t.operands[0].value)
        for other in t.operands[1:]:
            result = binary(result, other.value)
        return Const(from_bytes(result))

    return t


def associative_flattening(t: Term, config: RingConfig) -> Term:
    """(d) xor(a, xor(b, c)) → xor(a, b, c)."""
    if not isinstance(t, Nary):
        return t
    flattened: List[Term] = []
    for op in t.operands:
        if isinstance(op, Nary) and op.op == t.op:
            flattened.extend(op.operands)
        else:
            flattened.append(op)
    return Nary(t.op, tuple(flattened))


def commutative_sorting(t: Term, config: RingConfig) -> Term:
    """(e) Constants first, then lexicographic by serialization at ring width."""
    if not isinstance(t, Nary):
        return t

    def sort_key(op: Term) -> Tuple[int, str]:
        return (0 if isinstance(op, Const) else 1, serialize(op, config.width))

    return Nary(t.op, tuple(sorted(t.operands, key=sort_key)))


def identity_elimination(t: Term, config: RingConfig) -> Term:
    """(f) Drop identity operands, collapse empty and singleton lists, apply annihilators."""
    if not isinstance(t, Nary):
        return t

    identity = _identity(t.op, config)
    if t.op != "xor":
        annihilator = config.mask - identity
        if any(isinstance(op, Const) and op.value == annihilator for op in t.operands):
            return Const(annihilator)

    filtered = [op for op in t.operands if not (isinstance(op, Const) and op.value == identity)]
    if not filtered:
        return Const(identity)
    if len(filtered) == 1:
        return filtered[0]
    return Nary(t.op, tuple(filtered))


def self_cancellation(t: Term, config: RingConfig) -> Term:
    """(g) xor keeps operands occurring an odd number of times; and/or deduplicate."""
    if not isinstance(t, Nary):
        return t

    keys = [serialize(op, config.width) for op in t.operands]
    counts = Counter(keys)
    seen = set()
    result: List[Term] = []
    for key, op in zip(keys, t.operands):
        if key in seen:
            continue
        seen.add(key)
        if t.op != "xor" or counts[key] % 2 == 1:
            result.append(op)

    if not result:
        return Const(0)
    if len(result) == 1:
        return result[0]
    return Nary(t.op, tuple(result))


RULES = (
    involution_cancellation,
    derived_expansion,
    constant_folding,
    associative_flattening,
    commutative_sorting,
    identity_elimination,
    self_cancellation,
)


# ═══════════════════════════════════════════════════════════════════════════════
# DRIVER
# ═══════════════════════════════════════════════════════════════════════════════

def _apply_rules(t: Term, config: RingConfig) -> Term:
    if isinstance(t, Unary):
        t = Unary(t.op, _apply_rules(t.operand, config))
    elif isinstance(t, Nary):
        t = Nary(t.op, tuple(_apply_rules(op, config) for op in t.operands))
    elif not isinstance(t, (Const, Var)):
        raise UnknownOperation(f"Unknown term node: {t!r}")

    for rule in RULES:
        t = rule(t, config)
    return t


def rewrite(term: Term, config: RingConfig) -> Tuple[Term, int]:
    """
    Rewrite to the fixed point and report how many passes it took.

    The last pass is the one that confirmed nothing changed.
    """
    current = term
    previous = serialize(term, config.width)
    for passes in range(1, MAX_ITERATIONS + 1):
        current = _apply_rules(current, config)
        text = serialize(current, config.width)
        if text == previous:
            logger.debug("Canonical form %s reached in %d passes", text, passes)
            return current, passes
        previous = text

    logger.warning(
        "Canonicalization stopped at the %d pass cap without a fixed point: %s",
        MAX_ITERATIONS, previous,
    )
    return current, MAX_ITERATIONS


def canonicalize(term: Term, config: RingConfig) -> Term:
    """Reduce a term to its canonical normal form for the given ring size."""
    canonical, _ = rewrite(term, config)
    return canonical


def canonical_serialize(term: Term, config: RingConfig) -> str:
    return serialize(canonicalize(term, config), config.width)
