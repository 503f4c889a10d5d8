"""
Coherence verification: the ring laws that must hold before any
derivation is trusted.

At quantum 0 every law is checked for all 256 elements and the succ
cycle is walked in full, which makes the result a proof. Wider rings are
checked at boundary values, byte patterns and fixed pseudo-random samples;
such results carry ``sampled=True`` and are evidence, not proof.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

from .errors import CoherenceViolation
from .ring import ByteTuple, Ring, from_bytes

logger = logging.getLogger(__name__)

EXHAUSTIVE_MAX_BITS = 8
FULL_CYCLE_LIMIT = 65536
SAMPLE_SEED = 0x554F52
SAMPLE_COUNT = 50


class VerificationMode(Enum):
    """
    COLLECT: check everything and report every failure.
    ABORT:   raise CoherenceViolation at the first failure.
    """
    COLLECT = "collect"
    ABORT = "abort"


@dataclass(frozen=True)
class LawFailure:
    """One law failing at one value."""
    law: str
    value: int
    expected: int
    actual: int

    @property
    def message(self) -> str:
        return f"[{self.law}] at x={self.value}: expected {self.expected}, got {self.actual}"


@dataclass
class CoherenceResult:
    verified: bool
    quantum: int
    laws_checked: int
    total_checks: int
    failures: List[str]
    violations: List[LawFailure]
    full_cycle_verified: bool
    sampled: bool
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "@type": "CoherenceProof",
            "quantum": self.quantum,
            "verified": self.verified,
            "lawsChecked": self.laws_checked,
            "totalChecks": self.total_checks,
            "failures": list(self.failures),
            "fullCycleVerified": self.full_cycle_verified,
            "sampled": self.sampled,
            "criticalIdentity": "neg(bnot(x)) = succ(x)",
            "timestamp": self.timestamp,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# LAWS
# ═══════════════════════════════════════════════════════════════════════════════

# Each law maps (ring, x) to (expected, actual).
Law = Callable[[Ring, ByteTuple], Tuple[ByteTuple, ByteTuple]]


def _zero(ring: Ring) -> ByteTuple:
    return tuple([0] * ring.width)


def _ones(ring: Ring) -> ByteTuple:
    return tuple([0xFF] * ring.width)


def _additive_inverse(ring: Ring, b: ByteTuple) -> Tuple[ByteTuple, ByteTuple]:
    total = (from_bytes(ring.neg(b)) + from_bytes(b)) % ring.cycle
    return _zero(ring), ring.to_bytes(total)


LAWS: Tuple[Tuple[str, Law], ...] = (
    ("bnot-involution", lambda r, b: (b, r.bnot(r.bnot(b)))),
    ("neg-involution", lambda r, b: (b, r.neg(r.neg(b)))),
    ("critical-identity", lambda r, b: (r.succ(b), r.neg(r.bnot(b)))),
    ("pred-derivation", lambda r, b: (r.pred(b), r.bnot(r.neg(b)))),
    ("succ-pred-inverse", lambda r, b: (b, r.succ(r.pred(b)))),
    ("pred-succ-inverse", lambda r, b: (b, r.pred(r.succ(b)))),
    ("xor-complement", lambda r, b: (_ones(r), r.xor(b, r.bnot(b)))),
    ("xor-self-cancel", lambda r, b: (_zero(r), r.xor(b, b))),
    ("additive-inverse", _additive_inverse),
)

# The per-element laws plus the full-cycle walk.
LAW_COUNT = len(LAWS) + 1


def sample_values(ring: Ring) -> List[int]:
    """
    Test points for rings too wide to enumerate.

    Boundaries {0, 1, max, max-1, mid}, repeated byte patterns, the first
    and last sixteen elements, runs at the half and quarter points, and
    SAMPLE_COUNT values from a fixed-seed generator.
    """
    cycle = ring.cycle
    values = {0, 1, cycle - 1, cycle - 2, cycle // 2}
    for pattern in (0x55, 0xAA, 0x0F, 0xF0):
        values.add(from_bytes(tuple([pattern] * ring.width)))
    for i in range(16):
        values.add(i % cycle)
        values.add((cycle - 1 - i) % cycle)
        values.add((cycle // 2 + i) % cycle)
        values.add((cycle // 4 + i) % cycle)
    rng = random.Random(SAMPLE_SEED + ring.quantum)
    for _ in range(SAMPLE_COUNT):
        values.add(rng.randrange(cycle))
    return sorted(values)


def _walk_cycle(ring: Ring) -> Tuple[int, int]:
    """Apply succ `cycle` times from 0. Returns (final value, distinct values seen)."""
    visited = set()
    current = _zero(ring)
    for _ in range(ring.cycle):
        visited.add(current)
        current = ring.succ(current)
    return from_bytes(current), len(visited)


# ═══════════════════════════════════════════════════════════════════════════════
# VERIFIER
# ═══════════════════════════════════════════════════════════════════════════════

def verify_coherence(ring: Ring, mode: VerificationMode = VerificationMode.COLLECT) -> CoherenceResult:
    """
    Check every ring law.

    In COLLECT mode every failing (law, value, expected, actual) is recorded
    and returned; in ABORT mode the first one is raised as CoherenceViolation.
    The ring's own verified flag is not touched here; ``Ring.verify()`` does that.
    """
    sampled = ring.bits > EXHAUSTIVE_MAX_BITS
    values = sample_values(ring) if sampled else list(range(ring.cycle))

    violations: List[LawFailure] = []
    total_checks = 0

    def record(law: str, value: int, expected: int, actual: int) -> None:
        failure = LawFailure(law=law, value=value, expected=expected, actual=actual)
        if mode is VerificationMode.ABORT:
            raise CoherenceViolation(law, value, expected, actual)
        logger.warning("Coherence failure %s", failure.message)
        violations.append(failure)

    for n in values:
        b = ring.to_bytes(n)
        for name, law in LAWS:
            expected, actual = law(ring, b)
            total_checks += 1
            if expected != actual:
                record(name, n, from_bytes(expected), from_bytes(actual))

    full_cycle_verified = False
    if ring.cycle <= FULL_CYCLE_LIMIT:
        final, distinct = _walk_cycle(ring)
        total_checks += 1
        if final != 0:
            record("full-cycle", 0, 0, final)
        elif distinct != ring.cycle:
            record("full-cycle", 0, ring.cycle, distinct)
        else:
            full_cycle_verified = True

    result = CoherenceResult(
        verified=not violations,
        quantum=ring.quantum,
        laws_checked=LAW_COUNT,
        total_checks=total_checks,
        failures=[v.message for v in violations],
        violations=violations,
        full_cycle_verified=full_cycle_verified,
        sampled=sampled,
    )
    logger.info(
        "Coherence Q%d: %s (%d checks, %d failures%s)",
        ring.quantum, "verified" if result.verified else "FAILED",
        total_checks, len(violations), ", sampled" if sampled else "",
    )
    return result
